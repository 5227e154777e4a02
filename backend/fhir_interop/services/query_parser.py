"""FHIR search query-string parsing.

Turns the query string of ``GET /fhir/Patient`` and ``GET /fhir/Observation``
into frozen search-parameter objects. Parsing never fails: a value that
cannot be understood is dropped and the corresponding filter stays unset.

Date parameters accept a two-character comparison prefix:

    ge / gt  -> lower bound (inclusive)
    le / lt  -> upper bound (inclusive)
    eq / ""  -> exact match (Patient ``birthdate`` only)

Reserved paging/sorting names are ``_count``, ``_offset``, and ``_sort``
(a leading ``-`` requests descending order).
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import parse_qsl

from fhir_interop.models.search_params import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    MAX_LIMIT,
    ObservationSearchParams,
    PatientSearchParams,
    SortOrder,
)
from fhir_interop.utils.fhir_helpers import strict_strptime, strip_patient_prefix

logger = logging.getLogger(__name__)

COMPARISON_PREFIXES: frozenset[str] = frozenset(["ge", "gt", "le", "lt", "eq"])
LOWER_BOUND_PREFIXES: frozenset[str] = frozenset(["ge", "gt"])
UPPER_BOUND_PREFIXES: frozenset[str] = frozenset(["le", "lt"])
EXACT_PREFIXES: frozenset[str] = frozenset(["eq", ""])

# Tried in order; the first successful parse wins
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
)

_TRUE_VALUES = frozenset(["1", "t", "T", "true", "TRUE", "True"])
_FALSE_VALUES = frozenset(["0", "f", "F", "false", "FALSE", "False"])
# ASCII digits only, at most as many as a signed 64-bit integer can hold
_INTEGER = re.compile(r"[+-]?[0-9]{1,19}")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

QueryInput = str | Mapping[str, str]


@dataclass(frozen=True)
class PrefixedDate:
    """A date search value split into its comparison prefix and timestamp.

    Attributes:
        prefix: One of COMPARISON_PREFIXES, or "" when none was given.
        value: Parsed timestamp (UTC), or None if the date was unparsable.
    """

    prefix: str
    value: datetime | None


def query_values(query: QueryInput) -> dict[str, str]:
    """Normalize a raw query string or mapping into first-value-wins pairs.

    Empty values are kept here and treated as "absent" by the parsers.
    """
    if isinstance(query, str):
        values: dict[str, str] = {}
        for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True):
            values.setdefault(key, value)
        return values
    return {key: value for key, value in query.items()}


def parse_date_with_prefix(raw: str) -> PrefixedDate:
    """Split a FHIR comparison prefix off a date value and parse the rest.

    A prefix is only recognized when the value is longer than two
    characters, so a bare two-character token is never mistaken for one.
    """
    prefix = ""
    if len(raw) > 2 and raw[:2] in COMPARISON_PREFIXES:
        prefix = raw[:2]
        raw = raw[2:]

    for fmt in DATE_FORMATS:
        parsed = strict_strptime(raw, fmt)
        if parsed is not None:
            return PrefixedDate(prefix=prefix, value=parsed.replace(tzinfo=timezone.utc))
    return PrefixedDate(prefix=prefix, value=None)


def parse_bool(raw: str) -> bool | None:
    """Parse a boolean flag; unrecognized spellings yield None."""
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return None


def parse_int(raw: str) -> int | None:
    """Parse a signed base-10 integer.

    Anything but ASCII digits, or a value outside the signed 64-bit
    range, yields None.
    """
    if not _INTEGER.fullmatch(raw):
        return None
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def parse_sort(raw: str | None) -> tuple[str | None, SortOrder | None]:
    """Split ``_sort`` into (field, order).

    Returns:
        (None, None) when ``_sort`` is absent. A leading "-" gives DESC,
        otherwise ASC. The field may still be None (e.g. ``_sort=-``).
    """
    if not raw:
        return None, None
    if raw.startswith("-"):
        return raw[1:] or None, SortOrder.DESC
    return raw, SortOrder.ASC


def parse_limit(raw: str | None) -> int:
    """Parse ``_count``: clamp to MAX_LIMIT, ignore non-positive or non-numeric."""
    if not raw:
        return DEFAULT_LIMIT
    limit = parse_int(raw)
    if limit is None or limit <= 0:
        logger.debug("Ignoring invalid _count value %r", raw)
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def parse_offset(raw: str | None) -> int:
    """Parse ``_offset``: ignore negative or non-numeric values."""
    if not raw:
        return DEFAULT_OFFSET
    offset = parse_int(raw)
    if offset is None or offset < 0:
        logger.debug("Ignoring invalid _offset value %r", raw)
        return DEFAULT_OFFSET
    return offset


def parse_patient_search_params(query: QueryInput) -> PatientSearchParams:
    """Parse Patient search parameters.

    Recognized keys: name, family, given, gender, birthdate, active,
    _sort, _count, _offset. Unknown keys are ignored.

    Args:
        query: Raw query string (with or without leading "?") or a mapping.

    Returns:
        PatientSearchParams with unset filters as None.
    """
    values = query_values(query)

    birth_date = birth_date_greater_than = birth_date_less_than = None
    if raw_birthdate := values.get("birthdate"):
        parsed = parse_date_with_prefix(raw_birthdate)
        if parsed.value is not None:
            day = parsed.value.date()
            if parsed.prefix in LOWER_BOUND_PREFIXES:
                birth_date_greater_than = day
            elif parsed.prefix in UPPER_BOUND_PREFIXES:
                birth_date_less_than = day
            elif parsed.prefix in EXACT_PREFIXES:
                birth_date = day
        else:
            logger.debug("Ignoring unparsable birthdate %r", raw_birthdate)

    active = None
    if raw_active := values.get("active"):
        active = parse_bool(raw_active)

    sort_by, sort_order = parse_sort(values.get("_sort"))

    return PatientSearchParams(
        name=values.get("name") or None,
        family_name=values.get("family") or None,
        given_name=values.get("given") or None,
        gender=values.get("gender") or None,
        birth_date=birth_date,
        birth_date_greater_than=birth_date_greater_than,
        birth_date_less_than=birth_date_less_than,
        active=active,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=parse_limit(values.get("_count")),
        offset=parse_offset(values.get("_offset")),
    )


def parse_observation_search_params(query: QueryInput) -> ObservationSearchParams:
    """Parse Observation search parameters.

    Recognized keys: patient (bare ID or "Patient/{id}"), code, category,
    status, date, _sort, _count, _offset.

    Only prefixed ``date`` values produce a filter; ``date=2024-01-01``
    and ``date=eq2024-01-01`` are ignored.
    """
    values = query_values(query)

    patient_id = None
    if raw_patient := values.get("patient"):
        patient_id = strip_patient_prefix(raw_patient) or None

    date_greater_than = date_less_than = None
    if raw_date := values.get("date"):
        parsed = parse_date_with_prefix(raw_date)
        if parsed.value is not None:
            if parsed.prefix in LOWER_BOUND_PREFIXES:
                date_greater_than = parsed.value
            elif parsed.prefix in UPPER_BOUND_PREFIXES:
                date_less_than = parsed.value

    sort_by, sort_order = parse_sort(values.get("_sort"))

    return ObservationSearchParams(
        patient_id=patient_id,
        code=values.get("code") or None,
        category=values.get("category") or None,
        status=values.get("status") or None,
        date_greater_than=date_greater_than,
        date_less_than=date_less_than,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=parse_limit(values.get("_count")),
        offset=parse_offset(values.get("_offset")),
    )
