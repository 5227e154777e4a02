"""Structured search parameters for Patient and Observation queries.

Instances are produced by the query parser and consumed by the per-engine
search compilers. Unset filters are ``None`` so that "no filter" is never
confused with "filter on an empty value".
"""

import enum
from dataclasses import dataclass
from datetime import date, datetime

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_OFFSET = 0


class SortOrder(str, enum.Enum):
    """Sort direction requested by ``_sort``."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class PatientSearchParams:
    """Filter, sort, and paging intent for a Patient search.

    Attributes:
        name: Substring matched against given OR family name.
        family_name: Substring matched against family name only.
        given_name: Substring matched against given name only.
        gender: Exact gender match.
        birth_date: Exact birth date.
        birth_date_greater_than: Inclusive lower bound on birth date.
        birth_date_less_than: Inclusive upper bound on birth date.
        active: Exact active flag.
        sort_by: FHIR-style sort field, validated by the compiler.
        sort_order: Direction; anything but ASC sorts descending.
        limit: Page size in [1, 100].
        offset: Rows to skip, >= 0.
    """

    name: str | None = None
    family_name: str | None = None
    given_name: str | None = None
    gender: str | None = None
    birth_date: date | None = None
    birth_date_greater_than: date | None = None
    birth_date_less_than: date | None = None
    active: bool | None = None
    sort_by: str | None = None
    sort_order: SortOrder | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET


@dataclass(frozen=True)
class ObservationSearchParams:
    """Filter, sort, and paging intent for an Observation search.

    Attributes:
        patient_id: Bare patient ID (a "Patient/" prefix is already stripped).
        code: Exact observation code.
        category: Exact category code.
        status: Exact status.
        date_greater_than: Inclusive lower bound on effective date.
        date_less_than: Inclusive upper bound on effective date.
    """

    patient_id: str | None = None
    code: str | None = None
    category: str | None = None
    status: str | None = None
    date_greater_than: datetime | None = None
    date_less_than: datetime | None = None
    sort_by: str | None = None
    sort_order: SortOrder | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET
