"""Shared FHIR parsing and formatting utilities.

All functions are pure and handle missing/malformed data gracefully:
parse failures return None (or an empty string for references) instead
of raising.
"""

import re
from datetime import date, datetime, timezone

from fhir_interop.schemas.fhir import CodeableConcept, Coding

PATIENT_REFERENCE_PREFIX = "Patient/"

FHIR_DATE_FORMAT = "%Y-%m-%d"
# Observation.effectiveDateTime is exchanged with a literal trailing Z
EFFECTIVE_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def build_patient_reference(patient_id: str) -> str:
    """Build a "Patient/{id}" reference string."""
    return f"{PATIENT_REFERENCE_PREFIX}{patient_id}"


def parse_patient_reference(reference: str | None) -> str:
    """Extract the bare patient ID from a "Patient/{id}" reference.

    The reference must start with "Patient/" and carry a non-empty ID;
    anything else yields an empty string.

    Args:
        reference: FHIR reference string

    Returns:
        Patient ID, or "" if the reference is not a patient reference
    """
    if not reference:
        return ""
    if len(reference) > len(PATIENT_REFERENCE_PREFIX) and reference.startswith(
        PATIENT_REFERENCE_PREFIX
    ):
        return reference[len(PATIENT_REFERENCE_PREFIX):]
    return ""


def strip_patient_prefix(value: str) -> str:
    """Accept either a bare ID or "Patient/{id}" and return the bare ID."""
    return value.removeprefix(PATIENT_REFERENCE_PREFIX)


def extract_first_coding(codeable_concept: CodeableConcept | None) -> Coding | None:
    """Extract first coding from a FHIR CodeableConcept.

    Args:
        codeable_concept: FHIR CodeableConcept, possibly absent

    Returns:
        First Coding or None if there is none
    """
    if codeable_concept is None or not codeable_concept.coding:
        return None
    return codeable_concept.coding[0]


_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
_DATETIME_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
# date "T" time, optional fraction, then "Z" or a +hh:mm offset
_RFC3339_PATTERN = re.compile(
    r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]+)?(Z|[+-][0-9]{2}:[0-9]{2})"
)


def strict_strptime(value: str, fmt: str) -> datetime | None:
    """strptime that only accepts zero-padded fields.

    Returns:
        Naive datetime, or None if the value does not match the format.
    """
    pattern = _DATE_PATTERN if "T" not in fmt else _DATETIME_PATTERN
    suffix = "Z" if fmt.endswith("Z") else ""
    candidate = value[: len(value) - len(suffix)] if suffix and value.endswith(suffix) else value
    if suffix and candidate == value:
        return None
    if not pattern.fullmatch(candidate):
        return None
    try:
        return datetime.strptime(value, fmt)
    except ValueError:
        return None


def format_fhir_date(value: date) -> str:
    """Format a calendar date as YYYY-MM-DD."""
    return value.strftime(FHIR_DATE_FORMAT)


def parse_fhir_date(value: str) -> date | None:
    """Parse a YYYY-MM-DD date, returning None when malformed."""
    parsed = strict_strptime(value, FHIR_DATE_FORMAT)
    return parsed.date() if parsed else None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_effective_datetime(value: datetime) -> str:
    """Format an effective date as YYYY-MM-DDThh:mm:ssZ in UTC."""
    return _as_utc(value).strftime(EFFECTIVE_DATETIME_FORMAT)


def parse_effective_datetime(value: str) -> datetime | None:
    """Parse YYYY-MM-DDThh:mm:ssZ (literal Z) into an aware UTC datetime."""
    parsed = strict_strptime(value, EFFECTIVE_DATETIME_FORMAT)
    if parsed is None:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def format_instant(value: datetime) -> str:
    """Format an RFC 3339 instant with second precision and a Z suffix for UTC."""
    text = _as_utc(value).isoformat(timespec="seconds")
    return text.replace("+00:00", "Z")


def parse_instant(value: str) -> datetime | None:
    """Parse an RFC 3339 instant; a missing UTC offset counts as malformed."""
    if not _RFC3339_PATTERN.fullmatch(value):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed
