"""Tests for shared FHIR helper utilities."""

from datetime import date, datetime, timedelta, timezone

import pytest

from fhir_interop.schemas.fhir import CodeableConcept, Coding, PatientResource, searchset_bundle
from fhir_interop.utils.fhir_helpers import (
    build_patient_reference,
    extract_first_coding,
    format_effective_datetime,
    format_fhir_date,
    format_instant,
    parse_effective_datetime,
    parse_fhir_date,
    parse_instant,
    parse_patient_reference,
    strict_strptime,
    strip_patient_prefix,
)


class TestPatientReference:
    """Tests for Patient/{id} reference helpers."""

    def test_build(self):
        assert build_patient_reference("abc") == "Patient/abc"

    def test_parse(self):
        assert parse_patient_reference("Patient/abc") == "abc"

    @pytest.mark.parametrize("reference", ["Patient/", "patient/abc", "Group/abc", "", None])
    def test_parse_rejects_non_patient_references(self, reference):
        assert parse_patient_reference(reference) == ""

    def test_strip_prefix(self):
        assert strip_patient_prefix("Patient/abc") == "abc"
        assert strip_patient_prefix("abc") == "abc"


class TestExtractFirstCoding:
    """Tests for extract_first_coding function."""

    def test_returns_first(self):
        concept = CodeableConcept(coding=[Coding(code="a"), Coding(code="b")])
        assert extract_first_coding(concept).code == "a"

    def test_none_concept(self):
        assert extract_first_coding(None) is None

    def test_empty_coding(self):
        assert extract_first_coding(CodeableConcept(coding=[])) is None


class TestDates:
    """Tests for date and timestamp formatting."""

    def test_strict_strptime_requires_padding(self):
        assert strict_strptime("2024-1-5", "%Y-%m-%d") is None
        assert strict_strptime("2024-01-05", "%Y-%m-%d") == datetime(2024, 1, 5)

    def test_strict_strptime_literal_z(self):
        assert strict_strptime("2024-01-05T10:00:00", "%Y-%m-%dT%H:%M:%SZ") is None
        assert strict_strptime("2024-01-05T10:00:00Z", "%Y-%m-%dT%H:%M:%SZ") == datetime(
            2024, 1, 5, 10
        )

    def test_fhir_date(self):
        assert format_fhir_date(date(1985, 3, 14)) == "1985-03-14"
        assert parse_fhir_date("1985-03-14") == date(1985, 3, 14)
        assert parse_fhir_date("1985-02-30") is None

    def test_effective_datetime_converts_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        value = datetime(2024, 5, 1, 3, 30, tzinfo=eastern)
        assert format_effective_datetime(value) == "2024-05-01T08:30:00Z"
        assert parse_effective_datetime("2024-05-01T08:30:00Z") == datetime(
            2024, 5, 1, 8, 30, tzinfo=timezone.utc
        )

    def test_instant(self):
        value = datetime(2024, 5, 1, 9, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_instant(value) == "2024-05-01T09:00:00Z"
        assert parse_instant("2024-05-01T09:00:00Z") == datetime(
            2024, 5, 1, 9, tzinfo=timezone.utc
        )

    def test_instant_requires_offset(self):
        assert parse_instant("2024-05-01T09:00:00") is None
        assert parse_instant("not a date") is None

    @pytest.mark.parametrize(
        "value",
        ["2024-05-01 09:00:00Z", "20240501T090000Z", "2024-05-01T09:00Z", "2024-05-01T09:00:00+0200"],
    )
    def test_instant_rejects_non_rfc3339_forms(self, value):
        assert parse_instant(value) is None

    def test_instant_fraction_and_offset(self):
        assert parse_instant("2024-05-01T09:00:00.5+02:00") == datetime(
            2024, 5, 1, 9, 0, 0, 500000, tzinfo=timezone(timedelta(hours=2))
        )


class TestSchemas:
    """Tests for wire schema helpers."""

    def test_has_name(self):
        assert PatientResource(name=[{"family": "Smith"}]).has_name()
        assert PatientResource(name=[{"given": ["", "Jane"]}]).has_name()
        assert not PatientResource(name=[{"given": [""]}]).has_name()
        assert not PatientResource().has_name()

    def test_unknown_fields_ignored(self):
        resource = PatientResource.model_validate(
            {"resourceType": "Patient", "maritalStatus": {"text": "M"}}
        )
        assert resource.to_fhir_json() == {"resourceType": "Patient"}

    def test_searchset_bundle(self):
        bundle = searchset_bundle([PatientResource(id="a"), PatientResource(id="b")])
        assert bundle["total"] == 2
        assert [e["resource"]["id"] for e in bundle["entry"]] == ["a", "b"]
