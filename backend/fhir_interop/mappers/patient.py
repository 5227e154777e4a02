"""Patient mapper.

Converts between the stored Patient record and the FHIR Patient resource.
Both directions are total: malformed or missing wire fields map to an
unset domain field instead of raising.

The mapping is lossy on the way in: only the first name entry (its
family name and first given name) and the first identifier are kept.
"""

import uuid

from fhir_interop.models.patient import AdministrativeGender, Patient
from fhir_interop.schemas.fhir import HumanName, Identifier, PatientResource
from fhir_interop.utils.fhir_helpers import format_fhir_date, parse_fhir_date

_KNOWN_GENDERS = {
    AdministrativeGender.MALE.value,
    AdministrativeGender.FEMALE.value,
    AdministrativeGender.OTHER.value,
}


def map_gender_to_fhir(gender: str) -> str:
    """Domain gender to wire gender; anything unrecognized becomes "unknown"."""
    if gender in _KNOWN_GENDERS:
        return gender
    return AdministrativeGender.UNKNOWN.value


def map_gender_from_fhir(gender: str) -> str:
    """Wire gender to domain gender; anything unrecognized becomes "unknown"."""
    if gender in _KNOWN_GENDERS:
        return gender
    return AdministrativeGender.UNKNOWN.value


def _parse_patient_id(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class PatientMapper:
    """Maps Patient records to and from FHIR Patient resources.

    FHIR Patient reference: https://www.hl7.org/fhir/patient.html
    """

    @classmethod
    def to_fhir(cls, patient: Patient) -> PatientResource:
        """Convert a stored Patient to a FHIR Patient resource."""
        resource = PatientResource(
            id=str(patient.id) if patient.id else None,
            active=patient.active,
        )

        if patient.family_name or patient.given_name:
            resource.name = [
                HumanName(
                    family=patient.family_name or None,
                    given=[patient.given_name] if patient.given_name else None,
                )
            ]

        if patient.gender:
            resource.gender = map_gender_to_fhir(patient.gender)

        if patient.birth_date is not None:
            resource.birthDate = format_fhir_date(patient.birth_date)

        # Partial identifiers are dropped rather than emitted one-sided
        if patient.identifier_system and patient.identifier_value:
            resource.identifier = [
                Identifier(system=patient.identifier_system, value=patient.identifier_value)
            ]

        return resource

    @classmethod
    def from_fhir(cls, resource: PatientResource) -> Patient:
        """Convert a FHIR Patient resource to a (transient) Patient record.

        An absent ``active`` maps to False here; defaulting it to True on
        create is the service layer's decision.
        """
        patient = Patient(
            id=_parse_patient_id(resource.id),
            active=bool(resource.active),
            family_name="",
            given_name="",
        )

        if resource.name:
            first_name = resource.name[0]
            if first_name.family is not None:
                patient.family_name = first_name.family
            if first_name.given:
                patient.given_name = first_name.given[0]

        if resource.gender is not None:
            patient.gender = map_gender_from_fhir(resource.gender)

        if resource.birthDate is not None:
            patient.birth_date = parse_fhir_date(resource.birthDate)

        if resource.identifier:
            first_identifier = resource.identifier[0]
            patient.identifier_system = first_identifier.system
            patient.identifier_value = first_identifier.value

        return patient
