"""Pydantic schemas for the FHIR R4 wire resources served by the API.

Only the subset of Patient and Observation that the store keeps is
modelled. Every field is optional so that an absent field (None) stays
distinguishable from an empty string or an explicit ``false``; unknown
fields are ignored. Enumerated codes (gender, status) are kept as plain
strings because unrecognized values are collapsed by the mappers rather
than rejected.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class FhirModel(BaseModel):
    """Base for FHIR datatypes: camelCase names as-is, extra fields ignored."""

    model_config = ConfigDict(extra="ignore")

    def to_fhir_json(self) -> dict[str, Any]:
        """Serialize to FHIR JSON, omitting absent elements."""
        return self.model_dump(mode="json", exclude_none=True)


class Coding(FhirModel):
    """FHIR Coding."""

    system: str | None = None
    code: str | None = None
    display: str | None = None


class CodeableConcept(FhirModel):
    """FHIR CodeableConcept."""

    coding: list[Coding] | None = None
    text: str | None = None


class Reference(FhirModel):
    """FHIR Reference."""

    reference: str | None = None


class Quantity(FhirModel):
    """FHIR Quantity (value and unit only)."""

    value: float | None = None
    unit: str | None = None


class Identifier(FhirModel):
    """FHIR Identifier."""

    system: str | None = None
    value: str | None = None


class HumanName(FhirModel):
    """FHIR HumanName."""

    family: str | None = None
    given: list[str] | None = None


class PatientResource(FhirModel):
    """FHIR Patient resource."""

    resourceType: Literal["Patient"] = "Patient"
    id: str | None = None
    identifier: list[Identifier] | None = None
    active: bool | None = None
    name: list[HumanName] | None = None
    gender: str | None = None
    birthDate: str | None = None

    def has_name(self) -> bool:
        """True if any name entry has a non-empty family or given name."""
        for human_name in self.name or []:
            if human_name.family:
                return True
            if any(given for given in human_name.given or []):
                return True
        return False


class ObservationComponentResource(FhirModel):
    """FHIR Observation.component element."""

    code: CodeableConcept | None = None
    valueQuantity: Quantity | None = None
    valueString: str | None = None


class ObservationResource(FhirModel):
    """FHIR Observation resource."""

    resourceType: Literal["Observation"] = "Observation"
    id: str | None = None
    status: str | None = None
    category: list[CodeableConcept] | None = None
    code: CodeableConcept | None = None
    subject: Reference | None = None
    effectiveDateTime: str | None = None
    issued: str | None = None
    valueQuantity: Quantity | None = None
    valueString: str | None = None
    component: list[ObservationComponentResource] | None = None


def searchset_bundle(resources: list[FhirModel]) -> dict[str, Any]:
    """Wrap search results in a FHIR searchset Bundle.

    ``total`` is the number of entries in this page.
    """
    return {
        "resourceType": "Bundle",
        "type": "searchset",
        "total": len(resources),
        "entry": [{"resource": resource.to_fhir_json()} for resource in resources],
    }
