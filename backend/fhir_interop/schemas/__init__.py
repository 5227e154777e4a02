"""Pydantic schemas."""

from fhir_interop.schemas.fhir import (
    CodeableConcept,
    Coding,
    HumanName,
    Identifier,
    ObservationComponentResource,
    ObservationResource,
    PatientResource,
    Quantity,
    Reference,
    searchset_bundle,
)

__all__ = [
    "CodeableConcept",
    "Coding",
    "HumanName",
    "Identifier",
    "ObservationComponentResource",
    "ObservationResource",
    "PatientResource",
    "Quantity",
    "Reference",
    "searchset_bundle",
]
