"""Domain models: SQLAlchemy Patient, document Observation, search parameters."""

from fhir_interop.models.observation import (
    Observation,
    ObservationComponent,
    ObservationStatus,
)
from fhir_interop.models.patient import AdministrativeGender, Patient
from fhir_interop.models.search_params import (
    ObservationSearchParams,
    PatientSearchParams,
    SortOrder,
)

__all__ = [
    "AdministrativeGender",
    "Observation",
    "ObservationComponent",
    "ObservationSearchParams",
    "ObservationStatus",
    "Patient",
    "PatientSearchParams",
    "SortOrder",
]
