"""Repository layer for data access.

Repositories encapsulate storage operations behind a CRUD + Search
contract, with one implementation per storage engine.
"""

from fhir_interop.repositories.base import ObservationRepository, PatientRepository
from fhir_interop.repositories.observation import MongoObservationRepository
from fhir_interop.repositories.observation_search import (
    ObservationFilterBuilder,
    ObservationQuery,
)
from fhir_interop.repositories.patient import SqlPatientRepository
from fhir_interop.repositories.patient_search import PatientQueryBuilder

__all__ = [
    "MongoObservationRepository",
    "ObservationFilterBuilder",
    "ObservationQuery",
    "ObservationRepository",
    "PatientQueryBuilder",
    "PatientRepository",
    "SqlPatientRepository",
]
