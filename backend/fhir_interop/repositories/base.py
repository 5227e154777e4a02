"""Repository contracts.

Each resource kind has one capability interface (CRUD + Search) and one
implementation per storage engine. Services depend only on these
interfaces, so any engine (or an in-memory double in tests) can be
plugged in.

Error contract for every implementation:
    - NotFoundError when get_by_id / update / delete match no record.
    - InvalidIdentifierError when an ID is not a valid native identifier.
    - Any engine error propagates unchanged; no retries.
"""

from abc import ABC, abstractmethod

from fhir_interop.models.observation import Observation
from fhir_interop.models.patient import Patient
from fhir_interop.models.search_params import ObservationSearchParams, PatientSearchParams


class PatientRepository(ABC):
    """Storage contract for Patient records."""

    @abstractmethod
    async def create(self, patient: Patient) -> Patient:
        """Insert a patient; the store assigns ID and timestamps."""

    @abstractmethod
    async def get_by_id(self, patient_id: str) -> Patient:
        """Fetch one patient by ID."""

    @abstractmethod
    async def get_all(self, limit: int, offset: int) -> list[Patient]:
        """List patients, newest first."""

    @abstractmethod
    async def search(self, params: PatientSearchParams) -> list[Patient]:
        """Run a compiled Patient search."""

    @abstractmethod
    async def update(self, patient: Patient) -> Patient:
        """Overwrite the stored patient with ``patient.id``; refreshes updated_at."""

    @abstractmethod
    async def delete(self, patient_id: str) -> None:
        """Remove a patient by ID."""


class ObservationRepository(ABC):
    """Storage contract for Observation records."""

    @abstractmethod
    async def create(self, observation: Observation) -> Observation:
        """Insert an observation; the store assigns ID and timestamps."""

    @abstractmethod
    async def get_by_id(self, observation_id: str) -> Observation:
        """Fetch one observation by ID."""

    @abstractmethod
    async def get_by_patient_id(
        self, patient_id: str, limit: int, offset: int
    ) -> list[Observation]:
        """List a patient's observations, newest first."""

    @abstractmethod
    async def get_all(self, limit: int, offset: int) -> list[Observation]:
        """List observations, newest first."""

    @abstractmethod
    async def search(self, params: ObservationSearchParams) -> list[Observation]:
        """Run a compiled Observation search."""

    @abstractmethod
    async def update(self, observation: Observation) -> Observation:
        """Overwrite the stored observation with ``observation.id``."""

    @abstractmethod
    async def delete(self, observation_id: str) -> None:
        """Remove an observation by ID."""
