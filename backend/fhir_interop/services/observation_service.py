"""Observation use cases: map in, call the repository, map out."""

from fhir_interop.mappers.observation import ObservationMapper
from fhir_interop.models.search_params import ObservationSearchParams
from fhir_interop.repositories.base import ObservationRepository
from fhir_interop.schemas.fhir import ObservationResource


class ObservationService:
    """Orchestrates Observation operations over an ObservationRepository."""

    def __init__(self, repository: ObservationRepository):
        self.repository = repository

    async def create_observation(self, resource: ObservationResource) -> ObservationResource:
        observation = ObservationMapper.from_fhir(resource)
        created = await self.repository.create(observation)
        return ObservationMapper.to_fhir(created)

    async def get_observation(self, observation_id: str) -> ObservationResource:
        observation = await self.repository.get_by_id(observation_id)
        return ObservationMapper.to_fhir(observation)

    async def get_observations_for_patient(
        self, patient_id: str, limit: int, offset: int
    ) -> list[ObservationResource]:
        observations = await self.repository.get_by_patient_id(patient_id, limit, offset)
        return [ObservationMapper.to_fhir(observation) for observation in observations]

    async def get_all_observations(self, limit: int, offset: int) -> list[ObservationResource]:
        observations = await self.repository.get_all(limit, offset)
        return [ObservationMapper.to_fhir(observation) for observation in observations]

    async def search_observations(
        self, params: ObservationSearchParams
    ) -> list[ObservationResource]:
        observations = await self.repository.search(params)
        return [ObservationMapper.to_fhir(observation) for observation in observations]

    async def update_observation(
        self, observation_id: str, resource: ObservationResource
    ) -> ObservationResource:
        """Replace a stored observation; the path ID wins over any body ID."""
        observation = ObservationMapper.from_fhir(resource)
        observation.id = observation_id

        updated = await self.repository.update(observation)
        return ObservationMapper.to_fhir(updated)

    async def delete_observation(self, observation_id: str) -> None:
        await self.repository.delete(observation_id)
