"""Patient use cases: map in, call the repository, map out."""

from fhir_interop.mappers.patient import PatientMapper
from fhir_interop.models.search_params import PatientSearchParams
from fhir_interop.repositories.base import PatientRepository
from fhir_interop.schemas.fhir import PatientResource


class PatientService:
    """Orchestrates Patient operations over a PatientRepository.

    Repository errors (NotFoundError, InvalidIdentifierError, engine
    errors) propagate unchanged; the HTTP layer decides status codes.
    """

    def __init__(self, repository: PatientRepository):
        self.repository = repository

    async def create_patient(self, resource: PatientResource) -> PatientResource:
        """Create a patient from a FHIR Patient.

        A Patient sent without ``active`` is stored as active; an explicit
        ``false`` is kept.
        """
        patient = PatientMapper.from_fhir(resource)
        if resource.active is None:
            patient.active = True

        created = await self.repository.create(patient)
        return PatientMapper.to_fhir(created)

    async def get_patient(self, patient_id: str) -> PatientResource:
        patient = await self.repository.get_by_id(patient_id)
        return PatientMapper.to_fhir(patient)

    async def get_all_patients(self, limit: int, offset: int) -> list[PatientResource]:
        patients = await self.repository.get_all(limit, offset)
        return [PatientMapper.to_fhir(patient) for patient in patients]

    async def search_patients(self, params: PatientSearchParams) -> list[PatientResource]:
        patients = await self.repository.search(params)
        return [PatientMapper.to_fhir(patient) for patient in patients]

    async def update_patient(self, patient_id: str, resource: PatientResource) -> PatientResource:
        """Replace a stored patient; the path ID wins over any body ID."""
        patient = PatientMapper.from_fhir(resource)
        patient.id = patient_id

        updated = await self.repository.update(patient)
        return PatientMapper.to_fhir(updated)

    async def delete_patient(self, patient_id: str) -> None:
        await self.repository.delete(patient_id)
