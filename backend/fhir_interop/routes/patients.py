"""FHIR Patient API routes."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fhir_interop.database import get_db
from fhir_interop.repositories.patient import SqlPatientRepository
from fhir_interop.responses import FhirJSONResponse, bundle_response, resource_response
from fhir_interop.routes.errors import service_errors
from fhir_interop.schemas.fhir import PatientResource
from fhir_interop.services.patient_service import PatientService
from fhir_interop.services.query_parser import parse_patient_search_params

router = APIRouter(prefix="/fhir/Patient", tags=["Patient"])


def get_patient_service(db: AsyncSession = Depends(get_db)) -> PatientService:
    """Build a PatientService bound to the request's database session."""
    return PatientService(SqlPatientRepository(db))


def _require_name(resource: PatientResource) -> None:
    if not resource.has_name():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Patient must have at least one name",
        )


@router.post("", status_code=status.HTTP_201_CREATED, response_class=FhirJSONResponse)
async def create_patient(
    resource: PatientResource,
    service: PatientService = Depends(get_patient_service),
) -> FhirJSONResponse:
    """Create a patient.

    Returns:
        The stored Patient with its server-assigned ID (201).

    Raises:
        HTTPException: 400 if the Patient has no name, 500 on storage failure.
    """
    _require_name(resource)
    with service_errors("create patient"):
        created = await service.create_patient(resource)
    return resource_response(created, status_code=status.HTTP_201_CREATED)


@router.get("", response_class=FhirJSONResponse)
async def search_patients(
    request: Request,
    service: PatientService = Depends(get_patient_service),
) -> FhirJSONResponse:
    """Search patients.

    Supports name, family, given, gender, birthdate (with ge/gt/le/lt/eq
    prefixes), active, _sort, _count and _offset.

    Returns:
        A searchset Bundle of matching patients.
    """
    params = parse_patient_search_params(request.url.query)
    with service_errors("search patients"):
        patients = await service.search_patients(params)
    return bundle_response(patients)


@router.get("/{patient_id}", response_class=FhirJSONResponse)
async def get_patient(
    patient_id: str,
    service: PatientService = Depends(get_patient_service),
) -> FhirJSONResponse:
    """Get a single patient by ID.

    Raises:
        HTTPException: 404 if patient not found.
    """
    with service_errors("retrieve patient", patient_id):
        patient = await service.get_patient(patient_id)
    return resource_response(patient)


@router.put("/{patient_id}", response_class=FhirJSONResponse)
async def update_patient(
    patient_id: str,
    resource: PatientResource,
    service: PatientService = Depends(get_patient_service),
) -> FhirJSONResponse:
    """Replace a patient.

    Raises:
        HTTPException: 400 if the body ID differs from the path or the
            Patient has no name, 404 if patient not found.
    """
    if resource.id and resource.id != patient_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Resource ID does not match URL",
        )
    _require_name(resource)

    with service_errors("update patient", patient_id):
        updated = await service.update_patient(patient_id, resource)
    return resource_response(updated)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: str,
    service: PatientService = Depends(get_patient_service),
) -> Response:
    """Delete a patient.

    Raises:
        HTTPException: 404 if patient not found.
    """
    with service_errors("delete patient", patient_id):
        await service.delete_patient(patient_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
