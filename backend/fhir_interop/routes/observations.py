"""FHIR Observation API routes."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pymongo.asynchronous.collection import AsyncCollection

from fhir_interop.document_store import get_observation_collection
from fhir_interop.repositories.observation import MongoObservationRepository
from fhir_interop.responses import FhirJSONResponse, bundle_response, resource_response
from fhir_interop.routes.errors import service_errors
from fhir_interop.schemas.fhir import ObservationResource
from fhir_interop.services.observation_service import ObservationService
from fhir_interop.services.query_parser import parse_observation_search_params

router = APIRouter(prefix="/fhir/Observation", tags=["Observation"])


def get_observation_service(
    collection: AsyncCollection = Depends(get_observation_collection),
) -> ObservationService:
    """Build an ObservationService over the observations collection."""
    return ObservationService(MongoObservationRepository(collection))


@router.post("", status_code=status.HTTP_201_CREATED, response_class=FhirJSONResponse)
async def create_observation(
    resource: ObservationResource,
    service: ObservationService = Depends(get_observation_service),
) -> FhirJSONResponse:
    """Create an observation.

    Returns:
        The stored Observation with its server-assigned ID (201).
    """
    with service_errors("create observation"):
        created = await service.create_observation(resource)
    return resource_response(created, status_code=status.HTTP_201_CREATED)


@router.get("", response_class=FhirJSONResponse)
async def search_observations(
    request: Request,
    service: ObservationService = Depends(get_observation_service),
) -> FhirJSONResponse:
    """Search observations.

    Supports patient, code, category, status, date (ge/gt/le/lt
    prefixes), _sort, _count and _offset.

    Returns:
        A searchset Bundle of matching observations.
    """
    params = parse_observation_search_params(request.url.query)
    with service_errors("search observations"):
        observations = await service.search_observations(params)
    return bundle_response(observations)


@router.get("/{observation_id}", response_class=FhirJSONResponse)
async def get_observation(
    observation_id: str,
    service: ObservationService = Depends(get_observation_service),
) -> FhirJSONResponse:
    """Get a single observation by ID.

    Raises:
        HTTPException: 404 if observation not found.
    """
    with service_errors("retrieve observation", observation_id):
        observation = await service.get_observation(observation_id)
    return resource_response(observation)


@router.put("/{observation_id}", response_class=FhirJSONResponse)
async def update_observation(
    observation_id: str,
    resource: ObservationResource,
    service: ObservationService = Depends(get_observation_service),
) -> FhirJSONResponse:
    """Replace an observation.

    Raises:
        HTTPException: 400 if the body ID differs from the path, 404 if
            observation not found.
    """
    if resource.id and resource.id != observation_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Resource ID does not match URL",
        )

    with service_errors("update observation", observation_id):
        updated = await service.update_observation(observation_id, resource)
    return resource_response(updated)


@router.delete("/{observation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_observation(
    observation_id: str,
    service: ObservationService = Depends(get_observation_service),
) -> Response:
    """Delete an observation.

    Raises:
        HTTPException: 404 if observation not found.
    """
    with service_errors("delete observation", observation_id):
        await service.delete_observation(observation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
