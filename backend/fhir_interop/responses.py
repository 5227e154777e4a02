"""FHIR JSON responses."""

from typing import Any

from fastapi.responses import JSONResponse

from fhir_interop.schemas.fhir import FhirModel, searchset_bundle

FHIR_JSON = "application/fhir+json"


class FhirJSONResponse(JSONResponse):
    """JSON response served as ``application/fhir+json``."""

    media_type = FHIR_JSON


def resource_response(resource: FhirModel, status_code: int = 200) -> FhirJSONResponse:
    return FhirJSONResponse(content=resource.to_fhir_json(), status_code=status_code)


def bundle_response(resources: list[Any]) -> FhirJSONResponse:
    return FhirJSONResponse(content=searchset_bundle(resources))
