"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fhir_interop.config import settings
from fhir_interop.database import engine
from fhir_interop.document_store import (
    close_mongo_client,
    ensure_observation_indexes,
    get_observation_collection,
)
from fhir_interop.routes import observations, patients

logger = logging.getLogger(__name__)

SERVICE_NAME = "fhir-interop"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events for startup/shutdown."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Startup: ensure Mongo indexes exist; a missing server is not fatal
    if await ensure_observation_indexes(get_observation_collection()):
        logger.info("Observation indexes ensured")
    else:
        logger.warning("MongoDB not available - skipping index creation")

    yield  # Application runs here

    await close_mongo_client()
    await engine.dispose()
    logger.info("Storage clients closed")


app = FastAPI(
    title="FHIR Interop",
    description="FHIR R4 Patient and Observation storage and search",
    version="0.1.0",
    lifespan=lifespan,
)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed or invalid resource bodies as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request body", "errors": jsonable_errors(exc)},
    )


app.include_router(patients.router)
app.include_router(observations.router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "service": SERVICE_NAME,
    }


@app.get("/")
async def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": "FHIR Interop API",
        "version": "0.1.0",
        "docs": "/docs",
    }
