"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- HTTP client for API testing
- Relational test database sessions
- A mocked observations collection
- Common FHIR test data
"""

import os
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fhir_interop.database import Base, get_db
from fhir_interop.document_store import get_observation_collection
from fhir_interop.main import app
from fhir_interop.models.observation import Observation, ObservationComponent
from fhir_interop.models.patient import Patient

DEFAULT_TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_cursor(docs: list[dict]) -> MagicMock:
    """Cursor double whose ``to_list`` returns the given documents."""
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine with automatic schema management.

    Creates all tables before tests, drops them after.
    Uses DATABASE_TEST_URL env var if set, otherwise an in-memory SQLite
    database shared across connections.
    """
    db_url = os.environ.get("DATABASE_TEST_URL", DEFAULT_TEST_DATABASE_URL)

    if db_url.startswith("sqlite"):
        engine = create_async_engine(db_url, echo=False, poolclass=StaticPool)
    else:
        engine = create_async_engine(db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncSession:
    """Create test database session with automatic rollback.

    Each test gets a fresh session that rolls back on completion,
    ensuring test isolation.
    """
    session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_maker() as session:
        yield session
        await session.rollback()


# =============================================================================
# Document Store Fixtures
# =============================================================================


@pytest.fixture
def mock_collection() -> MagicMock:
    """Observations collection double with async CRUD methods."""
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.create_index = AsyncMock()
    collection.find = MagicMock(return_value=make_cursor([]))
    return collection


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client(test_engine, mock_collection):
    """Async test client for the FastAPI app with test storage.

    Overrides get_db to use the test database and the observations
    collection dependency to use the mocked collection.
    """
    test_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with test_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_observation_collection] = lambda: mock_collection

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_observation_collection, None)


# =============================================================================
# FHIR Test Data
# =============================================================================


@pytest.fixture
def patient_json() -> dict:
    """FHIR Patient in canonical single-name, single-identifier form."""
    return {
        "resourceType": "Patient",
        "identifier": [{"system": "http://hospital.example.org/mrn", "value": "MRN-0042"}],
        "active": True,
        "name": [{"family": "Smith", "given": ["Jane"]}],
        "gender": "female",
        "birthDate": "1985-03-14",
    }


@pytest.fixture
def observation_json() -> dict:
    """FHIR blood-pressure Observation with two components."""
    return {
        "resourceType": "Observation",
        "status": "final",
        "category": [{"coding": [{"code": "vital-signs", "display": "vital-signs"}]}],
        "code": {
            "coding": [
                {
                    "system": "http://loinc.org",
                    "code": "85354-9",
                    "display": "Blood pressure panel",
                }
            ]
        },
        "subject": {"reference": "Patient/0b7e6c1e-5b1a-4c1f-9f7e-3f2d8a1c9e44"},
        "effectiveDateTime": "2024-05-01T08:30:00Z",
        "issued": "2024-05-01T09:00:00Z",
        "component": [
            {
                "code": {"coding": [{"system": "http://loinc.org", "code": "8480-6"}]},
                "valueQuantity": {"value": 120, "unit": "mmHg"},
            },
            {
                "code": {"coding": [{"system": "http://loinc.org", "code": "8462-4"}]},
                "valueQuantity": {"value": 80, "unit": "mmHg"},
            },
        ],
    }


@pytest.fixture
def sample_patient() -> Patient:
    """Fully populated Patient record."""
    return Patient(
        id=None,
        identifier_system="http://hospital.example.org/mrn",
        identifier_value="MRN-0042",
        active=True,
        family_name="Smith",
        given_name="Jane",
        gender="female",
        birth_date=date(1985, 3, 14),
    )


@pytest.fixture
def sample_observation() -> Observation:
    """Heart-rate Observation record."""
    return Observation(
        id="66a1f0c2e4b0a1b2c3d4e5f6",
        patient_id="0b7e6c1e-5b1a-4c1f-9f7e-3f2d8a1c9e44",
        status="final",
        category="vital-signs",
        code="8867-4",
        code_system="http://loinc.org",
        code_display="Heart rate",
        value_quantity=72.0,
        value_unit="beats/minute",
        effective_date=datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc),
        issued_date=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
        components=[],
    )


@pytest.fixture
def sample_component() -> ObservationComponent:
    return ObservationComponent(
        code="8480-6",
        code_system="http://loinc.org",
        code_display="Systolic blood pressure",
        value_quantity=120.0,
        value_unit="mmHg",
    )
