"""Patient repository backed by PostgreSQL (async SQLAlchemy)."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fhir_interop.errors import InvalidIdentifierError, NotFoundError
from fhir_interop.models.patient import Patient
from fhir_interop.models.search_params import PatientSearchParams
from fhir_interop.repositories.base import PatientRepository
from fhir_interop.repositories.patient_search import PatientQueryBuilder

# Columns copied from the incoming record on update
_UPDATABLE_FIELDS = (
    "identifier_system",
    "identifier_value",
    "active",
    "family_name",
    "given_name",
    "gender",
    "birth_date",
)


def parse_patient_id(patient_id: str | uuid.UUID | None) -> uuid.UUID:
    """Convert an ID to a UUID.

    Raises:
        InvalidIdentifierError: If the ID is not a valid UUID.
    """
    if isinstance(patient_id, uuid.UUID):
        return patient_id
    try:
        return uuid.UUID(str(patient_id))
    except ValueError:
        raise InvalidIdentifierError("Patient", str(patient_id)) from None


class SqlPatientRepository(PatientRepository):
    """Repository for Patient persistence in the relational store.

    Searches are compiled by a PatientQueryBuilder; storage errors from
    SQLAlchemy propagate unchanged.
    """

    def __init__(self, db: AsyncSession, query_builder: PatientQueryBuilder | None = None):
        """Initialize repository with database session.

        Args:
            db: Async SQLAlchemy session.
            query_builder: Search compiler; defaults to PatientQueryBuilder.
        """
        self.db = db
        self.query_builder = query_builder or PatientQueryBuilder()

    async def create(self, patient: Patient) -> Patient:
        """Insert a patient and load the generated ID and timestamps.

        Any ID already on the record is replaced.
        """
        patient.id = uuid.uuid4()
        self.db.add(patient)
        await self.db.flush()
        await self.db.refresh(patient)
        return patient

    async def get_by_id(self, patient_id: str) -> Patient:
        """Get patient by ID.

        Raises:
            InvalidIdentifierError: If the ID is not a UUID.
            NotFoundError: If no patient has this ID.
        """
        result = await self.db.execute(
            select(Patient).where(Patient.id == parse_patient_id(patient_id))
        )
        patient = result.scalar_one_or_none()
        if patient is None:
            raise NotFoundError("Patient", str(patient_id))
        return patient

    async def get_all(self, limit: int, offset: int) -> list[Patient]:
        """Get patients newest first, paginated."""
        result = await self.db.execute(
            select(Patient).order_by(Patient.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def search(self, params: PatientSearchParams) -> list[Patient]:
        """Get patients matching the search parameters."""
        result = await self.db.execute(self.query_builder.build(params))
        return list(result.scalars().all())

    async def update(self, patient: Patient) -> Patient:
        """Overwrite a stored patient with the incoming record's fields.

        Raises:
            InvalidIdentifierError: If ``patient.id`` is not a UUID.
            NotFoundError: If no patient has this ID.
        """
        existing = await self.get_by_id(patient.id)
        for field in _UPDATABLE_FIELDS:
            setattr(existing, field, getattr(patient, field))
        existing.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return existing

    async def delete(self, patient_id: str) -> None:
        """Delete a patient.

        Raises:
            NotFoundError: If no patient has this ID.
        """
        patient = await self.get_by_id(patient_id)
        await self.db.delete(patient)
        await self.db.flush()
