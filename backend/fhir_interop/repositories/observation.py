"""Observation repository backed by MongoDB (async pymongo)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.asynchronous.collection import AsyncCollection

from fhir_interop.errors import InvalidIdentifierError, NotFoundError
from fhir_interop.models.observation import Observation
from fhir_interop.models.search_params import ObservationSearchParams
from fhir_interop.repositories.base import ObservationRepository
from fhir_interop.repositories.observation_search import ObservationFilterBuilder

# Keys left out of a document when unset; cleared explicitly on update
_OPTIONAL_KEYS = ("value_quantity", "value_unit", "value_string", "effective_date", "components")


def parse_observation_id(observation_id: str) -> ObjectId:
    """Convert a hex string to an ObjectId.

    Raises:
        InvalidIdentifierError: If the string is not a valid ObjectId.
    """
    # ObjectId(None) would mint a fresh ID
    if not observation_id:
        raise InvalidIdentifierError("Observation", str(observation_id))
    try:
        return ObjectId(observation_id)
    except (InvalidId, TypeError):
        raise InvalidIdentifierError("Observation", str(observation_id)) from None


class MongoObservationRepository(ObservationRepository):
    """Repository for Observation persistence in the document store.

    Searches are compiled by an ObservationFilterBuilder; pymongo errors
    propagate unchanged.
    """

    def __init__(
        self,
        collection: AsyncCollection,
        filter_builder: ObservationFilterBuilder | None = None,
    ):
        """Initialize repository with the observations collection.

        Args:
            collection: Async pymongo collection.
            filter_builder: Search compiler; defaults to ObservationFilterBuilder.
        """
        self.collection = collection
        self.filter_builder = filter_builder or ObservationFilterBuilder()

    async def create(self, observation: Observation) -> Observation:
        """Insert an observation and record the generated ObjectId."""
        now = datetime.now(timezone.utc)
        observation.created_at = now
        observation.updated_at = now

        result = await self.collection.insert_one(observation.to_document())
        observation.id = str(result.inserted_id)
        return observation

    async def get_by_id(self, observation_id: str) -> Observation:
        """Get observation by ID.

        Raises:
            InvalidIdentifierError: If the ID is not an ObjectId.
            NotFoundError: If no observation has this ID.
        """
        doc = await self.collection.find_one({"_id": parse_observation_id(observation_id)})
        if doc is None:
            raise NotFoundError("Observation", observation_id)
        return Observation.from_document(doc)

    async def get_by_patient_id(
        self, patient_id: str, limit: int, offset: int
    ) -> list[Observation]:
        """Get a patient's observations newest first, paginated."""
        return await self._find(
            {"patient_id": patient_id},
            sort=[("created_at", DESCENDING)],
            skip=offset,
            limit=limit,
        )

    async def get_all(self, limit: int, offset: int) -> list[Observation]:
        """Get observations newest first, paginated."""
        return await self._find({}, sort=[("created_at", DESCENDING)], skip=offset, limit=limit)

    async def search(self, params: ObservationSearchParams) -> list[Observation]:
        """Get observations matching the search parameters."""
        query = self.filter_builder.build(params)
        return await self._find(query.filter, sort=query.sort, skip=query.skip, limit=query.limit)

    async def update(self, observation: Observation) -> Observation:
        """Overwrite a stored observation, keeping its created_at.

        Raises:
            InvalidIdentifierError: If ``observation.id`` is not an ObjectId.
            NotFoundError: If no observation has this ID.
        """
        object_id = parse_observation_id(observation.id)
        observation.updated_at = datetime.now(timezone.utc)

        fields = observation.to_document()
        fields.pop("created_at", None)
        update: dict[str, Any] = {"$set": fields}
        cleared = {key: "" for key in _OPTIONAL_KEYS if key not in fields}
        if cleared:
            update["$unset"] = cleared

        result = await self.collection.update_one({"_id": object_id}, update)
        if result.matched_count == 0:
            raise NotFoundError("Observation", observation.id)
        return observation

    async def delete(self, observation_id: str) -> None:
        """Delete an observation.

        Raises:
            InvalidIdentifierError: If the ID is not an ObjectId.
            NotFoundError: If no observation has this ID.
        """
        result = await self.collection.delete_one({"_id": parse_observation_id(observation_id)})
        if result.deleted_count == 0:
            raise NotFoundError("Observation", observation_id)

    async def _find(
        self,
        query: dict[str, Any],
        *,
        sort: list[tuple[str, int]],
        skip: int,
        limit: int,
    ) -> list[Observation]:
        cursor = self.collection.find(query, sort=sort, skip=skip, limit=limit)
        docs = await cursor.to_list()
        return [Observation.from_document(doc) for doc in docs]
