"""Document database setup (Observation store).

The Mongo client is created lazily on first use so that importing the
application never opens a connection.
"""

import logging

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from fhir_interop.config import settings

logger = logging.getLogger(__name__)

_client: AsyncMongoClient | None = None


def get_mongo_client() -> AsyncMongoClient:
    """Return the process-wide Mongo client, creating it on first call."""
    global _client
    if _client is None:
        _client = AsyncMongoClient(settings.mongodb_url, tz_aware=True)
    return _client


async def close_mongo_client() -> None:
    """Close the Mongo client if one was created."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None


def get_observation_collection() -> AsyncCollection:
    """FastAPI dependency returning the observations collection."""
    database = get_mongo_client()[settings.mongodb_database]
    return database[settings.observation_collection]


async def ensure_observation_indexes(collection: AsyncCollection) -> bool:
    """Create the indexes used by observation search.

    Returns:
        True if indexes were ensured, False if the server was unreachable.
    """
    try:
        await collection.create_index([("patient_id", ASCENDING), ("created_at", DESCENDING)])
        await collection.create_index([("code", ASCENDING)])
        await collection.create_index([("effective_date", DESCENDING)])
    except PyMongoError as e:
        logger.warning("Could not ensure observation indexes: %s", e)
        return False
    return True
