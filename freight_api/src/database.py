"""
MongoDB client lifecycle and collection layout.

The client is created once during application startup, shared by every
request, and closed on shutdown. Collection names follow the plural,
lower-cased form used by the existing logistics database.
"""

from typing import Optional

import structlog
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from freight_api.src.config import get_settings

logger = structlog.get_logger(__name__)


USERS = "users"
LOCATIONS = "locations"
CONTAINER_TYPES = "containertypes"
GOODS_TYPES = "goodstypes"
QUOTE_REQUESTS = "quoterequests"
SHIPMENTS = "shipments"
TRACKING_EVENTS = "trackingevents"
CONTACT_MESSAGES = "contactmessages"
SERVICES = "services"

# (collection, field) pairs that must be unique
UNIQUE_INDEXES = (
    (USERS, "email"),
    (CONTAINER_TYPES, "name"),
    (GOODS_TYPES, "name"),
    (SERVICES, "name"),
    (SHIPMENTS, "trackingNumber"),
)

# Lookup indexes for the per-customer and per-shipment listings
LOOKUP_INDEXES = (
    (QUOTE_REQUESTS, "user"),
    (SHIPMENTS, "user"),
    (TRACKING_EVENTS, "shipment"),
)


_client: Optional[AsyncMongoClient] = None


async def init_mongo_client() -> AsyncMongoClient:
    """
    Initialize the MongoDB client.

    Should be called during application startup. The driver connects
    lazily; a ping is issued so misconfiguration fails fast.

    Returns:
        Shared async MongoDB client
    """
    global _client

    if _client is not None:
        return _client

    settings = get_settings()

    try:
        _client = AsyncMongoClient(
            settings.mongodb_url,
            maxPoolSize=settings.mongodb_max_pool_size,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
            tz_aware=True,
        )
        await _client.admin.command("ping")

        logger.info(
            "mongo_client_initialized",
            database=settings.mongodb_database,
            host=settings.mongodb_url.split("@")[-1]
        )

        return _client

    except Exception as e:
        logger.error("mongo_client_init_failed", error=str(e))
        if _client is not None:
            await _client.close()
            _client = None
        raise


async def close_mongo_client():
    """
    Close the MongoDB client.

    Should be called during application shutdown.
    """
    global _client

    if _client is not None:
        await _client.close()
        logger.info("mongo_client_closed")
        _client = None


def get_mongo_client() -> AsyncMongoClient:
    """
    Get the shared MongoDB client.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _client is None:
        logger.error("mongo_client_not_initialized")
        raise RuntimeError(
            "MongoDB client not initialized. Call init_mongo_client() during startup."
        )
    return _client


def get_database() -> AsyncDatabase:
    """Get the application database."""
    return get_mongo_client()[get_settings().mongodb_database]


async def ensure_indexes(db: AsyncDatabase):
    """Create the unique and lookup indexes (idempotent)."""
    for collection, field in UNIQUE_INDEXES:
        await db[collection].create_index([(field, ASCENDING)], unique=True)
    for collection, field in LOOKUP_INDEXES:
        await db[collection].create_index([(field, ASCENDING)])
    logger.info(
        "mongo_indexes_ensured",
        unique=len(UNIQUE_INDEXES),
        lookup=len(LOOKUP_INDEXES)
    )


async def ping(db: AsyncDatabase) -> bool:
    """Check that the database answers a ping."""
    try:
        await db.command("ping")
        return True
    except Exception as e:
        logger.warning("mongo_ping_failed", error=str(e))
        return False
