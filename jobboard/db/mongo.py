# jobboard/db/mongo.py
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING

from jobboard.core.config import settings

logger = logging.getLogger(__name__)

_mongo_client: Optional[AsyncIOMotorClient] = None

# (collection, keys) pairs backing the live queries and list endpoints
INDEXES = [
    ("messages", [("conversationId", ASCENDING), ("timestamp", ASCENDING)]),
    ("messages", [("conversationId", ASCENDING), ("receiverId", ASCENDING), ("read", ASCENDING)]),
    ("conversations", [("participants", ASCENDING), ("lastMessageTimestamp", DESCENDING)]),
    ("notifications", [("userId", ASCENDING), ("createdAt", DESCENDING)]),
    ("applications", [("jobId", ASCENDING)]),
    ("messageTemplates", [("userId", ASCENDING)]),
]


def get_mongo_client() -> AsyncIOMotorClient:
    """
    Returns a cached Motor client.
    """
    global _mongo_client
    if _mongo_client is None:
        _mongo_client = AsyncIOMotorClient(settings.MONGODB_URI)
    return _mongo_client


def set_mongo_client(client) -> None:
    """Install a client (tests use an in-memory motor-compatible client)."""
    global _mongo_client
    _mongo_client = client


def get_db():
    client = get_mongo_client()
    return client[settings.MONGODB_DB]


async def init_db():
    db = get_db()
    for name, keys in INDEXES:
        try:
            await db[name].create_index(keys)
        except Exception:
            # the app still serves reads without the index; log and keep going
            logger.exception("Failed to create index on %s %s", name, keys)


def close_db():
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
