# -------------------------------------------------------------
# 🌍 MongoDB Connection Manager
# -------------------------------------------------------------
# One Motor client per process. Whoever touches Mongo first creates it,
# the startup warmup only pings it, and it is never closed.
import asyncio
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

from ziroplans.config import settings

logger = logging.getLogger(__name__)

_mongo_client: Optional[AsyncIOMotorClient] = None
_pinged = False
_lock = asyncio.Lock()


def _masked_host(uri: str) -> str:
    return uri.split("@")[-1] if "@" in uri else uri


def get_mongo_client() -> AsyncIOMotorClient:
    global _mongo_client
    if _mongo_client is None:
        logger.info("Creating MongoDB client for %s", _masked_host(settings.MONGO_URI))
        _mongo_client = AsyncIOMotorClient(settings.MONGO_URI)
    return _mongo_client


def get_mongo_db() -> AsyncIOMotorDatabase:
    """Trips database on the shared client; the driver connects on first use."""
    return get_mongo_client()[settings.MONGO_DB]


async def init_mongo() -> AsyncIOMotorDatabase:
    """
    Ping the shared client once so connection problems show up at startup.
    Concurrent and repeated calls are safe; the client is reused, never replaced.
    """
    global _pinged

    async with _lock:
        db = get_mongo_db()
        if not _pinged:
            await db.command("ping")
            _pinged = True
            logger.info("MongoDB connection established (db=%s)", settings.MONGO_DB)
    return db


def get_collection(name: str) -> AsyncIOMotorCollection:
    if not name:
        raise ValueError("Collection name is required")
    return get_mongo_db()[name]
