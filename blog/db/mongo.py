# ----------------------
# file   : blog/db/mongo.py
# function: MongoDB client and database handles
# ----------------------

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from blog.core.config import settings
from blog.utils.logger import logger

_client = None
_db = None


# ----------------------
# function: lazily create the motor client and database
# return  : db (AsyncIOMotorDatabase)
# ----------------------
def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        logger.info(f"[MONGO] connecting to {settings.MONGO_DB}")
        _client = AsyncIOMotorClient(settings.MONGO_URI)
        _db = _client[settings.MONGO_DB]
    return _db


# ----------------------
# param   : db - database to use instead of the configured one (tests, scripts)
# function: replace the shared database handle
# ----------------------
def set_db(db: AsyncIOMotorDatabase) -> None:
    global _db
    _db = db


def close_db() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("[MONGO] connection closed")
    _client = None
    _db = None
