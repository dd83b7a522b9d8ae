# ----------------------
# file   : blog/middleware/session_store.py
# function: keyed session stores (redis, in-memory)
# ----------------------

import json
import time
from typing import Dict, Optional, Tuple

from redis.asyncio import Redis

from blog.utils.logger import logger


class RedisSessionStore:
    """Session data as JSON strings under ``key`` with a TTL."""

    def __init__(self, url: str):
        self.url = url
        self._redis: Optional[Redis] = None

    @property
    def client(self) -> Redis:
        if self._redis is None:
            self._redis = Redis.from_url(self.url, decode_responses=True)
        return self._redis

    async def get(self, key: str) -> Optional[dict]:
        raw = await self.client.get(key)
        return json.loads(raw) if raw else None

    async def set(self, key: str, data: dict, max_age: int) -> None:
        await self.client.set(key, json.dumps(data, default=str), ex=max_age)

    async def destroy(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            logger.info("[SESSION] redis connection closed")
        self._redis = None


class MemorySessionStore:
    """In-process store for development and tests."""

    def __init__(self):
        self._data: Dict[str, Tuple[float, str]] = {}

    async def get(self, key: str) -> Optional[dict]:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, raw = entry
        if expires_at <= time.monotonic():
            del self._data[key]
            return None
        return json.loads(raw)

    async def set(self, key: str, data: dict, max_age: int) -> None:
        self._data[key] = (time.monotonic() + max_age, json.dumps(data, default=str))

    async def destroy(self, key: str) -> None:
        self._data.pop(key, None)

    async def close(self) -> None:
        self._data.clear()

    def __len__(self):
        return len(self._data)


# ----------------------
# param   : kind - "redis" or "memory"
# param   : redis_url - used when kind is redis
# return  : session store
# ----------------------
def create_session_store(kind: str, redis_url: str):
    if kind == "memory":
        logger.info("[SESSION] using in-memory session store")
        return MemorySessionStore()
    logger.info("[SESSION] using redis session store")
    return RedisSessionStore(redis_url)
