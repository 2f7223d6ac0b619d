import json
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional, Dict
import time
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

class CacheBackend(ABC):
    @abstractmethod
    async def add(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set only if absent. True when this call created the key."""
        pass

    @abstractmethod
    async def clear(self) -> bool:
        pass

class MemoryCacheBackend(CacheBackend):
    def __init__(self):
        self._cache: Dict[str, Dict] = {}
        self._lock = asyncio.Lock()

    def _expiry(self, ttl: Optional[int]) -> float:
        if ttl == 0:
            return 0
        return time.time() + (ttl or settings.CACHE_TTL)

    async def _cleanup_expired(self):
        current_time = time.time()
        expired_keys = [
            key for key, item in self._cache.items()
            if item.get("expiry", 0) > 0 and current_time >= item["expiry"]
        ]
        for key in expired_keys:
            del self._cache[key]

    async def add(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        async with self._lock:
            await self._cleanup_expired()
            if key in self._cache:
                return False
            self._cache[key] = {"value": value, "expiry": self._expiry(ttl)}
            return True

    async def clear(self) -> bool:
        async with self._lock:
            self._cache.clear()
            return True

class RedisCacheBackend(CacheBackend):
    def __init__(self, redis_url: str):
        import redis.asyncio as redis
        self.redis = redis.from_url(redis_url, decode_responses=True)

    def _serialize(self, value: Any) -> str:
        return json.dumps(value, default=str)

    async def add(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            created = await self.redis.set(
                key, self._serialize(value), ex=ttl or settings.CACHE_TTL, nx=True
            )
            return bool(created)
        except Exception as e:
            # Fail open so the violation is still recorded
            logger.error(f"Redis SET NX error for key {key}: {e}")
            return True

    async def clear(self) -> bool:
        try:
            await self.redis.flushdb()
            return True
        except Exception as e:
            logger.error(f"Redis CLEAR error: {e}")
            return False

def create_cache_backend() -> CacheBackend:
    if settings.REDIS_URL:
        try:
            logger.info("Initializing Redis cache backend")
            return RedisCacheBackend(settings.REDIS_URL)
        except Exception as e:
            logger.error(f"Redis connection failed: {e}, falling back to memory cache")

    logger.info("Using in-memory cache backend")
    return MemoryCacheBackend()

cache = create_cache_backend()
