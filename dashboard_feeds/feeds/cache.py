"""Redis-backed cache of raw feed response bodies."""

import base64
import binascii
import hashlib
import logging
import random

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def _key(url: str) -> str:
    """Generate Redis key for a feed URL's cached body."""
    digest = hashlib.sha256(url.encode()).hexdigest()
    return f"df:feed:{digest}"


class FeedCache:
    """Stores response bodies with TTL + randomized splay.

    Any Redis failure is logged and treated as a cache miss, so the cache
    can never be the reason a feed fails to load.
    """

    def __init__(self, redis: Redis, ttl_seconds: int = 900, splay_max: int = 300):
        self._redis = redis
        self.ttl_seconds = ttl_seconds
        self.splay_max = splay_max

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int = 900, splay_max: int = 300) -> "FeedCache":
        return cls(Redis.from_url(url), ttl_seconds, splay_max)

    async def get(self, url: str) -> bytes | None:
        """Return the cached body for ``url`` if it is still fresh."""
        try:
            cached = await self._redis.get(_key(url))
        except RedisError as exc:
            logger.warning("Cache lookup failed for %s: %s", url, exc)
            return None
        if cached is None:
            return None
        try:
            return base64.b64decode(cached, validate=True)
        except binascii.Error as exc:
            logger.warning("Ignoring corrupt cache entry for %s: %s", url, exc)
            return None

    async def set(self, url: str, body: bytes) -> None:
        ttl = self.ttl_seconds + random.randint(0, self.splay_max)
        try:
            await self._redis.setex(_key(url), ttl, base64.b64encode(body))
        except RedisError as exc:
            logger.warning("Cache store failed for %s: %s", url, exc)

    async def aclose(self) -> None:
        await self._redis.aclose()
