"""Cache-aside storage for resolved club flags.

The cache holds one whole ``EntitlementResult`` per club, so invalidation is
always whole-club. A failed read is a miss and a failed write is skipped, so
resolution carries on against the store. A failed invalidation is logged and
raised so the write that needed it fails.
"""

import json
import time
from typing import Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from club_entitlements.common.config import EntitlementsSettings
from club_entitlements.common.logging import get_logger
from club_entitlements.flags.entitlements import EntitlementResult

logger = get_logger("flags.cache")


class FlagCache:
    """Interface for flag cache backends."""

    async def load(self, club_id: str) -> EntitlementResult | None:
        raise NotImplementedError

    async def store(
        self, club_id: str, result: EntitlementResult, ttl: int | None = None,
    ) -> None:
        raise NotImplementedError

    async def invalidate(self, club_id: str) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class NullFlagCache(FlagCache):
    """Never caches; every read resolves fresh."""

    async def load(self, club_id: str) -> EntitlementResult | None:
        return None

    async def store(
        self, club_id: str, result: EntitlementResult, ttl: int | None = None,
    ) -> None:
        return None

    async def invalidate(self, club_id: str) -> None:
        return None


class MemoryFlagCache(FlagCache):
    """Process-local cache. A ``None`` TTL stores entries without expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float | None, dict]] = {}

    async def load(self, club_id: str) -> EntitlementResult | None:
        entry = self._entries.get(club_id)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at is not None and self._clock() >= expires_at:
            self._entries.pop(club_id, None)
            return None
        return EntitlementResult.from_dict(payload)

    async def store(
        self, club_id: str, result: EntitlementResult, ttl: int | None = None,
    ) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._entries[club_id] = (expires_at, result.to_dict())

    async def invalidate(self, club_id: str) -> None:
        self._entries.pop(club_id, None)

    def __contains__(self, club_id: str) -> bool:
        return club_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class RedisFlagCache(FlagCache):
    """Redis-backed cache, one JSON value per club under ``<prefix><club_id>``."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "feature-flags:",
        client: "redis.Redis | None" = None,
    ):
        self.redis_url = redis_url
        self.prefix = prefix
        self._client = client

    @property
    def client(self) -> "redis.Redis":
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        return self._client

    def key_for(self, club_id: str) -> str:
        return f"{self.prefix}{club_id}"

    async def load(self, club_id: str) -> EntitlementResult | None:
        try:
            raw = await self.client.get(self.key_for(club_id))
        except (RedisError, OSError) as exc:
            logger.warning(
                "Flag cache read failed, resolving fresh: %s", exc,
                extra={"club_id": club_id},
            )
            return None
        if not raw:
            return None
        try:
            return EntitlementResult.from_dict(json.loads(raw))
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning(
                "Discarding malformed flag cache entry: %s", exc,
                extra={"club_id": club_id},
            )
            return None

    async def store(
        self, club_id: str, result: EntitlementResult, ttl: int | None = None,
    ) -> None:
        payload = json.dumps(result.to_dict())
        try:
            if ttl:
                await self.client.setex(self.key_for(club_id), ttl, payload)
            else:
                await self.client.set(self.key_for(club_id), payload)
        except (RedisError, OSError) as exc:
            logger.warning(
                "Flag cache write failed: %s", exc, extra={"club_id": club_id},
            )

    async def invalidate(self, club_id: str) -> None:
        try:
            await self.client.delete(self.key_for(club_id))
        except (RedisError, OSError) as exc:
            logger.error(
                "Flag cache invalidation failed: %s", exc, extra={"club_id": club_id},
            )
            raise

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def build_flag_cache(settings: EntitlementsSettings) -> FlagCache:
    """Create the cache backend named by ``settings.cache_backend``."""
    backend = settings.cache_backend.lower()
    if backend == "redis":
        return RedisFlagCache(settings.redis_url, prefix=settings.cache_prefix)
    if backend == "none":
        return NullFlagCache()
    if backend == "memory":
        return MemoryFlagCache()
    raise ValueError(f"Unknown cache backend: {settings.cache_backend}")
