"""Feature flag service: cached resolution, dot-path checks, admin views."""

from dataclasses import dataclass
from functools import partial
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from club_entitlements.clubs.models import ClubModel
from club_entitlements.clubs.store import load_club_snapshot
from club_entitlements.common.config import EntitlementsSettings
from club_entitlements.common.database import add_commit_hook
from club_entitlements.common.logging import get_logger
from club_entitlements.flags.cache import FlagCache, MemoryFlagCache
from club_entitlements.flags.entitlements import (
    ClubSnapshot,
    EntitlementResult,
    resolve_entitlements,
    value_at,
)
from club_entitlements.flags.tier_templates import (
    LEGACY_TIERS,
    TierFlags,
    get_default_flags_for_tier,
    get_tier_defaults,
)

logger = get_logger("flags.service")

# session.info key: club ids written in the open transaction
PENDING_WRITES = "club_entitlements.pending_flag_writes"


@dataclass
class ClubFlagsSummary:
    """One row of the cross-club admin view."""
    club_id: str
    club_name: str
    subscription_tier: str
    resolution: str  # "package" or "legacy"
    package_slug: str | None
    flags: EntitlementResult
    has_operational_overrides: bool


def _has_operational_overrides(snapshot: ClubSnapshot) -> bool:
    if snapshot.has_package:
        return bool(snapshot.operational_overrides)
    operational = snapshot.legacy.features.get("operational")
    return isinstance(operational, dict) and len(operational) > 0


class FeatureFlagService:
    """Resolves club flags through a cache-aside layer."""

    def __init__(
        self,
        settings: EntitlementsSettings,
        cache: FlagCache | None = None,
        tiers: Mapping[str, TierFlags] = LEGACY_TIERS,
    ):
        self.settings = settings
        self.cache = cache if cache is not None else MemoryFlagCache()
        self.tiers = tiers

    # ── Resolution ──

    async def resolve(self, session: AsyncSession, club_id: str) -> EntitlementResult:
        """Resolve a club's flags from the store, bypassing the cache."""
        snapshot = await load_club_snapshot(session, club_id)
        return self._resolve_snapshot(club_id, snapshot)

    def _resolve_snapshot(
        self, club_id: str, snapshot: ClubSnapshot | None,
    ) -> EntitlementResult:
        if snapshot is None:
            logger.warning(
                "Club not found, returning empty flags", extra={"club_id": club_id},
            )
            return EntitlementResult.empty()
        return resolve_entitlements(snapshot, self.tiers)

    async def get_feature_flags(
        self, session: AsyncSession, club_id: str,
    ) -> EntitlementResult:
        """Read-through: cached flags when fresh, otherwise resolve and cache.

        A session holding uncommitted writes for the club resolves straight
        from the store and leaves the cache alone.
        """
        if self.has_pending_write(session, club_id):
            return await self.resolve(session, club_id)

        cached = await self.cache.load(club_id)
        if cached is not None:
            return cached

        result = await self.resolve(session, club_id)
        await self.cache.store(club_id, result, self.settings.cache_ttl)
        return result

    async def is_enabled(
        self, session: AsyncSession, club_id: str, path: str,
    ) -> bool:
        """Check a dot path like ``modules.golf``. Unknown paths are False."""
        flags = await self.get_feature_flags(session, club_id)
        return value_at(flags, path)

    async def invalidate(self, club_id: str) -> None:
        """Drop the club's cached flags. Cache errors propagate."""
        await self.cache.invalidate(club_id)
        logger.info("Invalidated cached flags", extra={"club_id": club_id})

    def invalidate_on_commit(self, session: AsyncSession, club_id: str) -> None:
        """Mark the club written in this session.

        The cached entry is dropped right before the commit, where a cache
        error aborts the write, and again right after it. Nothing happens on
        rollback.
        """
        pending = session.info.setdefault(PENDING_WRITES, set())
        if club_id in pending:
            return
        pending.add(club_id)
        add_commit_hook(session, partial(self.invalidate, club_id))

    def has_pending_write(self, session: AsyncSession, club_id: str) -> bool:
        return club_id in session.info.get(PENDING_WRITES, ())

    # ── Legacy tier defaults ──

    def get_default_flags_for_tier(self, tier: str) -> EntitlementResult:
        return get_default_flags_for_tier(tier, self.tiers)

    def get_tier_defaults(self) -> list[dict[str, Any]]:
        return get_tier_defaults(self.tiers)

    # ── Admin views ──

    async def list_clubs_with_flags(self, session: AsyncSession) -> list[ClubFlagsSummary]:
        """Every club, by name, with its resolved flags and resolution path."""
        result = await session.execute(select(ClubModel).order_by(ClubModel.name))
        summaries = []
        for club in result.scalars().all():
            snapshot = await load_club_snapshot(session, club.id)
            if self.has_pending_write(session, club.id):
                flags = self._resolve_snapshot(club.id, snapshot)
            else:
                flags = await self.cache.load(club.id)
                if flags is None:
                    flags = self._resolve_snapshot(club.id, snapshot)
                    await self.cache.store(club.id, flags, self.settings.cache_ttl)
            summaries.append(ClubFlagsSummary(
                club_id=club.id,
                club_name=club.name,
                subscription_tier=club.subscription_tier,
                resolution="package" if snapshot.has_package else "legacy",
                package_slug=snapshot.package_slug,
                flags=flags,
                has_operational_overrides=_has_operational_overrides(snapshot),
            ))
        return summaries
