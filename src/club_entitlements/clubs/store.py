"""Read side of club assignment state.

Loads everything resolution needs for one club into a ``ClubSnapshot``.
Store errors propagate to the caller unchanged.
"""

from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from club_entitlements.catalog.models import FeatureDefinitionModel, PackageFeatureModel, PackageModel
from club_entitlements.clubs.models import (
    ClubAddonModel,
    ClubModel,
    ClubOperationalFlagModel,
    ClubPackageModel,
)
from club_entitlements.common.exceptions import AssignmentConflictError
from club_entitlements.common.models import as_utc, utcnow
from club_entitlements.flags.entitlements import ClubSnapshot, FeatureToggle, LegacyRecord


async def get_active_club_package(
    session: AsyncSession, club_id: str, now: datetime | None = None,
) -> ClubPackageModel | None:
    """Return the club's current package assignment, if any.

    Raises:
        AssignmentConflictError: If more than one assignment is active. The
            write path is expected to prevent overlaps; resolution does not
            pick a winner.
    """
    now = as_utc(now) or utcnow()
    result = await session.execute(
        select(ClubPackageModel).where(
            ClubPackageModel.club_id == club_id,
            ClubPackageModel.start_date <= now,
            or_(ClubPackageModel.end_date.is_(None), ClubPackageModel.end_date > now),
        )
    )
    active = list(result.scalars().all())
    if len(active) > 1:
        raise AssignmentConflictError(
            f"Club {club_id} has {len(active)} overlapping package assignments"
        )
    return active[0] if active else None


async def get_active_addon_keys(
    session: AsyncSession, club_id: str, now: datetime | None = None,
) -> list[str]:
    """Feature keys of add-ons whose end date is unset or strictly after now."""
    now = as_utc(now) or utcnow()
    result = await session.execute(
        select(FeatureDefinitionModel.key)
        .join(ClubAddonModel, ClubAddonModel.feature_definition_id == FeatureDefinitionModel.id)
        .where(
            ClubAddonModel.club_id == club_id,
            or_(ClubAddonModel.end_date.is_(None), ClubAddonModel.end_date > now),
        )
    )
    return list(result.scalars().all())


async def get_operational_overrides(
    session: AsyncSession, club_id: str,
) -> list[FeatureToggle]:
    result = await session.execute(
        select(FeatureDefinitionModel.key, ClubOperationalFlagModel.enabled)
        .join(
            ClubOperationalFlagModel,
            ClubOperationalFlagModel.feature_definition_id == FeatureDefinitionModel.id,
        )
        .where(ClubOperationalFlagModel.club_id == club_id)
    )
    return [FeatureToggle(key=key, enabled=enabled) for key, enabled in result.all()]


async def get_package_features(
    session: AsyncSession, package_id: str,
) -> list[FeatureToggle]:
    result = await session.execute(
        select(FeatureDefinitionModel.key, PackageFeatureModel.enabled)
        .join(
            PackageFeatureModel,
            PackageFeatureModel.feature_definition_id == FeatureDefinitionModel.id,
        )
        .where(PackageFeatureModel.package_id == package_id)
    )
    return [FeatureToggle(key=key, enabled=enabled) for key, enabled in result.all()]


async def load_club_snapshot(
    session: AsyncSession, club_id: str, now: datetime | None = None,
) -> ClubSnapshot | None:
    """Load a club's assignment state, or None if the club does not exist."""
    club = await session.get(ClubModel, club_id)
    if club is None:
        return None

    now = as_utc(now) or utcnow()
    snapshot = ClubSnapshot(
        club_id=club.id,
        club_name=club.name,
        legacy=LegacyRecord(
            subscription_tier=club.subscription_tier,
            features=dict(club.features or {}),
        ),
    )

    club_package = await get_active_club_package(session, club_id, now)
    if club_package is None:
        return snapshot

    package = await session.get(PackageModel, club_package.package_id)
    snapshot.has_package = True
    snapshot.package_slug = package.slug if package else None
    snapshot.package_features = await get_package_features(session, club_package.package_id)
    snapshot.addon_keys = await get_active_addon_keys(session, club_id, now)
    snapshot.operational_overrides = await get_operational_overrides(session, club_id)
    return snapshot
