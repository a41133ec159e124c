"""Club assignment writes: operational overrides, packages, add-ons.

Every method that changes what a club resolves to marks the club with
``FeatureFlagService.invalidate_on_commit``. The cached entry is dropped
when the surrounding ``DatabaseManager.get_session`` transaction commits,
never from uncommitted state.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from club_entitlements.catalog.keys import OPERATIONAL_KEYS, is_operational_key, operational_default
from club_entitlements.catalog.models import (
    CATEGORY_OPERATIONAL,
    FeatureDefinitionModel,
    PackageModel,
)
from club_entitlements.catalog.seeds import LEGACY_TO_PACKAGE_TIER, package_slug
from club_entitlements.clubs.models import (
    ClubAddonModel,
    ClubModel,
    ClubOperationalFlagModel,
    ClubPackageModel,
)
from club_entitlements.clubs.store import get_active_club_package
from club_entitlements.common.exceptions import (
    AssignmentConflictError,
    ClubNotFoundError,
    FeatureNotFoundError,
    InvalidFlagKeyError,
    PackageNotFoundError,
)
from club_entitlements.common.logging import get_logger
from club_entitlements.common.models import as_utc, utcnow
from club_entitlements.flags.entitlements import EntitlementResult
from club_entitlements.flags.service import FeatureFlagService
from club_entitlements.flags.tier_templates import tier_flags

logger = get_logger("clubs.service")


class ClubAssignmentService:
    """Mutations of club assignment state."""

    def __init__(self, flag_service: FeatureFlagService):
        self.flag_service = flag_service

    # ── Clubs ──

    async def create_club(
        self,
        session: AsyncSession,
        name: str,
        slug: str,
        subscription_tier: str = "STARTER",
        features: dict[str, Any] | None = None,
    ) -> ClubModel:
        club = ClubModel(
            name=name,
            slug=slug,
            subscription_tier=subscription_tier,
            features=features or {},
        )
        session.add(club)
        await session.flush()
        self.flag_service.invalidate_on_commit(session, club.id)
        return club

    async def get_club(self, session: AsyncSession, club_id: str) -> ClubModel | None:
        return await session.get(ClubModel, club_id)

    async def _require_club(self, session: AsyncSession, club_id: str) -> ClubModel:
        club = await self.get_club(session, club_id)
        if club is None:
            raise ClubNotFoundError(f"Club {club_id} not found")
        return club

    async def _get_definition(
        self, session: AsyncSession, key: str,
    ) -> FeatureDefinitionModel | None:
        result = await session.execute(
            select(FeatureDefinitionModel).where(FeatureDefinitionModel.key == key)
        )
        return result.scalar_one_or_none()

    # ── Operational flags ──

    async def update_operational_flag(
        self,
        session: AsyncSession,
        club_id: str,
        key: str,
        enabled: bool,
    ) -> EntitlementResult:
        """Set one operational toggle for a club and return its fresh flags.

        Clubs on a package store sparse override rows: writing the system
        default deletes the row. Legacy clubs store the override in
        ``features["operational"]``, dropping it when it equals the tier
        default.

        The returned flags are resolved from this session and are not cached.

        Raises:
            InvalidFlagKeyError: If key is not an operational flag, or its
                catalog definition is missing or not OPERATIONAL.
            ClubNotFoundError: If the club does not exist.
        """
        if not is_operational_key(key):
            raise InvalidFlagKeyError(
                f"Invalid operational flag key: {key}. Valid keys: {', '.join(OPERATIONAL_KEYS)}"
            )

        club = await self._require_club(session, club_id)
        definition = await self._require_operational_definition(session, key)
        club_package = await get_active_club_package(session, club_id)

        if club_package is not None:
            await self._write_override_row(session, club_id, definition, enabled)
        else:
            self._write_legacy_override(club, key, enabled)

        await session.flush()
        self.flag_service.invalidate_on_commit(session, club_id)
        return await self.flag_service.resolve(session, club_id)

    async def _require_operational_definition(
        self, session: AsyncSession, key: str,
    ) -> FeatureDefinitionModel:
        definition = await self._get_definition(session, key)
        if definition is None:
            raise InvalidFlagKeyError(f"Operational flag {key} has no catalog definition")
        if definition.category != CATEGORY_OPERATIONAL:
            raise InvalidFlagKeyError(
                f"Feature {key} is a {definition.category} definition, not OPERATIONAL"
            )
        return definition

    async def _write_override_row(
        self,
        session: AsyncSession,
        club_id: str,
        definition: FeatureDefinitionModel,
        enabled: bool,
    ) -> None:
        key = definition.key
        result = await session.execute(
            select(ClubOperationalFlagModel).where(
                ClubOperationalFlagModel.club_id == club_id,
                ClubOperationalFlagModel.feature_definition_id == definition.id,
            )
        )
        row = result.scalar_one_or_none()

        if enabled == operational_default(key):
            if row is not None:
                await session.delete(row)
                logger.info(
                    "Removed operational override %s", key, extra={"club_id": club_id},
                )
            return

        if row is None:
            session.add(ClubOperationalFlagModel(
                club_id=club_id,
                feature_definition_id=definition.id,
                enabled=enabled,
            ))
        elif row.enabled != enabled:
            row.enabled = enabled
        logger.info(
            "Set operational override %s=%s", key, enabled, extra={"club_id": club_id},
        )

    def _write_legacy_override(self, club: ClubModel, key: str, enabled: bool) -> None:
        features = dict(club.features or {})
        operational = features.get("operational")
        operational = dict(operational) if isinstance(operational, dict) else {}

        if enabled == tier_flags(club.subscription_tier, self.flag_service.tiers).operational[key]:
            operational.pop(key, None)
        else:
            operational[key] = enabled

        if operational:
            features["operational"] = operational
        else:
            features.pop("operational", None)
        # Reassign so the JSON column is flagged dirty
        club.features = features

    # ── Package assignment ──

    async def assign_package(
        self,
        session: AsyncSession,
        club_id: str,
        package_id: str,
        member_limit_override: int | None = None,
        user_limit_override: int | None = None,
        custom_price_override: Decimal | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> ClubPackageModel:
        """Assign a package to a club.

        Raises:
            AssignmentConflictError: If the new window overlaps any existing
                assignment for the club. End the current one first.
        """
        await self._require_club(session, club_id)
        package = await session.get(PackageModel, package_id)
        if package is None:
            raise PackageNotFoundError(f"Package {package_id} not found")

        start = as_utc(start_date) or utcnow()
        end_date = as_utc(end_date)
        if end_date is not None and end_date <= start:
            raise ValueError("end_date must be after start_date")

        overlap = [
            ClubPackageModel.club_id == club_id,
            or_(ClubPackageModel.end_date.is_(None), ClubPackageModel.end_date > start),
        ]
        if end_date is not None:
            overlap.append(ClubPackageModel.start_date < end_date)
        result = await session.execute(select(ClubPackageModel.id).where(*overlap))
        if result.first() is not None:
            raise AssignmentConflictError(
                f"Club {club_id} already has a package assignment overlapping {start.isoformat()}"
            )

        club_package = ClubPackageModel(
            club_id=club_id,
            package_id=package_id,
            member_limit_override=member_limit_override,
            user_limit_override=user_limit_override,
            custom_price_override=custom_price_override,
            start_date=start,
            end_date=end_date,
        )
        session.add(club_package)
        await session.flush()
        self.flag_service.invalidate_on_commit(session, club_id)
        logger.info("Assigned package %s", package.slug, extra={"club_id": club_id})
        return club_package

    async def end_package(self, session: AsyncSession, club_id: str) -> ClubPackageModel:
        """End the club's active assignment now. The club falls back to legacy flags."""
        await self._require_club(session, club_id)
        club_package = await get_active_club_package(session, club_id)
        if club_package is None:
            raise PackageNotFoundError(f"Club {club_id} has no active package")

        club_package.end_date = utcnow()
        await session.flush()
        self.flag_service.invalidate_on_commit(session, club_id)
        return club_package

    async def migrate_legacy_club(
        self, session: AsyncSession, club_id: str, vertical_slug: str = "golf",
    ) -> ClubPackageModel | None:
        """Move a legacy club onto the seeded package matching its tier.

        Unknown legacy tiers map to the Pro package. Legacy operational
        overrides that differ from the system default become override rows.
        Returns None if the club already has a package.
        """
        club = await self._require_club(session, club_id)
        if await get_active_club_package(session, club_id) is not None:
            return None

        package_tier = LEGACY_TO_PACKAGE_TIER.get(club.subscription_tier, "PRO")
        slug = package_slug(vertical_slug, package_tier)
        result = await session.execute(select(PackageModel).where(PackageModel.slug == slug))
        package = result.scalar_one_or_none()
        if package is None:
            raise PackageNotFoundError(f"No package found for slug: {slug}")

        club_package = await self.assign_package(session, club_id, package.id)

        legacy_operational = (club.features or {}).get("operational")
        if isinstance(legacy_operational, dict):
            for key, value in legacy_operational.items():
                if not is_operational_key(key):
                    continue
                definition = await self._require_operational_definition(session, key)
                # Anything but a literal True was resolved as off
                await self._write_override_row(session, club_id, definition, value is True)
            await session.flush()
            self.flag_service.invalidate_on_commit(session, club_id)

        logger.info("Migrated legacy club to %s", slug, extra={"club_id": club_id})
        return club_package

    # ── Add-ons ──

    async def add_addon(
        self,
        session: AsyncSession,
        club_id: str,
        feature_key: str,
        price_override: Decimal | None = None,
    ) -> ClubAddonModel:
        """Grant a feature to a club independent of its package.

        Raises:
            AssignmentConflictError: If the add-on is already active.
        """
        await self._require_club(session, club_id)
        definition = await self._get_definition(session, feature_key)
        if definition is None:
            raise FeatureNotFoundError(f"Feature {feature_key} not found")
        if definition.category == CATEGORY_OPERATIONAL:
            raise InvalidFlagKeyError(
                f"Operational flag {feature_key} cannot be sold as an add-on"
            )

        now = utcnow()
        result = await session.execute(
            select(ClubAddonModel).where(
                ClubAddonModel.club_id == club_id,
                ClubAddonModel.feature_definition_id == definition.id,
            )
        )
        addon = result.scalar_one_or_none()
        if addon is not None and _is_active(addon.end_date, now):
            raise AssignmentConflictError("Add-on is already active for this club")

        if addon is None:
            addon = ClubAddonModel(
                club_id=club_id,
                feature_definition_id=definition.id,
                price_override=price_override,
                start_date=now,
            )
            session.add(addon)
        else:
            addon.price_override = price_override
            addon.start_date = now
            addon.end_date = None

        await session.flush()
        self.flag_service.invalidate_on_commit(session, club_id)
        logger.info("Added add-on %s", feature_key, extra={"club_id": club_id})
        return addon

    async def remove_addon(
        self, session: AsyncSession, club_id: str, feature_key: str,
    ) -> ClubAddonModel:
        """Soft-expire an add-on by ending it now."""
        await self._require_club(session, club_id)
        definition = await self._get_definition(session, feature_key)
        if definition is None:
            raise FeatureNotFoundError(f"Feature {feature_key} not found")

        now = utcnow()
        result = await session.execute(
            select(ClubAddonModel).where(
                ClubAddonModel.club_id == club_id,
                ClubAddonModel.feature_definition_id == definition.id,
            )
        )
        addon = result.scalar_one_or_none()
        if addon is None or not _is_active(addon.end_date, now):
            raise FeatureNotFoundError(f"No active add-on {feature_key} for club {club_id}")

        addon.end_date = now
        await session.flush()
        self.flag_service.invalidate_on_commit(session, club_id)
        logger.info("Removed add-on %s", feature_key, extra={"club_id": club_id})
        return addon


def _is_active(end_date: datetime | None, now: datetime) -> bool:
    """Strictly-after expiry: an end date equal to now is already expired."""
    if end_date is None:
        return True
    return as_utc(end_date) > as_utc(now)
