#!/usr/bin/env python3
"""Seed the package catalog and migrate legacy clubs onto packages.

Usage:
    python -m scripts.seed_catalog
    # or from project root:
    python scripts/seed_catalog.py [--skip-migration]
"""

import asyncio
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from sqlalchemy import select

from club_entitlements.catalog.seeds import apply_catalog_seeds
from club_entitlements.clubs.models import ClubModel
from club_entitlements.clubs.service import ClubAssignmentService
from club_entitlements.common.config import get_settings
from club_entitlements.common.database import DatabaseManager
from club_entitlements.common.exceptions import PackageNotFoundError
from club_entitlements.flags.cache import build_flag_cache
from club_entitlements.flags.service import FeatureFlagService


async def seed_catalog(migrate: bool = True) -> None:
    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    await db.create_all()

    cache = build_flag_cache(settings)
    assignments = ClubAssignmentService(FeatureFlagService(settings, cache=cache))

    async with db.get_session() as session:
        seeded = await apply_catalog_seeds(session)
        print(f"  [catalog] {len(seeded['features'])} feature definitions")
        print(f"  [catalog] {len(seeded['packages'])} packages")

    if migrate:
        async with db.get_session() as session:
            result = await session.execute(select(ClubModel).order_by(ClubModel.name))
            clubs = list(result.scalars().all())
            for club in clubs:
                try:
                    club_package = await assignments.migrate_legacy_club(session, club.id)
                except PackageNotFoundError as e:
                    print(f"  [skip] {club.name}: {e.message}")
                    continue
                if club_package is None:
                    print(f"  [skip] {club.name} already has a package")
                else:
                    print(f"  [migrated] {club.name}")

    await cache.close()
    await db.close()
    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(seed_catalog(migrate="--skip-migration" not in sys.argv))
