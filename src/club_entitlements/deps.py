"""Dependency injection singletons for Club-Entitlements."""

from club_entitlements.common.config import get_settings
from club_entitlements.common.database import DatabaseManager
from club_entitlements.catalog.service import CatalogService
from club_entitlements.clubs.service import ClubAssignmentService
from club_entitlements.flags.cache import FlagCache, build_flag_cache
from club_entitlements.flags.service import FeatureFlagService

_db: DatabaseManager | None = None
_cache: FlagCache | None = None
_flags: FeatureFlagService | None = None
_assignments: ClubAssignmentService | None = None
_catalog: CatalogService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_flag_cache() -> FlagCache:
    global _cache
    if _cache is None:
        _cache = build_flag_cache(get_settings())
    return _cache


def get_flag_service() -> FeatureFlagService:
    global _flags
    if _flags is None:
        _flags = FeatureFlagService(get_settings(), cache=get_flag_cache())
    return _flags


def get_assignment_service() -> ClubAssignmentService:
    global _assignments
    if _assignments is None:
        _assignments = ClubAssignmentService(get_flag_service())
    return _assignments


def get_catalog_service() -> CatalogService:
    global _catalog
    if _catalog is None:
        _catalog = CatalogService()
    return _catalog


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _cache, _flags, _assignments, _catalog
    _db = None
    _cache = None
    _flags = None
    _assignments = None
    _catalog = None
