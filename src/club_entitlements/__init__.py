"""Club-Entitlements: tenant feature entitlement resolution."""

from club_entitlements.flags.entitlements import EntitlementResult, resolve_entitlements, value_at
from club_entitlements.flags.tier_templates import LEGACY_TIERS, resolve_legacy

__all__ = [
    "EntitlementResult",
    "LEGACY_TIERS",
    "resolve_entitlements",
    "resolve_legacy",
    "value_at",
]
__version__ = "0.1.0"
