"""Fixed output key registry for resolved feature flags.

The catalog of feature definitions is open-ended and admin-editable, but the
resolved flag structure is not: every consumer reads the same three buckets
with the same closed set of keys. Adding a key here is additive; renaming or
removing one breaks every consumer.

Catalog keys that are not listed here are ignored on output until they are
wired into a bucket.
"""

from types import MappingProxyType
from typing import Mapping

MODULES = "modules"
FEATURES = "features"
OPERATIONAL = "operational"

BUCKETS = (MODULES, FEATURES, OPERATIONAL)

MODULE_KEYS: tuple[str, ...] = (
    "golf",
    "bookings",
    "billing",
    "marketing",
    "pos",
    "reports",
)

FEATURE_KEYS: tuple[str, ...] = (
    "golfLottery",
    "memberWindows",
    "aiDynamicPricing",
    "automatedFlows",
    "memberPricing",
    "houseAccounts",
    "whiteLabelApp",
    "customDomain",
)

# System defaults for operational toggles, applied when a club has no override.
OPERATIONAL_DEFAULTS: Mapping[str, bool] = MappingProxyType({
    "maintenanceMode": False,
    "newMemberRegistration": True,
    "onlineBooking": True,
    "emailCampaigns": True,
})

OPERATIONAL_KEYS: tuple[str, ...] = tuple(OPERATIONAL_DEFAULTS)

BUCKET_BY_KEY: Mapping[str, str] = MappingProxyType({
    **{key: MODULES for key in MODULE_KEYS},
    **{key: FEATURES for key in FEATURE_KEYS},
    **{key: OPERATIONAL for key in OPERATIONAL_KEYS},
})

KEYS_BY_BUCKET: Mapping[str, tuple[str, ...]] = MappingProxyType({
    MODULES: MODULE_KEYS,
    FEATURES: FEATURE_KEYS,
    OPERATIONAL: OPERATIONAL_KEYS,
})


def bucket_for(key: str) -> str | None:
    """Return the output bucket a catalog key is wired into, or None."""
    return BUCKET_BY_KEY.get(key)


def is_operational_key(key: str) -> bool:
    return key in OPERATIONAL_DEFAULTS


def operational_default(key: str) -> bool:
    """Return the system default for an operational key.

    Raises:
        KeyError: If key is not a known operational key.
    """
    return OPERATIONAL_DEFAULTS[key]
