"""Legacy subscription tiers and the pre-catalog flag resolver.

Clubs that were never assigned a package still carry a ``subscription_tier``
string and a free-form ``features`` JSON object. Their modules and features
come straight from the tier table; only operational toggles can be
overridden, through ``features["operational"]``.

Tier names match exactly; anything else, including a differently cased
name, falls back to STARTER.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from club_entitlements.catalog.keys import (
    FEATURE_KEYS,
    MODULE_KEYS,
    OPERATIONAL_DEFAULTS,
    OPERATIONAL_KEYS,
)
from club_entitlements.common.logging import get_logger
from club_entitlements.flags.entitlements import EntitlementResult

logger = get_logger("flags.tier_templates")

DEFAULT_TIER = "STARTER"


@dataclass(frozen=True)
class TierFlags:
    """Immutable flag defaults for one legacy tier."""
    modules: Mapping[str, bool]
    features: Mapping[str, bool]
    operational: Mapping[str, bool]

    def to_result(self) -> EntitlementResult:
        return EntitlementResult(
            modules=dict(self.modules),
            features=dict(self.features),
            operational=dict(self.operational),
        )


def _tier(enabled_features: set[str]) -> TierFlags:
    """Every legacy tier has all modules; tiers differ only by features."""
    return TierFlags(
        modules=MappingProxyType({key: True for key in MODULE_KEYS}),
        features=MappingProxyType({key: key in enabled_features for key in FEATURE_KEYS}),
        operational=OPERATIONAL_DEFAULTS,
    )


LEGACY_TIERS: Mapping[str, TierFlags] = MappingProxyType({
    "STARTER": _tier(set()),
    "PROFESSIONAL": _tier({
        "golfLottery",
        "memberWindows",
        "automatedFlows",
        "memberPricing",
        "houseAccounts",
    }),
    "ENTERPRISE": _tier(set(FEATURE_KEYS)),
})


def tier_flags(tier: str | None, tiers: Mapping[str, TierFlags] = LEGACY_TIERS) -> TierFlags:
    """Return the defaults for an exact tier name, falling back to STARTER."""
    if not isinstance(tier, str):
        return tiers[DEFAULT_TIER]
    return tiers.get(tier) or tiers[DEFAULT_TIER]


def resolve_legacy(
    subscription_tier: str | None,
    features_json: Any,
    tiers: Mapping[str, TierFlags] = LEGACY_TIERS,
) -> EntitlementResult:
    """Resolve flags for a club that has no package assignment.

    Modules and features are copied from the tier verbatim. Keys present in
    ``features_json["operational"]`` are shallow-merged over the tier's
    operational defaults. Unknown keys are ignored. For known keys anything
    other than a literal ``True`` means off.
    """
    result = tier_flags(subscription_tier, tiers).to_result()

    overrides = features_json.get("operational") if isinstance(features_json, dict) else None
    if not isinstance(overrides, dict):
        return result

    for key, value in overrides.items():
        if key not in OPERATIONAL_KEYS:
            logger.debug("Ignoring legacy operational override %r=%r", key, value)
            continue
        result.operational[key] = value is True
    return result


def get_default_flags_for_tier(
    tier: str, tiers: Mapping[str, TierFlags] = LEGACY_TIERS,
) -> EntitlementResult:
    """Default flags for a subscription tier (STARTER when unknown)."""
    return tier_flags(tier, tiers).to_result()


def get_tier_defaults(
    tiers: Mapping[str, TierFlags] = LEGACY_TIERS,
) -> list[dict[str, Any]]:
    """Every legacy tier with its default flags, in table order."""
    return [
        {"tier": name, "flags": flags.to_result()}
        for name, flags in tiers.items()
    ]
