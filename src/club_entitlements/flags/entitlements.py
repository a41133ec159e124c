"""Entitlement resolution logic.

A club on a package resolves from its package features, its active add-ons
and its operational overrides. A club without a package falls back to the
legacy subscription tier table (see ``tier_templates``).
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from club_entitlements.catalog.keys import (
    BUCKETS,
    FEATURE_KEYS,
    FEATURES,
    KEYS_BY_BUCKET,
    MODULE_KEYS,
    MODULES,
    OPERATIONAL,
    OPERATIONAL_DEFAULTS,
    bucket_for,
)


@dataclass
class EntitlementResult:
    """The three-bucket flag structure every consumer gates on."""
    modules: dict[str, bool]
    features: dict[str, bool]
    operational: dict[str, bool]

    @classmethod
    def empty(cls) -> "EntitlementResult":
        """All modules and features off, operational toggles at their defaults."""
        return cls(
            modules={key: False for key in MODULE_KEYS},
            features={key: False for key in FEATURE_KEYS},
            operational=dict(OPERATIONAL_DEFAULTS),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EntitlementResult":
        """Rebuild a result from its dict form, normalised to the fixed key sets."""
        def bucket(name: str, default: Mapping[str, bool]) -> dict[str, bool]:
            raw = data.get(name) or {}
            return {key: raw.get(key, default.get(key, False)) is True for key in KEYS_BY_BUCKET[name]}

        return cls(
            modules=bucket(MODULES, {}),
            features=bucket(FEATURES, {}),
            operational=bucket(OPERATIONAL, OPERATIONAL_DEFAULTS),
        )

    def to_dict(self) -> dict[str, dict[str, bool]]:
        return {
            MODULES: dict(self.modules),
            FEATURES: dict(self.features),
            OPERATIONAL: dict(self.operational),
        }


@dataclass(frozen=True)
class FeatureToggle:
    """A catalog key with an on/off value (package feature or operational override)."""
    key: str
    enabled: bool


@dataclass(frozen=True)
class LegacyRecord:
    """Pre-catalog subscription data stored on the club itself."""
    subscription_tier: str
    features: dict[str, Any] = field(default_factory=dict)


@dataclass
class ClubSnapshot:
    """Everything resolution needs to know about one club at one instant."""
    club_id: str
    legacy: LegacyRecord
    club_name: str = ""
    has_package: bool = False
    package_slug: str | None = None
    package_features: list[FeatureToggle] = field(default_factory=list)
    addon_keys: list[str] = field(default_factory=list)
    operational_overrides: list[FeatureToggle] = field(default_factory=list)


def enabled_keys_for(snapshot: ClubSnapshot) -> set[str]:
    """Catalog keys enabled by the package plus every active add-on.

    Add-ons only ever add to the package's set.
    """
    enabled = {toggle.key for toggle in snapshot.package_features if toggle.enabled}
    enabled.update(snapshot.addon_keys)
    return enabled


def resolve_entitlements(snapshot: ClubSnapshot, tiers=None) -> EntitlementResult:
    """Resolve the full flag structure for a club snapshot.

    Args:
        snapshot: Club assignment state loaded by the store.
        tiers: Legacy tier table, used only when the club has no package.
            Defaults to ``tier_templates.LEGACY_TIERS``.
    """
    if not snapshot.has_package:
        from club_entitlements.flags.tier_templates import LEGACY_TIERS, resolve_legacy

        return resolve_legacy(
            snapshot.legacy.subscription_tier,
            snapshot.legacy.features,
            tiers=tiers if tiers is not None else LEGACY_TIERS,
        )

    result = EntitlementResult.empty()
    # Package features and add-ons only reach the modules and features buckets
    for key in enabled_keys_for(snapshot):
        bucket = bucket_for(key)
        if bucket == MODULES:
            result.modules[key] = True
        elif bucket == FEATURES:
            result.features[key] = True

    for toggle in snapshot.operational_overrides:
        if bucket_for(toggle.key) == OPERATIONAL:
            result.operational[toggle.key] = toggle.enabled
    return result


def value_at(flags: EntitlementResult | Mapping[str, Any], path: str) -> bool:
    """Look up a dot path such as ``features.golfLottery``.

    Unknown paths are indistinguishable from disabled features: anything other
    than a literal ``True`` leaf returns False.
    """
    current: Any = flags.to_dict() if isinstance(flags, EntitlementResult) else flags
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return False
        current = current.get(part)
        if current is None:
            return False
    return current is True


def leaf_paths(flags: EntitlementResult) -> Iterator[tuple[str, bool]]:
    """Yield ``(dot_path, value)`` for every leaf of a result."""
    data = flags.to_dict()
    for bucket in BUCKETS:
        for key, value in data[bucket].items():
            yield f"{bucket}.{key}", value
