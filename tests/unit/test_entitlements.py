"""Tests for pure entitlement resolution and dot-path lookup."""

from club_entitlements.catalog.keys import FEATURE_KEYS, MODULE_KEYS, OPERATIONAL_DEFAULTS
from club_entitlements.flags.entitlements import (
    ClubSnapshot,
    EntitlementResult,
    FeatureToggle,
    LegacyRecord,
    enabled_keys_for,
    leaf_paths,
    resolve_entitlements,
    value_at,
)
from club_entitlements.flags.tier_templates import LEGACY_TIERS, TierFlags


def make_snapshot(
    package_features=None,
    addon_keys=None,
    operational_overrides=None,
    has_package=True,
    tier="STARTER",
    legacy_features=None,
) -> ClubSnapshot:
    return ClubSnapshot(
        club_id="club-1",
        club_name="Pebble Creek",
        legacy=LegacyRecord(subscription_tier=tier, features=legacy_features or {}),
        has_package=has_package,
        package_slug="golf-custom" if has_package else None,
        package_features=[
            FeatureToggle(key=k, enabled=v) for k, v in (package_features or {}).items()
        ],
        addon_keys=list(addon_keys or []),
        operational_overrides=[
            FeatureToggle(key=k, enabled=v) for k, v in (operational_overrides or {}).items()
        ],
    )


PROFESSIONAL_FEATURES = {
    "golf": True,
    "bookings": True,
    "golfLottery": True,
    "memberWindows": True,
}


class TestPackageResolution:
    def test_professional_package(self):
        result = resolve_entitlements(make_snapshot(PROFESSIONAL_FEATURES))
        assert result.modules == {
            "golf": True, "bookings": True, "billing": False,
            "marketing": False, "pos": False, "reports": False,
        }
        assert result.features["golfLottery"] is True
        assert result.features["memberWindows"] is True
        assert result.features["aiDynamicPricing"] is False
        assert result.operational == {
            "maintenanceMode": False,
            "newMemberRegistration": True,
            "onlineBooking": True,
            "emailCampaigns": True,
        }

    def test_addon_enables_disabled_package_feature(self):
        features = dict(PROFESSIONAL_FEATURES, golfLottery=False)
        result = resolve_entitlements(make_snapshot(features, addon_keys=["golfLottery"]))
        assert result.features["golfLottery"] is True

    def test_addon_cannot_disable(self):
        result = resolve_entitlements(make_snapshot(PROFESSIONAL_FEATURES, addon_keys=[]))
        assert result.features["golfLottery"] is True

    def test_addon_module(self):
        result = resolve_entitlements(make_snapshot(PROFESSIONAL_FEATURES, addon_keys=["pos"]))
        assert result.modules["pos"] is True

    def test_keys_absent_from_package_are_false(self):
        result = resolve_entitlements(make_snapshot({}))
        assert all(v is False for v in result.modules.values())
        assert all(v is False for v in result.features.values())

    def test_explicitly_disabled_package_feature(self):
        result = resolve_entitlements(make_snapshot({"golf": False}))
        assert result.modules["golf"] is False

    def test_unwired_catalog_keys_ignored(self):
        result = resolve_entitlements(make_snapshot({"spaTreatments": True}, addon_keys=["kiosk"]))
        assert set(result.modules) == set(MODULE_KEYS)
        assert set(result.features) == set(FEATURE_KEYS)
        assert "spaTreatments" not in result.to_dict()["features"]

    def test_operational_key_in_package_stays_in_its_bucket(self):
        result = resolve_entitlements(make_snapshot(
            {"maintenanceMode": True, "golf": True}, addon_keys=["onlineBooking"],
        ))
        assert result.operational == dict(OPERATIONAL_DEFAULTS)
        assert "maintenanceMode" not in result.features
        assert "onlineBooking" not in result.modules
        assert result.modules["golf"] is True

    def test_feature_key_in_operational_overrides_ignored(self):
        result = resolve_entitlements(make_snapshot(
            {}, operational_overrides={"golfLottery": True, "maintenanceMode": True},
        ))
        assert result.features["golfLottery"] is False
        assert "golfLottery" not in result.operational
        assert result.operational["maintenanceMode"] is True

    def test_operational_override_wins(self):
        result = resolve_entitlements(make_snapshot(
            PROFESSIONAL_FEATURES,
            operational_overrides={"maintenanceMode": True, "onlineBooking": False},
        ))
        assert result.operational["maintenanceMode"] is True
        assert result.operational["onlineBooking"] is False
        assert result.operational["emailCampaigns"] is True

    def test_package_ignores_legacy_data(self):
        result = resolve_entitlements(make_snapshot(
            {}, tier="ENTERPRISE",
            legacy_features={"operational": {"maintenanceMode": True}},
        ))
        assert result.features["whiteLabelApp"] is False
        assert result.operational["maintenanceMode"] is False

    def test_output_shape_is_fixed(self):
        result = resolve_entitlements(make_snapshot(PROFESSIONAL_FEATURES))
        data = result.to_dict()
        assert list(data) == ["modules", "features", "operational"]
        assert list(data["modules"]) == list(MODULE_KEYS)
        assert list(data["features"]) == list(FEATURE_KEYS)
        assert list(data["operational"]) == list(OPERATIONAL_DEFAULTS)

    def test_enabled_keys_for(self):
        snapshot = make_snapshot({"golf": True, "pos": False}, addon_keys=["customDomain"])
        assert enabled_keys_for(snapshot) == {"golf", "customDomain"}


class TestLegacyDispatch:
    def test_no_package_uses_tier_table(self):
        result = resolve_entitlements(make_snapshot(has_package=False, tier="ENTERPRISE"))
        assert all(result.features.values())
        assert all(result.modules.values())

    def test_injected_tier_table(self):
        tiers = {
            "STARTER": TierFlags(
                modules={k: False for k in MODULE_KEYS},
                features={k: k == "customDomain" for k in FEATURE_KEYS},
                operational=OPERATIONAL_DEFAULTS,
            ),
        }
        result = resolve_entitlements(make_snapshot(has_package=False), tiers=tiers)
        assert result.modules["golf"] is False
        assert result.features["customDomain"] is True

    def test_injected_table_not_used_with_package(self):
        result = resolve_entitlements(make_snapshot({"golf": True}), tiers=LEGACY_TIERS)
        assert result.modules["golf"] is True
        assert result.modules["billing"] is False


class TestEntitlementResult:
    def test_empty(self):
        result = EntitlementResult.empty()
        assert not any(result.modules.values())
        assert not any(result.features.values())
        assert result.operational == dict(OPERATIONAL_DEFAULTS)

    def test_from_dict_round_trip(self):
        result = resolve_entitlements(make_snapshot(
            PROFESSIONAL_FEATURES, operational_overrides={"maintenanceMode": True},
        ))
        assert EntitlementResult.from_dict(result.to_dict()) == result

    def test_from_dict_fills_missing_keys(self):
        result = EntitlementResult.from_dict({"modules": {"golf": True}})
        assert result.modules["golf"] is True
        assert result.modules["pos"] is False
        assert result.features["golfLottery"] is False
        assert result.operational == dict(OPERATIONAL_DEFAULTS)

    def test_from_dict_rejects_truthy_non_bool(self):
        result = EntitlementResult.from_dict({"modules": {"golf": "yes", "pos": 1}})
        assert result.modules["golf"] is False
        assert result.modules["pos"] is False

    def test_from_dict_drops_unknown_keys(self):
        result = EntitlementResult.from_dict({"features": {"teleport": True}})
        assert "teleport" not in result.features


class TestValueAt:
    def setup_method(self):
        self.flags = resolve_entitlements(make_snapshot(PROFESSIONAL_FEATURES))

    def test_enabled_path(self):
        assert value_at(self.flags, "modules.golf") is True
        assert value_at(self.flags, "features.golfLottery") is True

    def test_disabled_path(self):
        assert value_at(self.flags, "modules.pos") is False
        assert value_at(self.flags, "operational.maintenanceMode") is False

    def test_unknown_key(self):
        assert value_at(self.flags, "features.teleport") is False

    def test_unknown_bucket(self):
        assert value_at(self.flags, "widgets.golf") is False

    def test_bucket_path_is_not_a_leaf(self):
        assert value_at(self.flags, "modules") is False

    def test_path_past_leaf(self):
        assert value_at(self.flags, "modules.golf.extra") is False

    def test_empty_path(self):
        assert value_at(self.flags, "") is False

    def test_plain_mapping(self):
        assert value_at({"a": {"b": True}}, "a.b") is True
        assert value_at({"a": {"b": "true"}}, "a.b") is False

    def test_every_leaf_path_matches_structure(self):
        data = self.flags.to_dict()
        for path, value in leaf_paths(self.flags):
            bucket, key = path.split(".")
            assert value_at(self.flags, path) is value
            assert data[bucket][key] is value
