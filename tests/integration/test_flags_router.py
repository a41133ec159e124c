"""Integration tests for feature flag endpoints."""

import pytest


async def create_club(client, headers, slug="pebble", tier="STARTER", features=None):
    resp = await client.post(
        "/clubs",
        json={"name": slug.title(), "slug": slug, "subscription_tier": tier, "features": features or {}},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()


class TestFlagsAuth:
    async def test_requires_auth(self, client):
        resp = await client.get("/clubs/abc/feature-flags")
        assert resp.status_code == 422  # missing header

    async def test_wrong_key(self, client):
        resp = await client.get(
            "/clubs/abc/feature-flags", headers={"X-Club-Api-Key": "wrong-key"},
        )
        assert resp.status_code == 403


class TestGetFeatureFlags:
    async def test_legacy_club(self, client, admin_headers):
        club = await create_club(client, admin_headers, tier="PROFESSIONAL")
        resp = await client.get(f"/clubs/{club['id']}/feature-flags", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == {"modules", "features", "operational"}
        assert data["features"]["golfLottery"] is True
        assert data["features"]["aiDynamicPricing"] is False
        assert data["operational"]["maintenanceMode"] is False

    async def test_unknown_club_is_empty(self, client, admin_headers):
        resp = await client.get("/clubs/missing/feature-flags", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert not any(data["modules"].values())
        assert not any(data["features"].values())
        assert data["operational"]["onlineBooking"] is True

    async def test_packaged_club(self, client, admin_headers, catalog):
        club = await create_club(client, admin_headers, tier="ENTERPRISE")
        resp = await client.put(
            f"/clubs/{club['id']}/package",
            json={"package_id": catalog["packages"]["golf-starter"]},
            headers=admin_headers,
        )
        assert resp.status_code == 201

        resp = await client.get(f"/clubs/{club['id']}/feature-flags", headers=admin_headers)
        data = resp.json()
        assert all(data["modules"].values())
        assert not any(data["features"].values())


class TestCheckFlag:
    async def test_enabled(self, client, admin_headers):
        club = await create_club(client, admin_headers, tier="ENTERPRISE")
        resp = await client.get(
            f"/clubs/{club['id']}/feature-flags/check",
            params={"path": "features.whiteLabelApp"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "club_id": club["id"], "path": "features.whiteLabelApp", "enabled": True,
        }

    async def test_unknown_path(self, client, admin_headers):
        club = await create_club(client, admin_headers)
        resp = await client.get(
            f"/clubs/{club['id']}/feature-flags/check",
            params={"path": "widgets.teleport"},
            headers=admin_headers,
        )
        assert resp.json()["enabled"] is False

    async def test_path_required(self, client, admin_headers):
        resp = await client.get("/clubs/abc/feature-flags/check", headers=admin_headers)
        assert resp.status_code == 422


class TestUpdateOperationalFlag:
    async def test_toggle_on_package(self, client, admin_headers, catalog):
        club = await create_club(client, admin_headers)
        await client.put(
            f"/clubs/{club['id']}/package",
            json={"package_id": catalog["packages"]["golf-pro"]},
            headers=admin_headers,
        )
        # Warm the cache
        await client.get(f"/clubs/{club['id']}/feature-flags", headers=admin_headers)

        resp = await client.put(
            f"/clubs/{club['id']}/feature-flags/operational/maintenanceMode",
            json={"enabled": True},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["operational"]["maintenanceMode"] is True

        resp = await client.get(f"/clubs/{club['id']}/feature-flags", headers=admin_headers)
        assert resp.json()["operational"]["maintenanceMode"] is True

        resp = await client.put(
            f"/clubs/{club['id']}/feature-flags/operational/maintenanceMode",
            json={"enabled": False},
            headers=admin_headers,
        )
        assert resp.json()["operational"]["maintenanceMode"] is False

        resp = await client.get("/feature-flags/clubs", headers=admin_headers)
        summary = resp.json()[0]
        assert summary["has_operational_overrides"] is False

    async def test_toggle_legacy(self, client, admin_headers, catalog):
        club = await create_club(client, admin_headers)
        await client.get(f"/clubs/{club['id']}/feature-flags", headers=admin_headers)
        resp = await client.put(
            f"/clubs/{club['id']}/feature-flags/operational/onlineBooking",
            json={"enabled": False},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["operational"]["onlineBooking"] is False

        resp = await client.get(f"/clubs/{club['id']}", headers=admin_headers)
        assert resp.json()["features"] == {"operational": {"onlineBooking": False}}

        resp = await client.get(f"/clubs/{club['id']}/feature-flags", headers=admin_headers)
        assert resp.json()["operational"]["onlineBooking"] is False

    async def test_legacy_toggle_needs_catalog_definition(self, client, admin_headers):
        club = await create_club(client, admin_headers)
        resp = await client.put(
            f"/clubs/{club['id']}/feature-flags/operational/onlineBooking",
            json={"enabled": False},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert "no catalog definition" in resp.json()["detail"]

    async def test_invalid_key(self, client, admin_headers):
        club = await create_club(client, admin_headers)
        resp = await client.put(
            f"/clubs/{club['id']}/feature-flags/operational/golfLottery",
            json={"enabled": True},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert "Invalid operational flag key" in resp.json()["detail"]

    async def test_unknown_club(self, client, admin_headers):
        resp = await client.put(
            "/clubs/missing/feature-flags/operational/maintenanceMode",
            json={"enabled": True},
            headers=admin_headers,
        )
        assert resp.status_code == 404

    async def test_body_required(self, client, admin_headers):
        resp = await client.put(
            "/clubs/abc/feature-flags/operational/maintenanceMode",
            json={},
            headers=admin_headers,
        )
        assert resp.status_code == 422


class TestAdminViews:
    async def test_tier_defaults(self, client, admin_headers):
        resp = await client.get("/feature-flags/tiers", headers=admin_headers)
        assert resp.status_code == 200
        tiers = resp.json()
        assert [t["tier"] for t in tiers] == ["STARTER", "PROFESSIONAL", "ENTERPRISE"]
        assert tiers[2]["flags"]["features"]["customDomain"] is True

    async def test_list_clubs(self, client, admin_headers, catalog):
        legacy = await create_club(client, admin_headers, slug="zephyr", tier="ENTERPRISE")
        packaged = await create_club(client, admin_headers, slug="aspen")
        await client.put(
            f"/clubs/{packaged['id']}/package",
            json={"package_id": catalog["packages"]["golf-pro"]},
            headers=admin_headers,
        )

        resp = await client.get("/feature-flags/clubs", headers=admin_headers)
        assert resp.status_code == 200
        rows = resp.json()
        assert [r["club_name"] for r in rows] == ["Aspen", "Zephyr"]
        assert rows[0]["resolution"] == "package"
        assert rows[0]["package_slug"] == "golf-pro"
        assert rows[1]["resolution"] == "legacy"
        assert rows[1]["club_id"] == legacy["id"]
        assert rows[1]["flags"]["features"]["whiteLabelApp"] is True


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "club-entitlements"
        assert data["cache_backend"] == "memory"
