"""Shared test fixtures for Club-Entitlements."""

import os
import pytest
from httpx import ASGITransport, AsyncClient


API_KEY = "test-admin-api-key"


@pytest.fixture
def api_key():
    return API_KEY


@pytest.fixture
def app():
    """Create a test app with in-memory DB."""
    os.environ["CLUBENT_DB_URL"] = "sqlite+aiosqlite://"
    os.environ["CLUBENT_API_KEY"] = API_KEY
    os.environ["CLUBENT_CACHE_BACKEND"] = "memory"

    # Clear caches and singletons so new env vars take effect
    from club_entitlements.common.config import get_settings
    get_settings.cache_clear()

    from club_entitlements.deps import reset_singletons
    reset_singletons()

    from club_entitlements.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from club_entitlements.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


@pytest.fixture
async def catalog(client):
    """Seed the catalog behind the test client; returns feature and package ids."""
    from club_entitlements.catalog.seeds import apply_catalog_seeds
    from club_entitlements.deps import get_db

    async with get_db().get_session() as session:
        seeded = await apply_catalog_seeds(session)
    return seeded


@pytest.fixture
def admin_headers():
    return {"X-Club-Api-Key": API_KEY}
