"""FastAPI application factory for Club-Entitlements."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from club_entitlements.common.config import get_settings
from club_entitlements.common.schemas import HealthResponse


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        from club_entitlements.deps import get_db, get_flag_cache
        db = get_db()
        await db.init()
        await db.create_all()
        yield
        # Shutdown
        await get_flag_cache().close()
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            version=settings.api_version, cache_backend=settings.cache_backend,
        )

    # Mount routers
    from club_entitlements.flags.router import router as flags_router
    from club_entitlements.clubs.router import router as clubs_router
    from club_entitlements.catalog.router import router as catalog_router

    prefix = settings.api_prefix
    app.include_router(flags_router, prefix=prefix, tags=["feature-flags"])
    app.include_router(clubs_router, prefix=prefix, tags=["clubs"])
    app.include_router(catalog_router, prefix=prefix, tags=["catalog"])

    return app
