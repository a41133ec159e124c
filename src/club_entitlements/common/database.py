"""Async database manager for Club-Entitlements."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from club_entitlements.common.config import EntitlementsSettings, get_settings
from club_entitlements.common.models import Base

# Import all model modules so Base.metadata is complete for create_all().
import club_entitlements.catalog.models  # noqa: F401
import club_entitlements.clubs.models  # noqa: F401

COMMIT_HOOKS = "club_entitlements.commit_hooks"


def add_commit_hook(session: AsyncSession, hook: Callable[[], Awaitable[None]]) -> None:
    """Register ``await hook()`` to run on both sides of the session commit.

    Hooks run once just before ``commit()`` (a failure rolls the write back)
    and once just after it. They are dropped on rollback. Only sessions
    opened through ``DatabaseManager.get_session`` run them.
    """
    session.info.setdefault(COMMIT_HOOKS, []).append(hook)


async def _run_commit_hooks(session: AsyncSession) -> None:
    for hook in list(session.info.get(COMMIT_HOOKS, ())):
        await hook()


class DatabaseManager:
    """Manages a single async database engine."""

    def __init__(self, settings: EntitlementsSettings | None = None):
        self._settings = settings or get_settings()
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def init(self) -> None:
        url = self._settings.db_url
        self.engine = create_async_engine(url, echo=False)
        self._session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        if self._session_factory is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        async with self._session_factory() as session:
            try:
                yield session
                await _run_commit_hooks(session)
                await session.commit()
                await _run_commit_hooks(session)
            except Exception:
                await session.rollback()
                raise
            finally:
                session.info.pop(COMMIT_HOOKS, None)

    async def create_all(self) -> None:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self._session_factory = None
