"""
SQLAlchemy async engine and session management.

Writes (and every Unit of Work) go to the primary; read-only queries go to the
replica when POSTGRES_REPLICA_SERVER is configured, otherwise to the primary too.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class AsyncEngineManager:
    """
    Keeps one write engine and one read engine per running event loop.

    asyncpg connections are bound to the loop that opened them, so a new loop
    (test runners, worker threads) gets fresh engines.
    """

    def __init__(self) -> None:
        self._write_engine: Optional[AsyncEngine] = None
        self._read_engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_makers: dict[bool, async_sessionmaker[AsyncSession]] = {}

    def get_engine(self, *, read_only: bool = False) -> AsyncEngine:
        try:
            current_loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if current_loop is not None and self._loop is not current_loop:
            if self._write_engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, recreating engines')
            self._write_engine = None
            self._read_engine = None
            self._session_makers.clear()
            self._loop = current_loop

        if read_only:
            if self._read_engine is None:
                self._read_engine = self._create_engine(
                    url=settings.DATABASE_READ_URL_ASYNC, pool_size=settings.DB_POOL_SIZE_READ
                )
            return self._read_engine

        if self._write_engine is None:
            Logger.base.info('🔗 [DB] Creating write engine')
            self._write_engine = self._create_engine(
                url=settings.DATABASE_URL_ASYNC, pool_size=settings.DB_POOL_SIZE_WRITE
            )
        return self._write_engine

    def get_session_maker(self, *, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine(read_only=read_only)
        if read_only not in self._session_makers:
            self._session_makers[read_only] = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._session_makers[read_only]

    async def dispose(self) -> None:
        for engine in (self._write_engine, self._read_engine):
            if engine is not None:
                await engine.dispose()
        self._write_engine = None
        self._read_engine = None
        self._session_makers.clear()

    @staticmethod
    def _create_engine(*, url: str, pool_size: int) -> AsyncEngine:
        return create_async_engine(
            url,
            echo=False,
            pool_size=pool_size,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


engine_manager = AsyncEngineManager()


def get_engine(*, read_only: bool = False) -> AsyncEngine:
    return engine_manager.get_engine(read_only=read_only)


def get_session_maker(*, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
    return engine_manager.get_session_maker(read_only=read_only)


class Base(DeclarativeBase):
    pass


async def create_db_and_tables() -> None:
    """Create missing tables (local runs without migrations)."""
    # Models register themselves on Base.metadata at import time
    import src.service.booking.driven_adapter.model  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    Logger.base.info('🗄️ [DB] Tables ensured')


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: write session on the primary, closed (and rolled back) on exit."""
    async with get_session_maker(read_only=False)() as session:
        yield session


class Database:
    """Session factory handed to query repositories through the DI container."""

    def __init__(self, *, read_only: bool = False) -> None:
        self._read_only = read_only

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with get_session_maker(read_only=self._read_only)() as session:
            yield session
