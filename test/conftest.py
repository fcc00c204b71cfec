"""
Test Configuration and Fixtures

This module provides:
- Environment setup before application modules read settings
- In-memory Unit of Work fixtures for unit tests
- Database setup and cleanup for integration tests (skipped without PostgreSQL)

Architecture:
- Unit tests (marker `unit`): in-memory fakes, no I/O
- Integration tests (marker `integration`): real PostgreSQL, schema from alembic
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    if worker_id == 'master':
        os.environ['POSTGRES_DB'] = 'appointment_booking_test_db'
    else:
        os.environ['POSTGRES_DB'] = f'appointment_booking_test_db_{worker_id}'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('DB_POOL_SIZE_WRITE', '2')
    os.environ.setdefault('DB_POOL_SIZE_READ', '2')
    os.environ.setdefault('DB_POOL_MAX_OVERFLOW', '2')


_early_setup_test_environment()

import asyncio  # noqa: E402
from collections.abc import AsyncGenerator  # noqa: E402

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

from src.platform.config.core_setting import settings  # noqa: E402
from src.platform.constant.path import ALEMBIC_INI  # noqa: E402
from test.shared.booking_factories import make_service, make_slot  # noqa: E402
from test.shared.fake_unit_of_work import FakeUnitOfWork, InMemoryStore  # noqa: E402


# =============================================================================
# Pytest Hooks: integration tests need PostgreSQL
# =============================================================================
_postgres_available: bool | None = None


async def _check_postgres() -> bool:
    engine = create_async_engine(
        settings.DATABASE_URL_ASYNC.replace(f'/{settings.POSTGRES_DB}', '/postgres'),
        connect_args={'timeout': 2},
    )
    try:
        async with engine.connect() as conn:
            await conn.execute(text('SELECT 1'))
        return True
    except Exception:
        return False
    finally:
        await engine.dispose()


def _is_postgres_available() -> bool:
    global _postgres_available
    if _postgres_available is None:
        _postgres_available = asyncio.run(_check_postgres())
    return _postgres_available


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    integration_items = [item for item in items if item.get_closest_marker('integration')]
    if not integration_items:
        return
    if not _is_postgres_available():
        skip = pytest.mark.skip(reason='PostgreSQL is not reachable')
        for item in integration_items:
            item.add_marker(skip)
        return
    for item in integration_items:
        item.fixturenames.append('clean_database')


# =============================================================================
# Database Setup and Cleanup
# =============================================================================
async def _setup_test_database() -> None:
    db_name = settings.POSTGRES_DB
    admin_url = settings.DATABASE_URL_ASYNC.replace(f'/{db_name}', '/postgres')
    engine = create_async_engine(admin_url, isolation_level='AUTOCOMMIT')
    async with engine.begin() as conn:
        result = await conn.execute(
            text('SELECT 1 FROM pg_database WHERE datname = :name'), {'name': db_name}
        )
        if not result.fetchone():
            await conn.execute(text(f'CREATE DATABASE {db_name}'))
    await engine.dispose()

    reset_engine = create_async_engine(settings.DATABASE_URL_ASYNC)
    async with reset_engine.begin() as conn:
        await conn.execute(text('DROP SCHEMA public CASCADE'))
        await conn.execute(text('CREATE SCHEMA public'))
    await reset_engine.dispose()


@pytest.fixture(scope='session')
def migrated_database() -> None:
    asyncio.run(_setup_test_database())
    # env.py runs its own event loop, so it has to be called outside one
    command.upgrade(Config(str(ALEMBIC_INI)), 'head')


async def _clean_all_tables() -> None:
    engine = create_async_engine(settings.DATABASE_URL_ASYNC)
    try:
        async with engine.begin() as conn:
            await conn.execute(
                text(
                    'TRUNCATE bookings, booking_locks, package_exhaustion_notifications, '
                    'package_subscription_usage, package_subscriptions, slots, services '
                    'RESTART IDENTITY CASCADE'
                )
            )
    finally:
        await engine.dispose()


@pytest.fixture(scope='function')
async def clean_database(migrated_database: None) -> AsyncGenerator[None, None]:
    from src.platform.database.orm_db_setting import engine_manager

    await _clean_all_tables()
    yield
    await engine_manager.dispose()


# =============================================================================
# Unit Test Fixtures
# =============================================================================
@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow(store: InMemoryStore) -> FakeUnitOfWork:
    return FakeUnitOfWork(store)


@pytest.fixture
def service(store: InMemoryStore):
    return store.add_service(make_service())


@pytest.fixture
def slot(store: InMemoryStore, service):
    return store.add_slot(make_slot(service_id=service.id, capacity=5))
