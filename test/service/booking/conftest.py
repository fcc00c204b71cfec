from collections.abc import Generator
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
import pytest

from src.platform.config.di import container
from src.platform.database.unit_of_work import get_unit_of_work
from test.shared.fake_unit_of_work import FakeUnitOfWork, InMemoryStore
from test.test_main import app


@pytest.fixture
def slot_query_repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def package_subscription_query_repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def client(
    store: InMemoryStore, slot_query_repo: AsyncMock, package_subscription_query_repo: AsyncMock
) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_unit_of_work] = lambda: FakeUnitOfWork(store)
    container.slot_query_repo.override(slot_query_repo)
    container.package_subscription_query_repo.override(package_subscription_query_repo)
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
        container.slot_query_repo.reset_override()
        container.package_subscription_query_repo.reset_override()
