"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.service.booking.driven_adapter.repo.package_subscription_query_repo_impl import (
    PackageSubscriptionQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.slot_query_repo_impl import SlotQueryRepoImpl


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Read-side database (replica when configured)
    read_database = providers.Singleton(Database, read_only=True)

    # Query repositories (stateless - open a session per call)
    slot_query_repo = providers.Singleton(
        SlotQueryRepoImpl, session_factory=read_database.provided.session
    )
    package_subscription_query_repo = providers.Singleton(
        PackageSubscriptionQueryRepoImpl, session_factory=read_database.provided.session
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
