from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_package_subscription_query_repo import (
    IPackageSubscriptionQueryRepo,
)
from src.service.booking.domain.value_object.service_capacity import CustomerServiceCapacity


class ResolveCustomerServiceCapacityUseCase:
    def __init__(self, *, package_subscription_query_repo: IPackageSubscriptionQueryRepo) -> None:
        self.package_subscription_query_repo = package_subscription_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        package_subscription_query_repo: IPackageSubscriptionQueryRepo = Depends(
            Provide[Container.package_subscription_query_repo]
        ),
    ) -> Self:
        return cls(package_subscription_query_repo=package_subscription_query_repo)

    @Logger.io
    async def execute(self, *, customer_id: UUID, service_id: UUID) -> CustomerServiceCapacity:
        balances = await self.package_subscription_query_repo.list_active_balances(
            customer_id=customer_id, service_id=service_id
        )
        return CustomerServiceCapacity(
            customer_id=customer_id, service_id=service_id, subscriptions=tuple(balances)
        )
