from typing import AsyncContextManager, Callable, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_package_subscription_query_repo import (
    IPackageSubscriptionQueryRepo,
)
from src.service.booking.domain.enum.subscription_status import SubscriptionStatus
from src.service.booking.domain.value_object.service_capacity import SubscriptionBalance
from src.service.booking.driven_adapter.model.package_subscription_model import (
    PackageSubscriptionModel,
    PackageSubscriptionUsageModel,
)


class PackageSubscriptionQueryRepoImpl(IPackageSubscriptionQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def list_active_balances(
        self, *, customer_id: UUID, service_id: UUID
    ) -> List[SubscriptionBalance]:
        stmt = (
            select(
                PackageSubscriptionModel.id,
                PackageSubscriptionModel.package_id,
                PackageSubscriptionUsageModel.remaining_quantity,
                PackageSubscriptionUsageModel.original_quantity,
                PackageSubscriptionUsageModel.used_quantity,
            )
            .join(
                PackageSubscriptionUsageModel,
                PackageSubscriptionUsageModel.subscription_id == PackageSubscriptionModel.id,
            )
            .where(
                PackageSubscriptionModel.customer_id == customer_id,
                PackageSubscriptionModel.status == SubscriptionStatus.ACTIVE.value,
                PackageSubscriptionModel.is_active.is_(True),
                PackageSubscriptionUsageModel.service_id == service_id,
            )
            .order_by(PackageSubscriptionModel.created_at, PackageSubscriptionModel.id)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [
                SubscriptionBalance(
                    subscription_id=subscription_id,
                    package_id=package_id,
                    remaining=remaining,
                    total=total,
                    used=used,
                )
                for subscription_id, package_id, remaining, total, used in result.all()
            ]
