from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_package_subscription_command_repo import (
    IPackageSubscriptionCommandRepo,
)
from src.service.booking.domain.entity.package_subscription_entity import (
    PackageSubscription,
    PackageSubscriptionUsage,
)
from src.service.booking.domain.enum.subscription_status import SubscriptionStatus
from src.service.booking.driven_adapter.model.package_subscription_model import (
    PackageExhaustionNotificationModel,
    PackageSubscriptionModel,
    PackageSubscriptionUsageModel,
)


class PackageSubscriptionCommandRepoImpl(IPackageSubscriptionCommandRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @Logger.io
    async def get_subscription(self, *, subscription_id: UUID) -> PackageSubscription | None:
        model = await self.session.get(PackageSubscriptionModel, subscription_id)
        if model is None:
            return None
        return PackageSubscription(
            id=model.id,
            tenant_id=model.tenant_id,
            customer_id=model.customer_id,
            package_id=model.package_id,
            status=SubscriptionStatus(model.status),
            is_active=model.is_active,
            created_at=model.created_at,
        )

    @Logger.io
    async def get_usage_for_update(
        self, *, subscription_id: UUID, service_id: UUID
    ) -> PackageSubscriptionUsage | None:
        result = await self.session.execute(
            select(PackageSubscriptionUsageModel)
            .where(
                PackageSubscriptionUsageModel.subscription_id == subscription_id,
                PackageSubscriptionUsageModel.service_id == service_id,
            )
            .with_for_update()
        )
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return PackageSubscriptionUsage(
            subscription_id=model.subscription_id,
            service_id=model.service_id,
            original_quantity=model.original_quantity,
            remaining_quantity=model.remaining_quantity,
            used_quantity=model.used_quantity,
        )

    @Logger.io
    async def update_usage(self, *, usage: PackageSubscriptionUsage) -> PackageSubscriptionUsage:
        await self.session.execute(
            update(PackageSubscriptionUsageModel)
            .where(
                PackageSubscriptionUsageModel.subscription_id == usage.subscription_id,
                PackageSubscriptionUsageModel.service_id == usage.service_id,
            )
            .values(
                remaining_quantity=usage.remaining_quantity,
                used_quantity=usage.used_quantity,
            )
        )
        return usage

    @Logger.io
    async def record_exhaustion(self, *, subscription_id: UUID, service_id: UUID) -> bool:
        existing = await self.session.execute(
            select(PackageExhaustionNotificationModel.id).where(
                PackageExhaustionNotificationModel.subscription_id == subscription_id,
                PackageExhaustionNotificationModel.service_id == service_id,
            )
        )
        if existing.first() is not None:
            return False
        self.session.add(
            PackageExhaustionNotificationModel(
                subscription_id=subscription_id, service_id=service_id
            )
        )
        await self.session.flush()
        return True
