from abc import ABC, abstractmethod
from uuid import UUID

from src.service.booking.domain.entity.package_subscription_entity import (
    PackageSubscription,
    PackageSubscriptionUsage,
)


class IPackageSubscriptionCommandRepo(ABC):
    @abstractmethod
    async def get_subscription(self, *, subscription_id: UUID) -> PackageSubscription | None:
        pass

    @abstractmethod
    async def get_usage_for_update(
        self, *, subscription_id: UUID, service_id: UUID
    ) -> PackageSubscriptionUsage | None:
        """Row-lock the subscription's balance for a service inside the booking transaction."""
        pass

    @abstractmethod
    async def update_usage(self, *, usage: PackageSubscriptionUsage) -> PackageSubscriptionUsage:
        pass

    @abstractmethod
    async def record_exhaustion(self, *, subscription_id: UUID, service_id: UUID) -> bool:
        """
        Remember that the balance hit zero. Idempotent.

        Returns:
            True only the first time for this subscription and service
        """
        pass
