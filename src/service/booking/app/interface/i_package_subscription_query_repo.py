from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.service.booking.domain.value_object.service_capacity import SubscriptionBalance


class IPackageSubscriptionQueryRepo(ABC):
    @abstractmethod
    async def list_active_balances(
        self, *, customer_id: UUID, service_id: UUID
    ) -> List[SubscriptionBalance]:
        """
        Balances for a service across the customer's usable subscriptions.

        A subscription includes a service when it has a usage row for it.
        Exhausted balances are returned too.
        """
        pass
