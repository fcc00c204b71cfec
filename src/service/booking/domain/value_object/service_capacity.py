from uuid import UUID

import attrs


@attrs.frozen
class SubscriptionBalance:
    subscription_id: UUID
    package_id: UUID
    remaining: int
    total: int
    used: int

    @property
    def is_exhausted(self) -> bool:
        return self.remaining <= 0


@attrs.frozen
class CustomerServiceCapacity:
    """
    Package balances a customer holds for one service.

    total_remaining_capacity is informational: a booking draws on exactly one
    subscription, so it never gets more coverage than that subscription's remaining.
    """

    customer_id: UUID
    service_id: UUID
    subscriptions: tuple[SubscriptionBalance, ...] = ()

    @property
    def total_remaining_capacity(self) -> int:
        return sum(balance.remaining for balance in self.subscriptions if not balance.is_exhausted)

    @property
    def source_package_ids(self) -> list[UUID]:
        return [balance.package_id for balance in self.subscriptions if not balance.is_exhausted]
