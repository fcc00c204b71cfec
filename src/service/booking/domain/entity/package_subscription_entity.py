from datetime import datetime
from typing import Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError, InsufficientSubscriptionBalanceError
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.enum.subscription_status import SubscriptionStatus


@attrs.define
class PackageSubscription:
    id: UUID
    tenant_id: UUID
    customer_id: UUID
    package_id: UUID
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_usable(self) -> bool:
        # Packages have no time-based expiry; only status and the active flag matter
        return self.is_active and self.status == SubscriptionStatus.ACTIVE


@attrs.define
class PackageSubscriptionUsage:
    """Balance of one subscription for one service."""

    subscription_id: UUID
    service_id: UUID
    original_quantity: int
    remaining_quantity: int
    used_quantity: int = 0

    @property
    def is_exhausted(self) -> bool:
        return self.remaining_quantity <= 0

    @Logger.io
    def consume(self, *, quantity: int) -> 'PackageSubscriptionUsage':
        if quantity < 0:
            raise DomainError('Covered quantity cannot be negative')
        if quantity > self.remaining_quantity:
            raise InsufficientSubscriptionBalanceError(
                f'No available package capacity. Only {self.remaining_quantity} remaining, '
                f'but {quantity} requested.'
            )
        return attrs.evolve(
            self,
            remaining_quantity=self.remaining_quantity - quantity,
            used_quantity=self.used_quantity + quantity,
        )

    @Logger.io
    def refund(self, *, quantity: int) -> 'PackageSubscriptionUsage':
        """Return covered units of a cancelled booking; never more than were used."""
        if quantity < 0:
            raise DomainError('Refunded quantity cannot be negative')
        refunded = min(quantity, self.used_quantity)
        return attrs.evolve(
            self,
            remaining_quantity=self.remaining_quantity + refunded,
            used_quantity=self.used_quantity - refunded,
        )
