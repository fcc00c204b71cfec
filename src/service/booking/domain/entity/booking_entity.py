from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.booking.domain.enum.booking_status import BookingStatus, PaymentStatus


@attrs.define
class Booking:
    id: UUID
    tenant_id: UUID
    service_id: UUID
    slot_id: UUID
    customer_name: str
    customer_phone: str
    visitor_count: int
    adult_count: int
    child_count: int
    package_covered_quantity: int
    paid_quantity: int
    total_price: int
    customer_id: Optional[UUID] = None
    customer_email: Optional[str] = None
    package_subscription_id: Optional[UUID] = None
    booking_group_id: Optional[UUID] = None
    notes: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    created_at: Optional[datetime] = None

    @staticmethod
    def ensure_visitor_counts(*, visitor_count: int, adult_count: int, child_count: int) -> None:
        if visitor_count < 1:
            raise DomainError('visitor_count must be at least 1')
        if adult_count < 0 or child_count < 0:
            raise DomainError('adult_count and child_count cannot be negative')
        if adult_count + child_count != visitor_count:
            raise DomainError(
                f'visitor_count ({visitor_count}) must equal adult_count ({adult_count}) '
                f'+ child_count ({child_count})'
            )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    @Logger.io
    def cancel(self) -> 'Booking':
        if self.is_cancelled:
            raise DomainError('Booking is already cancelled')
        return attrs.evolve(self, status=BookingStatus.CANCELLED)

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        tenant_id: UUID,
        service_id: UUID,
        slot_id: UUID,
        customer_name: str,
        customer_phone: str,
        visitor_count: int,
        adult_count: int,
        child_count: int,
        package_covered_quantity: int,
        paid_quantity: int,
        unit_price: int,
        customer_id: Optional[UUID] = None,
        customer_email: Optional[str] = None,
        package_subscription_id: Optional[UUID] = None,
        booking_group_id: Optional[UUID] = None,
        notes: Optional[str] = None,
    ) -> 'Booking':
        if not customer_name or not customer_phone:
            raise DomainError('customer_name and customer_phone are required')
        cls.ensure_visitor_counts(
            visitor_count=visitor_count, adult_count=adult_count, child_count=child_count
        )
        if package_covered_quantity < 0 or paid_quantity < 0:
            raise DomainError('package_covered_quantity and paid_quantity cannot be negative')
        if package_covered_quantity + paid_quantity != visitor_count:
            raise DomainError(
                f'package_covered_quantity ({package_covered_quantity}) + paid_quantity '
                f'({paid_quantity}) must equal visitor_count ({visitor_count})'
            )
        if package_covered_quantity and package_subscription_id is None:
            raise DomainError('package_subscription_id is required for package covered visitors')
        if unit_price < 0:
            raise DomainError('unit_price cannot be negative')

        return cls(
            id=new_uuid7(),
            tenant_id=tenant_id,
            service_id=service_id,
            slot_id=slot_id,
            customer_id=customer_id,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_email=customer_email,
            visitor_count=visitor_count,
            adult_count=adult_count,
            child_count=child_count,
            package_subscription_id=package_subscription_id,
            package_covered_quantity=package_covered_quantity,
            paid_quantity=paid_quantity,
            total_price=paid_quantity * unit_price,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PAID if paid_quantity == 0 else PaymentStatus.UNPAID,
            booking_group_id=booking_group_id,
            notes=notes,
            created_at=datetime.now(timezone.utc),
        )
