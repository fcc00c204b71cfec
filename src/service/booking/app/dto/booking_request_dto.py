from typing import List, Optional
from uuid import UUID

import attrs

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.value_object.coverage_split import CoverageSplit


@attrs.define(frozen=True, kw_only=True)
class BookingRequestBase:
    tenant_id: UUID
    service_id: UUID
    customer_name: str
    customer_phone: str
    visitor_count: int
    adult_count: Optional[int] = None  # defaults to every visitor being an adult
    child_count: Optional[int] = None
    customer_id: Optional[UUID] = None
    customer_email: Optional[str] = None
    notes: Optional[str] = None
    lock_id: Optional[UUID] = None
    session_id: Optional[str] = None
    package_subscription_id: Optional[UUID] = None
    package_covered_quantity: Optional[int] = None
    paid_quantity: Optional[int] = None

    @property
    def resolved_child_count(self) -> int:
        return self.child_count or 0

    @property
    def resolved_adult_count(self) -> int:
        if self.adult_count is None:
            return self.visitor_count - self.resolved_child_count
        return self.adult_count


@attrs.define(frozen=True, kw_only=True)
class BookingRequest(BookingRequestBase):
    slot_id: UUID


@attrs.define(frozen=True, kw_only=True)
class BulkBookingRequest(BookingRequestBase):
    """One visitor per slot; the lock (if any) belongs to the first slot."""

    slot_ids: List[UUID]
    booking_group_id: Optional[UUID] = None


@attrs.define(frozen=True)
class BulkBookingResult:
    booking_group_id: UUID
    bookings: List[Booking]
    split: CoverageSplit

    @property
    def total_price(self) -> int:
        return sum(booking.total_price for booking in self.bookings)
