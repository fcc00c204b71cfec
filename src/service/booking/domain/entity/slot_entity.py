from datetime import date, time
from typing import Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import CapacityUnavailableError, DomainError
from src.platform.logging.loguru_io import Logger


@attrs.define
class Slot:
    """
    A bookable window for one service (optionally one employee).

    available_capacity already has committed bookings taken out; active locks are
    not reflected here and have to be subtracted by the caller (see free_capacity).
    """

    id: UUID
    tenant_id: UUID
    service_id: UUID
    slot_date: date
    start_time: time
    end_time: time
    original_capacity: int
    available_capacity: int
    booked_count: int = 0
    is_available: bool = True
    employee_id: Optional[UUID] = None

    def free_capacity(self, *, locked: int) -> int:
        return max(0, self.available_capacity - locked)

    def ensure_can_hold(self, *, quantity: int, locked: int) -> None:
        if not self.is_available:
            raise CapacityUnavailableError('Slot is not available')
        free = self.free_capacity(locked=locked)
        if quantity > free:
            raise CapacityUnavailableError(
                f'Not enough capacity available. Only {free} available, but {quantity} requested.'
            )

    @Logger.io
    def book(self, *, visitor_count: int) -> 'Slot':
        if visitor_count < 1:
            raise DomainError('visitor_count must be at least 1')
        return attrs.evolve(
            self,
            available_capacity=max(0, self.available_capacity - visitor_count),
            booked_count=self.booked_count + visitor_count,
        )

    @Logger.io
    def restore(self, *, visitor_count: int) -> 'Slot':
        """Give a cancelled booking's visitors back, never above original_capacity."""
        if visitor_count < 1:
            raise DomainError('visitor_count must be at least 1')
        return attrs.evolve(
            self,
            available_capacity=min(
                self.original_capacity, self.available_capacity + visitor_count
            ),
            booked_count=max(0, self.booked_count - visitor_count),
        )

    def with_locked(self, *, locked: int) -> 'Slot':
        """Copy whose available_capacity shows what a new request could still reserve."""
        return attrs.evolve(self, available_capacity=self.free_capacity(locked=locked))
