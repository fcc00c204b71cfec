from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.service.booking.domain.entity.booking_lock_entity import BookingLock


class IBookingLockCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, lock: BookingLock) -> BookingLock:
        pass

    @abstractmethod
    async def get_by_id(self, *, lock_id: UUID) -> BookingLock | None:
        pass

    @abstractmethod
    async def delete(self, *, lock_id: UUID, session_id: str) -> bool:
        """
        Delete a lock only if the session owns it.

        Returns:
            True if a row was deleted, False when there was nothing to delete
        """
        pass

    @abstractmethod
    async def sum_active_reserved(
        self, *, slot_id: UUID, now: datetime, exclude_lock_id: Optional[UUID] = None
    ) -> int:
        """Capacity held by unexpired locks on a slot (optionally ignoring one lock)."""
        pass
