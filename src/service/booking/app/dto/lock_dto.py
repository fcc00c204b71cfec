from datetime import datetime
from uuid import UUID

import attrs

from src.service.booking.domain.entity.booking_lock_entity import BookingLock


@attrs.define(frozen=True)
class AcquiredLock:
    lock: BookingLock
    expires_in_seconds: int

    @property
    def session_id(self) -> str:
        return self.lock.reserved_by_session_id


@attrs.define(frozen=True)
class LockValidation:
    lock_id: UUID
    expires_at: datetime
    seconds_remaining: int
    valid: bool = True
