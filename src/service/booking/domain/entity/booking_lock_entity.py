from datetime import datetime, timedelta
import math
from typing import Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError, LockExpiredError
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import new_uuid7


DEFAULT_LOCK_DURATION_SECONDS = 120


@attrs.define
class BookingLock:
    """
    Short-lived hold on part of a slot's capacity for one checkout session.

    The expiry is fixed at creation: validating a lock never extends it.
    Expired rows are not swept, they simply stop counting.
    """

    id: UUID
    slot_id: UUID
    reserved_by_session_id: str
    reserved_capacity: int
    lock_expires_at: datetime
    created_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        slot_id: UUID,
        session_id: str,
        reserved_capacity: int,
        now: datetime,
        duration_seconds: int = DEFAULT_LOCK_DURATION_SECONDS,
    ) -> 'BookingLock':
        if reserved_capacity < 1:
            raise DomainError('reserved_capacity must be at least 1')
        if not session_id:
            raise DomainError('session_id is required')
        if duration_seconds < 1:
            raise DomainError('Lock duration must be positive')

        return cls(
            id=new_uuid7(),
            slot_id=slot_id,
            reserved_by_session_id=session_id,
            reserved_capacity=reserved_capacity,
            lock_expires_at=now + timedelta(seconds=duration_seconds),
            created_at=now,
        )

    def is_active(self, *, now: datetime) -> bool:
        return self.lock_expires_at > now

    def seconds_remaining(self, *, now: datetime) -> int:
        return max(0, math.floor((self.lock_expires_at - now).total_seconds()))

    def is_owned_by(self, session_id: str) -> bool:
        return self.reserved_by_session_id == session_id

    def ensure_held_by(self, *, session_id: str, now: datetime) -> None:
        if not self.is_owned_by(session_id):
            raise LockExpiredError('Lock does not belong to this session')
        if not self.is_active(now=now):
            raise LockExpiredError('Lock has expired')

    def ensure_covers(self, *, slot_id: UUID, quantity: int) -> None:
        if self.slot_id != slot_id:
            raise DomainError('Lock does not match the specified slot')
        if self.reserved_capacity < quantity:
            raise DomainError(
                f'Lock reserved capacity ({self.reserved_capacity}) is less than '
                f'requested visitor count ({quantity})'
            )
