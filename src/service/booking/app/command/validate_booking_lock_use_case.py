from datetime import datetime, timezone
from typing import Self
from uuid import UUID

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import LockExpiredError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.dto.lock_dto import LockValidation


INVALID_LOCK_MESSAGE = 'Lock expired or invalid. The reserved capacity is no longer held.'


class ValidateBookingLockUseCase:
    """Keepalive check for a lock. Read only: the expiry never moves."""

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, lock_id: UUID, session_id: str) -> LockValidation:
        async with self.uow:
            lock = await self.uow.booking_locks.get_by_id(lock_id=lock_id)

        now = datetime.now(timezone.utc)
        if lock is None or not lock.is_owned_by(session_id) or not lock.is_active(now=now):
            metrics.record_lock_validation(valid=False)
            raise LockExpiredError(INVALID_LOCK_MESSAGE)

        metrics.record_lock_validation(valid=True)
        return LockValidation(
            lock_id=lock.id,
            expires_at=lock.lock_expires_at,
            seconds_remaining=lock.seconds_remaining(now=now),
        )
