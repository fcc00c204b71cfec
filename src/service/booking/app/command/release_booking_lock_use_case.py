from typing import Self
from uuid import UUID

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics


class ReleaseBookingLockUseCase:
    """
    Give a lock's capacity back early.

    Idempotent: unknown, already released, expired or foreign locks are a no-op.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, lock_id: UUID, session_id: str) -> bool:
        async with self.uow:
            released = await self.uow.booking_locks.delete(lock_id=lock_id, session_id=session_id)
            await self.uow.commit()

        metrics.record_lock_release(released=released)
        if released:
            Logger.base.info(f'🔓 [LOCK] {lock_id} released by {session_id}')
        return released
