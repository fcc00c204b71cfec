from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_lock_command_repo import (
    IBookingLockCommandRepo,
)
from src.service.booking.domain.entity.booking_lock_entity import BookingLock
from src.service.booking.driven_adapter.model.booking_lock_model import BookingLockModel


class BookingLockCommandRepoImpl(IBookingLockCommandRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(model: BookingLockModel) -> BookingLock:
        return BookingLock(
            id=model.id,
            slot_id=model.slot_id,
            reserved_by_session_id=model.reserved_by_session_id,
            reserved_capacity=model.reserved_capacity,
            lock_expires_at=model.lock_expires_at,
            created_at=model.created_at,
        )

    @Logger.io
    async def create(self, *, lock: BookingLock) -> BookingLock:
        model = BookingLockModel(
            id=lock.id,
            slot_id=lock.slot_id,
            reserved_by_session_id=lock.reserved_by_session_id,
            reserved_capacity=lock.reserved_capacity,
            lock_expires_at=lock.lock_expires_at,
        )
        if lock.created_at is not None:
            model.created_at = lock.created_at
        self.session.add(model)
        await self.session.flush()
        return self._to_entity(model)

    @Logger.io
    async def get_by_id(self, *, lock_id: UUID) -> BookingLock | None:
        model = await self.session.get(BookingLockModel, lock_id)
        return self._to_entity(model) if model else None

    @Logger.io
    async def delete(self, *, lock_id: UUID, session_id: str) -> bool:
        result = await self.session.execute(
            delete(BookingLockModel).where(
                BookingLockModel.id == lock_id,
                BookingLockModel.reserved_by_session_id == session_id,
            )
        )
        return (result.rowcount or 0) > 0  # type: ignore[attr-defined]

    @Logger.io
    async def sum_active_reserved(
        self, *, slot_id: UUID, now: datetime, exclude_lock_id: Optional[UUID] = None
    ) -> int:
        stmt = select(func.coalesce(func.sum(BookingLockModel.reserved_capacity), 0)).where(
            BookingLockModel.slot_id == slot_id,
            BookingLockModel.lock_expires_at > now,
        )
        if exclude_lock_id is not None:
            stmt = stmt.where(BookingLockModel.id != exclude_lock_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
