from datetime import date, datetime
from typing import AsyncContextManager, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_slot_query_repo import ISlotQueryRepo
from src.service.booking.domain.entity.slot_entity import Slot
from src.service.booking.driven_adapter.model.booking_lock_model import BookingLockModel
from src.service.booking.driven_adapter.model.slot_model import SlotModel
from src.service.booking.driven_adapter.repo.slot_command_repo_impl import slot_model_to_entity


class SlotQueryRepoImpl(ISlotQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def list_slots(
        self, *, service_id: UUID, slot_date: date, tenant_id: Optional[UUID] = None
    ) -> List[Slot]:
        stmt = (
            select(SlotModel)
            .where(
                SlotModel.service_id == service_id,
                SlotModel.slot_date == slot_date,
                SlotModel.is_available.is_(True),
            )
            .order_by(SlotModel.start_time, SlotModel.id)
        )
        if tenant_id is not None:
            stmt = stmt.where(SlotModel.tenant_id == tenant_id)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [slot_model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def locked_capacity_by_slot(
        self, *, slot_ids: List[UUID], now: datetime
    ) -> Dict[UUID, int]:
        if not slot_ids:
            return {}
        stmt = (
            select(BookingLockModel.slot_id, func.sum(BookingLockModel.reserved_capacity))
            .where(
                BookingLockModel.slot_id.in_(slot_ids),
                BookingLockModel.lock_expires_at > now,
            )
            .group_by(BookingLockModel.slot_id)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return {slot_id: int(locked) for slot_id, locked in result.all()}
