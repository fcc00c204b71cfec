from typing import List
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_slot_command_repo import ISlotCommandRepo
from src.service.booking.domain.entity.slot_entity import Slot
from src.service.booking.driven_adapter.model.slot_model import SlotModel


def slot_model_to_entity(model: SlotModel) -> Slot:
    return Slot(
        id=model.id,
        tenant_id=model.tenant_id,
        service_id=model.service_id,
        employee_id=model.employee_id,
        slot_date=model.slot_date,
        start_time=model.start_time,
        end_time=model.end_time,
        original_capacity=model.original_capacity,
        available_capacity=model.available_capacity,
        booked_count=model.booked_count,
        is_available=model.is_available,
    )


class SlotCommandRepoImpl(ISlotCommandRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @Logger.io
    async def get_for_update(self, *, slot_id: UUID) -> Slot | None:
        result = await self.session.execute(
            select(SlotModel).where(SlotModel.id == slot_id).with_for_update()
        )
        model = result.scalar_one_or_none()
        return slot_model_to_entity(model) if model else None

    @Logger.io
    async def get_many_for_update(self, *, slot_ids: List[UUID]) -> List[Slot]:
        result = await self.session.execute(
            select(SlotModel)
            .where(SlotModel.id.in_(slot_ids))
            .order_by(SlotModel.id)
            .with_for_update()
        )
        return [slot_model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def update_capacity(self, *, slot: Slot) -> Slot:
        await self.session.execute(
            update(SlotModel)
            .where(SlotModel.id == slot.id)
            .values(
                available_capacity=slot.available_capacity,
                booked_count=slot.booked_count,
            )
        )
        return slot
