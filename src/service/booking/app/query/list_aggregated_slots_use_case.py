from datetime import date, datetime, timezone
from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_slot_query_repo import ISlotQueryRepo
from src.service.booking.domain.service.slot_aggregation import aggregate_slots
from src.service.booking.domain.value_object.aggregated_slot import AggregatedSlot


class ListAggregatedSlotsUseCase:
    """Customer-facing availability: capacity still reservable per time window."""

    def __init__(self, *, slot_query_repo: ISlotQueryRepo) -> None:
        self.slot_query_repo = slot_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        slot_query_repo: ISlotQueryRepo = Depends(Provide[Container.slot_query_repo]),
    ) -> Self:
        return cls(slot_query_repo=slot_query_repo)

    @Logger.io
    async def execute(
        self, *, service_id: UUID, slot_date: date, tenant_id: Optional[UUID] = None
    ) -> List[AggregatedSlot]:
        slots = await self.slot_query_repo.list_slots(
            service_id=service_id, slot_date=slot_date, tenant_id=tenant_id
        )
        locked = await self.slot_query_repo.locked_capacity_by_slot(
            slot_ids=[slot.id for slot in slots], now=datetime.now(timezone.utc)
        )
        return aggregate_slots(slot.with_locked(locked=locked.get(slot.id, 0)) for slot in slots)
