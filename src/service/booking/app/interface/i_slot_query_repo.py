from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from src.service.booking.domain.entity.slot_entity import Slot


class ISlotQueryRepo(ABC):
    @abstractmethod
    async def list_slots(
        self, *, service_id: UUID, slot_date: date, tenant_id: Optional[UUID] = None
    ) -> List[Slot]:
        """Bookable slots (is_available) of a service on one day."""
        pass

    @abstractmethod
    async def locked_capacity_by_slot(
        self, *, slot_ids: List[UUID], now: datetime
    ) -> Dict[UUID, int]:
        """Sum of reserved_capacity of unexpired locks, keyed by slot. Slots without locks are omitted."""
        pass
