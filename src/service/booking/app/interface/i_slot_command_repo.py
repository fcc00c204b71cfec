from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.service.booking.domain.entity.slot_entity import Slot


class ISlotCommandRepo(ABC):
    @abstractmethod
    async def get_for_update(self, *, slot_id: UUID) -> Slot | None:
        """
        Load a slot and row-lock it until the surrounding transaction ends.

        Every capacity decision (new lock, booking commit) for a slot goes
        through this lock, which serialises concurrent requests on that slot.
        """
        pass

    @abstractmethod
    async def get_many_for_update(self, *, slot_ids: List[UUID]) -> List[Slot]:
        """Row-lock several slots in a stable order (id) to avoid deadlocks."""
        pass

    @abstractmethod
    async def update_capacity(self, *, slot: Slot) -> Slot:
        pass
