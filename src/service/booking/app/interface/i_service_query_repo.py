from abc import ABC, abstractmethod
from uuid import UUID

from src.service.booking.domain.entity.service_entity import Service


class IServiceQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, service_id: UUID) -> Service | None:
        pass
