from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_service_query_repo import IServiceQueryRepo
from src.service.booking.domain.entity.service_entity import Service
from src.service.booking.driven_adapter.model.service_model import ServiceModel


class ServiceQueryRepoImpl(IServiceQueryRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @Logger.io
    async def get_by_id(self, *, service_id: UUID) -> Service | None:
        model = await self.session.get(ServiceModel, service_id)
        if model is None:
            return None
        return Service(
            id=model.id,
            tenant_id=model.tenant_id,
            name=model.name,
            base_price=model.base_price,
            is_active=model.is_active,
        )
