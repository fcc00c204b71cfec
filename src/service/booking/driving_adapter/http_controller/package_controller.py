from uuid import UUID

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.query.resolve_customer_service_capacity_use_case import (
    ResolveCustomerServiceCapacityUseCase,
)
from src.service.booking.driving_adapter.http_controller.schema.package_schema import (
    ServiceCapacityResponse,
    SubscriptionBalanceResponse,
)


router = APIRouter()


@router.get('/capacity')
@Logger.io
async def get_customer_service_capacity(
    customer_id: UUID,
    service_id: UUID,
    use_case: ResolveCustomerServiceCapacityUseCase = Depends(
        ResolveCustomerServiceCapacityUseCase.depends
    ),
) -> ServiceCapacityResponse:
    """Package balances the customer can draw on for a service (one subscription per booking)."""
    capacity = await use_case.execute(customer_id=customer_id, service_id=service_id)
    return ServiceCapacityResponse(
        customer_id=capacity.customer_id,
        service_id=capacity.service_id,
        total_remaining_capacity=capacity.total_remaining_capacity,
        source_package_ids=capacity.source_package_ids,
        exhaustion_status=[
            SubscriptionBalanceResponse(
                subscription_id=balance.subscription_id,
                package_id=balance.package_id,
                remaining=balance.remaining,
                total=balance.total,
                used=balance.used,
                is_exhausted=balance.is_exhausted,
            )
            for balance in capacity.subscriptions
        ],
    )
