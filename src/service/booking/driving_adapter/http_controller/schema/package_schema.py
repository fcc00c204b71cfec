from typing import List
from uuid import UUID

from pydantic import BaseModel


class SubscriptionBalanceResponse(BaseModel):
    subscription_id: UUID
    package_id: UUID
    remaining: int
    total: int
    used: int
    is_exhausted: bool


class ServiceCapacityResponse(BaseModel):
    customer_id: UUID
    service_id: UUID
    total_remaining_capacity: int
    source_package_ids: List[UUID]
    exhaustion_status: List[SubscriptionBalanceResponse]
