from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class _BookingCustomerFields(BaseModel):
    tenant_id: UUID
    service_id: UUID
    customer_name: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=50)
    customer_email: Optional[str] = Field(default=None, max_length=255)
    customer_id: Optional[UUID] = None
    visitor_count: int = Field(ge=1)
    adult_count: Optional[int] = Field(default=None, ge=0)
    child_count: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None
    lock_id: Optional[UUID] = None
    session_id: Optional[str] = Field(default=None, max_length=128)
    package_subscription_id: Optional[UUID] = None
    package_covered_quantity: Optional[int] = Field(default=None, ge=0)
    paid_quantity: Optional[int] = Field(default=None, ge=0)


class BookingCreateRequest(_BookingCustomerFields):
    model_config = ConfigDict(
        json_schema_extra={
            'examples': [
                {
                    'tenant_id': '0193a1b2-0000-7000-8000-000000000001',
                    'service_id': '0193a1b2-0000-7000-8000-000000000002',
                    'slot_id': '0193a1b2-7c3d-7e4f-8a5b-6c7d8e9f0a1b',
                    'customer_name': 'Mei Chen',
                    'customer_phone': '+886912345678',
                    'visitor_count': 3,
                    'adult_count': 2,
                    'child_count': 1,
                    'lock_id': '0193a1b2-9d8e-7f60-8a5b-000000000042',
                    'session_id': 'session_0193a1b27c3d7e4f',
                },
                {
                    'tenant_id': '0193a1b2-0000-7000-8000-000000000001',
                    'service_id': '0193a1b2-0000-7000-8000-000000000002',
                    'slot_id': '0193a1b2-7c3d-7e4f-8a5b-6c7d8e9f0a1b',
                    'customer_name': 'Mei Chen',
                    'customer_phone': '+886912345678',
                    'customer_id': '0193a1b2-0000-7000-8000-0000000000c1',
                    'visitor_count': 10,
                    'package_subscription_id': '0193a1b2-0000-7000-8000-0000000000a9',
                },
            ]
        }
    )

    slot_id: UUID


class BookingBulkCreateRequest(_BookingCustomerFields):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'tenant_id': '0193a1b2-0000-7000-8000-000000000001',
                'service_id': '0193a1b2-0000-7000-8000-000000000002',
                'slot_ids': [
                    '0193a1b2-7c3d-7e4f-8a5b-6c7d8e9f0a1b',
                    '0193a1b2-7c3d-7e4f-8a5b-6c7d8e9f0a1c',
                ],
                'customer_name': 'Mei Chen',
                'customer_phone': '+886912345678',
                'visitor_count': 2,
            }
        }
    )

    slot_ids: List[UUID] = Field(min_length=1)
    booking_group_id: Optional[UUID] = None


class BookingResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    service_id: UUID
    slot_id: UUID
    customer_id: Optional[UUID] = None
    customer_name: str
    visitor_count: int
    adult_count: int
    child_count: int
    package_subscription_id: Optional[UUID] = None
    package_covered_quantity: int
    paid_quantity: int
    total_price: int
    status: str
    payment_status: str
    booking_group_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


class BulkBookingResponse(BaseModel):
    booking_group_id: UUID
    package_covered_quantity: int
    paid_quantity: int
    total_price: int
    bookings: List[BookingResponse]


class SlotSummaryResponse(BaseModel):
    id: UUID
    employee_id: Optional[UUID] = None
    available_capacity: int


class AggregatedSlotResponse(BaseModel):
    time_range: str
    slot_date: date
    start_time: time
    end_time: time
    total_capacity: int
    slots: List[SlotSummaryResponse]


class BookingCancellationResponse(BaseModel):
    cancelled: bool
    restored_capacity: int
    refunded_quantity: int
    booking: BookingResponse
