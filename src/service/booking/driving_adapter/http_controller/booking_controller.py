from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.acquire_booking_lock_use_case import (
    AcquireBookingLockUseCase,
)
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.booking.app.command.create_bulk_booking_use_case import (
    CreateBulkBookingUseCase,
)
from src.service.booking.app.command.release_booking_lock_use_case import (
    ReleaseBookingLockUseCase,
)
from src.service.booking.app.command.validate_booking_lock_use_case import (
    ValidateBookingLockUseCase,
)
from src.service.booking.app.dto.booking_request_dto import BookingRequest, BulkBookingRequest
from src.service.booking.app.query.list_aggregated_slots_use_case import (
    ListAggregatedSlotsUseCase,
)
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    AggregatedSlotResponse,
    BookingBulkCreateRequest,
    BookingCancellationResponse,
    BookingCreateRequest,
    BookingResponse,
    BulkBookingResponse,
    SlotSummaryResponse,
)
from src.service.booking.driving_adapter.http_controller.schema.lock_schema import (
    LockAcquireRequest,
    LockReleaseRequest,
    LockReleaseResponse,
    LockResponse,
    LockValidationResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _to_booking_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        tenant_id=booking.tenant_id,
        service_id=booking.service_id,
        slot_id=booking.slot_id,
        customer_id=booking.customer_id,
        customer_name=booking.customer_name,
        visitor_count=booking.visitor_count,
        adult_count=booking.adult_count,
        child_count=booking.child_count,
        package_subscription_id=booking.package_subscription_id,
        package_covered_quantity=booking.package_covered_quantity,
        paid_quantity=booking.paid_quantity,
        total_price=booking.total_price,
        status=booking.status.value,
        payment_status=booking.payment_status.value,
        booking_group_id=booking.booking_group_id,
        created_at=booking.created_at,
    )


# ============================ Capacity locks ============================


@router.post('/lock')
@Logger.io
async def acquire_lock(
    request: LockAcquireRequest,
    use_case: AcquireBookingLockUseCase = Depends(AcquireBookingLockUseCase.depends),
) -> LockResponse:
    with tracer.start_as_current_span('controller.acquire_lock') as span:
        span.set_attribute('slot.id', str(request.slot_id))
        acquired = await use_case.execute(
            slot_id=request.slot_id,
            reserved_capacity=request.reserved_capacity,
            session_id=request.session_id,
        )
        return LockResponse(
            lock_id=acquired.lock.id,
            session_id=acquired.session_id,
            reserved_capacity=acquired.lock.reserved_capacity,
            expires_at=acquired.lock.lock_expires_at,
            expires_in_seconds=acquired.expires_in_seconds,
        )


@router.get('/lock/{lock_id}/validate')
@Logger.io
async def validate_lock(
    lock_id: UUID,
    session_id: str = Query(min_length=1),
    use_case: ValidateBookingLockUseCase = Depends(ValidateBookingLockUseCase.depends),
) -> LockValidationResponse:
    # LockExpiredError renders as 409 {valid: false}
    validation = await use_case.execute(lock_id=lock_id, session_id=session_id)
    return LockValidationResponse(
        valid=validation.valid,
        expires_at=validation.expires_at,
        seconds_remaining=validation.seconds_remaining,
    )


@router.post('/lock/{lock_id}/release')
@Logger.io
async def release_lock(
    lock_id: UUID,
    request: LockReleaseRequest,
    use_case: ReleaseBookingLockUseCase = Depends(ReleaseBookingLockUseCase.depends),
) -> LockReleaseResponse:
    released = await use_case.execute(lock_id=lock_id, session_id=request.session_id)
    return LockReleaseResponse(released=released)


# ============================ Booking commit ============================


@router.post('/create', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_booking(
    request: BookingCreateRequest,
    use_case: CreateBookingUseCase = Depends(CreateBookingUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.create_booking') as span:
        span.set_attribute('slot.id', str(request.slot_id))
        booking = await use_case.execute(request=BookingRequest(**request.model_dump()))
        span.set_attribute('booking.id', str(booking.id))
        return _to_booking_response(booking)


@router.post('/create-bulk', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_bulk_booking(
    request: BookingBulkCreateRequest,
    use_case: CreateBulkBookingUseCase = Depends(CreateBulkBookingUseCase.depends),
) -> BulkBookingResponse:
    with tracer.start_as_current_span('controller.create_bulk_booking') as span:
        span.set_attribute('booking.slot_count', len(request.slot_ids))
        result = await use_case.execute(request=BulkBookingRequest(**request.model_dump()))
        return BulkBookingResponse(
            booking_group_id=result.booking_group_id,
            package_covered_quantity=result.split.covered,
            paid_quantity=result.split.paid,
            total_price=result.total_price,
            bookings=[_to_booking_response(booking) for booking in result.bookings],
        )


@router.delete('/{booking_id}')
@Logger.io
async def cancel_booking(
    booking_id: UUID,
    tenant_id: UUID,
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> BookingCancellationResponse:
    cancellation = await use_case.execute(booking_id=booking_id, tenant_id=tenant_id)
    return BookingCancellationResponse(
        cancelled=cancellation.cancelled,
        restored_capacity=cancellation.restored_capacity,
        refunded_quantity=cancellation.refunded_quantity,
        booking=_to_booking_response(cancellation.booking),
    )


# ============================ Availability ============================


@router.get('/slots')
@Logger.io
async def list_aggregated_slots(
    service_id: UUID,
    slot_date: date,
    tenant_id: Optional[UUID] = None,
    use_case: ListAggregatedSlotsUseCase = Depends(ListAggregatedSlotsUseCase.depends),
) -> List[AggregatedSlotResponse]:
    aggregated = await use_case.execute(
        service_id=service_id, slot_date=slot_date, tenant_id=tenant_id
    )
    return [
        AggregatedSlotResponse(
            time_range=entry.time_range,
            slot_date=slot_date,
            start_time=entry.start_time,
            end_time=entry.end_time,
            total_capacity=entry.total_capacity,
            slots=[
                SlotSummaryResponse(
                    id=slot.id,
                    employee_id=slot.employee_id,
                    available_capacity=slot.available_capacity,
                )
                for slot in entry.slots
            ],
        )
        for entry in aggregated
    ]
