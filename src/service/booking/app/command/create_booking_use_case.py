from datetime import datetime, timezone
import time
from typing import Self

from fastapi import Depends
from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.dto.booking_request_dto import BookingRequest
from src.service.booking.app.service.booking_commit_steps import (
    apply_package_coverage,
    ensure_slot_matches,
    load_bookable_service,
    verify_lock_for_commit,
)
from src.service.booking.domain.entity.booking_entity import Booking


class CreateBookingUseCase:
    """
    Commit a booking for one slot.

    Flow (one transaction, all or nothing):
    1. Row-lock the slot, check tenant / service / availability
    2. Re-validate the caller's lock (expired mid-checkout -> LockExpired)
    3. Capacity check that ignores the caller's own lock
    4. Package coverage: draw min(visitors, remaining) from the ONE chosen subscription
    5. Insert the booking, decrement slot capacity, delete the lock
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, request: BookingRequest) -> Booking:
        started = time.perf_counter()
        Booking.ensure_visitor_counts(
            visitor_count=request.visitor_count,
            adult_count=request.resolved_adult_count,
            child_count=request.resolved_child_count,
        )
        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={
                'slot.id': str(request.slot_id),
                'booking.visitor_count': request.visitor_count,
            },
        ):
            async with self.uow:
                slot = await self.uow.slots.get_for_update(slot_id=request.slot_id)
                if slot is None:
                    raise NotFoundError('Slot not found')
                ensure_slot_matches(
                    slot, tenant_id=request.tenant_id, service_id=request.service_id
                )
                service = await load_bookable_service(
                    self.uow, service_id=request.service_id, tenant_id=request.tenant_id
                )

                now = datetime.now(timezone.utc)
                if request.lock_id is not None:
                    await verify_lock_for_commit(
                        self.uow,
                        lock_id=request.lock_id,
                        session_id=request.session_id,
                        slot_id=slot.id,
                        quantity=request.visitor_count,
                        now=now,
                    )

                locked_by_others = await self.uow.booking_locks.sum_active_reserved(
                    slot_id=slot.id, now=now, exclude_lock_id=request.lock_id
                )
                slot.ensure_can_hold(quantity=request.visitor_count, locked=locked_by_others)

                split = await apply_package_coverage(
                    self.uow, request=request, unit_price=service.base_price
                )

                booking = Booking.create(
                    tenant_id=request.tenant_id,
                    service_id=request.service_id,
                    slot_id=slot.id,
                    customer_id=request.customer_id,
                    customer_name=request.customer_name,
                    customer_phone=request.customer_phone,
                    customer_email=request.customer_email,
                    visitor_count=request.visitor_count,
                    adult_count=request.resolved_adult_count,
                    child_count=request.resolved_child_count,
                    package_subscription_id=split.subscription_id,
                    package_covered_quantity=split.covered,
                    paid_quantity=split.paid,
                    unit_price=service.base_price,
                    notes=request.notes,
                )
                booking = await self.uow.bookings.create(booking=booking)
                await self.uow.slots.update_capacity(
                    slot=slot.book(visitor_count=request.visitor_count)
                )
                if request.lock_id is not None and request.session_id:
                    await self.uow.booking_locks.delete(
                        lock_id=request.lock_id, session_id=request.session_id
                    )
                await self.uow.commit()

            metrics.record_booking_commit(
                mode='single',
                payment_status=booking.payment_status.value,
                covered=split.covered,
                paid=split.paid,
                duration=time.perf_counter() - started,
            )
            Logger.base.info(
                f'📝 [BOOKING] {booking.id} on slot {slot.id}: {split.covered} covered, '
                f'{split.paid} paid, total {booking.total_price}'
            )
            return booking
