from collections import Counter
from datetime import datetime, timezone
import time
from typing import Self

from fastapi import Depends
from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import CapacityUnavailableError, DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.booking.app.dto.booking_request_dto import BulkBookingRequest, BulkBookingResult
from src.service.booking.app.service.booking_commit_steps import (
    apply_package_coverage,
    ensure_slot_matches,
    load_bookable_service,
    verify_lock_for_commit,
)
from src.service.booking.domain.entity.booking_entity import Booking


class CreateBulkBookingUseCase:
    """
    Book one visitor per slot across several slots under a shared booking_group_id.

    Coverage is decided for the whole group against one subscription; the first
    `covered` visitors are package covered (price 0), the rest pay unit price.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, request: BulkBookingRequest) -> BulkBookingResult:
        started = time.perf_counter()
        if not request.slot_ids:
            raise DomainError('slot_ids must not be empty')
        if len(request.slot_ids) != request.visitor_count:
            raise DomainError(
                f'Number of slots ({len(request.slot_ids)}) must equal '
                f'visitor_count ({request.visitor_count})'
            )
        Booking.ensure_visitor_counts(
            visitor_count=request.visitor_count,
            adult_count=request.resolved_adult_count,
            child_count=request.resolved_child_count,
        )

        visitors_per_slot = Counter(request.slot_ids)
        first_slot_id = request.slot_ids[0]
        booking_group_id = request.booking_group_id or new_uuid7()

        with self.tracer.start_as_current_span(
            'use_case.create_bulk_booking',
            attributes={
                'booking.group_id': str(booking_group_id),
                'booking.visitor_count': request.visitor_count,
            },
        ):
            async with self.uow:
                slots = await self.uow.slots.get_many_for_update(
                    slot_ids=list(visitors_per_slot)
                )
                slots_by_id = {slot.id: slot for slot in slots}
                for slot_id in visitors_per_slot:
                    if slot_id not in slots_by_id:
                        raise NotFoundError(f'Slot {slot_id} not found')

                service = await load_bookable_service(
                    self.uow, service_id=request.service_id, tenant_id=request.tenant_id
                )

                now = datetime.now(timezone.utc)
                if request.lock_id is not None:
                    await verify_lock_for_commit(
                        self.uow,
                        lock_id=request.lock_id,
                        session_id=request.session_id,
                        slot_id=first_slot_id,
                        quantity=visitors_per_slot[first_slot_id],
                        now=now,
                    )

                for slot_id, visitors in visitors_per_slot.items():
                    slot = slots_by_id[slot_id]
                    ensure_slot_matches(
                        slot, tenant_id=request.tenant_id, service_id=request.service_id
                    )
                    locked_by_others = await self.uow.booking_locks.sum_active_reserved(
                        slot_id=slot_id,
                        now=now,
                        exclude_lock_id=request.lock_id if slot_id == first_slot_id else None,
                    )
                    if not slot.is_available or slot.free_capacity(locked=locked_by_others) < 1:
                        raise CapacityUnavailableError(f'Slot {slot_id} has no available capacity')
                    slot.ensure_can_hold(quantity=visitors, locked=locked_by_others)

                split = await apply_package_coverage(
                    self.uow, request=request, unit_price=service.base_price
                )

                bookings = []
                for index, (slot_id, covered) in enumerate(
                    zip(request.slot_ids, split.unit_is_covered(), strict=True)
                ):
                    is_adult = index < request.resolved_adult_count
                    bookings.append(
                        Booking.create(
                            tenant_id=request.tenant_id,
                            service_id=request.service_id,
                            slot_id=slot_id,
                            customer_id=request.customer_id,
                            customer_name=request.customer_name,
                            customer_phone=request.customer_phone,
                            customer_email=request.customer_email,
                            visitor_count=1,
                            adult_count=1 if is_adult else 0,
                            child_count=0 if is_adult else 1,
                            package_subscription_id=split.subscription_id if covered else None,
                            package_covered_quantity=1 if covered else 0,
                            paid_quantity=0 if covered else 1,
                            unit_price=service.base_price,
                            booking_group_id=booking_group_id,
                            notes=request.notes,
                        )
                    )
                bookings = await self.uow.bookings.create_many(bookings=bookings)

                for slot_id, visitors in visitors_per_slot.items():
                    await self.uow.slots.update_capacity(
                        slot=slots_by_id[slot_id].book(visitor_count=visitors)
                    )
                if request.lock_id is not None and request.session_id:
                    await self.uow.booking_locks.delete(
                        lock_id=request.lock_id, session_id=request.session_id
                    )
                await self.uow.commit()

            metrics.record_booking_commit(
                mode='bulk',
                payment_status='paid' if split.paid == 0 else 'unpaid',
                covered=split.covered,
                paid=split.paid,
                duration=time.perf_counter() - started,
                count=len(bookings),
            )
            Logger.base.info(
                f'📝 [BOOKING] Group {booking_group_id}: {len(bookings)} bookings, '
                f'{split.covered} covered, {split.paid} paid'
            )
            return BulkBookingResult(
                booking_group_id=booking_group_id, bookings=bookings, split=split
            )
