from typing import Self
from uuid import UUID

from fastapi import Depends
from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.dto.cancellation_dto import BookingCancellation


class CancelBookingUseCase:
    """
    Soft-cancel a booking and give back what it took.

    Row lock order is booking, slot, package usage; commits take slot before
    usage too, so the two never wait on each other in opposite order.
    - slot: available_capacity += visitors (capped at original_capacity),
      booked_count -= visitors (floored at 0)
    - package usage: the units this booking drew are returned to the subscription
    Cancelling an already cancelled booking changes nothing.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, booking_id: UUID, tenant_id: UUID) -> BookingCancellation:
        with self.tracer.start_as_current_span(
            'use_case.cancel_booking', attributes={'booking.id': str(booking_id)}
        ):
            async with self.uow:
                booking = await self.uow.bookings.get_for_update(booking_id=booking_id)
                # Another tenant's booking is reported exactly like a missing one
                if booking is None or booking.tenant_id != tenant_id:
                    raise NotFoundError('Booking not found')
                if booking.is_cancelled:
                    Logger.base.info(f'🚫 [BOOKING] {booking_id} already cancelled')
                    return BookingCancellation(booking=booking, cancelled=False)

                restored = 0
                slot = await self.uow.slots.get_for_update(slot_id=booking.slot_id)
                if slot is not None:
                    freed = slot.restore(visitor_count=booking.visitor_count)
                    restored = freed.available_capacity - slot.available_capacity
                    await self.uow.slots.update_capacity(slot=freed)

                refunded = await self._refund_package_units(booking)

                cancelled = booking.cancel()
                await self.uow.bookings.update_status(booking=cancelled)
                await self.uow.commit()

            metrics.record_booking_cancelled(refunded=refunded > 0)
            Logger.base.info(
                f'🚫 [BOOKING] {booking_id} cancelled: slot {booking.slot_id} +{restored}, '
                f'{refunded} package units returned'
            )
            return BookingCancellation(
                booking=cancelled,
                cancelled=True,
                restored_capacity=restored,
                refunded_quantity=refunded,
            )

    async def _refund_package_units(self, booking) -> int:
        if booking.package_subscription_id is None or booking.package_covered_quantity == 0:
            return 0
        usage = await self.uow.package_subscriptions.get_usage_for_update(
            subscription_id=booking.package_subscription_id, service_id=booking.service_id
        )
        if usage is None:
            return 0
        refunded = usage.refund(quantity=booking.package_covered_quantity)
        await self.uow.package_subscriptions.update_usage(usage=refunded)
        return refunded.remaining_quantity - usage.remaining_quantity
