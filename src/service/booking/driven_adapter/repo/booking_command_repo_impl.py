from typing import List
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.enum.booking_status import BookingStatus, PaymentStatus
from src.service.booking.driven_adapter.model.booking_model import BookingModel


def booking_model_to_entity(model: BookingModel) -> Booking:
    return Booking(
        id=model.id,
        tenant_id=model.tenant_id,
        service_id=model.service_id,
        slot_id=model.slot_id,
        customer_id=model.customer_id,
        customer_name=model.customer_name,
        customer_phone=model.customer_phone,
        customer_email=model.customer_email,
        visitor_count=model.visitor_count,
        adult_count=model.adult_count,
        child_count=model.child_count,
        package_subscription_id=model.package_subscription_id,
        package_covered_quantity=model.package_covered_quantity,
        paid_quantity=model.paid_quantity,
        total_price=model.total_price,
        status=BookingStatus(model.status),
        payment_status=PaymentStatus(model.payment_status),
        booking_group_id=model.booking_group_id,
        notes=model.notes,
        created_at=model.created_at,
    )


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_model(booking: Booking) -> BookingModel:
        model = BookingModel(
            id=booking.id,
            tenant_id=booking.tenant_id,
            service_id=booking.service_id,
            slot_id=booking.slot_id,
            customer_id=booking.customer_id,
            customer_name=booking.customer_name,
            customer_phone=booking.customer_phone,
            customer_email=booking.customer_email,
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
            notes=booking.notes,
        )
        if booking.created_at is not None:
            model.created_at = booking.created_at
        return model

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        self.session.add(self._to_model(booking))
        await self.session.flush()
        return booking

    @Logger.io
    async def create_many(self, *, bookings: List[Booking]) -> List[Booking]:
        self.session.add_all([self._to_model(booking) for booking in bookings])
        await self.session.flush()
        return bookings

    @Logger.io
    async def get_for_update(self, *, booking_id: UUID) -> Booking | None:
        result = await self.session.execute(
            select(BookingModel).where(BookingModel.id == booking_id).with_for_update()
        )
        model = result.scalar_one_or_none()
        return booking_model_to_entity(model) if model else None

    @Logger.io
    async def update_status(self, *, booking: Booking) -> Booking:
        await self.session.execute(
            update(BookingModel)
            .where(BookingModel.id == booking.id)
            .values(status=booking.status.value)
        )
        return booking
