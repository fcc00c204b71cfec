import attrs

from src.service.booking.domain.entity.booking_entity import Booking


@attrs.define(frozen=True)
class BookingCancellation:
    booking: Booking
    cancelled: bool  # False when the booking was already cancelled
    restored_capacity: int = 0
    refunded_quantity: int = 0
