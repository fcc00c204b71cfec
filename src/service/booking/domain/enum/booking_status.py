from enum import StrEnum


class BookingStatus(StrEnum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'


class PaymentStatus(StrEnum):
    UNPAID = 'unpaid'
    PAID = 'paid'
