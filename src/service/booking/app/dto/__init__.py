"""Application layer DTOs"""

from src.service.booking.app.dto.booking_request_dto import (
    BookingRequest,
    BookingRequestBase,
    BulkBookingRequest,
    BulkBookingResult,
)
from src.service.booking.app.dto.cancellation_dto import BookingCancellation
from src.service.booking.app.dto.lock_dto import AcquiredLock, LockValidation

__all__ = [
    'AcquiredLock',
    'BookingCancellation',
    'BookingRequest',
    'BookingRequestBase',
    'BulkBookingRequest',
    'BulkBookingResult',
    'LockValidation',
]
