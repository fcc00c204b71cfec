from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.service.booking.domain.entity.booking_entity import Booking


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, booking: Booking) -> Booking:
        pass

    @abstractmethod
    async def create_many(self, *, bookings: List[Booking]) -> List[Booking]:
        pass

    @abstractmethod
    async def get_for_update(self, *, booking_id: UUID) -> Booking | None:
        """Row-lock a booking so concurrent cancellations of it are serialised."""
        pass

    @abstractmethod
    async def update_status(self, *, booking: Booking) -> Booking:
        pass
