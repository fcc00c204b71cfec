"""
Unit tests for CancelBookingUseCase

1. Slot capacity comes back (capped at original_capacity, booked_count floored at 0)
2. Package units drawn by the booking return to the same subscription
3. Cancelling twice is a no-op; other tenants see 404
"""

import attrs
import pytest

from src.platform.exception.exceptions import NotFoundError
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.booking.app.command.acquire_booking_lock_use_case import (
    AcquireBookingLockUseCase,
)
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.booking.app.dto.booking_request_dto import BookingRequest
from src.service.booking.domain.enum.booking_status import BookingStatus
from test.shared.booking_factories import make_subscription
from test.test_constants import (
    CUSTOMER_ID,
    CUSTOMER_NAME,
    CUSTOMER_PHONE,
    OTHER_TENANT_ID,
    TENANT_ID,
)


@pytest.fixture
def cancel_booking(uow) -> CancelBookingUseCase:
    return CancelBookingUseCase(uow=uow)


@pytest.fixture
def book(uow, service, slot):
    async def _book(**overrides):
        params = {
            'tenant_id': TENANT_ID,
            'service_id': service.id,
            'slot_id': slot.id,
            'customer_id': CUSTOMER_ID,
            'customer_name': CUSTOMER_NAME,
            'customer_phone': CUSTOMER_PHONE,
            'visitor_count': 2,
        }
        params.update(overrides)
        return await CreateBookingUseCase(uow=uow).execute(request=BookingRequest(**params))

    return _book


@pytest.mark.unit
class TestCancelBookingUseCase:
    @pytest.mark.asyncio
    async def test_cancel_restores_slot_capacity(
        self, cancel_booking, book, store, slot
    ) -> None:
        # ============ Given ============
        booking = await book(visitor_count=3)
        assert store.slots[slot.id].available_capacity == 2

        # ============ When ============
        result = await cancel_booking.execute(booking_id=booking.id, tenant_id=TENANT_ID)

        # ============ Then ============
        assert result.cancelled is True
        assert result.restored_capacity == 3
        assert result.booking.status == BookingStatus.CANCELLED
        assert store.bookings[booking.id].status == BookingStatus.CANCELLED
        assert store.slots[slot.id].available_capacity == 5
        assert store.slots[slot.id].booked_count == 0

    @pytest.mark.asyncio
    async def test_restored_capacity_never_exceeds_original(
        self, cancel_booking, book, store, slot
    ) -> None:
        booking = await book(visitor_count=2)
        # Capacity was corrected by hand after the booking went in
        store.slots[slot.id] = attrs.evolve(
            store.slots[slot.id], available_capacity=4, booked_count=1
        )

        result = await cancel_booking.execute(booking_id=booking.id, tenant_id=TENANT_ID)

        assert store.slots[slot.id].available_capacity == 5
        assert store.slots[slot.id].booked_count == 0
        assert result.restored_capacity == 1

    @pytest.mark.asyncio
    async def test_freed_capacity_can_be_locked_again(
        self, uow, cancel_booking, book, slot
    ) -> None:
        # ============ Given ============
        booking = await book(visitor_count=5)

        # ============ When ============
        await cancel_booking.execute(booking_id=booking.id, tenant_id=TENANT_ID)
        acquired = await AcquireBookingLockUseCase(uow=uow, lock_duration_seconds=120).execute(
            slot_id=slot.id, reserved_capacity=5, session_id='session_next'
        )

        # ============ Then ============
        assert acquired.lock.reserved_capacity == 5

    @pytest.mark.asyncio
    async def test_package_units_return_to_the_subscription(
        self, cancel_booking, book, store, service
    ) -> None:
        # ============ Given ============
        subscription, usage = make_subscription(
            customer_id=CUSTOMER_ID, service_id=service.id, remaining=1, original=10
        )
        store.add_subscription(subscription, [usage])
        booking = await book(visitor_count=3, package_subscription_id=subscription.id)
        assert booking.package_covered_quantity == 1
        assert store.usage(subscription.id, service.id).remaining_quantity == 0

        # ============ When ============
        result = await cancel_booking.execute(booking_id=booking.id, tenant_id=TENANT_ID)

        # ============ Then ============
        balance = store.usage(subscription.id, service.id)
        assert result.refunded_quantity == 1
        assert balance.remaining_quantity == 1
        assert balance.used_quantity == 9
        assert balance.remaining_quantity + balance.used_quantity == balance.original_quantity

    @pytest.mark.asyncio
    async def test_second_cancel_changes_nothing(
        self, cancel_booking, book, store, slot
    ) -> None:
        booking = await book(visitor_count=2)
        await cancel_booking.execute(booking_id=booking.id, tenant_id=TENANT_ID)

        again = await cancel_booking.execute(booking_id=booking.id, tenant_id=TENANT_ID)

        assert again.cancelled is False
        assert again.restored_capacity == 0
        assert again.booking.status == BookingStatus.CANCELLED
        assert store.slots[slot.id].available_capacity == 5
        assert store.slots[slot.id].booked_count == 0

    @pytest.mark.asyncio
    async def test_cancel_fail__unknown_booking(self, cancel_booking) -> None:
        with pytest.raises(NotFoundError):
            await cancel_booking.execute(booking_id=new_uuid7(), tenant_id=TENANT_ID)

    @pytest.mark.asyncio
    async def test_cancel_fail__other_tenant(self, cancel_booking, book, store, slot) -> None:
        booking = await book(visitor_count=2)

        with pytest.raises(NotFoundError):
            await cancel_booking.execute(booking_id=booking.id, tenant_id=OTHER_TENANT_ID)

        assert store.bookings[booking.id].status == BookingStatus.PENDING
        assert store.slots[slot.id].available_capacity == 3
