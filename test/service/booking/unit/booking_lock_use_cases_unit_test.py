"""
Unit tests for the capacity lock use cases

Acquire / validate / release against the in-memory Unit of Work:
1. Free capacity = available_capacity - active locks
2. Rejected acquisitions write nothing
3. Validation is read only and never extends a lock
4. Release is idempotent
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.platform.exception.exceptions import (
    CapacityUnavailableError,
    DomainError,
    LockExpiredError,
    NotFoundError,
)
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.booking.app.command.acquire_booking_lock_use_case import (
    AcquireBookingLockUseCase,
)
from src.service.booking.app.command.release_booking_lock_use_case import (
    ReleaseBookingLockUseCase,
)
from src.service.booking.app.command.validate_booking_lock_use_case import (
    INVALID_LOCK_MESSAGE,
    ValidateBookingLockUseCase,
)
from test.shared.booking_factories import make_lock


@pytest.fixture
def acquire(uow) -> AcquireBookingLockUseCase:
    return AcquireBookingLockUseCase(uow=uow, lock_duration_seconds=120)


@pytest.fixture
def validate(uow) -> ValidateBookingLockUseCase:
    return ValidateBookingLockUseCase(uow=uow)


@pytest.fixture
def release(uow) -> ReleaseBookingLockUseCase:
    return ReleaseBookingLockUseCase(uow=uow)


@pytest.mark.unit
class TestAcquireBookingLock:
    @pytest.mark.asyncio
    async def test_acquire_success__returns_lock_for_120_seconds(
        self, acquire, store, slot
    ) -> None:
        acquired = await acquire.execute(slot_id=slot.id, reserved_capacity=2)

        assert acquired.expires_in_seconds == 120
        assert acquired.session_id.startswith('session_')
        assert acquired.lock.reserved_capacity == 2
        assert store.locks[acquired.lock.id].slot_id == slot.id

    @pytest.mark.asyncio
    async def test_acquire_keeps_caller_session_id(self, acquire, slot) -> None:
        acquired = await acquire.execute(
            slot_id=slot.id, reserved_capacity=1, session_id='session_mine'
        )

        assert acquired.session_id == 'session_mine'

    @pytest.mark.asyncio
    async def test_acquire_fail__above_free_capacity_writes_nothing(
        self, acquire, store, slot
    ) -> None:
        await acquire.execute(slot_id=slot.id, reserved_capacity=4)

        with pytest.raises(CapacityUnavailableError, match='Only 1 available, but 2 requested'):
            await acquire.execute(slot_id=slot.id, reserved_capacity=2)

        assert len(store.locks) == 1

    @pytest.mark.asyncio
    async def test_full_slot_frees_up_after_release(self, acquire, release, slot) -> None:
        first = await acquire.execute(slot_id=slot.id, reserved_capacity=5)
        with pytest.raises(CapacityUnavailableError):
            await acquire.execute(slot_id=slot.id, reserved_capacity=1)

        await release.execute(lock_id=first.lock.id, session_id=first.session_id)

        second = await acquire.execute(slot_id=slot.id, reserved_capacity=1)
        assert second.lock.reserved_capacity == 1

    @pytest.mark.asyncio
    async def test_expired_locks_stop_counting(self, acquire, store, slot) -> None:
        store.add_lock(make_lock(slot_id=slot.id, reserved_capacity=5, expires_in_seconds=-1))

        acquired = await acquire.execute(slot_id=slot.id, reserved_capacity=5)

        assert acquired.lock.reserved_capacity == 5

    @pytest.mark.asyncio
    async def test_acquire_fail__unknown_slot(self, acquire) -> None:
        with pytest.raises(NotFoundError):
            await acquire.execute(slot_id=new_uuid7(), reserved_capacity=1)

    @pytest.mark.asyncio
    async def test_acquire_fail__non_positive_capacity(self, acquire, slot) -> None:
        with pytest.raises(DomainError):
            await acquire.execute(slot_id=slot.id, reserved_capacity=0)

    @pytest.mark.asyncio
    async def test_each_acquire_creates_a_new_lock(self, acquire, store, slot) -> None:
        first = await acquire.execute(slot_id=slot.id, reserved_capacity=1, session_id='s')
        second = await acquire.execute(slot_id=slot.id, reserved_capacity=1, session_id='s')

        assert first.lock.id != second.lock.id
        assert len(store.locks) == 2


@pytest.mark.unit
class TestValidateBookingLock:
    @pytest.mark.asyncio
    async def test_valid_lock_reports_seconds_remaining(self, validate, store, slot) -> None:
        lock = store.add_lock(make_lock(slot_id=slot.id, reserved_capacity=1, expires_in_seconds=60))

        validation = await validate.execute(lock_id=lock.id, session_id=lock.reserved_by_session_id)

        assert validation.valid is True
        assert 58 <= validation.seconds_remaining <= 60
        assert validation.expires_at == lock.lock_expires_at

    @pytest.mark.asyncio
    async def test_validation_never_extends_the_lock(self, validate, store, slot) -> None:
        lock = store.add_lock(make_lock(slot_id=slot.id, reserved_capacity=1, expires_in_seconds=60))
        expires_at = lock.lock_expires_at

        for _ in range(3):
            await validate.execute(lock_id=lock.id, session_id=lock.reserved_by_session_id)

        assert store.locks[lock.id].lock_expires_at == expires_at

    @pytest.mark.asyncio
    async def test_expired_lock_is_invalid(self, validate, store, slot) -> None:
        lock = store.add_lock(make_lock(slot_id=slot.id, reserved_capacity=1, expires_in_seconds=-1))

        with pytest.raises(LockExpiredError, match=INVALID_LOCK_MESSAGE):
            await validate.execute(lock_id=lock.id, session_id=lock.reserved_by_session_id)

    @pytest.mark.asyncio
    async def test_other_session_and_unknown_lock_are_invalid(self, validate, store, slot) -> None:
        lock = store.add_lock(make_lock(slot_id=slot.id, reserved_capacity=1))

        with pytest.raises(LockExpiredError):
            await validate.execute(lock_id=lock.id, session_id='session_other')
        with pytest.raises(LockExpiredError):
            await validate.execute(lock_id=new_uuid7(), session_id=lock.reserved_by_session_id)


@pytest.mark.unit
class TestReleaseBookingLock:
    @pytest.mark.asyncio
    async def test_release_twice_is_harmless(self, release, store, slot) -> None:
        lock = store.add_lock(make_lock(slot_id=slot.id, reserved_capacity=1))

        assert await release.execute(lock_id=lock.id, session_id=lock.reserved_by_session_id)
        assert not await release.execute(lock_id=lock.id, session_id=lock.reserved_by_session_id)
        assert lock.id not in store.locks

    @pytest.mark.asyncio
    async def test_release_by_other_session_keeps_the_lock(self, release, store, slot) -> None:
        lock = store.add_lock(make_lock(slot_id=slot.id, reserved_capacity=1))

        released = await release.execute(lock_id=lock.id, session_id='session_other')

        assert released is False
        assert lock.id in store.locks

    @pytest.mark.asyncio
    async def test_release_after_expiry_is_a_no_op(self, release, validate, store, slot) -> None:
        lock = store.add_lock(make_lock(slot_id=slot.id, reserved_capacity=1, expires_in_seconds=-5))

        await release.execute(lock_id=lock.id, session_id=lock.reserved_by_session_id)

        with pytest.raises(LockExpiredError):
            await validate.execute(lock_id=lock.id, session_id=lock.reserved_by_session_id)


@pytest.mark.unit
def test_lock_expiry_is_fixed_at_acquire_time() -> None:
    now = datetime.now(timezone.utc)
    lock = make_lock(slot_id=new_uuid7(), reserved_capacity=1, now=now)

    assert lock.lock_expires_at == now + timedelta(seconds=120)
