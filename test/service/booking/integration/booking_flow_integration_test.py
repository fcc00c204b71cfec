"""
Integration tests for the booking flow against PostgreSQL.

Exercises the SQLAlchemy repositories through the real Unit of Work: row locks
on slots and usage rows, active-lock sums, and the one-subscription coverage rule.
"""

from datetime import datetime, time, timedelta, timezone

import anyio
import pytest
from sqlalchemy import select

from src.platform.database.orm_db_setting import Database, get_session_maker
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.platform.exception.exceptions import CapacityUnavailableError, LockExpiredError
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.booking.app.command.acquire_booking_lock_use_case import (
    AcquireBookingLockUseCase,
)
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.booking.app.command.release_booking_lock_use_case import (
    ReleaseBookingLockUseCase,
)
from src.service.booking.app.dto.booking_request_dto import BookingRequest
from src.service.booking.driven_adapter.model import (
    BookingLockModel,
    BookingModel,
    PackageExhaustionNotificationModel,
    PackageSubscriptionModel,
    PackageSubscriptionUsageModel,
    ServiceModel,
    SlotModel,
)
from src.service.booking.driven_adapter.repo.package_subscription_query_repo_impl import (
    PackageSubscriptionQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.slot_query_repo_impl import SlotQueryRepoImpl
from test.test_constants import (
    CUSTOMER_ID,
    CUSTOMER_NAME,
    CUSTOMER_PHONE,
    SLOT_DATE,
    TENANT_ID,
    UNIT_PRICE,
)


def _uow() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(get_session_maker()())


@pytest.fixture
async def seeded(clean_database: None) -> dict:
    service_id, slot_id, other_slot_id = new_uuid7(), new_uuid7(), new_uuid7()
    big_sub_id, small_sub_id = new_uuid7(), new_uuid7()
    async with get_session_maker()() as session:
        session.add(
            ServiceModel(
                id=service_id, tenant_id=TENANT_ID, name='Guided Tour', base_price=UNIT_PRICE
            )
        )
        for sid, employee in ((slot_id, new_uuid7()), (other_slot_id, new_uuid7())):
            session.add(
                SlotModel(
                    id=sid,
                    tenant_id=TENANT_ID,
                    service_id=service_id,
                    employee_id=employee,
                    slot_date=SLOT_DATE,
                    start_time=time(9, 0),
                    end_time=time(10, 0),
                    original_capacity=5,
                    available_capacity=5,
                    booked_count=0,
                    is_available=True,
                )
            )
        for sub_id in (big_sub_id, small_sub_id):
            session.add(
                PackageSubscriptionModel(
                    id=sub_id,
                    tenant_id=TENANT_ID,
                    customer_id=CUSTOMER_ID,
                    package_id=new_uuid7(),
                    status='active',
                    is_active=True,
                )
            )
        await session.flush()
        for sub_id, remaining in ((big_sub_id, 9), (small_sub_id, 1)):
            session.add(
                PackageSubscriptionUsageModel(
                    subscription_id=sub_id,
                    service_id=service_id,
                    original_quantity=remaining,
                    remaining_quantity=remaining,
                    used_quantity=0,
                )
            )
        await session.commit()
    return {
        'service_id': service_id,
        'slot_id': slot_id,
        'other_slot_id': other_slot_id,
        'big_sub_id': big_sub_id,
        'small_sub_id': small_sub_id,
    }


def _request(seeded: dict, **overrides) -> BookingRequest:
    fields = {
        'tenant_id': TENANT_ID,
        'service_id': seeded['service_id'],
        'slot_id': seeded['slot_id'],
        'customer_id': CUSTOMER_ID,
        'customer_name': CUSTOMER_NAME,
        'customer_phone': CUSTOMER_PHONE,
        'visitor_count': 2,
    }
    fields.update(overrides)
    return BookingRequest(**fields)


@pytest.mark.integration
class TestLockLifecycle:
    async def test_lock_blocks_until_released(self, seeded: dict) -> None:
        acquired = await AcquireBookingLockUseCase(
            uow=_uow(), lock_duration_seconds=120
        ).execute(slot_id=seeded['slot_id'], reserved_capacity=5)

        with pytest.raises(CapacityUnavailableError):
            await AcquireBookingLockUseCase(uow=_uow(), lock_duration_seconds=120).execute(
                slot_id=seeded['slot_id'], reserved_capacity=1
            )

        released = await ReleaseBookingLockUseCase(uow=_uow()).execute(
            lock_id=acquired.lock.id, session_id=acquired.session_id
        )
        assert released is True
        assert await ReleaseBookingLockUseCase(uow=_uow()).execute(
            lock_id=acquired.lock.id, session_id=acquired.session_id
        ) is False

        again = await AcquireBookingLockUseCase(uow=_uow(), lock_duration_seconds=120).execute(
            slot_id=seeded['slot_id'], reserved_capacity=1
        )
        assert again.lock.reserved_capacity == 1

    async def test_concurrent_acquires_never_oversell(self, seeded: dict) -> None:
        results: list = []

        async def try_lock() -> None:
            try:
                acquired = await AcquireBookingLockUseCase(
                    uow=_uow(), lock_duration_seconds=120
                ).execute(slot_id=seeded['slot_id'], reserved_capacity=2)
                results.append(acquired)
            except CapacityUnavailableError as e:
                results.append(e)

        async with anyio.create_task_group() as tg:
            for _ in range(5):
                tg.start_soon(try_lock)

        granted = [r for r in results if not isinstance(r, Exception)]
        assert len(granted) == 2
        assert sum(acquired.lock.reserved_capacity for acquired in granted) == 4

    async def test_expired_locks_are_not_counted(self, seeded: dict) -> None:
        async with get_session_maker()() as session:
            session.add(
                BookingLockModel(
                    id=new_uuid7(),
                    slot_id=seeded['slot_id'],
                    reserved_by_session_id='session_old',
                    reserved_capacity=5,
                    lock_expires_at=datetime.now(timezone.utc) - timedelta(seconds=1),
                )
            )
            await session.commit()

        acquired = await AcquireBookingLockUseCase(uow=_uow(), lock_duration_seconds=120).execute(
            slot_id=seeded['slot_id'], reserved_capacity=5
        )

        assert acquired.expires_in_seconds == 120


@pytest.mark.integration
class TestBookingCommit:
    async def test_commit_under_lock_uses_one_subscription(self, seeded: dict) -> None:
        acquired = await AcquireBookingLockUseCase(uow=_uow(), lock_duration_seconds=120).execute(
            slot_id=seeded['slot_id'], reserved_capacity=5
        )

        booking = await CreateBookingUseCase(uow=_uow()).execute(
            request=_request(
                seeded,
                visitor_count=5,
                lock_id=acquired.lock.id,
                session_id=acquired.session_id,
                package_subscription_id=seeded['small_sub_id'],
            )
        )

        assert booking.package_covered_quantity == 1
        assert booking.paid_quantity == 4
        assert booking.total_price == 4 * UNIT_PRICE

        async with get_session_maker()() as session:
            slot = await session.get(SlotModel, seeded['slot_id'])
            assert slot.available_capacity == 0
            assert slot.booked_count == 5
            assert await session.get(BookingLockModel, acquired.lock.id) is None
            usages = {
                usage.subscription_id: usage.remaining_quantity
                for usage in (await session.execute(select(PackageSubscriptionUsageModel)))
                .scalars()
                .all()
            }
            assert usages == {seeded['small_sub_id']: 0, seeded['big_sub_id']: 9}
            exhausted = (
                await session.execute(select(PackageExhaustionNotificationModel))
            ).scalars().all()
            assert [row.subscription_id for row in exhausted] == [seeded['small_sub_id']]

    async def test_expired_lock_rolls_back_everything(self, seeded: dict) -> None:
        lock_id = new_uuid7()
        async with get_session_maker()() as session:
            session.add(
                BookingLockModel(
                    id=lock_id,
                    slot_id=seeded['slot_id'],
                    reserved_by_session_id='session_late',
                    reserved_capacity=2,
                    lock_expires_at=datetime.now(timezone.utc) - timedelta(seconds=1),
                )
            )
            await session.commit()

        with pytest.raises(LockExpiredError):
            await CreateBookingUseCase(uow=_uow()).execute(
                request=_request(
                    seeded,
                    lock_id=lock_id,
                    session_id='session_late',
                    package_subscription_id=seeded['big_sub_id'],
                )
            )

        async with get_session_maker()() as session:
            assert (await session.execute(select(BookingModel))).scalars().all() == []
            slot = await session.get(SlotModel, seeded['slot_id'])
            assert slot.available_capacity == 5

    async def test_cancel_gives_back_capacity_and_package_units(self, seeded: dict) -> None:
        booking = await CreateBookingUseCase(uow=_uow()).execute(
            request=_request(
                seeded, visitor_count=5, package_subscription_id=seeded['small_sub_id']
            )
        )

        cancellation = await CancelBookingUseCase(uow=_uow()).execute(
            booking_id=booking.id, tenant_id=TENANT_ID
        )
        again = await CancelBookingUseCase(uow=_uow()).execute(
            booking_id=booking.id, tenant_id=TENANT_ID
        )

        assert cancellation.restored_capacity == 5
        assert cancellation.refunded_quantity == 1
        assert again.cancelled is False
        async with get_session_maker()() as session:
            slot = await session.get(SlotModel, seeded['slot_id'])
            assert slot.available_capacity == 5
            assert slot.booked_count == 0
            stored = await session.get(BookingModel, booking.id)
            assert stored.status == 'cancelled'
            usage = (
                await session.execute(
                    select(PackageSubscriptionUsageModel).where(
                        PackageSubscriptionUsageModel.subscription_id == seeded['small_sub_id']
                    )
                )
            ).scalar_one()
            assert usage.remaining_quantity == 1
            assert usage.used_quantity == 0
        relocked = await AcquireBookingLockUseCase(uow=_uow(), lock_duration_seconds=120).execute(
            slot_id=seeded['slot_id'], reserved_capacity=5
        )
        assert relocked.lock.reserved_capacity == 5


@pytest.mark.integration
class TestReadRepositories:
    async def test_slots_and_locks_for_aggregation(self, seeded: dict) -> None:
        await AcquireBookingLockUseCase(uow=_uow(), lock_duration_seconds=120).execute(
            slot_id=seeded['slot_id'], reserved_capacity=3
        )
        repo = SlotQueryRepoImpl(session_factory=Database().session)

        slots = await repo.list_slots(service_id=seeded['service_id'], slot_date=SLOT_DATE)
        locked = await repo.locked_capacity_by_slot(
            slot_ids=[slot.id for slot in slots], now=datetime.now(timezone.utc)
        )

        assert {slot.id for slot in slots} == {seeded['slot_id'], seeded['other_slot_id']}
        assert locked == {seeded['slot_id']: 3}

    async def test_active_balances(self, seeded: dict) -> None:
        repo = PackageSubscriptionQueryRepoImpl(session_factory=Database().session)

        balances = await repo.list_active_balances(
            customer_id=CUSTOMER_ID, service_id=seeded['service_id']
        )

        assert sorted(balance.remaining for balance in balances) == [1, 9]
