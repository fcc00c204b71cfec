import pytest

from src.platform.exception.exceptions import (
    CapacityUnavailableError,
    DomainError,
    LockExpiredError,
)
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.checkout.app.checkout_session import CheckoutSession
from test.shared.fake_booking_api import error_response
from test.test_constants import CUSTOMER_NAME, CUSTOMER_PHONE, TENANT_ID


BOOKING_DETAILS = {
    'tenant_id': str(TENANT_ID),
    'service_id': str(new_uuid7()),
    'customer_name': CUSTOMER_NAME,
    'customer_phone': CUSTOMER_PHONE,
    'visitor_count': 2,
}


def _session(api_client) -> CheckoutSession:
    # Keepalive sleeps on the real clock; an hour means it never fires during a test
    return CheckoutSession(client=api_client, poll_interval_seconds=3600)


@pytest.mark.unit
class TestCheckoutSession:
    async def test_commit_revalidates_and_sends_lock(self, api_client, booking_api) -> None:
        slot_id = new_uuid7()

        async with _session(api_client) as checkout:
            handle = await checkout.reserve(slot_id=slot_id, reserved_capacity=2)
            result = await checkout.commit(booking=BOOKING_DETAILS)

        assert checkout.committed is True
        assert len(booking_api.calls('GET', '/lock/{id}/validate')) == 1
        assert result['lock_id'] == str(handle.lock_id)
        assert result['session_id'] == handle.session_id
        assert result['slot_id'] == str(slot_id)
        assert booking_api.calls('POST', '/lock/{id}/release') == []

    async def test_leaving_without_commit_releases(self, api_client, booking_api) -> None:
        async with _session(api_client) as checkout:
            await checkout.reserve(slot_id=new_uuid7(), reserved_capacity=2)

        assert checkout.released is True
        [release] = booking_api.calls('POST', '/lock/{id}/release')
        assert booking_api.body_of(release) == {'session_id': checkout.handle.session_id}

    async def test_error_in_body_propagates_and_releases(self, api_client, booking_api) -> None:
        with pytest.raises(KeyError):
            async with _session(api_client) as checkout:
                await checkout.reserve(slot_id=new_uuid7(), reserved_capacity=1)
                raise KeyError('form closed')

        assert len(booking_api.calls('POST', '/lock/{id}/release')) == 1

    async def test_release_failure_is_swallowed(self, api_client, booking_api) -> None:
        booking_api.script(
            'POST', '/lock/{id}/release', error_response(503, 'TRANSIENT_SERVER_ERROR')
        )

        async with _session(api_client) as checkout:
            await checkout.reserve(slot_id=new_uuid7(), reserved_capacity=1)

        assert checkout.released is False

    async def test_commit_after_lock_lost_raises(self, api_client, booking_api) -> None:
        booking_api.script(
            'GET',
            '/lock/{id}/validate',
            error_response(409, 'LOCK_EXPIRED', 'Lock expired', valid=False),
        )

        with pytest.raises(LockExpiredError):
            async with _session(api_client) as checkout:
                await checkout.reserve(slot_id=new_uuid7(), reserved_capacity=1)
                await checkout.keepalive.ping()
                assert checkout.is_lock_lost is True
                await checkout.commit(booking=BOOKING_DETAILS)

        assert booking_api.calls('POST', '/create') == []

    async def test_commit_detects_expiry_at_the_last_moment(
        self, api_client, booking_api
    ) -> None:
        async with _session(api_client) as checkout:
            await checkout.reserve(slot_id=new_uuid7(), reserved_capacity=1)
            booking_api.script(
                'GET',
                '/lock/{id}/validate',
                error_response(409, 'LOCK_EXPIRED', 'Lock expired', valid=False),
            )
            with pytest.raises(LockExpiredError):
                await checkout.commit(booking=BOOKING_DETAILS)

        assert checkout.committed is False
        assert booking_api.calls('POST', '/create') == []

    async def test_capacity_conflict_on_reserve(self, api_client, booking_api) -> None:
        booking_api.script('POST', '/lock', error_response(409, 'CAPACITY_UNAVAILABLE'))

        with pytest.raises(CapacityUnavailableError):
            async with _session(api_client) as checkout:
                await checkout.reserve(slot_id=new_uuid7(), reserved_capacity=9)

        assert booking_api.calls('POST', '/lock/{id}/release') == []

    async def test_second_reserve_is_rejected(self, api_client) -> None:
        async with _session(api_client) as checkout:
            await checkout.reserve(slot_id=new_uuid7(), reserved_capacity=1)
            with pytest.raises(DomainError):
                await checkout.reserve(slot_id=new_uuid7(), reserved_capacity=1)

    async def test_bulk_commit_requires_locked_slot_first(self, api_client, booking_api) -> None:
        slot_id = new_uuid7()
        other_slot_id = new_uuid7()

        async with _session(api_client) as checkout:
            await checkout.reserve(slot_id=slot_id, reserved_capacity=1)
            with pytest.raises(DomainError):
                await checkout.commit_bulk(
                    booking=BOOKING_DETAILS, slot_ids=[other_slot_id, slot_id]
                )
            result = await checkout.commit_bulk(
                booking=BOOKING_DETAILS, slot_ids=[slot_id, other_slot_id]
            )

        assert result['slot_ids'] == [str(slot_id), str(other_slot_id)]
        assert checkout.committed is True

    async def test_reserve_outside_context_is_rejected(self, api_client) -> None:
        with pytest.raises(RuntimeError):
            await _session(api_client).reserve(slot_id=new_uuid7(), reserved_capacity=1)
