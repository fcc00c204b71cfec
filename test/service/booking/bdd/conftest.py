"""
Shared BDD steps for the booking API scenarios.

Available steps:
    - a slot with capacity {capacity:d}
    - session "{session_id}" locks {quantity:d} visitors
    - the response status code should be {status_code:d}
    - the error code should be "{code}"
"""

from typing import Any

from fastapi.testclient import TestClient
import httpx
import pytest
from pytest_bdd import given, parsers, then, when

from test.shared.booking_factories import make_slot
from test.test_constants import LOCK_ACQUIRE


@pytest.fixture
def context() -> dict[str, Any]:
    """Shared state between steps of one scenario"""
    return {'locks': {}}


@given(parsers.parse('a slot with capacity {capacity:d}'))
def given_slot_with_capacity(
    store, service, capacity: int, context: dict[str, Any]
) -> None:
    slot = store.add_slot(make_slot(service_id=service.id, capacity=capacity))
    context['slot'] = slot


@when(parsers.parse('session "{session_id}" locks {quantity:d} visitors'))
def when_session_locks(
    client: TestClient, context: dict[str, Any], session_id: str, quantity: int
) -> None:
    response = client.post(
        LOCK_ACQUIRE,
        json={
            'slot_id': str(context['slot'].id),
            'reserved_capacity': quantity,
            'session_id': session_id,
        },
    )
    context['response'] = response
    if response.status_code == 200:
        context['locks'][session_id] = response.json()


@then(parsers.parse('the response status code should be {status_code:d}'))
def then_response_status_code(status_code: int, context: dict[str, Any]) -> None:
    response: httpx.Response = context['response']
    assert response.status_code == status_code, (
        f'Expected {status_code}, got {response.status_code}: {response.text}'
    )


@then(parsers.parse('the error code should be "{code}"'))
def then_error_code(code: str, context: dict[str, Any]) -> None:
    assert context['response'].json()['code'] == code
