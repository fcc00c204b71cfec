from typing import List

import pytest

from test.shared.fake_booking_api import FakeBookingApi


class RecordingSleep:
    """Replaces anyio.sleep so retry delays are observed instead of waited."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def booking_api() -> FakeBookingApi:
    return FakeBookingApi()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
async def api_client(booking_api: FakeBookingApi, sleep: RecordingSleep):
    async with booking_api.client(sleep=sleep) as client:
        yield client
