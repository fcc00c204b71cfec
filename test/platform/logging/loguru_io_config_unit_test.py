import pytest

from src.platform.logging.loguru_io_config import access_line_level


@pytest.mark.unit
@pytest.mark.parametrize(
    'status,expected',
    [
        (201, 'SUCCESS'),
        (304, 'INFO'),
        (400, 'ERROR'),
        (409, 'WARNING'),
        (503, 'CRITICAL'),
    ],
)
def test_access_line_level_follows_status(status: int, expected: str) -> None:
    line = f'127.0.0.1 - "POST /api/bookings/lock HTTP/1.1" - {status} - 8ms'

    assert access_line_level(line) == expected


@pytest.mark.unit
def test_non_access_messages_keep_their_own_level() -> None:
    assert access_line_level('🔒 [LOCK] Acquired 2 on slot 42') is None
