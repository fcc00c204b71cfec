from contextvars import ContextVar
from datetime import datetime
from enum import StrEnum
import logging
import os
import re
import sys
from typing import TYPE_CHECKING

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


LOG_DIR = os.environ.get('TEST_LOG_DIR', str(LOG_DIR))

# Keys whose values never reach the log output
SENSITIVE_KEYWORDS = {
    'password',
    'customer_phone',
    'customer_email',
}

DEPTH_LINE = '─'

# Chatty below WARNING; their useful signal already shows up in our own logs
QUIET_LOGGERS = ('sqlalchemy.engine', 'httpx', 'httpcore', 'asyncio')

# granian access line: '127.0.0.1 - "POST /api/bookings/lock HTTP/1.1" - 409 - 8ms'
ACCESS_LINE_STATUS = re.compile(r' HTTP/[\d.]+" - (?P<status>\d{3}) ')

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


def access_line_level(message: str) -> str | None:
    """Level for a granian access line, None for any other message."""
    if not (match := ACCESS_LINE_STATUS.search(message)):
        return None
    status = int(match['status'])
    if status >= 500:
        return 'CRITICAL'
    # 409 is the normal answer to a lost capacity race
    if status == 409:
        return 'WARNING'
    if status >= 400:
        return 'ERROR'
    return 'SUCCESS' if status < 300 else 'INFO'


class InterceptHandler(logging.Handler):
    """Forward stdlib logging (granian, sqlalchemy, alembic) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()

        level: str | int | None = access_line_level(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        custom_logger.opt(depth=depth, exception=record.exc_info).log(level, message)


io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)


def _configure() -> 'LoguruLogger':
    loguru_logger.remove()
    bound = loguru_logger.bind(
        **{
            ExtraField.SERVICE_CONTEXT: get_service_context(),
            ExtraField.CHAIN_START_TIME: '',
            ExtraField.CALL_TARGET: '',
        }
    )
    level = settings.LOG_LEVEL or ('DEBUG' if settings.DEBUG else 'INFO')

    if settings.LOG_JSON:
        bound.add(sys.stdout, level=level, serialize=True, enqueue=True)
    else:
        bound.add(sys.stdout, format=io_log_format, level=level, enqueue=True)

    # Production ships stdout only
    if settings.DEBUG:
        stamp = datetime.now().astimezone().strftime('%Y-%m-%d_%H')
        prefix = 'test_' if os.environ.get('TEST_LOG_DIR') else ''
        bound.add(
            f'{LOG_DIR}/{prefix}{stamp}.log',
            format=io_log_format,
            rotation='1 hour',
            retention='7 days',
            compression='gz',
            enqueue=True,
            level=level,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return bound


custom_logger = _configure()
