from typing import Awaitable, Callable, Optional

import anyio
from anyio.abc import TaskStatus

from src.platform.exception.exceptions import (
    CustomBaseError,
    LockExpiredError,
    TransientServerError,
)
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.dto.lock_handle import LockHandle, LockStatus
from src.service.checkout.driven_adapter.http_client.booking_api_client import BookingApiClient


class LockKeepalive:
    """
    Validate a held lock on a fixed interval while checkout is in progress.

    Validation never extends the lock; the loop only notices loss early. The first
    LockExpired ends the loop and marks the reservation lost. Transport failures
    are logged and the next ping goes ahead.
    """

    def __init__(
        self,
        *,
        client: BookingApiClient,
        handle: LockHandle,
        interval_seconds: float,
        on_lost: Optional[Callable[[LockHandle, str], Awaitable[None]]] = None,
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
    ) -> None:
        self.client = client
        self.handle = handle
        self.interval_seconds = interval_seconds
        self.on_lost = on_lost
        self._sleep = sleep
        self.lost = anyio.Event()
        self.lost_reason: Optional[str] = None
        self.last_status: Optional[LockStatus] = None
        self._cancel_scope: Optional[anyio.CancelScope] = None

    @property
    def is_lost(self) -> bool:
        return self.lost.is_set()

    async def run(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        with anyio.CancelScope() as scope:
            self._cancel_scope = scope
            task_status.started()
            while not self.is_lost:
                await self._sleep(self.interval_seconds)
                await self.ping()

    def stop(self) -> None:
        if self._cancel_scope is not None:
            self._cancel_scope.cancel()

    async def ping(self) -> bool:
        """One validation round trip. Returns False once the lock is gone."""
        if self.is_lost:
            return False
        try:
            status = await self.client.validate_lock(
                lock_id=self.handle.lock_id, session_id=self.handle.session_id
            )
        except TransientServerError as e:
            Logger.base.warning(
                f'⚠️ [KEEPALIVE] Validation of lock {self.handle.lock_id} failed: {e.message}'
            )
            return True
        except LockExpiredError as e:
            await self._mark_lost(e.message)
            return False
        except CustomBaseError as e:
            await self._mark_lost(e.message)
            return False

        if not status.valid:
            await self._mark_lost('Lock expired or invalid')
            return False
        self.last_status = status
        Logger.base.debug(
            f'⏱️ [KEEPALIVE] Lock {self.handle.lock_id} valid, '
            f'{status.seconds_remaining}s remaining'
        )
        return True

    async def _mark_lost(self, reason: str) -> None:
        self.lost_reason = reason
        self.lost.set()
        Logger.base.warning(
            f'⌛ [KEEPALIVE] Lock {self.handle.lock_id} on slot {self.handle.slot_id} lost: {reason}'
        )
        if self.on_lost is not None:
            await self.on_lost(self.handle, reason)
