"""
Caller side of a reservation: acquire, keep alive, commit or abandon.

    async with BookingApiClient() as client:
        async with CheckoutSession(client=client) as checkout:
            await checkout.reserve(slot_id=slot_id, reserved_capacity=2)
            ...  # customer fills in the form
            booking = await checkout.commit(booking=details)

Leaving the block without a successful commit releases the lock. A lock lost
during checkout (expired after 120s) makes commit fail with LockExpiredError;
the caller should refresh availability and start again.
"""

from types import TracebackType
from typing import Any, Awaitable, Callable, List, Optional
from uuid import UUID

import anyio
from anyio.abc import TaskGroup

from src.platform.config.core_setting import Settings, settings as default_settings
from src.platform.exception.exceptions import CustomBaseError, DomainError, LockExpiredError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.checkout.app.dto.lock_handle import LockHandle, LockStatus
from src.service.checkout.app.lock_keepalive import LockKeepalive
from src.service.checkout.driven_adapter.http_client.booking_api_client import BookingApiClient


class CheckoutSession:
    def __init__(
        self,
        *,
        client: BookingApiClient,
        poll_interval_seconds: Optional[float] = None,
        on_lock_lost: Optional[Callable[[LockHandle, str], Awaitable[None]]] = None,
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
        config: Settings = default_settings,
    ) -> None:
        self.client = client
        self.poll_interval_seconds = (
            config.CHECKOUT_LOCK_POLL_INTERVAL_SECONDS
            if poll_interval_seconds is None
            else poll_interval_seconds
        )
        self.on_lock_lost = on_lock_lost
        self._sleep = sleep
        self.handle: Optional[LockHandle] = None
        self.keepalive: Optional[LockKeepalive] = None
        self.committed = False
        self.released = False
        self._task_group: Optional[TaskGroup] = None

    async def __aenter__(self) -> 'CheckoutSession':
        self._task_group = anyio.create_task_group()
        await self._task_group.__aenter__()
        metrics.checkout_sessions_in_flight.inc()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self._stop_keepalive()
        try:
            await self._task_group.__aexit__(exc_type, exc, tb)  # type: ignore[union-attr]
        except BaseExceptionGroup as group:
            # The body's own error comes back wrapped; let the original propagate
            if not (exc is not None and len(group.exceptions) == 1 and group.exceptions[0] is exc):
                raise
        finally:
            metrics.checkout_sessions_in_flight.dec()
            if not self.committed:
                await self.abandon()

    # ============================ Reservation ============================

    async def reserve(
        self, *, slot_id: UUID, reserved_capacity: int, session_id: Optional[str] = None
    ) -> LockHandle:
        if self._task_group is None:
            raise RuntimeError('CheckoutSession must be used as an async context manager')
        if self.handle is not None:
            raise DomainError('This checkout already holds a lock')

        self.handle = await self.client.acquire_lock(
            slot_id=slot_id, reserved_capacity=reserved_capacity, session_id=session_id
        )
        self.keepalive = LockKeepalive(
            client=self.client,
            handle=self.handle,
            interval_seconds=self.poll_interval_seconds,
            on_lost=self.on_lock_lost,
            sleep=self._sleep,
        )
        await self._task_group.start(self.keepalive.run)
        Logger.base.info(
            f'🛒 [CHECKOUT] Holding {reserved_capacity} on slot {slot_id} '
            f'with lock {self.handle.lock_id} ({self.handle.expires_in_seconds}s)'
        )
        return self.handle

    @property
    def is_lock_lost(self) -> bool:
        return self.keepalive is not None and self.keepalive.is_lost

    async def ensure_lock_valid(self) -> LockStatus:
        """Fresh validation round trip; raises LockExpiredError when the hold is gone."""
        handle = self._require_handle()
        if self.keepalive is not None and self.keepalive.is_lost:
            raise LockExpiredError(self.keepalive.lost_reason or 'Lock expired')
        return await self.client.validate_lock(lock_id=handle.lock_id, session_id=handle.session_id)

    # ============================ Commit / abandon ============================

    async def commit(self, *, booking: dict[str, Any]) -> dict[str, Any]:
        handle = self._require_handle()
        await self.ensure_lock_valid()
        payload = {
            **booking,
            'slot_id': handle.slot_id,
            'lock_id': handle.lock_id,
            'session_id': handle.session_id,
        }
        result = await self.client.create_booking(payload=payload)
        self._mark_committed()
        return result

    async def commit_bulk(self, *, booking: dict[str, Any], slot_ids: List[UUID]) -> dict[str, Any]:
        """Multi-slot commit. The held lock must be on the first slot."""
        handle = self._require_handle()
        if not slot_ids or slot_ids[0] != handle.slot_id:
            raise DomainError('The first slot of a bulk booking must be the locked slot')
        await self.ensure_lock_valid()
        payload = {
            **booking,
            'slot_ids': slot_ids,
            'lock_id': handle.lock_id,
            'session_id': handle.session_id,
        }
        result = await self.client.create_bulk_booking(payload=payload)
        self._mark_committed()
        return result

    async def abandon(self) -> None:
        """Give the capacity back. Errors are logged only; the lock expires anyway."""
        self._stop_keepalive()
        if self.handle is None or self.committed or self.released:
            return
        try:
            released = await self.client.release_lock(
                lock_id=self.handle.lock_id, session_id=self.handle.session_id
            )
        except CustomBaseError as e:
            Logger.base.warning(
                f'⚠️ [CHECKOUT] Release of lock {self.handle.lock_id} failed, '
                f'it will expire on its own: {e.message}'
            )
            return
        self.released = True
        Logger.base.info(f'🔓 [CHECKOUT] Lock {self.handle.lock_id} released (released={released})')

    def _mark_committed(self) -> None:
        self.committed = True
        self._stop_keepalive()
        Logger.base.info(f'✅ [CHECKOUT] Booking committed under lock {self.handle.lock_id}')  # type: ignore[union-attr]

    def _stop_keepalive(self) -> None:
        if self.keepalive is not None:
            self.keepalive.stop()

    def _require_handle(self) -> LockHandle:
        if self.handle is None:
            raise DomainError('No lock held; call reserve() first')
        return self.handle
