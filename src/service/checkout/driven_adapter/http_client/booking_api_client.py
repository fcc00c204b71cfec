"""
HTTP client for the booking API, used by the checkout flow.

Error mapping mirrors the server's exception handlers: the `code` field of a
4xx body selects the domain exception, 5xx and transport failures become
TransientServerError. Only acquire is retried.
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

import anyio
import httpx
import orjson
from opentelemetry import trace

from src.platform.config.core_setting import Settings, settings as default_settings
from src.platform.exception.exceptions import (
    ERRORS_BY_CODE,
    ConflictError,
    CustomBaseError,
    DomainError,
    NotFoundError,
    TransientServerError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import inject_trace_context
from src.service.checkout.app.dto.lock_handle import LockHandle, LockStatus


BOOKINGS_PATH = '/api/bookings'


def error_from_response(response: httpx.Response) -> CustomBaseError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = str(body.get('detail') or response.text or response.reason_phrase)

    if response.status_code >= 500:
        return TransientServerError(message, status_code=response.status_code)

    error_class = ERRORS_BY_CODE.get(body.get('code', ''))
    if error_class is TransientServerError:
        return TransientServerError(message, status_code=response.status_code)
    if error_class is not None:
        return error_class(message)  # type: ignore[call-arg]

    if response.status_code == 404:
        return NotFoundError(message)
    if response.status_code == 409:
        return ConflictError(message)
    return DomainError(message, status_code=response.status_code)


class BookingApiClient:
    """
    Usage:
        async with BookingApiClient() as client:
            handle = await client.acquire_lock(slot_id=slot_id, reserved_capacity=2)
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_base_delay_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
        config: Settings = default_settings,
    ) -> None:
        self.base_url = base_url or config.BOOKING_API_BASE_URL
        self.timeout_seconds = (
            config.CHECKOUT_HTTP_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self.max_attempts = (
            config.CHECKOUT_ACQUIRE_MAX_ATTEMPTS if max_attempts is None else max_attempts
        )
        if self.max_attempts < 1:
            raise ValueError(f'max_attempts must be at least 1, got {self.max_attempts}')
        self.retry_base_delay_seconds = (
            config.CHECKOUT_RETRY_BASE_DELAY_SECONDS
            if retry_base_delay_seconds is None
            else retry_base_delay_seconds
        )
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout_seconds, transport=transport
        )
        self.tracer = trace.get_tracer(__name__)

    async def __aenter__(self) -> 'BookingApiClient':
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        headers = inject_trace_context(headers={'content-type': 'application/json'})
        try:
            response = await self._client.request(
                method,
                f'{BOOKINGS_PATH}{path}',
                # orjson handles UUID and datetime values natively
                content=orjson.dumps(json) if json is not None else None,
                params=params,
                headers=headers,
            )
        except httpx.TransportError as e:
            raise TransientServerError(f'Booking API unreachable: {e}') from e

        if response.is_error:
            raise error_from_response(response)
        return response.json()

    # ============================ Capacity locks ============================

    @Logger.io
    async def acquire_lock(
        self, *, slot_id: UUID, reserved_capacity: int, session_id: Optional[str] = None
    ) -> LockHandle:
        """
        Reserve capacity, retrying transient failures with a linearly growing delay
        (attempt x base delay). Conflicts and validation errors are returned at once.
        """
        payload: dict[str, Any] = {'slot_id': str(slot_id), 'reserved_capacity': reserved_capacity}
        if session_id:
            payload['session_id'] = session_id

        with self.tracer.start_as_current_span(
            'checkout.acquire_lock', attributes={'slot.id': str(slot_id)}
        ) as span:
            for attempt in range(1, self.max_attempts + 1):
                span.set_attribute('checkout.attempt', attempt)
                try:
                    body = await self._request('POST', '/lock', json=payload)
                    break
                except TransientServerError as e:
                    if attempt >= self.max_attempts:
                        Logger.base.error(
                            f'❌ [CHECKOUT] Lock on slot {slot_id} failed after {attempt} attempts: '
                            f'{e.message}'
                        )
                        raise
                    delay = attempt * self.retry_base_delay_seconds
                    Logger.base.warning(
                        f'🔁 [CHECKOUT] Lock attempt {attempt}/{self.max_attempts} failed '
                        f'({e.message}), retrying in {delay}s'
                    )
                    await self._sleep(delay)

        return LockHandle(
            lock_id=UUID(body['lock_id']),
            session_id=body['session_id'],
            slot_id=slot_id,
            reserved_capacity=body['reserved_capacity'],
            expires_at=datetime.fromisoformat(body['expires_at']),
            expires_in_seconds=body['expires_in_seconds'],
        )

    async def validate_lock(self, *, lock_id: UUID, session_id: str) -> LockStatus:
        body = await self._request(
            'GET', f'/lock/{lock_id}/validate', params={'session_id': session_id}
        )
        return LockStatus(
            valid=body['valid'],
            expires_at=datetime.fromisoformat(body['expires_at']),
            seconds_remaining=body['seconds_remaining'],
        )

    async def release_lock(self, *, lock_id: UUID, session_id: str) -> bool:
        body = await self._request(
            'POST', f'/lock/{lock_id}/release', json={'session_id': session_id}
        )
        return bool(body.get('released', False))

    # ============================ Booking commit ============================

    @Logger.io
    async def create_booking(self, *, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request('POST', '/create', json=payload)

    @Logger.io
    async def create_bulk_booking(self, *, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request('POST', '/create-bulk', json=payload)
