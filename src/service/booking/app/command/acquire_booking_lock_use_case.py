from datetime import datetime, timezone
from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import (
    CapacityUnavailableError,
    DomainError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.types.uuid7_utils_types import new_session_id
from src.service.booking.app.dto.lock_dto import AcquiredLock
from src.service.booking.domain.entity.booking_lock_entity import BookingLock


class AcquireBookingLockUseCase:
    """
    Reserve part of a slot's capacity for one checkout session.

    Flow (one transaction):
    1. Row-lock the slot (serialises concurrent acquisitions on it)
    2. free = available_capacity - capacity held by unexpired locks
    3. Reject with CapacityUnavailable when the request does not fit; nothing is written
    4. Insert a lock that expires after the configured duration (never renewed)
    """

    def __init__(self, *, uow: AbstractUnitOfWork, lock_duration_seconds: int) -> None:
        self.uow = uow
        self.lock_duration_seconds = lock_duration_seconds
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow=uow, lock_duration_seconds=settings.BOOKING_LOCK_DURATION_SECONDS)

    @Logger.io
    async def execute(
        self,
        *,
        slot_id: UUID,
        reserved_capacity: int,
        session_id: Optional[str] = None,
    ) -> AcquiredLock:
        if reserved_capacity < 1:
            metrics.record_lock_request(result='invalid')
            raise DomainError('reserved_capacity must be at least 1')
        session_id = session_id or new_session_id()

        with self.tracer.start_as_current_span(
            'use_case.acquire_booking_lock',
            attributes={'slot.id': str(slot_id), 'lock.reserved_capacity': reserved_capacity},
        ):
            async with self.uow:
                slot = await self.uow.slots.get_for_update(slot_id=slot_id)
                if slot is None:
                    metrics.record_lock_request(result='not_found')
                    raise NotFoundError('Slot not found')

                now = datetime.now(timezone.utc)
                locked = await self.uow.booking_locks.sum_active_reserved(
                    slot_id=slot_id, now=now
                )
                try:
                    slot.ensure_can_hold(quantity=reserved_capacity, locked=locked)
                except CapacityUnavailableError:
                    metrics.record_lock_request(result='capacity_unavailable')
                    raise

                lock = BookingLock.create(
                    slot_id=slot_id,
                    session_id=session_id,
                    reserved_capacity=reserved_capacity,
                    now=now,
                    duration_seconds=self.lock_duration_seconds,
                )
                lock = await self.uow.booking_locks.create(lock=lock)
                await self.uow.commit()

            metrics.record_lock_request(result='acquired', reserved_capacity=reserved_capacity)
            Logger.base.info(
                f'🔒 [LOCK] {lock.id} holds {reserved_capacity} on slot {slot_id} '
                f'for {session_id} until {lock.lock_expires_at.isoformat()}'
            )
            return AcquiredLock(lock=lock, expires_in_seconds=self.lock_duration_seconds)
