"""
Checks and side effects shared by single and bulk booking commits.

Every function here runs inside the caller's Unit of Work; none of them commit.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    DomainError,
    InsufficientSubscriptionBalanceError,
    LockExpiredError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.dto.booking_request_dto import BookingRequestBase
from src.service.booking.domain.entity.booking_lock_entity import BookingLock
from src.service.booking.domain.entity.service_entity import Service
from src.service.booking.domain.entity.slot_entity import Slot
from src.service.booking.domain.service import package_coverage_allocator
from src.service.booking.domain.value_object.coverage_split import CoverageSplit


async def load_bookable_service(
    uow: AbstractUnitOfWork, *, service_id: UUID, tenant_id: UUID
) -> Service:
    service = await uow.services.get_by_id(service_id=service_id)
    if service is None:
        raise NotFoundError('Service not found')
    if service.tenant_id != tenant_id:
        raise DomainError('Service does not belong to this tenant')
    if not service.is_active:
        raise DomainError('Service is not active')
    return service


def ensure_slot_matches(slot: Slot, *, tenant_id: UUID, service_id: UUID) -> None:
    if slot.tenant_id != tenant_id:
        raise DomainError(f'Slot {slot.id} does not belong to this tenant')
    if slot.service_id != service_id:
        raise DomainError(f'Slot {slot.id} is not for the requested service')


async def verify_lock_for_commit(
    uow: AbstractUnitOfWork,
    *,
    lock_id: UUID,
    session_id: Optional[str],
    slot_id: UUID,
    quantity: int,
    now: datetime,
) -> BookingLock:
    """
    Last-moment validation of the caller's lock, inside the commit transaction.

    A lock that expired during checkout fails here instead of overbooking.
    """
    if not session_id:
        raise DomainError('session_id is required when lock_id is provided')
    lock = await uow.booking_locks.get_by_id(lock_id=lock_id)
    if lock is None:
        raise LockExpiredError('Lock not found')
    lock.ensure_held_by(session_id=session_id, now=now)
    lock.ensure_covers(slot_id=slot_id, quantity=quantity)
    return lock


@Logger.io
async def apply_package_coverage(
    uow: AbstractUnitOfWork,
    *,
    request: BookingRequestBase,
    unit_price: int,
) -> CoverageSplit:
    """
    Split the visitors into package covered and paid, then draw the covered part
    from the chosen subscription's balance (row locked until commit).
    """
    quantity = request.visitor_count
    subscription_id = request.package_subscription_id

    if subscription_id is None:
        if request.package_covered_quantity is not None or request.paid_quantity is not None:
            return package_coverage_allocator.accept_declared(
                quantity=quantity,
                remaining_quantity=0,
                unit_price=unit_price,
                declared_covered=request.package_covered_quantity or 0,
                declared_paid=request.paid_quantity,
            )
        return package_coverage_allocator.allocate(
            quantity=quantity, remaining_quantity=0, unit_price=unit_price
        )

    subscription = await uow.package_subscriptions.get_subscription(
        subscription_id=subscription_id
    )
    if subscription is None or not subscription.is_usable:
        raise InsufficientSubscriptionBalanceError('Package subscription is not active')
    if subscription.tenant_id != request.tenant_id:
        raise InsufficientSubscriptionBalanceError(
            'Package subscription does not belong to this tenant'
        )
    if request.customer_id is not None and subscription.customer_id != request.customer_id:
        raise InsufficientSubscriptionBalanceError(
            'Package subscription does not belong to this customer'
        )

    usage = await uow.package_subscriptions.get_usage_for_update(
        subscription_id=subscription_id, service_id=request.service_id
    )
    if usage is None:
        raise InsufficientSubscriptionBalanceError(
            'Package subscription does not include this service'
        )

    if request.package_covered_quantity is None and request.paid_quantity is None:
        split = package_coverage_allocator.allocate(
            quantity=quantity,
            remaining_quantity=usage.remaining_quantity,
            unit_price=unit_price,
            subscription_id=subscription_id,
        )
    else:
        declared_covered = request.package_covered_quantity
        if declared_covered is None:
            declared_covered = quantity - (request.paid_quantity or 0)
        split = package_coverage_allocator.accept_declared(
            quantity=quantity,
            remaining_quantity=usage.remaining_quantity,
            unit_price=unit_price,
            declared_covered=declared_covered,
            declared_paid=request.paid_quantity,
            subscription_id=subscription_id,
        )

    if split.covered == 0:
        return split

    updated = usage.consume(quantity=split.covered)
    await uow.package_subscriptions.update_usage(usage=updated)
    Logger.base.info(
        f'🎟️ [PACKAGE] Subscription {subscription_id} covered {split.covered}/{quantity}, '
        f'remaining {updated.remaining_quantity}'
    )

    if updated.is_exhausted:
        first_time = await uow.package_subscriptions.record_exhaustion(
            subscription_id=subscription_id, service_id=request.service_id
        )
        if first_time:
            metrics.record_subscription_exhausted()
            Logger.base.info(
                f'📭 [PACKAGE] Subscription {subscription_id} exhausted for service '
                f'{request.service_id}'
            )

    return split
