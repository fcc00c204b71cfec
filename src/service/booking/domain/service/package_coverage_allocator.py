"""
Package coverage rule.

A booking draws on at most one subscription. That subscription covers
min(quantity, remaining) visitors and the rest are charged at unit price.
Balances of other subscriptions are never pooled in; no subscription means
remaining_quantity=0.
"""

from typing import Optional
from uuid import UUID

from src.platform.exception.exceptions import DomainError, InsufficientSubscriptionBalanceError
from src.service.booking.domain.value_object.coverage_split import CoverageSplit


def allocate(
    *,
    quantity: int,
    remaining_quantity: int,
    unit_price: int,
    subscription_id: Optional[UUID] = None,
) -> CoverageSplit:
    if quantity < 1:
        raise DomainError('quantity must be at least 1')
    if remaining_quantity < 0:
        raise DomainError('remaining_quantity cannot be negative')
    if unit_price < 0:
        raise DomainError('unit_price cannot be negative')

    covered = min(quantity, remaining_quantity)
    return CoverageSplit(
        quantity=quantity,
        covered=covered,
        paid=quantity - covered,
        unit_price=unit_price,
        subscription_id=subscription_id if covered else None,
    )


def accept_declared(
    *,
    quantity: int,
    remaining_quantity: int,
    unit_price: int,
    declared_covered: int,
    declared_paid: Optional[int] = None,
    subscription_id: Optional[UUID] = None,
) -> CoverageSplit:
    """
    Check a split the caller computed up front against the live balance.

    The caller may ask for less coverage than the rule allows, never more.
    """
    paid = quantity - declared_covered if declared_paid is None else declared_paid
    if declared_covered < 0 or paid < 0:
        raise DomainError('package_covered_quantity and paid_quantity cannot be negative')
    if declared_covered + paid != quantity:
        raise DomainError(
            f'package_covered_quantity ({declared_covered}) + paid_quantity ({paid}) '
            f'must equal visitor_count ({quantity})'
        )
    if declared_covered and subscription_id is None:
        raise DomainError('package_subscription_id is required for package covered visitors')

    allowed = allocate(
        quantity=quantity,
        remaining_quantity=remaining_quantity,
        unit_price=unit_price,
        subscription_id=subscription_id,
    )
    if declared_covered > allowed.covered:
        raise InsufficientSubscriptionBalanceError(
            f'Subscription covers at most {allowed.covered} of {quantity} visitors, '
            f'but {declared_covered} were declared as covered'
        )

    return CoverageSplit(
        quantity=quantity,
        covered=declared_covered,
        paid=paid,
        unit_price=unit_price,
        subscription_id=subscription_id if declared_covered else None,
    )
