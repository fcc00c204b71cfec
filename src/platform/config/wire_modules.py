"""
Wire Modules Configuration

Modules whose `Provide[...]` markers need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.booking.app.command import acquire_booking_lock_use_case
from src.service.booking.app.query import (
    list_aggregated_slots_use_case,
    resolve_customer_service_capacity_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    acquire_booking_lock_use_case,
    list_aggregated_slots_use_case,
    resolve_customer_service_capacity_use_case,
]
