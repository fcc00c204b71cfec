from collections.abc import Iterable
from datetime import time

from src.service.booking.domain.entity.slot_entity import Slot
from src.service.booking.domain.value_object.aggregated_slot import AggregatedSlot


def aggregate_slots(slots: Iterable[Slot]) -> list[AggregatedSlot]:
    """
    Merge per-employee slots that share a time window into one customer-facing entry.

    Windows with nothing left to book are dropped. The result is ordered by
    start time and does not depend on the input order.
    """
    grouped: dict[tuple[time, time], list[Slot]] = {}
    for slot in slots:
        grouped.setdefault((slot.start_time, slot.end_time), []).append(slot)

    aggregated = [
        AggregatedSlot(
            start_time=start_time,
            end_time=end_time,
            total_capacity=sum(slot.available_capacity for slot in members),
            slots=tuple(sorted(members, key=lambda slot: str(slot.id))),
        )
        for (start_time, end_time), members in grouped.items()
    ]
    return sorted(
        (entry for entry in aggregated if entry.total_capacity > 0),
        key=lambda entry: (entry.start_time, entry.end_time),
    )
