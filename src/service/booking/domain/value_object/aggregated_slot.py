from datetime import time

import attrs

from src.service.booking.domain.entity.slot_entity import Slot


@attrs.frozen
class AggregatedSlot:
    start_time: time
    end_time: time
    total_capacity: int
    slots: tuple[Slot, ...]

    @property
    def time_range(self) -> str:
        return f'{self.start_time.isoformat()}-{self.end_time.isoformat()}'
