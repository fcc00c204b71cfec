from typing import Optional
from uuid import UUID

import attrs


@attrs.frozen
class CoverageSplit:
    """How many visitors a package pays for and how many are charged."""

    quantity: int
    covered: int
    paid: int
    unit_price: int
    subscription_id: Optional[UUID] = None

    @property
    def total_price(self) -> int:
        return self.paid * self.unit_price

    def unit_is_covered(self) -> list[bool]:
        """Per-unit flags for bulk bookings: the first `covered` units ride on the package."""
        return [index < self.covered for index in range(self.quantity)]
