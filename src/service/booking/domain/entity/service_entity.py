from uuid import UUID

import attrs


@attrs.define
class Service:
    id: UUID
    tenant_id: UUID
    name: str
    base_price: int  # unit price per visitor, smallest currency unit
    is_active: bool = True
