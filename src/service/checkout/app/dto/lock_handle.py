from datetime import datetime
from uuid import UUID

import attrs


@attrs.define(frozen=True)
class LockHandle:
    """What the caller keeps after a successful acquire."""

    lock_id: UUID
    session_id: str
    slot_id: UUID
    reserved_capacity: int
    expires_at: datetime
    expires_in_seconds: int


@attrs.define(frozen=True)
class LockStatus:
    valid: bool
    expires_at: datetime
    seconds_remaining: int
