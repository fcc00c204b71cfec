from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LockAcquireRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'slot_id': '0193a1b2-7c3d-7e4f-8a5b-6c7d8e9f0a1b',
                'reserved_capacity': 2,
                'session_id': 'session_0193a1b27c3d7e4f',
            }
        }
    )

    slot_id: UUID
    reserved_capacity: int = Field(ge=1)
    session_id: Optional[str] = Field(default=None, min_length=1, max_length=128)


class LockResponse(BaseModel):
    lock_id: UUID
    session_id: str
    reserved_capacity: int
    expires_at: datetime
    expires_in_seconds: int


class LockValidationResponse(BaseModel):
    valid: bool
    expires_at: datetime
    seconds_remaining: int


class LockReleaseRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={'example': {'session_id': 'session_0193a1b27c3d7e4f'}}
    )

    session_id: str = Field(min_length=1, max_length=128)


class LockReleaseResponse(BaseModel):
    success: bool = True
    released: bool
