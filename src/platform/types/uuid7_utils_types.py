"""
UUID7 helpers.

Primary keys are UUID7 (time ordered) generated by uuid_utils. SQLAlchemy's Uuid
column type and pydantic both expect the stdlib ``uuid.UUID``, so ids are
converted once at creation and travel as stdlib UUIDs everywhere else.
"""

import uuid

import uuid_utils


def new_uuid7() -> uuid.UUID:
    return uuid.UUID(str(uuid_utils.uuid7()))


def new_session_id() -> str:
    """Opaque id for anonymous checkout sessions."""
    return f'session_{uuid_utils.uuid7().hex}'
