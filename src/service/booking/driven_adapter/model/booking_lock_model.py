from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class BookingLockModel(Base):
    __tablename__ = 'booking_locks'
    __table_args__ = (Index('ix_booking_locks_slot_expires', 'slot_id', 'lock_expires_at'),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    slot_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('slots.id', ondelete='CASCADE'), nullable=False
    )
    reserved_by_session_id: Mapped[str] = mapped_column(String(128), nullable=False)
    reserved_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    lock_expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
