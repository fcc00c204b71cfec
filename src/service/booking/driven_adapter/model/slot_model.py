from datetime import date, time
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Date, Index, Integer, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class SlotModel(Base):
    __tablename__ = 'slots'
    __table_args__ = (
        CheckConstraint('available_capacity >= 0', name='ck_slots_available_capacity'),
        CheckConstraint('booked_count >= 0', name='ck_slots_booked_count'),
        Index('ix_slots_service_date', 'service_id', 'slot_date'),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    tenant_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    service_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    employee_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    slot_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    original_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    available_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    booked_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
