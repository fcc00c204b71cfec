from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class BookingModel(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        CheckConstraint(
            'package_covered_quantity + paid_quantity = visitor_count',
            name='ck_bookings_quantity_split',
        ),
        CheckConstraint('package_covered_quantity >= 0', name='ck_bookings_covered'),
        CheckConstraint('paid_quantity >= 0', name='ck_bookings_paid'),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    tenant_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    service_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    slot_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('slots.id'), nullable=False, index=True)
    customer_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    visitor_count: Mapped[int] = mapped_column(Integer, nullable=False)
    adult_count: Mapped[int] = mapped_column(Integer, nullable=False)
    child_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    package_subscription_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey('package_subscriptions.id'), nullable=True
    )
    package_covered_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    paid_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default='unpaid')
    booking_group_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
