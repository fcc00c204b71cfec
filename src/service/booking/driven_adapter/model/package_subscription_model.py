from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class PackageSubscriptionModel(Base):
    __tablename__ = 'package_subscriptions'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    tenant_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    customer_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    package_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='active')
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class PackageSubscriptionUsageModel(Base):
    __tablename__ = 'package_subscription_usage'
    __table_args__ = (
        UniqueConstraint('subscription_id', 'service_id', name='uq_usage_subscription_service'),
        CheckConstraint('remaining_quantity >= 0', name='ck_usage_remaining_non_negative'),
        CheckConstraint(
            'remaining_quantity = original_quantity - used_quantity',
            name='ck_usage_remaining_matches_used',
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subscription_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('package_subscriptions.id', ondelete='CASCADE'), nullable=False
    )
    service_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    original_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    used_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class PackageExhaustionNotificationModel(Base):
    __tablename__ = 'package_exhaustion_notifications'
    __table_args__ = (
        UniqueConstraint(
            'subscription_id', 'service_id', name='uq_exhaustion_subscription_service'
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subscription_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    service_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
