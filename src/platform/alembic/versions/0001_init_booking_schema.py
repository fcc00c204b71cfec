"""init_booking_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Schema:
- slots: bookable time windows with capacity counters
- booking_locks: short lived capacity reservations (expire after 120s, never renewed)
- services: bookable services and their unit price
- package_subscriptions / package_subscription_usage: prepaid balances per service
- package_exhaustion_notifications: first time a balance reached zero
- bookings: committed bookings with the package covered / paid split
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        'created_at',
        sa.DateTime(timezone=True),
        server_default=sa.text('now()'),
        nullable=False,
    )


def upgrade() -> None:
    """Create all booking tables."""

    # ========== Catalogue ==========
    op.create_table(
        'services',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('base_price', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_services_tenant_id'), 'services', ['tenant_id'], unique=False)

    op.create_table(
        'slots',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('service_id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=True),
        sa.Column('slot_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('original_capacity', sa.Integer(), nullable=False),
        sa.Column('available_capacity', sa.Integer(), nullable=False),
        sa.Column('booked_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('is_available', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.CheckConstraint('available_capacity >= 0', name='ck_slots_available_capacity'),
        sa.CheckConstraint('booked_count >= 0', name='ck_slots_booked_count'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_slots_tenant_id'), 'slots', ['tenant_id'], unique=False)
    op.create_index('ix_slots_service_date', 'slots', ['service_id', 'slot_date'], unique=False)

    # ========== Capacity locks ==========
    op.create_table(
        'booking_locks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('slot_id', sa.Uuid(), nullable=False),
        sa.Column('reserved_by_session_id', sa.String(length=128), nullable=False),
        sa.Column('reserved_capacity', sa.Integer(), nullable=False),
        sa.Column('lock_expires_at', sa.DateTime(timezone=True), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['slot_id'], ['slots.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_booking_locks_slot_expires',
        'booking_locks',
        ['slot_id', 'lock_expires_at'],
        unique=False,
    )

    # ========== Packages ==========
    op.create_table(
        'package_subscriptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('package_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_package_subscriptions_tenant_id'),
        'package_subscriptions',
        ['tenant_id'],
        unique=False,
    )
    op.create_index(
        op.f('ix_package_subscriptions_customer_id'),
        'package_subscriptions',
        ['customer_id'],
        unique=False,
    )

    op.create_table(
        'package_subscription_usage',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('subscription_id', sa.Uuid(), nullable=False),
        sa.Column('service_id', sa.Uuid(), nullable=False),
        sa.Column('original_quantity', sa.Integer(), nullable=False),
        sa.Column('remaining_quantity', sa.Integer(), nullable=False),
        sa.Column('used_quantity', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.CheckConstraint('remaining_quantity >= 0', name='ck_usage_remaining_non_negative'),
        sa.CheckConstraint(
            'remaining_quantity = original_quantity - used_quantity',
            name='ck_usage_remaining_matches_used',
        ),
        sa.ForeignKeyConstraint(
            ['subscription_id'], ['package_subscriptions.id'], ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'subscription_id', 'service_id', name='uq_usage_subscription_service'
        ),
    )

    op.create_table(
        'package_exhaustion_notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('subscription_id', sa.Uuid(), nullable=False),
        sa.Column('service_id', sa.Uuid(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'subscription_id', 'service_id', name='uq_exhaustion_subscription_service'
        ),
    )

    # ========== Bookings ==========
    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('service_id', sa.Uuid(), nullable=False),
        sa.Column('slot_id', sa.Uuid(), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=50), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('visitor_count', sa.Integer(), nullable=False),
        sa.Column('adult_count', sa.Integer(), nullable=False),
        sa.Column('child_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('package_subscription_id', sa.Uuid(), nullable=True),
        sa.Column(
            'package_covered_quantity', sa.Integer(), server_default=sa.text('0'), nullable=False
        ),
        sa.Column('paid_quantity', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column(
            'payment_status', sa.String(length=20), server_default='unpaid', nullable=False
        ),
        sa.Column('booking_group_id', sa.Uuid(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            'package_covered_quantity + paid_quantity = visitor_count',
            name='ck_bookings_quantity_split',
        ),
        sa.CheckConstraint('package_covered_quantity >= 0', name='ck_bookings_covered'),
        sa.CheckConstraint('paid_quantity >= 0', name='ck_bookings_paid'),
        sa.ForeignKeyConstraint(['slot_id'], ['slots.id']),
        sa.ForeignKeyConstraint(['package_subscription_id'], ['package_subscriptions.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_bookings_tenant_id'), 'bookings', ['tenant_id'], unique=False)
    op.create_index(op.f('ix_bookings_slot_id'), 'bookings', ['slot_id'], unique=False)
    op.create_index(op.f('ix_bookings_customer_id'), 'bookings', ['customer_id'], unique=False)
    op.create_index(
        op.f('ix_bookings_booking_group_id'), 'bookings', ['booking_group_id'], unique=False
    )


def downgrade() -> None:
    """Drop all booking tables."""
    op.drop_table('bookings')
    op.drop_table('package_exhaustion_notifications')
    op.drop_table('package_subscription_usage')
    op.drop_table('package_subscriptions')
    op.drop_table('booking_locks')
    op.drop_table('slots')
    op.drop_table('services')
