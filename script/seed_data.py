#!/usr/bin/env python3
"""
Database Seed Script
Populate demo data into the database

Features:
1. Create Service - one tenant with one bookable service (unit price 500)
2. Create Slots - tomorrow, two employees per time window, capacity 5 each
3. Create Packages - one customer with two subscriptions (9 and 1 visits left)
"""

import asyncio
from datetime import date, time, timedelta

from sqlalchemy import func, select

from src.platform.database.orm_db_setting import get_session_maker
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.booking.driven_adapter.model import (
    PackageSubscriptionModel,
    PackageSubscriptionUsageModel,
    ServiceModel,
    SlotModel,
)


UNIT_PRICE = 500
SLOT_CAPACITY = 5
TIME_WINDOWS = [(time(9, 0), time(10, 0)), (time(10, 0), time(11, 0)), (time(14, 0), time(15, 0))]
PACKAGE_BALANCES = [9, 1]


async def _seed_data() -> None:
    tenant_id = new_uuid7()
    customer_id = new_uuid7()
    employee_ids = [new_uuid7(), new_uuid7()]
    slot_date = date.today() + timedelta(days=1)

    async with get_session_maker()() as session:
        service = ServiceModel(
            id=new_uuid7(), tenant_id=tenant_id, name='Guided Tour', base_price=UNIT_PRICE
        )
        session.add(service)

        for start_time, end_time in TIME_WINDOWS:
            for employee_id in employee_ids:
                session.add(
                    SlotModel(
                        id=new_uuid7(),
                        tenant_id=tenant_id,
                        service_id=service.id,
                        employee_id=employee_id,
                        slot_date=slot_date,
                        start_time=start_time,
                        end_time=end_time,
                        original_capacity=SLOT_CAPACITY,
                        available_capacity=SLOT_CAPACITY,
                        booked_count=0,
                        is_available=True,
                    )
                )

        for balance in PACKAGE_BALANCES:
            subscription = PackageSubscriptionModel(
                id=new_uuid7(),
                tenant_id=tenant_id,
                customer_id=customer_id,
                package_id=new_uuid7(),
                status='active',
                is_active=True,
            )
            session.add(subscription)
            await session.flush()
            session.add(
                PackageSubscriptionUsageModel(
                    subscription_id=subscription.id,
                    service_id=service.id,
                    original_quantity=balance,
                    remaining_quantity=balance,
                    used_quantity=0,
                )
            )

        await session.commit()

    print(f'   ✅ Tenant:   {tenant_id}')
    print(f'   ✅ Service:  {service.id} (unit price {UNIT_PRICE})')
    print(f'   ✅ Customer: {customer_id} (package balances {PACKAGE_BALANCES})')
    print(f'   ✅ Slots on {slot_date.isoformat()}: {len(TIME_WINDOWS) * len(employee_ids)}')


async def verify_data() -> None:
    async with get_session_maker(read_only=True)() as session:
        slot_count = await session.scalar(select(func.count()).select_from(SlotModel))
        usage_count = await session.scalar(
            select(func.count()).select_from(PackageSubscriptionUsageModel)
        )
    print(f'   📊 slots={slot_count} package_usage_rows={usage_count}')


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)
    await _seed_data()
    await verify_data()
    print('=' * 50)
    print('✅ Data seeding completed!')


if __name__ == '__main__':
    asyncio.run(main())
