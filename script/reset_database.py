#!/usr/bin/env python3
"""
Database Reset Script

Two modes:
- default: drop the booking database, recreate it and migrate to alembic head
- --truncate: keep the schema, empty every booking table (locks included)

Demo data is a separate step: `python script/seed_data.py`
"""

import argparse
import asyncio

from alembic import command
from alembic.config import Config
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine

from src.platform.config.core_setting import settings
from src.platform.constant.path import ALEMBIC_INI, BASE_DIR


# Every table the booking schema owns
BOOKING_TABLES = (
    'booking_locks',
    'bookings',
    'package_exhaustion_notifications',
    'package_subscription_usage',
    'package_subscriptions',
    'slots',
    'services',
)


async def _recreate_database() -> None:
    url = make_url(settings.DATABASE_URL_ASYNC)
    db_name = url.database
    admin_engine = create_async_engine(
        url.set(database='postgres'), isolation_level='AUTOCOMMIT'
    )
    try:
        async with admin_engine.connect() as conn:
            # Open pools (a running granian worker) would block DROP DATABASE
            await conn.execute(
                text(
                    'SELECT pg_terminate_backend(pid) FROM pg_stat_activity '
                    'WHERE datname = :db_name AND pid <> pg_backend_pid()'
                ),
                {'db_name': db_name},
            )
            await conn.execute(text(f'DROP DATABASE IF EXISTS "{db_name}"'))
            await conn.execute(text(f'CREATE DATABASE "{db_name}"'))
        print(f"   ✅ Database '{db_name}' recreated")
    finally:
        await admin_engine.dispose()


async def _truncate_booking_tables() -> None:
    engine = create_async_engine(settings.DATABASE_URL_ASYNC)
    try:
        async with engine.begin() as conn:
            await conn.execute(
                text(f'TRUNCATE {", ".join(BOOKING_TABLES)} RESTART IDENTITY CASCADE')
            )
        print(f'   ✅ Truncated {len(BOOKING_TABLES)} tables')
    finally:
        await engine.dispose()


def _upgrade_to_head() -> None:
    # env.py runs its own event loop, so this must be called outside asyncio.run
    config = Config(str(ALEMBIC_INI))
    config.set_main_option('script_location', str(BASE_DIR / 'src' / 'platform' / 'alembic'))
    command.upgrade(config, 'head')
    print('   ✅ Migrated to head')


def main() -> None:
    parser = argparse.ArgumentParser(description='Reset the booking database')
    parser.add_argument(
        '--truncate',
        action='store_true',
        help='empty the booking tables instead of dropping the database',
    )
    args = parser.parse_args()

    try:
        if args.truncate:
            print('🧹 Truncating booking tables...')
            asyncio.run(_truncate_booking_tables())
        else:
            print('🗑️ Recreating database...')
            asyncio.run(_recreate_database())
            print('🏗️ Running migrations...')
            _upgrade_to_head()
    except Exception as e:
        print(f'❌ Reset failed: {e}')
        raise SystemExit(1) from e

    print('💡 Seed demo data with: python script/seed_data.py')


if __name__ == '__main__':
    main()
