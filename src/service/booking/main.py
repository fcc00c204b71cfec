"""
Booking Service - Main Application
Handles capacity locks, booking commits, slot availability and package balances.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import (
    create_db_and_tables,
    engine_manager,
    get_engine,
)
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


SERVICE_NAME = 'booking-service'


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan: startup and shutdown"""
    Logger.base.info('🚀 [Booking Service] Starting up...')

    tracing = TracingConfig(service_name=SERVICE_NAME)
    tracing.setup()
    tracing.instrument_sqlalchemy(engine=get_engine())
    Logger.base.info('📊 [Booking Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Booking Service] Dependency injection wired')

    if settings.DEBUG:
        # Production schema is owned by alembic migrations
        await create_db_and_tables()
        Logger.base.info('🗄️ [Booking Service] Database tables ensured')

    Logger.base.info('✅ [Booking Service] Startup complete')

    yield

    Logger.base.info('🛑 [Booking Service] Shutting down...')

    await engine_manager.dispose()
    Logger.base.info('🗄️ [Booking Service] Database engines disposed')

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [Booking Service] Shutdown complete')


app = create_app(lifespan=lifespan, service_name=SERVICE_NAME)
