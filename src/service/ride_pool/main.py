"""
Ride Pool Service - Main Application
Handles ride publishing, seat bookings and ride messages.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig

# Models must be registered on Base.metadata before create_all
from src.service.ride_pool.driven_adapter.model import (  # noqa: F401
    booking_model,
    ride_message_model,
    ride_model,
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan: startup and shutdown"""
    Logger.base.info('🚀 [Ride Pool Service] Starting up...')

    tracing = TracingConfig(service_name=settings.SERVICE_NAME)
    tracing.setup()
    Logger.base.info('📊 [Ride Pool Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Ride Pool Service] Dependency injection wired')

    database = container.database()
    if settings.AUTO_CREATE_TABLES:
        await database.create_tables()

    tracing.instrument_sqlalchemy(engine=database.engine)
    Logger.base.info('📊 [Ride Pool Service] SQLAlchemy instrumentation configured')

    Logger.base.info('✅ [Ride Pool Service] Startup complete')

    yield

    Logger.base.info('🛑 [Ride Pool Service] Shutting down...')

    await database.dispose()

    # Flush remaining spans
    tracing.shutdown()
    Logger.base.info('📊 [Ride Pool Service] Tracing shutdown complete')

    container.unwire()

    Logger.base.info('👋 [Ride Pool Service] Shutdown complete')


app = create_app(lifespan=lifespan)
