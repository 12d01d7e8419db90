"""
Test Configuration and Fixtures

This module provides:
- Environment setup that must happen before application modules read settings
- A fresh SQLite database (aiosqlite) per test for integration tests
- Repository / Unit of Work / notifier fixtures wired to that database
- A TestClient running the real app factory against that database

Architecture:
- Unit tests (test/**/unit/): pure, collaborators replaced by AsyncMock
- Integration tests (test/**/integration/): real SQLAlchemy on a temporary SQLite file
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time (src.platform.config.core_setting.settings)
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Default database for anything that reaches the DI container without an override
    default_db = Path(tempfile.gettempdir()) / f'ride_pool_test_{os.getpid()}.db'
    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{default_db}'

    os.environ['SECRET_KEY'] = 'ride_pool_test_secret_key_with_enough_length'
    os.environ['DEBUG'] = 'false'
    os.environ['NOTIFICATION_TIMEZONE'] = 'Asia/Kolkata'
    os.environ['CURRENCY_SYMBOL'] = '₹'
    os.environ['RIDE_CANCEL_RETRY_BACKOFF_SECONDS'] = '0'


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import AsyncGenerator, Callable, Generator  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any, AsyncIterator  # noqa: E402

from dependency_injector import providers  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.app_factory import create_app  # noqa: E402
from src.platform.config.di import container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.orm_db_setting import Database  # noqa: E402
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork  # noqa: E402
from src.service.ride_pool.app.service.best_effort_notifier import BestEffortNotifier  # noqa: E402
from src.service.ride_pool.driven_adapter.model import (  # noqa: E402, F401
    booking_model,
    ride_message_model,
    ride_model,
)
from src.service.ride_pool.driven_adapter.notification.ride_message_notification_sender_impl import (  # noqa: E402
    RideMessageNotificationSenderImpl,
)
from src.service.ride_pool.driven_adapter.repo.booking_query_repo_impl import (  # noqa: E402
    BookingQueryRepoImpl,
)
from src.service.ride_pool.driven_adapter.repo.ride_message_repo_impl import (  # noqa: E402
    RideMessageRepoImpl,
)
from src.service.ride_pool.driven_adapter.repo.ride_query_repo_impl import (  # noqa: E402
    RideQueryRepoImpl,
)
from src.service.ride_pool.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)


DRIVER_ID = 1
PASSENGER_A_ID = 2
PASSENGER_B_ID = 3


def _sqlite_url(path: Path) -> str:
    return f'sqlite+aiosqlite:///{path}'


# =============================================================================
# Database fixtures (integration tests)
# =============================================================================
@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Fresh SQLite file per test, schema created from the ORM metadata."""
    db = Database(url=_sqlite_url(tmp_path / 'ride_pool.db'))
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> Callable[[], SqlAlchemyUnitOfWork]:
    return lambda: SqlAlchemyUnitOfWork(session_maker=database.session_maker)


@pytest.fixture
def ride_query_repo(database: Database) -> RideQueryRepoImpl:
    return RideQueryRepoImpl(session_factory=database.session)


@pytest.fixture
def booking_query_repo(database: Database) -> BookingQueryRepoImpl:
    return BookingQueryRepoImpl(session_factory=database.session)


@pytest.fixture
def ride_message_repo(database: Database) -> RideMessageRepoImpl:
    return RideMessageRepoImpl(session_factory=database.session)


@pytest.fixture
def notifier(ride_message_repo: RideMessageRepoImpl) -> BestEffortNotifier:
    return BestEffortNotifier(
        notification_sender=RideMessageNotificationSenderImpl(message_repo=ride_message_repo)
    )


@pytest.fixture
def ride_params() -> Callable[..., dict[str, Any]]:
    """Keyword arguments for CreateRideUseCase.create_ride, overridable per test."""

    def _build(**overrides: Any) -> dict[str, Any]:
        pickup_time = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=2)
        params: dict[str, Any] = {
            'driver_id': DRIVER_ID,
            'pickup_address': 'Koramangala',
            'drop_address': 'Whitefield',
            'pickup_time': pickup_time,
            'total_seats': 4,
            'price_per_seat': 100,
        }
        params.update(overrides)
        return params

    return _build


# =============================================================================
# HTTP fixtures
# =============================================================================
@pytest.fixture
def client(tmp_path: Path) -> Generator[TestClient, None, None]:
    """
    TestClient over the real app factory.

    The lifespan runs on the TestClient's own event loop, so the database engine is created,
    used and disposed on that loop only.
    """
    test_database = Database(url=_sqlite_url(tmp_path / 'ride_pool_api.db'))
    container.database.override(providers.Object(test_database))
    container.reset_singletons()

    @asynccontextmanager
    async def lifespan_for_tests(_app: FastAPI) -> AsyncIterator[None]:
        container.wire(modules=WIRE_MODULES)
        await test_database.create_tables()
        yield
        await test_database.dispose()
        container.unwire()

    app = create_app(lifespan=lifespan_for_tests, title_suffix=' (Test)')
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    container.database.reset_override()
    container.reset_singletons()


@pytest.fixture
def auth_headers() -> Callable[[int], dict[str, str]]:
    jwt_auth = JwtAuth()

    def _headers(user_id: int) -> dict[str, str]:
        return {'Authorization': f'Bearer {jwt_auth.create_jwt_token(user_id)}'}

    return _headers
