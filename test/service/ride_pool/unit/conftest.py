"""
Unit test configuration for the ride pool service.

Ledger use cases receive a Unit of Work whose repositories are AsyncMocks, so every flow
can be driven without a database.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest
import uuid_utils

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.ride_pool.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ride_pool.app.interface.i_notification_sender import INotificationSender
from src.service.ride_pool.app.interface.i_ride_command_repo import IRideCommandRepo
from src.service.ride_pool.app.service.best_effort_notifier import BestEffortNotifier
from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.entity.ride_entity import Ride
from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.domain.enum.ride_status import RideStatus, VehicleType


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(
        self, *, ride_command_repo: IRideCommandRepo, booking_command_repo: IBookingCommandRepo
    ) -> None:
        self.ride_command_repo = ride_command_repo
        self.booking_command_repo = booking_command_repo
        self.commits = 0
        self.rollbacks = 0

    async def _commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


@pytest.fixture
def ride_command_repo() -> AsyncMock:
    repo = AsyncMock(spec=IRideCommandRepo)
    repo.reserve_seats.return_value = True
    repo.release_seats.return_value = True
    repo.update_status.return_value = True
    return repo


@pytest.fixture
def booking_command_repo() -> AsyncMock:
    repo = AsyncMock(spec=IBookingCommandRepo)
    repo.find_active.return_value = None
    repo.create.side_effect = lambda *, booking: booking
    repo.update_status.return_value = True
    repo.update_status_bulk.side_effect = lambda *, bookings, expected_status: len(bookings)
    repo.list_by_ride_and_status.return_value = []
    return repo


@pytest.fixture
def uow(ride_command_repo: AsyncMock, booking_command_repo: AsyncMock) -> FakeUnitOfWork:
    return FakeUnitOfWork(
        ride_command_repo=ride_command_repo, booking_command_repo=booking_command_repo
    )


@pytest.fixture
def uow_factory(uow: FakeUnitOfWork) -> Callable[[], FakeUnitOfWork]:
    return lambda: uow


@pytest.fixture
def notification_sender() -> AsyncMock:
    return AsyncMock(spec=INotificationSender)


@pytest.fixture
def notifier(notification_sender: AsyncMock) -> BestEffortNotifier:
    return BestEffortNotifier(notification_sender=notification_sender)


@pytest.fixture
def make_ride() -> Callable[..., Ride]:
    def _make(**overrides: Any) -> Ride:
        now = datetime.now(timezone.utc)
        fields: dict[str, Any] = {
            'id': uuid_utils.uuid7(),
            'driver_id': 1,
            'pickup_address': 'Koramangala',
            'drop_address': 'Whitefield',
            'pickup_time': datetime(2026, 10, 20, 3, 0, tzinfo=timezone.utc),
            'expected_drop_time': None,
            'total_seats': 4,
            'available_seats': 4,
            'price_per_seat': 100,
            'vehicle_type': VehicleType.CAR,
            'status': RideStatus.AVAILABLE,
            'created_at': now - timedelta(hours=1),
            'updated_at': now - timedelta(hours=1),
        }
        fields.update(overrides)
        return Ride(**fields)

    return _make


@pytest.fixture
def make_booking() -> Callable[..., Booking]:
    def _make(ride: Ride, **overrides: Any) -> Booking:
        seats_booked = overrides.pop('seats_booked', 2)
        fields: dict[str, Any] = {
            'id': uuid_utils.uuid7(),
            'ride_id': ride.id,
            'passenger_id': 2,
            'seats_booked': seats_booked,
            'total_price': seats_booked * ride.price_per_seat,
            'status': BookingStatus.CONFIRMED,
            'booked_at': datetime.now(timezone.utc),
        }
        fields.update(overrides)
        return Booking(**fields)

    return _make
