"""
Integration tests for the seat ledger

Real SQLAlchemy Unit of Work on a temporary SQLite file. Covers the end-to-end booking
scenario, concurrent bookings against the seat counter, the ride cancellation cascade
(including rollback and retry) and the seat reconciliation audit.
"""

import asyncio

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    TransientStorageError,
)
from src.service.ride_pool.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.ride_pool.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.ride_pool.app.command.create_ride_use_case import CreateRideUseCase
from src.service.ride_pool.app.command.update_ride_status_use_case import (
    UpdateRideStatusUseCase,
)
from src.service.ride_pool.app.query.audit_ride_seats_use_case import AuditRideSeatsUseCase
from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.domain.enum.ride_status import RideStatus
from src.service.ride_pool.driven_adapter.model.entity_mapper import to_db_uuid
from src.service.ride_pool.driven_adapter.model.ride_model import RideModel


class FailingCascadeUnitOfWork(SqlAlchemyUnitOfWork):
    """Raises a storage error on the bookings write, after the ride status was written."""

    def __init__(self, session_maker, failures: list) -> None:
        super().__init__(session_maker)
        self.failures = failures

    async def __aenter__(self) -> 'FailingCascadeUnitOfWork':
        await super().__aenter__()
        if self.failures:
            self.failures.pop()

            async def _fail(*, bookings, expected_status):
                raise OperationalError('UPDATE booking', {}, Exception('database is locked'))

            self.booking_command_repo.update_status_bulk = _fail  # type: ignore[method-assign]
        return self


class InterleavedBookingUnitOfWork(SqlAlchemyUnitOfWork):
    """Runs `on_ride_read` or `on_bookings_read` right after the cascade's matching read."""

    def __init__(self, session_maker, *, on_ride_read=None, on_bookings_read=None) -> None:
        super().__init__(session_maker)
        self.on_ride_read = on_ride_read
        self.on_bookings_read = on_bookings_read

    async def __aenter__(self) -> 'InterleavedBookingUnitOfWork':
        await super().__aenter__()
        get_ride = self.ride_command_repo.get_by_id
        list_bookings = self.booking_command_repo.list_by_ride_and_status

        async def _get_ride(**kwargs):
            ride = await get_ride(**kwargs)
            if self.on_ride_read:
                await self.on_ride_read()
            return ride

        async def _list_bookings(**kwargs):
            bookings = await list_bookings(**kwargs)
            if self.on_bookings_read:
                await self.on_bookings_read()
            return bookings

        self.ride_command_repo.get_by_id = _get_ride  # type: ignore[method-assign]
        self.booking_command_repo.list_by_ride_and_status = (  # type: ignore[method-assign]
            _list_bookings
        )
        return self


@pytest.fixture
def create_ride(uow_factory):
    return CreateRideUseCase(uow_factory=uow_factory).create_ride


@pytest.fixture
def booking_use_case(uow_factory, notifier) -> CreateBookingUseCase:
    return CreateBookingUseCase(uow_factory=uow_factory, notifier=notifier)


@pytest.fixture
def cancel_use_case(uow_factory, notifier) -> CancelBookingUseCase:
    return CancelBookingUseCase(uow_factory=uow_factory, notifier=notifier)


@pytest.fixture
def ride_status_use_case(uow_factory, notifier) -> UpdateRideStatusUseCase:
    return UpdateRideStatusUseCase(
        uow_factory=uow_factory, notifier=notifier, max_attempts=3, retry_backoff_seconds=0
    )


@pytest.fixture
def audit(booking_query_repo) -> AuditRideSeatsUseCase:
    return AuditRideSeatsUseCase(booking_query_repo)


@pytest.mark.integration
class TestBookingLifecycle:
    async def test_book_reject_cancel_and_cascade(
        self,
        create_ride,
        booking_use_case,
        cancel_use_case,
        ride_status_use_case,
        ride_query_repo,
        booking_query_repo,
        ride_message_repo,
        audit,
        ride_params,
    ):
        """
        Given a ride with 4 seats at 100 per seat
        When A books 2, B asks for 3, A cancels, B books 1 and the driver cancels the ride
        Then every seat count, booking status and message matches the ledger
        """
        ride = await create_ride(**ride_params(total_seats=4, price_per_seat=100))

        booking_a = await booking_use_case.create_booking(
            passenger_id=2, ride_id=ride.id, seats_booked=2
        )
        assert booking_a.total_price == 200
        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).available_seats == 2

        with pytest.raises(DomainError, match='Not enough seats available'):
            await booking_use_case.create_booking(
                passenger_id=3, ride_id=ride.id, seats_booked=3
            )
        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).available_seats == 2

        await cancel_use_case.execute(booking_id=booking_a.id, requester_id=2)
        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).available_seats == 4
        assert await audit.audit() == []

        booking_b = await booking_use_case.create_booking(
            passenger_id=3, ride_id=ride.id, seats_booked=1
        )
        cancelled_ride = await ride_status_use_case.cancel_ride(
            ride_id=ride.id, requester_id=1, reason='Car broke down'
        )

        stored_ride = await ride_query_repo.get_by_id(ride_id=ride.id)
        assert cancelled_ride.status == stored_ride.status == RideStatus.CANCELLED
        assert stored_ride.cancellation_reason == 'Car broke down'
        # seats are not restored on ride cancellation
        assert stored_ride.available_seats == 3

        statuses = {
            b.id: b.status for b in await booking_query_repo.list_by_ride(ride_id=ride.id)
        }
        assert statuses == {
            booking_a.id: BookingStatus.CANCELLED,
            booking_b.id: BookingStatus.CANCELLED,
        }

        to_driver = await ride_message_repo.list_conversation(user_id=1, partner_id=2)
        assert [m.message.splitlines()[0] for m in to_driver] == [
            '🎉 New Booking!',
            '🚫 Booking Cancelled',
        ]
        to_passenger_b = await ride_message_repo.list_conversation(user_id=3, partner_id=1)
        assert to_passenger_b[-1].sender_id == 1
        assert to_passenger_b[-1].message.startswith('🚫 Ride Cancelled')
        assert 'Reason: Car broke down' in to_passenger_b[-1].message

    async def test_booking_price_is_fixed_at_booking_time(
        self, create_ride, booking_use_case, booking_query_repo, database, ride_params
    ):
        ride = await create_ride(**ride_params(price_per_seat=100))
        booking = await booking_use_case.create_booking(
            passenger_id=2, ride_id=ride.id, seats_booked=2
        )

        async with database.session() as session:
            await session.execute(
                update(RideModel)
                .where(RideModel.id == to_db_uuid(ride.id))
                .values(price_per_seat=250)
            )
            await session.commit()

        [stored] = await booking_query_repo.list_by_ride(ride_id=ride.id)
        assert stored.id == booking.id
        assert stored.total_price == 200

    async def test_passenger_can_book_again_after_cancelling(
        self, create_ride, booking_use_case, cancel_use_case, booking_query_repo, ride_params
    ):
        ride = await create_ride(**ride_params())
        first = await booking_use_case.create_booking(
            passenger_id=2, ride_id=ride.id, seats_booked=1
        )
        await cancel_use_case.execute(booking_id=first.id, requester_id=2)

        second = await booking_use_case.create_booking(
            passenger_id=2, ride_id=ride.id, seats_booked=2
        )

        assert second.id != first.id
        assert len(await booking_query_repo.list_by_ride(ride_id=ride.id)) == 2

    async def test_duplicate_active_booking_is_a_conflict(
        self, create_ride, booking_use_case, ride_query_repo, ride_params
    ):
        ride = await create_ride(**ride_params())
        await booking_use_case.create_booking(passenger_id=2, ride_id=ride.id, seats_booked=1)

        with pytest.raises(ConflictError):
            await booking_use_case.create_booking(
                passenger_id=2, ride_id=ride.id, seats_booked=1
            )

        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).available_seats == 3

    async def test_cancelling_twice_is_rejected(
        self, create_ride, booking_use_case, cancel_use_case, ride_query_repo, ride_params
    ):
        ride = await create_ride(**ride_params())
        booking = await booking_use_case.create_booking(
            passenger_id=2, ride_id=ride.id, seats_booked=2
        )
        await cancel_use_case.execute(booking_id=booking.id, requester_id=2)

        with pytest.raises(DomainError, match='Booking already cancelled'):
            await cancel_use_case.execute(booking_id=booking.id, requester_id=2)

        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).available_seats == 4


@pytest.mark.integration
class TestConcurrentBookings:
    async def test_parallel_bookings_never_oversell(
        self, create_ride, booking_use_case, ride_query_repo, booking_query_repo, audit,
        ride_params,
    ):
        """
        Given a ride with 3 seats
        When 6 passengers each book 1 seat at the same time
        Then exactly 3 bookings succeed and the ride is full
        """
        ride = await create_ride(**ride_params(total_seats=3))

        results = await asyncio.gather(
            *(
                booking_use_case.create_booking(
                    passenger_id=passenger_id, ride_id=ride.id, seats_booked=1
                )
                for passenger_id in range(10, 16)
            ),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, BaseException)]
        failed = [r for r in results if isinstance(r, BaseException)]
        assert len(succeeded) == 3
        assert all(isinstance(e, DomainError) for e in failed)
        assert all(e.message == 'Not enough seats available' for e in failed)

        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).available_seats == 0
        assert len(await booking_query_repo.list_by_ride(ride_id=ride.id)) == 3
        assert await audit.audit() == []

    async def test_parallel_duplicate_bookings_leave_one_active(
        self, create_ride, booking_use_case, ride_query_repo, booking_query_repo, audit,
        ride_params,
    ):
        ride = await create_ride(**ride_params(total_seats=4))

        results = await asyncio.gather(
            booking_use_case.create_booking(passenger_id=2, ride_id=ride.id, seats_booked=1),
            booking_use_case.create_booking(passenger_id=2, ride_id=ride.id, seats_booked=1),
            return_exceptions=True,
        )

        assert sum(not isinstance(r, BaseException) for r in results) == 1
        assert sum(isinstance(r, ConflictError) for r in results) == 1
        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).available_seats == 3
        assert len(await booking_query_repo.list_by_ride(ride_id=ride.id)) == 1
        assert await audit.audit() == []


@pytest.mark.integration
class TestRideCancellationCascade:
    async def test_failed_cascade_rolls_back_everything(
        self, database, create_ride, booking_use_case, notifier, ride_query_repo,
        booking_query_repo, ride_message_repo, ride_params,
    ):
        """
        Given a ride with a confirmed booking
        When every attempt to write the bookings fails
        Then the ride stays open and the booking stays confirmed
        """
        ride = await create_ride(**ride_params())
        booking = await booking_use_case.create_booking(
            passenger_id=2, ride_id=ride.id, seats_booked=2
        )
        failures = [1, 1]
        use_case = UpdateRideStatusUseCase(
            uow_factory=lambda: FailingCascadeUnitOfWork(database.session_maker, failures),
            notifier=notifier,
            max_attempts=2,
            retry_backoff_seconds=0,
        )

        with pytest.raises(TransientStorageError):
            await use_case.cancel_ride(ride_id=ride.id, requester_id=1, reason='Flat tyre')

        stored_ride = await ride_query_repo.get_by_id(ride_id=ride.id)
        assert stored_ride.status == RideStatus.AVAILABLE
        assert stored_ride.cancellation_reason is None
        [stored_booking] = await booking_query_repo.list_by_ride(ride_id=ride.id)
        assert stored_booking.id == booking.id
        assert stored_booking.status == BookingStatus.CONFIRMED

        to_passenger = await ride_message_repo.list_conversation(user_id=2, partner_id=1)
        assert all(m.sender_id == 2 for m in to_passenger)

    async def test_transient_failure_is_retried(
        self, database, create_ride, booking_use_case, notifier, ride_query_repo,
        booking_query_repo, ride_params,
    ):
        ride = await create_ride(**ride_params())
        await booking_use_case.create_booking(passenger_id=2, ride_id=ride.id, seats_booked=2)
        failures = [1]
        use_case = UpdateRideStatusUseCase(
            uow_factory=lambda: FailingCascadeUnitOfWork(database.session_maker, failures),
            notifier=notifier,
            max_attempts=3,
            retry_backoff_seconds=0,
        )

        cancelled = await use_case.cancel_ride(ride_id=ride.id, requester_id=1)

        assert cancelled.status == RideStatus.CANCELLED
        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).status == RideStatus.CANCELLED
        [stored_booking] = await booking_query_repo.list_by_ride(ride_id=ride.id)
        assert stored_booking.status == BookingStatus.CANCELLED

    async def test_booking_committed_after_ride_read_is_cancelled_too(
        self, database, create_ride, booking_use_case, notifier, booking_query_repo,
        ride_params,
    ):
        """
        Given a cancellation that has read the ride but not written it yet
        When a passenger books the ride on another connection and commits
        Then the cascade cancels that booking as well
        """
        ride = await create_ride(**ride_params())
        late_bookings = []

        async def _book_once():
            if not late_bookings:
                late_bookings.append(
                    await booking_use_case.create_booking(
                        passenger_id=7, ride_id=ride.id, seats_booked=1
                    )
                )

        use_case = UpdateRideStatusUseCase(
            uow_factory=lambda: InterleavedBookingUnitOfWork(
                database.session_maker, on_ride_read=_book_once
            ),
            notifier=notifier,
            max_attempts=3,
            retry_backoff_seconds=0,
        )

        await use_case.cancel_ride(ride_id=ride.id, requester_id=1)

        [late_booking] = late_bookings
        [stored_booking] = await booking_query_repo.list_by_ride(ride_id=ride.id)
        assert stored_booking.id == late_booking.id
        assert stored_booking.status == BookingStatus.CANCELLED

    async def test_booking_started_during_cascade_is_rejected(
        self, database, create_ride, booking_use_case, notifier, ride_query_repo,
        booking_query_repo, audit, ride_params,
    ):
        """
        Given a cancellation that has already read the ride's confirmed bookings
        When a passenger starts booking the ride on another connection
        Then the booking is rejected and the cancelled ride has no confirmed booking
        """
        ride = await create_ride(**ride_params())
        late_bookings = []

        async def _start_booking():
            late_bookings.append(
                asyncio.create_task(
                    booking_use_case.create_booking(
                        passenger_id=7, ride_id=ride.id, seats_booked=1
                    )
                )
            )
            # let the booking reach the ride row before the cascade commits
            await asyncio.sleep(0.1)

        use_case = UpdateRideStatusUseCase(
            uow_factory=lambda: InterleavedBookingUnitOfWork(
                database.session_maker, on_bookings_read=_start_booking
            ),
            notifier=notifier,
            max_attempts=1,
            retry_backoff_seconds=0,
        )

        cancelled = await use_case.cancel_ride(ride_id=ride.id, requester_id=1)
        [late_result] = await asyncio.gather(*late_bookings, return_exceptions=True)

        assert cancelled.status == RideStatus.CANCELLED
        assert isinstance(late_result, DomainError)
        assert (await ride_query_repo.get_by_id(ride_id=ride.id)).status == RideStatus.CANCELLED
        assert await booking_query_repo.list_by_ride(ride_id=ride.id) == []
        assert await audit.audit() == []

    async def test_completing_ride_completes_confirmed_bookings(
        self, create_ride, booking_use_case, cancel_use_case, ride_status_use_case,
        booking_query_repo, ride_params,
    ):
        ride = await create_ride(**ride_params())
        kept = await booking_use_case.create_booking(
            passenger_id=2, ride_id=ride.id, seats_booked=1
        )
        dropped = await booking_use_case.create_booking(
            passenger_id=3, ride_id=ride.id, seats_booked=1
        )
        await cancel_use_case.execute(booking_id=dropped.id, requester_id=3)

        await ride_status_use_case.update_status(
            ride_id=ride.id, requester_id=1, status=RideStatus.ACTIVE
        )
        await ride_status_use_case.update_status(
            ride_id=ride.id, requester_id=1, status=RideStatus.COMPLETED
        )

        statuses = {
            b.id: b.status for b in await booking_query_repo.list_by_ride(ride_id=ride.id)
        }
        assert statuses == {
            kept.id: BookingStatus.COMPLETED,
            dropped.id: BookingStatus.CANCELLED,
        }

    async def test_active_ride_no_longer_accepts_bookings(
        self, create_ride, booking_use_case, ride_status_use_case, ride_params
    ):
        ride = await create_ride(**ride_params())
        await ride_status_use_case.update_status(
            ride_id=ride.id, requester_id=1, status=RideStatus.ACTIVE
        )

        with pytest.raises(DomainError, match='Ride is not available for booking'):
            await booking_use_case.create_booking(
                passenger_id=2, ride_id=ride.id, seats_booked=1
            )


@pytest.mark.integration
class TestSeatAudit:
    async def test_corrupted_counter_is_reported(
        self, create_ride, booking_use_case, audit, database, ride_params
    ):
        ride = await create_ride(**ride_params(total_seats=4))
        await booking_use_case.create_booking(passenger_id=2, ride_id=ride.id, seats_booked=2)

        async with database.session() as session:
            await session.execute(
                update(RideModel)
                .where(RideModel.id == to_db_uuid(ride.id))
                .values(available_seats=1)
            )
            await session.commit()

        [discrepancy] = await audit.audit()
        assert discrepancy.ride_id == ride.id
        assert discrepancy.booked_seats == 2
        assert discrepancy.expected_available == 2
        assert discrepancy.actual_available == 1

    async def test_cancelled_rides_are_not_audited(
        self, create_ride, booking_use_case, ride_status_use_case, audit, ride_params
    ):
        ride = await create_ride(**ride_params(total_seats=4))
        await booking_use_case.create_booking(passenger_id=2, ride_id=ride.id, seats_booked=2)

        await ride_status_use_case.cancel_ride(ride_id=ride.id, requester_id=1)

        assert await audit.audit() == []
