"""
Unit tests for CancelBookingUseCase

Covers precondition order, the conditional status update, the capacity guard on seat
release and the best-effort notification.
"""

from unittest.mock import AsyncMock

import pytest
import uuid_utils

from src.platform.exception.exceptions import (
    DataIntegrityError,
    DomainError,
    ForbiddenError,
    NotFoundError,
)
from src.service.ride_pool.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.ride_pool.domain.enum.booking_status import BookingStatus


@pytest.fixture
def use_case(uow_factory, notifier) -> CancelBookingUseCase:
    return CancelBookingUseCase(uow_factory=uow_factory, notifier=notifier)


@pytest.mark.unit
class TestCancelBookingUseCase:
    async def test_cancel_releases_seats_and_notifies_driver(
        self, use_case, uow, ride_command_repo, booking_command_repo, notification_sender,
        make_ride, make_booking,
    ):
        """
        Given a confirmed 2-seat booking on a ride with 2 seats left
        When the passenger cancels
        Then the booking is cancelled, 2 seats go back and the driver sees 4 available
        """
        ride = make_ride(available_seats=2)
        booking = make_booking(ride, passenger_id=2, seats_booked=2)
        ride_command_repo.get_by_id.return_value = ride
        booking_command_repo.get_by_id.return_value = booking

        cancelled = await use_case.execute(booking_id=booking.id, requester_id=2)

        assert cancelled.status == BookingStatus.CANCELLED
        booking_command_repo.update_status.assert_awaited_once_with(
            booking=cancelled, expected_status=BookingStatus.CONFIRMED
        )
        ride_command_repo.get_by_id.assert_awaited_once_with(ride_id=ride.id, for_update=True)
        ride_command_repo.release_seats.assert_awaited_once_with(ride_id=ride.id, seats=2)
        assert uow.commits == 1

        notification = notification_sender.send.await_args.kwargs['notification']
        assert notification.receiver_id == ride.driver_id
        assert 'Your ride now has 4 seats available.' in notification.text

    async def test_missing_booking_is_not_found(self, use_case, booking_command_repo):
        booking_command_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError, match='Booking not found'):
            await use_case.execute(booking_id=uuid_utils.uuid7(), requester_id=2)

    async def test_other_user_is_forbidden_even_for_cancelled_booking(
        self, use_case, ride_command_repo, booking_command_repo, make_ride, make_booking
    ):
        booking = make_booking(make_ride(), passenger_id=2, status=BookingStatus.CANCELLED)
        booking_command_repo.get_by_id.return_value = booking

        with pytest.raises(ForbiddenError):
            await use_case.execute(booking_id=booking.id, requester_id=3)

        ride_command_repo.get_by_id.assert_not_awaited()

    async def test_already_cancelled_booking_is_rejected(
        self, use_case, uow, ride_command_repo, booking_command_repo, make_ride, make_booking
    ):
        ride = make_ride(available_seats=4)
        booking = make_booking(ride, status=BookingStatus.CANCELLED)
        ride_command_repo.get_by_id.return_value = ride
        booking_command_repo.get_by_id.return_value = booking

        with pytest.raises(DomainError, match='Booking already cancelled'):
            await use_case.execute(booking_id=booking.id, requester_id=booking.passenger_id)

        ride_command_repo.release_seats.assert_not_awaited()
        assert uow.commits == 0

    async def test_completed_booking_cannot_be_cancelled(
        self, use_case, ride_command_repo, booking_command_repo, make_ride, make_booking
    ):
        ride = make_ride()
        booking = make_booking(ride, status=BookingStatus.COMPLETED)
        ride_command_repo.get_by_id.return_value = ride
        booking_command_repo.get_by_id.return_value = booking

        with pytest.raises(DomainError, match='Cannot cancel a completed booking'):
            await use_case.execute(booking_id=booking.id, requester_id=booking.passenger_id)

    async def test_concurrent_cancel_that_won_first_is_reported_as_already_cancelled(
        self, use_case, uow, ride_command_repo, booking_command_repo, make_ride, make_booking
    ):
        ride = make_ride(available_seats=2)
        booking = make_booking(ride, seats_booked=2)
        ride_command_repo.get_by_id.return_value = ride
        booking_command_repo.get_by_id.return_value = booking
        booking_command_repo.update_status.return_value = False

        with pytest.raises(DomainError, match='Booking already cancelled'):
            await use_case.execute(booking_id=booking.id, requester_id=booking.passenger_id)

        ride_command_repo.release_seats.assert_not_awaited()
        assert uow.commits == 0

    async def test_booking_gone_after_ride_lock_is_a_data_integrity_error(
        self, use_case, uow, ride_command_repo, booking_command_repo, make_ride, make_booking
    ):
        ride = make_ride(available_seats=2)
        booking = make_booking(ride, seats_booked=2)
        ride_command_repo.get_by_id.return_value = ride
        booking_command_repo.get_by_id.side_effect = [booking, None]

        with pytest.raises(DataIntegrityError, match='disappeared while cancelling'):
            await use_case.execute(booking_id=booking.id, requester_id=booking.passenger_id)

        booking_command_repo.update_status.assert_not_awaited()
        ride_command_repo.release_seats.assert_not_awaited()
        assert uow.commits == 0

    async def test_release_beyond_capacity_is_a_data_integrity_error(
        self, use_case, uow, ride_command_repo, booking_command_repo, notification_sender,
        make_ride, make_booking,
    ):
        """
        Given a ride whose counter already shows every seat free
        When a confirmed booking on it is cancelled
        Then the release is refused, nothing is clamped or committed
        """
        ride = make_ride(total_seats=4, available_seats=4)
        booking = make_booking(ride, seats_booked=2)
        ride_command_repo.get_by_id.return_value = ride
        booking_command_repo.get_by_id.return_value = booking

        with pytest.raises(DataIntegrityError):
            await use_case.execute(booking_id=booking.id, requester_id=booking.passenger_id)

        assert uow.commits == 0
        notification_sender.send.assert_not_awaited()

    async def test_conditional_release_refused_by_storage_is_a_data_integrity_error(
        self, use_case, uow, ride_command_repo, booking_command_repo, make_ride, make_booking
    ):
        ride = make_ride(available_seats=2)
        booking = make_booking(ride, seats_booked=2)
        ride_command_repo.get_by_id.return_value = ride
        booking_command_repo.get_by_id.return_value = booking
        ride_command_repo.release_seats.return_value = False

        with pytest.raises(DataIntegrityError):
            await use_case.execute(booking_id=booking.id, requester_id=booking.passenger_id)

        assert uow.commits == 0

    async def test_failing_notification_does_not_fail_the_cancel(
        self, use_case, uow, ride_command_repo, booking_command_repo, notification_sender,
        make_ride, make_booking,
    ):
        ride = make_ride(available_seats=2)
        booking = make_booking(ride, seats_booked=2)
        ride_command_repo.get_by_id.return_value = ride
        booking_command_repo.get_by_id.return_value = booking
        notification_sender.send = AsyncMock(side_effect=ConnectionError('down'))

        cancelled = await use_case.execute(booking_id=booking.id, requester_id=booking.passenger_id)

        assert cancelled.status == BookingStatus.CANCELLED
        assert uow.commits == 1
