"""
Ride notifications - the in-app messages the ledger sends after a committed change.

Texts are built inside the transaction (from the committed state) and delivered afterwards,
so a notification always describes something that actually happened.
"""

from datetime import datetime
from typing import Optional
import zoneinfo

import attrs
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.entity.ride_entity import Ride


@attrs.frozen
class RideNotification:
    ride_id: UUID
    sender_id: int
    receiver_id: int
    text: str


def format_schedule(moment: datetime, *, tz_name: Optional[str] = None) -> str:
    """'16 Oct 2026 at 09:30 AM' in the notification timezone"""
    local = moment.astimezone(zoneinfo.ZoneInfo(tz_name or settings.NOTIFICATION_TIMEZONE))
    return f'{local.strftime("%d %b %Y")} at {local.strftime("%I:%M %p")}'


def _money(amount: int) -> str:
    return f'{settings.CURRENCY_SYMBOL}{amount}'


def booking_created_notice(*, ride: Ride, booking: Booking) -> RideNotification:
    text = (
        '🎉 New Booking!\n\n'
        f'A passenger has booked {booking.seats_booked} seat(s) for your ride.\n\n'
        f'📍 Route: {ride.route}\n'
        f'📅 Date: {format_schedule(ride.pickup_time)}\n'
        f'💰 Total: {_money(booking.total_price)}\n\n'
        'Please confirm the pickup details with your passenger.'
    )
    return RideNotification(
        ride_id=ride.id, sender_id=booking.passenger_id, receiver_id=ride.driver_id, text=text
    )


def booking_cancelled_notice(*, ride: Ride, booking: Booking) -> RideNotification:
    """`ride` is the state after the seats were released."""
    text = (
        '🚫 Booking Cancelled\n\n'
        'A passenger has cancelled their booking.\n\n'
        f'📍 Route: {ride.route}\n'
        f'📅 Date: {format_schedule(ride.pickup_time)}\n'
        f'🪑 Seats cancelled: {booking.seats_booked}\n'
        f'💰 Refund: {_money(booking.total_price)}\n\n'
        f'Your ride now has {ride.available_seats} seats available.'
    )
    return RideNotification(
        ride_id=ride.id, sender_id=booking.passenger_id, receiver_id=ride.driver_id, text=text
    )


def ride_cancelled_notice(
    *, ride: Ride, booking: Booking, reason: Optional[str] = None
) -> RideNotification:
    text = (
        '🚫 Ride Cancelled\n\n'
        'The driver has cancelled the ride you booked.\n\n'
        f'📍 Route: {ride.route}\n'
        f'📅 Date: {format_schedule(ride.pickup_time)}\n'
        f'🪑 Your seats: {booking.seats_booked}\n'
        f'💰 Refund: {_money(booking.total_price)}'
    )
    if reason:
        text += f'\n\nReason: {reason}'
    text += '\n\nWe apologize for the inconvenience. Please search for alternative rides.'
    return RideNotification(
        ride_id=ride.id, sender_id=ride.driver_id, receiver_id=booking.passenger_id, text=text
    )
