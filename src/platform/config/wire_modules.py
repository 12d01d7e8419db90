"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ride_pool.app.command import (
    cancel_booking_use_case,
    create_booking_use_case,
    create_ride_use_case,
    mark_message_read_use_case,
    send_ride_message_use_case,
    update_ride_status_use_case,
)
from src.service.ride_pool.app.query import (
    get_ride_use_case,
    list_bookings_use_case,
    list_ride_messages_use_case,
    list_rides_use_case,
)
from src.service.ride_pool.driving_adapter.http_controller.auth import jwt_auth


WIRE_MODULES: list[ModuleType] = [
    create_ride_use_case,
    update_ride_status_use_case,
    create_booking_use_case,
    cancel_booking_use_case,
    send_ride_message_use_case,
    mark_message_read_use_case,
    get_ride_use_case,
    list_rides_use_case,
    list_bookings_use_case,
    list_ride_messages_use_case,
    jwt_auth,
]
