"""
Model <-> entity conversion shared by the command and query repositories.

SQLAlchemy's Uuid type works with stdlib uuid.UUID while the domain uses uuid_utils.UUID;
timestamps read back from SQLite are naive and are treated as UTC.
"""

from datetime import datetime, timezone
from typing import Optional
import uuid

from uuid_utils import UUID

from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.entity.ride_entity import Ride, as_utc
from src.service.ride_pool.domain.entity.ride_message_entity import RideMessage
from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.domain.enum.message_type import MessageType
from src.service.ride_pool.domain.enum.ride_status import RideStatus, VehicleType
from src.service.ride_pool.domain.value_object.read_models import RideSummary
from src.service.ride_pool.driven_adapter.model.booking_model import BookingModel
from src.service.ride_pool.driven_adapter.model.ride_message_model import RideMessageModel
from src.service.ride_pool.driven_adapter.model.ride_model import RideModel


def to_db_uuid(value: UUID | uuid.UUID) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def to_domain_uuid(value: uuid.UUID) -> UUID:
    return UUID(str(value))


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value) if value is not None else None


def ride_to_entity(db_ride: RideModel) -> Ride:
    return Ride(
        id=to_domain_uuid(db_ride.id),
        driver_id=db_ride.driver_id,
        pickup_address=db_ride.pickup_address,
        drop_address=db_ride.drop_address,
        pickup_time=as_utc(db_ride.pickup_time),
        expected_drop_time=_utc(db_ride.expected_drop_time),
        total_seats=db_ride.total_seats,
        available_seats=db_ride.available_seats,
        price_per_seat=db_ride.price_per_seat,
        vehicle_type=VehicleType(db_ride.vehicle_type),
        description=db_ride.description,
        status=RideStatus(db_ride.status),
        cancellation_reason=db_ride.cancellation_reason,
        created_at=_utc(db_ride.created_at),
        updated_at=_utc(db_ride.updated_at),
    )


def ride_to_model(ride: Ride) -> RideModel:
    return RideModel(
        id=to_db_uuid(ride.id),
        driver_id=ride.driver_id,
        pickup_address=ride.pickup_address,
        drop_address=ride.drop_address,
        pickup_time=ride.pickup_time,
        expected_drop_time=ride.expected_drop_time,
        total_seats=ride.total_seats,
        available_seats=ride.available_seats,
        price_per_seat=ride.price_per_seat,
        vehicle_type=ride.vehicle_type.value,
        description=ride.description,
        status=ride.status.value,
        cancellation_reason=ride.cancellation_reason,
        created_at=ride.created_at or _now(),
        updated_at=ride.updated_at or _now(),
    )


def ride_to_summary(db_ride: RideModel) -> RideSummary:
    return RideSummary(
        id=to_domain_uuid(db_ride.id),
        pickup_address=db_ride.pickup_address,
        drop_address=db_ride.drop_address,
        pickup_time=as_utc(db_ride.pickup_time),
        vehicle_type=VehicleType(db_ride.vehicle_type),
        price_per_seat=db_ride.price_per_seat,
        status=RideStatus(db_ride.status),
    )


def booking_to_entity(db_booking: BookingModel) -> Booking:
    return Booking(
        id=to_domain_uuid(db_booking.id),
        ride_id=to_domain_uuid(db_booking.ride_id),
        passenger_id=db_booking.passenger_id,
        seats_booked=db_booking.seats_booked,
        total_price=db_booking.total_price,
        status=BookingStatus(db_booking.status),
        booked_at=_utc(db_booking.booked_at),
        updated_at=_utc(db_booking.updated_at),
    )


def booking_to_model(booking: Booking) -> BookingModel:
    return BookingModel(
        id=to_db_uuid(booking.id),
        ride_id=to_db_uuid(booking.ride_id),
        passenger_id=booking.passenger_id,
        seats_booked=booking.seats_booked,
        total_price=booking.total_price,
        status=booking.status.value,
        booked_at=booking.booked_at or _now(),
        updated_at=booking.updated_at or _now(),
    )


def message_to_entity(db_message: RideMessageModel) -> RideMessage:
    return RideMessage(
        id=to_domain_uuid(db_message.id),
        ride_id=to_domain_uuid(db_message.ride_id),
        sender_id=db_message.sender_id,
        receiver_id=db_message.receiver_id,
        message=db_message.message,
        message_type=MessageType(db_message.message_type),
        is_read=db_message.is_read,
        sent_at=_utc(db_message.sent_at),
    )


def message_to_model(message: RideMessage) -> RideMessageModel:
    return RideMessageModel(
        id=to_db_uuid(message.id),
        ride_id=to_db_uuid(message.ride_id),
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        message=message.message,
        message_type=message.message_type.value,
        is_read=message.is_read,
        sent_at=message.sent_at or _now(),
    )
