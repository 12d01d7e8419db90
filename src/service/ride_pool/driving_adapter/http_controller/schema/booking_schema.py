from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.domain.enum.ride_status import RideStatus, VehicleType
from src.service.ride_pool.domain.value_object.read_models import BookingWithRide


class BookingCreateRequest(BaseModel):
    ride_id: UtilsUUID7
    seats_booked: int

    model_config = {
        'json_schema_extra': {
            'example': {'ride_id': '01936d8f-5e73-7c4e-a9c5-123456789abc', 'seats_booked': 2}
        }
    }


class BookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-6a10-7b2e-8f4d-abcdef012345',  # UUID7
                'ride_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'passenger_id': 2,
                'seats_booked': 2,
                'total_price': 200,
                'status': 'confirmed',
                'booked_at': '2026-10-16T10:30:00Z',
            }
        },
    }

    id: UtilsUUID7  # UUID7
    ride_id: UtilsUUID7
    passenger_id: int
    seats_booked: int
    total_price: int
    status: BookingStatus
    booked_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, booking: Booking) -> 'BookingResponse':
        return cls(
            id=booking.id,
            ride_id=booking.ride_id,
            passenger_id=booking.passenger_id,
            seats_booked=booking.seats_booked,
            total_price=booking.total_price,
            status=booking.status,
            booked_at=booking.booked_at,
            updated_at=booking.updated_at,
        )


class RideSummaryResponse(BaseModel):
    id: UtilsUUID7
    pickup_address: str
    drop_address: str
    pickup_time: datetime
    vehicle_type: VehicleType
    price_per_seat: int
    status: RideStatus


class BookingWithRideResponse(BookingResponse):
    ride: RideSummaryResponse

    @classmethod
    def from_read_model(cls, item: BookingWithRide) -> 'BookingWithRideResponse':
        booking = BookingResponse.from_entity(item.booking)
        return cls(
            **booking.model_dump(),
            ride=RideSummaryResponse(
                id=item.ride.id,
                pickup_address=item.ride.pickup_address,
                drop_address=item.ride.drop_address,
                pickup_time=item.ride.pickup_time,
                vehicle_type=item.ride.vehicle_type,
                price_per_seat=item.ride.price_per_seat,
                status=item.ride.status,
            ),
        )
