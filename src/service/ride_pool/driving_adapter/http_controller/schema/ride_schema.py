from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.ride_pool.domain.entity.ride_entity import Ride
from src.service.ride_pool.domain.enum.ride_status import RideStatus, VehicleType


class RideCreateRequest(BaseModel):
    pickup_address: str
    drop_address: str
    pickup_time: datetime
    expected_drop_time: Optional[datetime] = None
    total_seats: int
    price_per_seat: int
    vehicle_type: VehicleType = VehicleType.CAR
    description: Optional[str] = None

    model_config = {
        'json_schema_extra': {
            'example': {
                'pickup_address': 'Koramangala',
                'drop_address': 'Whitefield',
                'pickup_time': '2026-10-20T08:30:00+05:30',
                'expected_drop_time': '2026-10-20T09:45:00+05:30',
                'total_seats': 4,
                'price_per_seat': 100,
                'vehicle_type': 'car',
                'description': 'AC sedan, no smoking',
            }
        }
    }


class RideStatusUpdateRequest(BaseModel):
    status: RideStatus
    cancellation_reason: Optional[str] = None

    model_config = {
        'json_schema_extra': {
            'example': {'status': 'cancelled', 'cancellation_reason': 'Car broke down'}
        }
    }


class RideResponse(BaseModel):
    id: UtilsUUID7  # UUID7
    driver_id: int
    pickup_address: str
    drop_address: str
    pickup_time: datetime
    expected_drop_time: Optional[datetime] = None
    total_seats: int
    available_seats: int
    price_per_seat: int
    vehicle_type: VehicleType
    description: Optional[str] = None
    status: RideStatus
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ride: Ride) -> 'RideResponse':
        return cls(
            id=ride.id,
            driver_id=ride.driver_id,
            pickup_address=ride.pickup_address,
            drop_address=ride.drop_address,
            pickup_time=ride.pickup_time,
            expected_drop_time=ride.expected_drop_time,
            total_seats=ride.total_seats,
            available_seats=ride.available_seats,
            price_per_seat=ride.price_per_seat,
            vehicle_type=ride.vehicle_type,
            description=ride.description,
            status=ride.status,
            cancellation_reason=ride.cancellation_reason,
            created_at=ride.created_at,
            updated_at=ride.updated_at,
        )
