from typing import List

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.ride_pool.app.command.create_ride_use_case import CreateRideUseCase
from src.service.ride_pool.app.command.update_ride_status_use_case import UpdateRideStatusUseCase
from src.service.ride_pool.app.query.get_ride_use_case import GetRideUseCase
from src.service.ride_pool.app.query.list_rides_use_case import ListRidesUseCase
from src.service.ride_pool.driving_adapter.http_controller.auth.jwt_auth import (
    get_current_user_id,
)
from src.service.ride_pool.driving_adapter.http_controller.schema.ride_schema import (
    RideCreateRequest,
    RideResponse,
    RideStatusUpdateRequest,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_ride(
    request: RideCreateRequest,
    current_user_id: int = Depends(get_current_user_id),
    use_case: CreateRideUseCase = Depends(CreateRideUseCase.depends),
) -> RideResponse:
    ride = await use_case.create_ride(
        driver_id=current_user_id,
        pickup_address=request.pickup_address,
        drop_address=request.drop_address,
        pickup_time=request.pickup_time,
        expected_drop_time=request.expected_drop_time,
        total_seats=request.total_seats,
        price_per_seat=request.price_per_seat,
        vehicle_type=request.vehicle_type,
        description=request.description,
    )
    return RideResponse.from_entity(ride)


@router.get('/available', response_model=List[RideResponse])
@Logger.io
async def list_available_rides(
    current_user_id: int = Depends(get_current_user_id),
    use_case: ListRidesUseCase = Depends(ListRidesUseCase.depends),
) -> List[RideResponse]:
    rides = await use_case.list_available()
    return [RideResponse.from_entity(ride) for ride in rides]


@router.get('/my/published', response_model=List[RideResponse])
@Logger.io
async def list_my_published_rides(
    current_user_id: int = Depends(get_current_user_id),
    use_case: ListRidesUseCase = Depends(ListRidesUseCase.depends),
) -> List[RideResponse]:
    rides = await use_case.list_by_driver(current_user_id)
    return [RideResponse.from_entity(ride) for ride in rides]


@router.get('/{ride_id}')
@Logger.io
async def get_ride(
    ride_id: UtilsUUID7,
    current_user_id: int = Depends(get_current_user_id),
    use_case: GetRideUseCase = Depends(GetRideUseCase.depends),
) -> RideResponse:
    ride = await use_case.get_ride(ride_id)
    return RideResponse.from_entity(ride)


@router.patch('/{ride_id}/status', status_code=status.HTTP_200_OK)
@Logger.io
async def update_ride_status(
    ride_id: UtilsUUID7,
    request: RideStatusUpdateRequest,
    current_user_id: int = Depends(get_current_user_id),
    use_case: UpdateRideStatusUseCase = Depends(UpdateRideStatusUseCase.depends),
) -> RideResponse:
    with tracer.start_as_current_span('controller.update_ride_status') as span:
        span.set_attribute('ride.id', str(ride_id))
        span.set_attribute('ride.status', request.status.value)

        ride = await use_case.update_status(
            ride_id=ride_id,
            requester_id=current_user_id,
            status=request.status,
            reason=request.cancellation_reason,
        )
        return RideResponse.from_entity(ride)
