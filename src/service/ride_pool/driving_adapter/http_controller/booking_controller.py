from typing import List

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.ride_pool.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.ride_pool.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.ride_pool.app.query.list_bookings_use_case import ListBookingsUseCase
from src.service.ride_pool.driving_adapter.http_controller.auth.jwt_auth import (
    get_current_user_id,
)
from src.service.ride_pool.driving_adapter.http_controller.schema.booking_schema import (
    BookingCreateRequest,
    BookingResponse,
    BookingWithRideResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_booking(
    request: BookingCreateRequest,
    current_user_id: int = Depends(get_current_user_id),
    booking_use_case: CreateBookingUseCase = Depends(CreateBookingUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.create_booking') as span:
        span.set_attribute('ride.id', str(request.ride_id))
        span.set_attribute('seats_booked', request.seats_booked)
        span.set_attribute('passenger.id', current_user_id)

        booking = await booking_use_case.create_booking(
            passenger_id=current_user_id,
            ride_id=request.ride_id,
            seats_booked=request.seats_booked,
        )

        span.set_attribute('booking.id', str(booking.id))
        return BookingResponse.from_entity(booking)


@router.get('/my', response_model=List[BookingWithRideResponse])
@Logger.io
async def list_my_bookings(
    current_user_id: int = Depends(get_current_user_id),
    use_case: ListBookingsUseCase = Depends(ListBookingsUseCase.depends),
) -> List[BookingWithRideResponse]:
    bookings = await use_case.list_passenger_bookings(current_user_id)
    return [BookingWithRideResponse.from_read_model(item) for item in bookings]


@router.get('/ride/{ride_id}', response_model=List[BookingResponse])
@Logger.io
async def list_ride_bookings(
    ride_id: UtilsUUID7,
    current_user_id: int = Depends(get_current_user_id),
    use_case: ListBookingsUseCase = Depends(ListBookingsUseCase.depends),
) -> List[BookingResponse]:
    bookings = await use_case.list_ride_bookings(ride_id=ride_id, requester_id=current_user_id)
    return [BookingResponse.from_entity(booking) for booking in bookings]


@router.patch('/{booking_id}/cancel', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_booking(
    booking_id: UtilsUUID7,
    current_user_id: int = Depends(get_current_user_id),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> BookingResponse:
    booking = await use_case.execute(booking_id=booking_id, requester_id=current_user_id)
    return BookingResponse.from_entity(booking)
