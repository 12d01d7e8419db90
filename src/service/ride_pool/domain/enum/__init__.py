"""Ride Pool Domain Enums"""

from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.domain.enum.message_type import MessageType
from src.service.ride_pool.domain.enum.ride_status import RideStatus, VehicleType

__all__ = ['BookingStatus', 'MessageType', 'RideStatus', 'VehicleType']
