from enum import StrEnum


class RideStatus(StrEnum):
    AVAILABLE = 'available'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class VehicleType(StrEnum):
    BIKE = 'bike'
    CAR = 'car'
    CAB = 'cab'
    SUV = 'suv'
