from datetime import datetime, timezone
from typing import ClassVar, Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import DataIntegrityError, DomainError, ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.domain.enum.ride_status import RideStatus, VehicleType


def as_utc(value: datetime) -> datetime:
    """Naive datetimes (e.g. read back from SQLite) are UTC by convention."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@attrs.define
class Ride:
    id: UUID
    driver_id: int
    pickup_address: str
    drop_address: str
    pickup_time: datetime
    total_seats: int
    available_seats: int
    price_per_seat: int
    vehicle_type: VehicleType = VehicleType.CAR
    status: RideStatus = RideStatus.AVAILABLE
    expected_drop_time: Optional[datetime] = None
    description: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # cancelled and completed are terminal
    ALLOWED_TRANSITIONS: ClassVar[dict[RideStatus, frozenset[RideStatus]]] = {
        RideStatus.AVAILABLE: frozenset(
            {RideStatus.ACTIVE, RideStatus.CANCELLED, RideStatus.COMPLETED}
        ),
        RideStatus.ACTIVE: frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED}),
        RideStatus.COMPLETED: frozenset(),
        RideStatus.CANCELLED: frozenset(),
    }

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        id: UUID,
        driver_id: int,
        pickup_address: str,
        drop_address: str,
        pickup_time: datetime,
        total_seats: int,
        price_per_seat: int,
        vehicle_type: VehicleType = VehicleType.CAR,
        expected_drop_time: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> 'Ride':
        if not pickup_address.strip() or not drop_address.strip():
            raise DomainError('Pickup and drop addresses are required')
        if total_seats < 1:
            raise DomainError('A ride must offer at least one seat')
        if price_per_seat < 0:
            raise DomainError('Price per seat cannot be negative')

        pickup_time = as_utc(pickup_time)
        if expected_drop_time is not None:
            expected_drop_time = as_utc(expected_drop_time)
            if expected_drop_time <= pickup_time:
                raise DomainError('Expected drop time must be after pickup time')

        now = datetime.now(timezone.utc)
        return cls(
            id=id,
            driver_id=driver_id,
            pickup_address=pickup_address.strip(),
            drop_address=drop_address.strip(),
            pickup_time=pickup_time,
            expected_drop_time=expected_drop_time,
            total_seats=total_seats,
            available_seats=total_seats,
            price_per_seat=price_per_seat,
            vehicle_type=vehicle_type,
            description=description,
            status=RideStatus.AVAILABLE,
            created_at=now,
            updated_at=now,
        )

    @property
    def route(self) -> str:
        return f'{self.pickup_address} → {self.drop_address}'

    @property
    def booked_seats(self) -> int:
        return self.total_seats - self.available_seats

    def is_owned_by(self, user_id: int) -> bool:
        return self.driver_id == user_id

    def validate_owner(self, requester_id: int) -> None:
        if not self.is_owned_by(requester_id):
            raise ForbiddenError('Only the driver can manage this ride')

    def validate_bookable(self, *, passenger_id: int, seats: int) -> None:
        """
        Business checks for a new booking, first failure wins:
        own ride -> ride not open -> not enough seats
        """
        if self.is_owned_by(passenger_id):
            raise DomainError('Cannot book your own ride')
        if self.status != RideStatus.AVAILABLE:
            raise DomainError('Ride is not available for booking')
        if seats < 1:
            raise DomainError('At least one seat must be booked')
        if self.available_seats < seats:
            raise DomainError('Not enough seats available')

    def reserve_seats(self, seats: int) -> 'Ride':
        if seats < 1 or self.available_seats < seats:
            raise DomainError('Not enough seats available')
        return attrs.evolve(
            self,
            available_seats=self.available_seats - seats,
            updated_at=datetime.now(timezone.utc),
        )

    def release_seats(self, seats: int) -> 'Ride':
        restored = self.available_seats + seats
        if restored > self.total_seats:
            raise DataIntegrityError(
                f'Releasing {seats} seat(s) on ride {self.id} would exceed its capacity '
                f'({restored} > {self.total_seats})'
            )
        return attrs.evolve(self, available_seats=restored, updated_at=datetime.now(timezone.utc))

    def transition_to(self, status: RideStatus, *, reason: Optional[str] = None) -> 'Ride':
        if status == self.status:
            raise DomainError(f'Ride is already {self.status.value}')
        if status not in self.ALLOWED_TRANSITIONS[self.status]:
            raise DomainError(
                f'Cannot change ride status from {self.status.value} to {status.value}'
            )
        return attrs.evolve(
            self,
            status=status,
            cancellation_reason=reason if status == RideStatus.CANCELLED else None,
            updated_at=datetime.now(timezone.utc),
        )

    def cancel(self, *, reason: Optional[str] = None) -> 'Ride':
        # available_seats is left as-is: a cancelled ride's seat count is moot
        return self.transition_to(RideStatus.CANCELLED, reason=reason)
