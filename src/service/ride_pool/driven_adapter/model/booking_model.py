from datetime import datetime
import uuid

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


ACTIVE_BOOKING_PREDICATE = text("status <> 'cancelled'")


class BookingModel(Base):
    __tablename__ = 'booking'
    __table_args__ = (
        CheckConstraint('seats_booked >= 1', name='ck_booking_seats_positive'),
        # At most one non-cancelled booking per passenger and ride
        Index(
            'uq_booking_active_ride_passenger',
            'ride_id',
            'passenger_id',
            unique=True,
            postgresql_where=ACTIVE_BOOKING_PREDICATE,
            sqlite_where=ACTIVE_BOOKING_PREDICATE,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)  # UUID7
    ride_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('ride.id'), nullable=False, index=True
    )
    passenger_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    seats_booked: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='confirmed', nullable=False)
    booked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
