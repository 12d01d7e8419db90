from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class RideModel(Base):
    __tablename__ = 'ride'
    __table_args__ = (
        CheckConstraint('total_seats >= 1', name='ck_ride_total_seats_positive'),
        CheckConstraint(
            'available_seats >= 0 AND available_seats <= total_seats',
            name='ck_ride_available_seats_range',
        ),
        CheckConstraint('price_per_seat >= 0', name='ck_ride_price_non_negative'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)  # UUID7
    driver_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    pickup_address: Mapped[str] = mapped_column(String(255), nullable=False)
    drop_address: Mapped[str] = mapped_column(String(255), nullable=False)
    pickup_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expected_drop_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_seat: Mapped[int] = mapped_column(Integer, nullable=False)
    vehicle_type: Mapped[str] = mapped_column(String(10), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default='available', nullable=False, index=True)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
