"""init_ride_pool_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-16

Schema:
- ride: Published rides with the seat counter (available_seats)
- booking: Seat bookings with UUID primary key, at most one active booking per passenger and ride
- ride_message: Messages between riders, also used for ledger notifications
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables with final schema."""

    # Ride table
    op.create_table(
        'ride',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('driver_id', sa.Integer(), nullable=False),
        sa.Column('pickup_address', sa.String(length=255), nullable=False),
        sa.Column('drop_address', sa.String(length=255), nullable=False),
        sa.Column('pickup_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expected_drop_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('available_seats', sa.Integer(), nullable=False),
        sa.Column('price_per_seat', sa.Integer(), nullable=False),
        sa.Column('vehicle_type', sa.String(length=10), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.CheckConstraint('total_seats >= 1', name='ck_ride_total_seats_positive'),
        sa.CheckConstraint(
            'available_seats >= 0 AND available_seats <= total_seats',
            name='ck_ride_available_seats_range',
        ),
        sa.CheckConstraint('price_per_seat >= 0', name='ck_ride_price_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ride_driver_id'), 'ride', ['driver_id'], unique=False)
    op.create_index(op.f('ix_ride_status'), 'ride', ['status'], unique=False)

    # Booking table
    op.create_table(
        'booking',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('ride_id', sa.Uuid(), nullable=False),
        sa.Column('passenger_id', sa.Integer(), nullable=False),
        sa.Column('seats_booked', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column(
            'booked_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.CheckConstraint('seats_booked >= 1', name='ck_booking_seats_positive'),
        sa.ForeignKeyConstraint(['ride_id'], ['ride.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_booking_ride_id'), 'booking', ['ride_id'], unique=False)
    op.create_index(op.f('ix_booking_passenger_id'), 'booking', ['passenger_id'], unique=False)
    op.create_index(
        'uq_booking_active_ride_passenger',
        'booking',
        ['ride_id', 'passenger_id'],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
    )

    # Ride message table
    op.create_table(
        'ride_message',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('ride_id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('receiver_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(length=20), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column(
            'sent_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['ride_id'], ['ride.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ride_message_ride_id'), 'ride_message', ['ride_id'], unique=False)
    op.create_index(
        'ix_ride_message_sender_receiver', 'ride_message', ['sender_id', 'receiver_id']
    )
    op.create_index(
        'ix_ride_message_receiver_is_read', 'ride_message', ['receiver_id', 'is_read']
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('ride_message')
    op.drop_index('uq_booking_active_ride_passenger', table_name='booking')
    op.drop_table('booking')
    op.drop_table('ride')
