from typing import List

from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ride_pool.domain.value_object.read_models import SeatDiscrepancy


class AuditRideSeatsUseCase:
    """
    Reconciliation check for the seat ledger (read-only).

    For every ride that is not cancelled:
        available_seats == total_seats - sum(seats_booked of non-cancelled bookings)
    """

    def __init__(self, booking_query_repo: IBookingQueryRepo) -> None:
        self.booking_query_repo = booking_query_repo

    @Logger.io
    async def audit(self) -> List[SeatDiscrepancy]:
        discrepancies = await self.booking_query_repo.find_seat_discrepancies()

        if not discrepancies:
            Logger.base.info('✅ [SEAT-AUDIT] Seat ledger is consistent')
            return discrepancies

        for discrepancy in discrepancies:
            Logger.base.warning(
                f'⚠️ [SEAT-AUDIT] Ride {discrepancy.ride_id}: '
                f'expected {discrepancy.expected_available} available, '
                f'found {discrepancy.actual_available}'
            )
        return discrepancies
