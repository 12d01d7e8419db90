#!/usr/bin/env python3
"""
Seat Ledger Audit Script
Read-only reconciliation of every ride's seat counter against its bookings

For each ride that is not cancelled:
    available_seats == total_seats - sum(seats_booked of non-cancelled bookings)

Exit code 0 when the ledger is consistent, 1 when a discrepancy was found.
"""

import asyncio

from src.platform.config.di import container
from src.service.ride_pool.app.query.audit_ride_seats_use_case import AuditRideSeatsUseCase


async def main() -> int:
    database = container.database()
    use_case = AuditRideSeatsUseCase(booking_query_repo=container.booking_query_repo())

    try:
        discrepancies = await use_case.audit()
    finally:
        await database.dispose()

    print('=' * 50)
    if not discrepancies:
        print('✅ Seat ledger is consistent')
        return 0

    print(f'⚠️  {len(discrepancies)} ride(s) with a seat discrepancy:')
    for discrepancy in discrepancies:
        print(
            f'   ride={discrepancy.ride_id} total={discrepancy.total_seats} '
            f'booked={discrepancy.booked_seats} '
            f'expected_available={discrepancy.expected_available} '
            f'actual_available={discrepancy.actual_available}'
        )
    return 1


if __name__ == '__main__':
    raise SystemExit(asyncio.run(main()))
