from prometheus_client import Counter, Histogram


class RidePoolMetrics:
    """
    Ride Pool Ledger Metrics

    Seat-ledger outcomes (bookings, cancellations, cascades) and the health of the
    best-effort notification path
    """

    def __init__(self):
        # ========== Booking Ledger ==========
        self.booking_requests = Counter(
            'ride_pool_booking_requests_total',
            'Booking requests by outcome',
            ['result'],  # result: confirmed/rejected/conflict/not_found/error
        )

        self.booking_cancellations = Counter(
            'ride_pool_booking_cancellations_total',
            'Bookings cancelled by their passenger',
        )

        self.ride_status_changes = Counter(
            'ride_pool_ride_status_changes_total',
            'Ride status transitions',
            ['status'],
        )

        self.cascade_cancelled_bookings = Counter(
            'ride_pool_cascade_cancelled_bookings_total',
            'Bookings force-cancelled because their ride was cancelled',
        )

        self.ride_cancel_retries = Counter(
            'ride_pool_ride_cancel_retries_total',
            'Ride cancellation cascades re-run after a transient storage failure',
        )

        self.ledger_operation_duration = Histogram(
            'ride_pool_ledger_operation_duration_seconds',
            'Ledger operation duration including the transaction',
            ['operation'],  # create_booking/cancel_booking/update_ride_status
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
        )

        # ========== Notifications ==========
        self.notifications = Counter(
            'ride_pool_notifications_total',
            'Post-commit notifications by delivery outcome',
            ['result'],  # result: sent/failed
        )

    # ========== Helper Methods ==========

    def record_booking_request(self, *, result: str) -> None:
        self.booking_requests.labels(result=result).inc()

    def record_ride_status_change(self, *, status: str, cascaded_bookings: int = 0) -> None:
        self.ride_status_changes.labels(status=status).inc()
        if cascaded_bookings:
            self.cascade_cancelled_bookings.inc(cascaded_bookings)

    def record_notification(self, *, sent: bool) -> None:
        self.notifications.labels(result='sent' if sent else 'failed').inc()

    def observe_duration(self, *, operation: str, seconds: float) -> None:
        self.ledger_operation_duration.labels(operation=operation).observe(seconds)


# Global metrics instance
metrics = RidePoolMetrics()
