from prometheus_client import Counter, Gauge, Histogram


class BookingMetrics:
    """
    Booking core metrics.

    Tracks the capacity reservation lifecycle (acquire / validate / release),
    booking commits and how much of each booking packages absorbed.
    """

    def __init__(self):
        # ========== Capacity Reservation ==========
        self.lock_requests = Counter(
            'booking_lock_requests_total',
            'Capacity lock acquisition attempts',
            ['result'],  # result: acquired/capacity_unavailable/not_found/invalid
        )

        self.lock_validations = Counter(
            'booking_lock_validations_total',
            'Lock validation pings',
            ['result'],  # result: valid/expired
        )

        self.lock_releases = Counter(
            'booking_lock_releases_total',
            'Lock release calls',
            ['result'],  # result: released/noop
        )

        self.reserved_capacity = Histogram(
            'booking_lock_reserved_capacity',
            'Units reserved per acquired lock',
            buckets=[1, 2, 3, 5, 8, 13, 21, 50],
        )

        # ========== Booking Commit ==========
        self.bookings_committed = Counter(
            'bookings_committed_total',
            'Committed bookings',
            ['mode', 'payment_status'],  # mode: single/bulk
        )

        self.bookings_cancelled = Counter(
            'bookings_cancelled_total',
            'Cancelled bookings',
            ['refunded'],  # refunded: yes/no (package units returned)
        )

        self.booking_commit_duration = Histogram(
            'booking_commit_duration_seconds',
            'Booking commit transaction time',
            ['mode'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0],
        )

        # ========== Package Coverage ==========
        self.package_covered_units = Counter(
            'booking_package_covered_units_total',
            'Visitor units covered by a package subscription',
        )

        self.paid_units = Counter(
            'booking_paid_units_total',
            'Visitor units charged at unit price',
        )

        self.exhausted_subscriptions = Counter(
            'booking_package_exhausted_total',
            'Subscriptions whose balance for a service reached zero',
        )

        # ========== HTTP ==========
        self.http_request_duration = Histogram(
            'booking_http_request_duration_seconds',
            'Booking API request latency',
            ['method', 'route', 'status'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
        )

        self.checkout_sessions_in_flight = Gauge(
            'checkout_sessions_in_flight',
            'Checkout sessions currently holding a lock (caller side)',
        )

    def record_lock_request(self, *, result: str, reserved_capacity: int | None = None):
        self.lock_requests.labels(result=result).inc()
        if reserved_capacity is not None:
            self.reserved_capacity.observe(reserved_capacity)

    def record_lock_validation(self, *, valid: bool):
        self.lock_validations.labels(result='valid' if valid else 'expired').inc()

    def record_lock_release(self, *, released: bool):
        self.lock_releases.labels(result='released' if released else 'noop').inc()

    def record_booking_commit(
        self,
        *,
        mode: str,
        payment_status: str,
        covered: int,
        paid: int,
        duration: float,
        count: int = 1,
    ):
        self.bookings_committed.labels(mode=mode, payment_status=payment_status).inc(count)
        self.booking_commit_duration.labels(mode=mode).observe(duration)
        if covered:
            self.package_covered_units.inc(covered)
        if paid:
            self.paid_units.inc(paid)

    def record_booking_cancelled(self, *, refunded: bool):
        self.bookings_cancelled.labels(refunded='yes' if refunded else 'no').inc()

    def record_subscription_exhausted(self):
        self.exhausted_subscriptions.inc()

    def record_http_request(self, *, method: str, route: str, status: int, duration: float):
        self.http_request_duration.labels(method=method, route=route, status=str(status)).observe(
            duration
        )


# Global metrics instance
metrics = BookingMetrics()
