"""
Prometheus metrics for the scheduling core.

Populated by the ``@measure_operation`` decorator on service classes.
Metrics live in a private registry so embedding applications decide
whether and where to expose them.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "scheduling_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "scheduling_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "scheduling_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_conflicts_total = Counter(
    "scheduling_booking_conflicts_total",
    "Bookings rejected because the slot was taken",
    ["stage"],
    registry=REGISTRY,
)

refund_decisions_total = Counter(
    "scheduling_refund_decisions_total",
    "Refund decisions by kind",
    ["kind"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin recording facade used by services."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'book_session')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_booking_conflict(stage: str) -> None:
        """stage: 'validation' (pre-write) or 'commit' (conditional write lost)."""
        booking_conflicts_total.labels(stage=stage).inc()

    @staticmethod
    def record_refund_decision(kind: str) -> None:
        refund_decisions_total.labels(kind=kind).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Exposition-format dump of the scheduling registry."""
        return generate_latest(REGISTRY)


prometheus_metrics = PrometheusMetrics()
