"""Prometheus metrics for signed URL validation."""

from prometheus_client import Counter, Histogram

VALIDATIONS_TOTAL = Counter(
    "urlsign_validations_total",
    "Total signed URL validations",
    ["outcome"],  # outcome: valid, invalid, not_configured
)

VALIDATION_LATENCY = Histogram(
    "urlsign_validation_latency_seconds",
    "Signed URL validation latency in seconds",
    buckets=[0.0001, 0.00025, 0.0005, 0.001, 0.0025, 0.005, 0.01],
)


def record_validation(outcome: str, latency: float | None = None) -> None:
    """Record a validation outcome."""
    VALIDATIONS_TOTAL.labels(outcome=outcome).inc()
    if latency is not None:
        VALIDATION_LATENCY.observe(latency)
