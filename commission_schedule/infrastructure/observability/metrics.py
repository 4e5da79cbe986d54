"""Prometheus metrics for schedule reconciliation, integrity cleanup and paid-status changes"""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconciliation_counter = Counter(
    "commission_schedule_reconciliations_total",
    "Schedule reconciliations run",
    ["trigger"],  # create | update | delete | backfill
)

installments_generated_counter = Counter(
    "commission_installments_generated_total",
    "Installments written by the schedule generator",
)

installments_purged_counter = Counter(
    "commission_installments_purged_total",
    "Corrupt installments removed by the integrity pass",
    ["reason"],  # missing_date | out_of_range | duplicate
)

paid_status_counter = Counter(
    "commission_paid_status_updates_total",
    "Direct paid-status changes on single installments",
    ["status"],  # paid | unpaid
)

# Storage metrics
storage_failures_counter = Counter(
    "storage_failures_total",
    "Requests aborted by a storage-layer error",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_reconciliation(trigger: str, generated_count: int) -> None:
    """Record one reconciliation run and the rows it produced"""
    reconciliation_counter.labels(trigger=trigger).inc()
    if generated_count:
        installments_generated_counter.inc(generated_count)


def record_purge(reason: str) -> None:
    """Record a single installment removed by the integrity pass"""
    installments_purged_counter.labels(reason=reason).inc()


def record_paid_status(paid: bool) -> None:
    """Record a direct paid/unpaid toggle"""
    paid_status_counter.labels(status="paid" if paid else "unpaid").inc()
