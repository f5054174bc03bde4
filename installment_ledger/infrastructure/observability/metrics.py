"""Prometheus metrics for schedule generation, rebalancing, validation and payments"""

from prometheus_client import Counter, Histogram

from installment_ledger.config import settings

# Schedule metrics
schedule_generated_counter = Counter(
    "ledger_schedules_generated_total",
    "Installment schedules generated or regenerated",
    ["reason"],  # issued | header_change
)

installment_count_histogram = Histogram(
    "ledger_installment_count",
    "Regular installments per generated schedule",
    buckets=[0, 1, 2, 3, 6, 12, 24, 48],
)

# Rebalance metrics
rebalance_warning_counter = Counter(
    "ledger_rebalance_warnings_total",
    "Auto-corrections surfaced to the user",
    ["code"],  # adjustment_exceeds_balance | last_installment_corrected | due_date_before_issue
)

# Validation metrics
validation_counter = Counter(
    "ledger_validations_total",
    "Entry validations on submit",
    ["outcome"],  # accepted | rejected
)

validation_error_counter = Counter(
    "ledger_validation_errors_total",
    "Validation errors by code",
    ["code"],
)

# Settlement metrics
payment_counter = Counter(
    "ledger_payments_total",
    "Payments registered by resulting installment status",
    ["status"],
)


def record_schedule(reason: str, installment_count: int) -> None:
    if not settings.metrics_enabled:
        return
    schedule_generated_counter.labels(reason=reason).inc()
    installment_count_histogram.observe(installment_count)


def record_rebalance_warning(code: str) -> None:
    if not settings.metrics_enabled:
        return
    rebalance_warning_counter.labels(code=code).inc()


def record_validation(ok: bool, error_codes: list) -> None:
    """Record validation outcome and one increment per error code"""
    if not settings.metrics_enabled:
        return
    validation_counter.labels(outcome="accepted" if ok else "rejected").inc()
    for code in error_codes:
        validation_error_counter.labels(code=code).inc()


def record_payment(status: str) -> None:
    if not settings.metrics_enabled:
        return
    payment_counter.labels(status=status).inc()
