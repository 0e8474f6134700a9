"""Prometheus metrics for monitoring purchases, settlements, and watchlist batches"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Purchase metrics
purchase_counter = Counter(
    "marketplace_purchase_total",
    "Security purchase attempts",
    ["outcome"],  # completed | conflict | unavailable
)

purchase_volume_counter = Counter(
    "marketplace_purchase_volume",
    "Face value of securities sold",
)

commission_counter = Counter(
    "marketplace_commission_collected",
    "Commission collected across both sides of each trade",
)

# Settlement metrics
settlement_counter = Counter(
    "marketplace_settlement_total",
    "Securities marked as paid",
)

# Watchlist batch metrics
watchlist_item_counter = Counter(
    "marketplace_watchlist_items_total",
    "Watchlist batch purchase items",
    ["outcome"],  # purchased | skipped
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_purchase(total_value: Decimal, commission: Decimal) -> None:
    """Record a completed purchase; commission is counted once per side"""
    purchase_counter.labels(outcome="completed").inc()
    purchase_volume_counter.inc(float(total_value))
    commission_counter.inc(float(commission * 2))


def record_purchase_failure(outcome: str) -> None:
    purchase_counter.labels(outcome=outcome).inc()


def record_watchlist_batch(purchased: int, skipped: int) -> None:
    if purchased:
        watchlist_item_counter.labels(outcome="purchased").inc(purchased)
    if skipped:
        watchlist_item_counter.labels(outcome="skipped").inc(skipped)
