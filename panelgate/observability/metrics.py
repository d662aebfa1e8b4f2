"""Prometheus metrics for panelgate.

Label values are bounded enums (results, outcome kinds, profile ids);
user ids and idempotency keys are never used as labels.
"""

from prometheus_client import Counter, Histogram

IDEMPOTENCY_ACQUIRES = Counter(
    "panelgate_idempotency_acquire_total",
    "Idempotency acquire attempts by result",
    labelnames=["result"],
)

IDEMPOTENCY_TRANSITIONS = Counter(
    "panelgate_idempotency_transition_total",
    "Idempotency record transitions after acquisition",
    labelnames=["transition", "result"],
)

CREDIT_OPERATIONS = Counter(
    "panelgate_credit_operations_total",
    "Credit ledger operations by result",
    labelnames=["operation", "result"],
)

FALLBACK_ATTEMPTS = Counter(
    "panelgate_fallback_attempts_total",
    "Provider attempts per adapter profile",
    labelnames=["profile_id", "result"],
)

REQUEST_OUTCOMES = Counter(
    "panelgate_request_outcomes_total",
    "Terminal request coordinator outcomes",
    labelnames=["outcome"],
)

GENERATION_LATENCY = Histogram(
    "panelgate_generation_latency_seconds",
    "Wall time of a full fallback chain run",
    labelnames=["result"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 45.0, 60.0),
)
