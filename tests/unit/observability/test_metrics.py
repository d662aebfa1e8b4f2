"""Tests for Prometheus metric definitions."""

from prometheus_client import REGISTRY

from panelgate.observability.metrics import (
    FALLBACK_ATTEMPTS,
    IDEMPOTENCY_ACQUIRES,
    REQUEST_OUTCOMES,
)


class TestMetrics:
    """Tests for metric labels."""

    def test_acquire_counter_increments(self) -> None:
        """Labelled counters are registered and increment."""
        before = REGISTRY.get_sample_value(
            "panelgate_idempotency_acquire_total", {"result": "acquired"}
        ) or 0.0
        IDEMPOTENCY_ACQUIRES.labels(result="acquired").inc()
        after = REGISTRY.get_sample_value(
            "panelgate_idempotency_acquire_total", {"result": "acquired"}
        )
        assert after == before + 1

    def test_label_names(self) -> None:
        """Labels never include user ids or keys."""
        assert FALLBACK_ATTEMPTS._labelnames == ("profile_id", "result")
        assert REQUEST_OUTCOMES._labelnames == ("outcome",)
