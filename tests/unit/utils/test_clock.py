"""Tests for clock utilities."""

from datetime import UTC, datetime, timedelta

import pytest

from panelgate.utils.clock import ManualClock, SystemClock, from_epoch_ms, to_epoch_ms


class TestManualClock:
    """Tests for ManualClock."""

    def test_default_start(self) -> None:
        """Starts at 2025-01-01 UTC."""
        assert ManualClock().now() == datetime(2025, 1, 1, tzinfo=UTC)

    def test_advance(self) -> None:
        """advance accepts seconds and timedelta keywords."""
        clock = ManualClock()
        start = clock.now()
        clock.advance(30)
        clock.advance(days=1)
        assert clock.now() - start == timedelta(days=1, seconds=30)

    def test_naive_start_rejected(self) -> None:
        """Naive datetimes are refused."""
        with pytest.raises(ValueError):
            ManualClock(datetime(2025, 1, 1))

    def test_set(self) -> None:
        """set jumps to an absolute time."""
        clock = ManualClock()
        target = datetime(2030, 6, 1, tzinfo=UTC)
        clock.set(target)
        assert clock.now() == target


class TestHelpers:
    """Tests for epoch helpers."""

    def test_epoch_ms_round_trip(self) -> None:
        """Millisecond conversions agree."""
        value = datetime(2025, 1, 8, 12, 30, tzinfo=UTC)
        assert from_epoch_ms(to_epoch_ms(value)) == value

    def test_system_clock_is_aware(self) -> None:
        """SystemClock returns UTC-aware times."""
        assert SystemClock().now().tzinfo is not None
