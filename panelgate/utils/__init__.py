"""Shared utilities."""

from panelgate.utils.clock import Clock, ManualClock, SystemClock, utc_now

__all__ = ["Clock", "ManualClock", "SystemClock", "utc_now"]
