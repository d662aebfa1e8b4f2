"""Unit tests for CreditLedger."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from panelgate.config.models.coordination import CreditConfig
from panelgate.coordination.inmemory import InMemoryCoordinationStore
from panelgate.credits import CreditLedger
from panelgate.exceptions import CoordinationStoreError
from panelgate.utils.clock import ManualClock


@pytest.fixture
def ledger(store: InMemoryCoordinationStore, clock: ManualClock) -> CreditLedger:
    return CreditLedger(store, CreditConfig(capacity=3, window_seconds=7 * 24 * 3600), clock)


class TestReserve:
    """Tests for reserve."""

    async def test_reserve_decrements(self, ledger: CreditLedger, clock: ManualClock) -> None:
        reservation = await ledger.reserve("u1")

        assert reservation.success is True
        assert reservation.remaining == 2
        assert reservation.reset_at == clock.now() + timedelta(days=7)

    async def test_exhausted_reports_reset(self, ledger: CreditLedger) -> None:
        for _ in range(3):
            await ledger.reserve("u1")

        reservation = await ledger.reserve("u1")

        assert reservation.success is False
        assert reservation.remaining == 0
        assert reservation.reset_at is not None

    async def test_users_are_independent(self, ledger: CreditLedger) -> None:
        for _ in range(3):
            await ledger.reserve("u1")
        assert (await ledger.reserve("u2")).success is True

    async def test_concurrent_reserves_never_overspend(self, ledger: CreditLedger) -> None:
        results = await asyncio.gather(*(ledger.reserve("u1") for _ in range(20)))

        assert sum(r.success for r in results) == 3
        assert (await ledger.get_status("u1")).remaining == 0

    async def test_window_refills(self, ledger: CreditLedger, clock: ManualClock) -> None:
        for _ in range(3):
            await ledger.reserve("u1")
        clock.advance(days=7)

        assert (await ledger.reserve("u1")).remaining == 2

    async def test_store_error_propagates(self, clock: ManualClock) -> None:
        store = AsyncMock()
        store.reserve.side_effect = CoordinationStoreError("down")
        ledger = CreditLedger(store, CreditConfig(), clock)

        with pytest.raises(CoordinationStoreError):
            await ledger.reserve("u1")


class TestRefund:
    """Tests for refund."""

    async def test_reserve_then_refund_nets_zero(self, ledger: CreditLedger) -> None:
        await ledger.reserve("u1")
        status = await ledger.refund("u1")
        assert status.remaining == 3

    async def test_refund_never_exceeds_capacity(self, ledger: CreditLedger) -> None:
        await ledger.reserve("u1")
        await ledger.refund("u1")
        assert (await ledger.refund("u1")).remaining == 3


class TestGetStatus:
    """Tests for get_status."""

    async def test_fresh_user(self, ledger: CreditLedger) -> None:
        status = await ledger.get_status("u1")
        assert status.remaining == 3
        assert status.reset_at is None
        assert status.unlimited is False

    async def test_read_only(
        self, ledger: CreditLedger, store: InMemoryCoordinationStore
    ) -> None:
        await ledger.get_status("u1")
        await ledger.get_status("u1")
        assert store.calls["reserve"] == 0
        assert (await ledger.get_status("u1")).remaining == 3
