"""
Unit tests for guard metrics and alerts.
"""

from unittest.mock import Mock

import pytest

from swapguard.escrow.errors import SlippageExceeded
from swapguard.monitoring.alerts import AlertLevel, AlertManager, AlertType
from swapguard.monitoring.config import AlertConfig
from swapguard.monitoring.metrics_collector import GuardMetricsCollector
from swapguard.pool.schemas import Direction

from tests.conftest import LARGE_AMOUNT


class TestGuardMetricsCollector:
    """Tests for GuardMetricsCollector."""

    def test_separate_registries(self):
        """Two collectors in one process do not clash."""
        a = GuardMetricsCollector()
        b = GuardMetricsCollector()
        assert a.registry is not b.registry

    def test_counts_guard_events(self, guard, pool_key, router, clock):
        """Pause and execution events increment counters."""
        metrics = GuardMetricsCollector()
        metrics.attach(guard)

        result = router.swap_exact_input("alice", pool_key, Direction.ZERO_FOR_ONE, LARGE_AMOUNT)
        trade = guard.get_pending_trade(result.trade_id)
        clock.set(trade.valid_after)
        receipt = guard.execute(trade.id, "keeper")

        assert metrics.value("swapguard_swaps_paused_total") == 1
        assert metrics.value("swapguard_escrowed_volume_total") == LARGE_AMOUNT
        assert metrics.value("swapguard_swaps_executed_total", {"executor": "keeper"}) == 1
        assert metrics.value("swapguard_executor_fees_total") == pytest.approx(receipt.fee)
        assert metrics.value("swapguard_execution_delay_seconds_count") == 1

    def test_gauges_follow_ledger(self, guard, pool_key, router):
        """Gauges report pending trades and custody."""
        metrics = GuardMetricsCollector()
        metrics.attach(guard)
        router.swap_exact_input("alice", pool_key, Direction.ZERO_FOR_ONE, LARGE_AMOUNT)

        metrics.update_from_guard()

        assert metrics.value("swapguard_pending_trades") == 1
        assert metrics.value("swapguard_escrowed_input", {"currency": "TOKEN0"}) == LARGE_AMOUNT
        assert metrics.value("swapguard_custody_balance", {"currency": "TOKEN0"}) == LARGE_AMOUNT

    def test_cancel_counted(self, guard, pool_key, router, clock):
        metrics = GuardMetricsCollector(prefix="test")
        metrics.attach(guard)
        result = router.swap_exact_input("alice", pool_key, Direction.ZERO_FOR_ONE, LARGE_AMOUNT)
        clock.set(guard.get_pending_trade(result.trade_id).valid_until + 1)

        guard.cancel(result.trade_id, "alice")

        assert metrics.value("test_swaps_cancelled_total") == 1


class TestAlertManager:
    """Tests for AlertManager."""

    def test_healthy_guard(self, guard, pool_key, router, clock):
        """A consistent guard with nothing expired raises no alerts."""
        router.swap_exact_input("alice", pool_key, Direction.ZERO_FOR_ONE, LARGE_AMOUNT)
        alerts = AlertManager(clock=clock)

        assert alerts.check_guard(guard) == []

    def test_expired_trade_alert(self, guard, pool_key, router, clock):
        """Expired, uncancelled trades raise a warning."""
        result = router.swap_exact_input("alice", pool_key, Direction.ZERO_FOR_ONE, LARGE_AMOUNT)
        clock.set(guard.get_pending_trade(result.trade_id).valid_until + 1)
        alerts = AlertManager(clock=clock)

        raised = alerts.check_guard(guard)

        assert [a.alert_type for a in raised] == [AlertType.EXPIRED]
        assert raised[0].level is AlertLevel.WARNING

    def test_stuck_output_after_slippage(self, guard, pool_key, router, clock):
        """A slippage failure leaves unaccounted output and raises alerts."""
        result = router.swap_exact_input(
            "alice", pool_key, Direction.ZERO_FOR_ONE, LARGE_AMOUNT, min_amount_out=LARGE_AMOUNT * 2
        )
        clock.set(guard.get_pending_trade(result.trade_id).valid_after)
        with pytest.raises(SlippageExceeded):
            guard.execute(result.trade_id, "keeper")

        raised = AlertManager(clock=clock).check_guard(guard)
        types = {a.alert_type for a in raised}

        assert AlertType.SLIPPAGE in types
        assert AlertType.CUSTODY in types

    def test_custody_shortfall_is_critical(self):
        alert = AlertManager().check_custody("TOKEN0", balance=5, escrowed=10)
        assert alert.level is AlertLevel.CRITICAL

    def test_cooldown(self, clock):
        """Repeat alerts inside the cooldown are suppressed."""
        alerts = AlertManager(AlertConfig(alert_cooldown_seconds=60), clock=clock)

        assert alerts.check_pending(100) is not None
        assert alerts.check_pending(100) is None

        clock.advance(60)
        assert alerts.check_pending(100) is not None

    def test_callbacks(self, clock):
        callback = Mock()
        alerts = AlertManager(clock=clock)
        alerts.on_alert(callback)

        alert = alerts.system_alert("keeper offline")

        callback.assert_called_once_with(alert)
        assert alert.to_dict()["type"] == "system"
        assert alerts.get_recent_alerts() == [alert]
