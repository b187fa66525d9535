"""
Prometheus Metrics Collector.

Exposes guard activity in Prometheus format.

Metrics:
- swapguard_swaps_paused_total: Large trades escrowed
- swapguard_swaps_executed_total: Pending trades settled
- swapguard_swaps_cancelled_total: Pending trades refunded
- swapguard_executor_fees_total: Output paid to executors
- swapguard_pending_trades: Trades awaiting execution
- swapguard_escrowed_input: Pending input per currency
- swapguard_custody_balance: Guard vault balance per currency
- swapguard_execution_delay_seconds: Submission to settlement delay
"""

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

from swapguard.escrow.events import GuardEvent, SwapCancelled, SwapExecuted, SwapPaused
from swapguard.escrow.guard import SandwichGuard

logger = logging.getLogger(__name__)


class GuardMetricsCollector:
    """
    Collects and exposes Prometheus metrics for a sandwich guard.

    Usage:
        collector = GuardMetricsCollector()
        collector.attach(guard)  # counters follow guard events

        # Refresh gauges (e.g. from the keeper loop)
        collector.update_from_guard(guard)

        collector.serve(9108)  # optional /metrics endpoint
    """

    def __init__(
        self,
        prefix: str = "swapguard",
        registry: Optional[CollectorRegistry] = None,
    ):
        """
        Initialize metrics collector.

        Args:
            prefix: Prefix for all metric names
            registry: Registry to register metrics in (a fresh one by default,
                so several guards can be collected in one process)
        """
        self.prefix = prefix
        self.registry = registry if registry is not None else CollectorRegistry()

        self._guard: Optional[SandwichGuard] = None

        # Counters
        self.paused_total = Counter(
            f"{prefix}_swaps_paused_total",
            "Large trades escrowed",
            registry=self.registry,
        )

        self.executed_total = Counter(
            f"{prefix}_swaps_executed_total",
            "Pending trades settled",
            ["executor"],
            registry=self.registry,
        )

        self.cancelled_total = Counter(
            f"{prefix}_swaps_cancelled_total",
            "Pending trades refunded to their owner",
            registry=self.registry,
        )

        self.escrowed_volume_total = Counter(
            f"{prefix}_escrowed_volume_total",
            "Input taken into custody",
            registry=self.registry,
        )

        self.executor_fees_total = Counter(
            f"{prefix}_executor_fees_total",
            "Output paid to executors",
            registry=self.registry,
        )

        # Gauges
        self.pending_trades = Gauge(
            f"{prefix}_pending_trades",
            "Trades awaiting execution",
            registry=self.registry,
        )

        self.expired_trades = Gauge(
            f"{prefix}_expired_trades",
            "Pending trades past their window",
            registry=self.registry,
        )

        self.slippage_failures = Gauge(
            f"{prefix}_slippage_failures",
            "Trades finalized without settlement",
            registry=self.registry,
        )

        self.escrowed_input = Gauge(
            f"{prefix}_escrowed_input",
            "Pending input per currency",
            ["currency"],
            registry=self.registry,
        )

        self.custody_balance = Gauge(
            f"{prefix}_custody_balance",
            "Guard vault balance per currency",
            ["currency"],
            registry=self.registry,
        )

        # Histograms
        self.execution_delay = Histogram(
            f"{prefix}_execution_delay_seconds",
            "Delay between submission and settlement",
            buckets=[24, 30, 45, 60, 90, 120, 300, 600, 900],
            registry=self.registry,
        )

    def attach(self, guard: SandwichGuard):
        """Follow a guard's events."""
        self._guard = guard
        guard.on_event(self.record_event)

    def record_event(self, event: GuardEvent):
        """Record a guard event."""
        if isinstance(event, SwapPaused):
            self.paused_total.inc()
            self.escrowed_volume_total.inc(event.amount_in)
        elif isinstance(event, SwapExecuted):
            self.executed_total.labels(executor=event.executor).inc()
            self.executor_fees_total.inc(event.fee)
            self._observe_delay(event.id)
        elif isinstance(event, SwapCancelled):
            self.cancelled_total.inc()

    def update_from_guard(self, guard: Optional[SandwichGuard] = None):
        """Refresh gauges from the guard's ledger and custody."""
        guard = guard or self._guard
        if guard is None:
            return

        self.pending_trades.set(len(guard.ledger.pending()))
        self.expired_trades.set(len(guard.expired_trades()))
        self.slippage_failures.set(guard.ledger.stats.slippage_failures)

        for currency in self._currencies(guard):
            self.escrowed_input.labels(currency=currency).set(guard.escrowed_amount(currency))
            self.custody_balance.labels(currency=currency).set(guard.escrow_balance(currency))

    def value(self, name: str, labels: Optional[dict] = None) -> Optional[float]:
        """Current sample value of a metric (full sample name, e.g. with _total)."""
        return self.registry.get_sample_value(name, labels or {})

    def serve(self, port: int):
        """Expose the registry at http://0.0.0.0:<port>/metrics."""
        start_http_server(port, registry=self.registry)
        logger.info(f"Metrics exporter listening on :{port}")

    def _observe_delay(self, trade_id: str):
        if self._guard is None:
            return
        trade = self._guard.get_pending_trade(trade_id)
        if trade is None or trade.created_at is None or trade.finalized_at is None:
            return
        self.execution_delay.observe(trade.finalized_at - trade.created_at)

    @staticmethod
    def _currencies(guard: SandwichGuard) -> set[str]:
        currencies = set(guard.vault.balances(guard.address))
        for trade in guard.ledger.pending():
            key = guard.engine.get_pool_key(trade.pool_id)
            currencies.add(key.currency_in(trade.direction))
        return currencies
