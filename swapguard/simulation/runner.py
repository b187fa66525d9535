"""
Simulation Runner - replays a scenario against a simulated pool.

Coordinates:
- Scenario loading
- Event-driven replay (swaps, executions, cancellations)
- Automatic keeper execution of paused trades
- Outcome collection for reporting
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from swapguard.escrow.config import GuardConfig
from swapguard.escrow.errors import SwapGuardError
from swapguard.escrow.events import GuardEvent, event_to_dict
from swapguard.pool.errors import PoolError
from swapguard.pool.schemas import Direction

from .config import PoolSetup, SimulationConfig
from .environment import SimulatedPool, build_pool
from .event_engine import Event, EventEngine, EventType
from .scenario import load_scenario

logger = logging.getLogger(__name__)

OUTCOME_COLUMNS = [
    "timestamp", "account", "action", "trade_ref", "trade_id", "status",
    "amount_in", "amount_out", "fee", "refund", "valid_after", "valid_until", "error",
]


@dataclass
class SimulationResult:
    """Complete simulation results."""
    config: SimulationConfig
    pool_setup: PoolSetup
    guard_config: GuardConfig
    guarded: bool
    outcomes: pd.DataFrame
    trades: pd.DataFrame  # Ledger records (empty when unguarded)
    balances: dict[str, dict[str, int]]  # account -> currency -> balance
    final_sqrt_price_x96: int
    final_price: float
    events_processed: int
    guard_events: list[dict] = field(default_factory=list)

    def status_counts(self) -> dict[str, int]:
        if self.outcomes.empty:
            return {}
        return self.outcomes["status"].value_counts().to_dict()


class SimulationRunner:
    """
    Replays a scenario of swap requests against a pool with the guard attached.

    Usage:
        runner = SimulationRunner(SimulationConfig(), PoolSetup(), GuardConfig())
        result = runner.run("scenario.csv")
        print(result.status_counts())
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        pool_setup: Optional[PoolSetup] = None,
        guard_config: Optional[GuardConfig] = None,
        guarded: Optional[bool] = None,
    ):
        """
        Initialize runner.

        Args:
            config: Simulation configuration
            pool_setup: Initial pool state
            guard_config: Guard parameters
            guarded: Overrides config.guarded
        """
        self.config = config or SimulationConfig()
        self.pool_setup = pool_setup or PoolSetup()
        self.guard_config = guard_config or GuardConfig()
        self.guarded = self.config.guarded if guarded is None else guarded

        self.pool: SimulatedPool = build_pool(
            self.pool_setup, self.guard_config, self.config, guarded=self.guarded
        )
        self.event_engine = EventEngine()

        # State tracking
        self._refs: dict[str, str] = {}  # trade_ref -> trade id
        self._accounts: set[str] = set()
        self._outcomes: list[dict[str, Any]] = []
        self._guard_events: list[dict] = []

        if self.pool.guard is not None:
            self.pool.guard.on_event(self._record_guard_event)

    def run(self, scenario: Union[str, Path, pd.DataFrame]) -> SimulationResult:
        """
        Run a scenario to completion.

        Args:
            scenario: CSV path or DataFrame

        Returns:
            SimulationResult
        """
        df = load_scenario(scenario)
        logger.info(
            f"Starting simulation: {len(df)} requests, "
            f"{'guarded' if self.guarded else 'unguarded'} pool"
        )

        self.event_engine.on(EventType.SWAP, self._handle_swap)
        self.event_engine.on(EventType.EXECUTE, self._handle_execute)
        self.event_engine.on(EventType.CANCEL, self._handle_cancel)
        self.event_engine.load_scenario(df, self.config.start_time)

        for _ in self.event_engine.run():
            pass

        logger.info(f"Simulation complete: {self.event_engine.events_processed} events processed")

        guard = self.pool.guard
        trades = guard.ledger.to_dataframe() if guard is not None else pd.DataFrame()

        return SimulationResult(
            config=self.config,
            pool_setup=self.pool_setup,
            guard_config=self.guard_config,
            guarded=self.guarded,
            outcomes=pd.DataFrame(self._outcomes, columns=OUTCOME_COLUMNS, dtype=object),
            trades=trades,
            balances={a: self.pool.vault.balances(a) for a in sorted(self._accounts)},
            final_sqrt_price_x96=self.pool.sqrt_price_x96,
            final_price=self.pool.price,
            events_processed=self.event_engine.events_processed,
            guard_events=list(self._guard_events),
        )

    def _handle_swap(self, event: Event):
        row = event.data
        self._advance(event.timestamp)
        self._accounts.add(event.account)
        self.pool.fund(event.account)

        try:
            result = self.pool.router.swap_exact_input(
                event.account,
                self.pool.key,
                Direction(row["direction"]),
                row["amount_in"],
                min_amount_out=row["min_amount_out"],
            )
        except (SwapGuardError, PoolError) as e:
            logger.warning(f"Swap from {event.account} failed: {e}")
            self._record(event, "failed", amount_in=row["amount_in"], error=e)
            return

        if not result.paused:
            self._record(event, "filled", amount_in=result.amount_in, amount_out=result.amount_out)
            return

        trade = self.pool.guard.get_pending_trade(result.trade_id)
        if row["trade_ref"]:
            self._refs[row["trade_ref"]] = trade.id

        self._record(
            event,
            "paused",
            trade_id=trade.id,
            amount_in=trade.amount_in,
            valid_after=trade.valid_after,
            valid_until=trade.valid_until,
        )

        if self.config.auto_execute:
            self.event_engine.schedule(
                timestamp=trade.valid_after + self.config.execute_delay,
                event_type=EventType.EXECUTE,
                data={"trade_id": trade.id, "trade_ref": row["trade_ref"], "action": "execute"},
                account=self.config.keeper_address,
            )

    def _handle_execute(self, event: Event):
        self._advance(event.timestamp)
        self._accounts.add(event.account)

        trade_id = self._resolve(event)
        if trade_id is None:
            return

        try:
            receipt = self.pool.guard.execute(trade_id, event.account)
        except (SwapGuardError, PoolError) as e:
            self._record(event, "failed", trade_id=trade_id, error=e)
            return

        self._record(
            event,
            "executed",
            trade_id=trade_id,
            amount_in=receipt.amount_in,
            amount_out=receipt.amount_out,
            fee=receipt.fee,
            refund=receipt.refund,
        )

    def _handle_cancel(self, event: Event):
        self._advance(event.timestamp)
        self._accounts.add(event.account)

        trade_id = self._resolve(event)
        if trade_id is None:
            return

        try:
            trade = self.pool.guard.cancel(trade_id, event.account)
        except (SwapGuardError, PoolError) as e:
            self._record(event, "failed", trade_id=trade_id, error=e)
            return

        self._record(event, "cancelled", trade_id=trade_id, refund=trade.amount_in)

    def _resolve(self, event: Event) -> Optional[str]:
        """Trade id an execute/cancel event refers to, recording a skip if there is none."""
        if self.pool.guard is None:
            self._record(event, "skipped", error="pool has no guard")
            return None

        trade_id = event.data.get("trade_id") or self._refs.get(event.data.get("trade_ref", ""))
        if trade_id is None:
            self._record(event, "skipped", error=f"unknown trade_ref {event.data.get('trade_ref')!r}")
        return trade_id

    def _advance(self, timestamp: int):
        if timestamp > self.pool.clock.now():
            self.pool.clock.set(timestamp)

    def _record(self, event: Event, status: str, error: Any = None, **values):
        row = {column: None for column in OUTCOME_COLUMNS}
        row.update(
            timestamp=event.timestamp,
            account=event.account,
            action=event.event_type.value,
            trade_ref=event.data.get("trade_ref", "") if event.data else "",
            status=status,
        )
        row.update(values)
        if error is not None:
            row["error"] = type(error).__name__ if isinstance(error, Exception) else str(error)
        self._outcomes.append(row)

    def _record_guard_event(self, event: GuardEvent):
        self._guard_events.append({"timestamp": self.pool.clock.now(), **event_to_dict(event)})
