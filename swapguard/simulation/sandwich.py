"""
Sandwich Attack Simulator.

Plays the classic bundle against a fresh pool, once without and once
with the guard attached:

1. Attacker front-runs: buys the asset the victim is about to buy
2. Victim swaps
3. Attacker back-runs: sells everything the front-run bought

Without the guard the back-run sells into the price the victim pushed
up. With the guard a large victim trade is escrowed, so the back-run
happens before the victim's trade moves the price; the attacker pays
the LP fee twice for nothing. A front-run that is itself large is
escrowed too and never lands ahead of the victim.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

import pandas as pd

from swapguard.escrow.config import GuardConfig
from swapguard.escrow.errors import SwapGuardError
from swapguard.pool.schemas import Direction

from .config import PoolSetup, SimulationConfig
from .environment import SimulatedPool, build_pool

logger = logging.getLogger(__name__)


@dataclass
class SandwichOutcome:
    """Result of one sandwich attempt."""
    guarded: bool
    victim_amount_in: int
    frontrun_amount_in: int
    frontrun_paused: bool
    victim_paused: bool
    backrun_executed: bool
    victim_amount_out: int  # Output the victim ended up with (after executor fee)
    attacker_pnl_in: int  # Net change in the currency the victim sells
    attacker_pnl_out: int  # Net change in the currency the victim buys
    attacker_profit: float  # Both legs valued in the victim's input currency
    executor_fees: int
    final_price: float


@dataclass
class SandwichComparison:
    """Unguarded vs guarded outcome of the same bundle."""
    unguarded: SandwichOutcome
    guarded: SandwichOutcome

    @property
    def profit_prevented(self) -> float:
        return self.unguarded.attacker_profit - self.guarded.attacker_profit

    @property
    def victim_improvement(self) -> int:
        return self.guarded.victim_amount_out - self.unguarded.victim_amount_out

    def to_frame(self) -> pd.DataFrame:
        rows = [asdict(self.unguarded), asdict(self.guarded)]
        return pd.DataFrame(rows, dtype=object).set_index("guarded")


class SandwichSimulator:
    """
    Measures what a sandwich attacker earns with and without the guard.

    Usage:
        sim = SandwichSimulator(PoolSetup(liquidity=10**21), GuardConfig())
        comparison = sim.compare(victim_amount=5 * 10**19, frontrun_amount=2 * 10**19)
        print(comparison.profit_prevented)
    """

    def __init__(
        self,
        pool_setup: Optional[PoolSetup] = None,
        guard_config: Optional[GuardConfig] = None,
        config: Optional[SimulationConfig] = None,
        attacker: str = "attacker",
        victim: str = "victim",
    ):
        self.pool_setup = pool_setup or PoolSetup()
        self.guard_config = guard_config or GuardConfig()
        self.config = config or SimulationConfig()
        self.attacker = attacker
        self.victim = victim

    def compare(
        self,
        victim_amount: int,
        frontrun_amount: int,
        direction: Direction = Direction.ZERO_FOR_ONE,
        victim_min_out: Optional[int] = None,
    ) -> SandwichComparison:
        """Run the same bundle against an unguarded and a guarded pool."""
        return SandwichComparison(
            unguarded=self.run(victim_amount, frontrun_amount, direction, victim_min_out, guarded=False),
            guarded=self.run(victim_amount, frontrun_amount, direction, victim_min_out, guarded=True),
        )

    def run(
        self,
        victim_amount: int,
        frontrun_amount: int,
        direction: Direction = Direction.ZERO_FOR_ONE,
        victim_min_out: Optional[int] = None,
        guarded: bool = True,
    ) -> SandwichOutcome:
        """
        Run one sandwich bundle.

        Args:
            victim_amount: Victim's exact input
            frontrun_amount: Attacker's front-run input (same direction as the victim)
            direction: Victim's trade direction
            victim_min_out: Victim's slippage floor
            guarded: Attach the guard to the pool

        Returns:
            SandwichOutcome
        """
        pool = build_pool(self.pool_setup, self.guard_config, self.config, guarded=guarded)
        pool.fund(self.attacker)
        pool.fund(self.victim)

        currency_in = pool.key.currency_in(direction)
        currency_out = pool.key.currency_out(direction)
        start_in = pool.balance(self.attacker, currency_in)
        start_out = pool.balance(self.attacker, currency_out)
        victim_start_out = pool.balance(self.victim, currency_out)

        # Same block: front-run, victim, back-run
        front = pool.router.swap_exact_input(self.attacker, pool.key, direction, frontrun_amount)
        victim = pool.router.swap_exact_input(
            self.victim, pool.key, direction, victim_amount, min_amount_out=victim_min_out
        )

        backrun_executed = False
        if front.amount_out > 0:
            back_direction = Direction.from_bool(not direction.zero_for_one)
            pool.router.swap_exact_input(self.attacker, pool.key, back_direction, front.amount_out)
            backrun_executed = True

        executor_fees = self._settle_pending(pool)

        pnl_in = pool.balance(self.attacker, currency_in) - start_in
        pnl_out = pool.balance(self.attacker, currency_out) - start_out

        outcome = SandwichOutcome(
            guarded=guarded,
            victim_amount_in=victim_amount,
            frontrun_amount_in=frontrun_amount,
            frontrun_paused=front.paused,
            victim_paused=victim.paused,
            backrun_executed=backrun_executed,
            victim_amount_out=pool.balance(self.victim, currency_out) - victim_start_out,
            attacker_pnl_in=pnl_in,
            attacker_pnl_out=pnl_out,
            attacker_profit=pnl_in + self._value_in_input(pool, direction, pnl_out),
            executor_fees=executor_fees,
            final_price=pool.price,
        )

        logger.info(
            f"Sandwich ({'guarded' if guarded else 'unguarded'}): "
            f"attacker profit={outcome.attacker_profit:.6g} victim out={outcome.victim_amount_out}"
        )
        return outcome

    def _settle_pending(self, pool: SimulatedPool) -> int:
        """Let the keeper execute every escrowed trade in window order."""
        guard = pool.guard
        if guard is None:
            return 0

        fees = 0
        for trade in sorted(guard.ledger.pending(), key=lambda t: t.valid_after):
            if pool.clock.now() < trade.valid_after:
                pool.clock.set(trade.valid_after)
            try:
                receipt = guard.execute(trade.id, self.config.keeper_address)
            except SwapGuardError as e:
                logger.warning(f"Keeper could not settle {trade.id[:10]}: {e}")
                continue
            fees += receipt.fee
        return fees

    @staticmethod
    def _value_in_input(pool: SimulatedPool, direction: Direction, amount_out: int) -> float:
        """Value an amount of the output currency in input units at the final pool price."""
        price = pool.price  # currency1 per currency0
        if direction.zero_for_one:
            return amount_out / price
        return amount_out * price
