"""
Simulated host environment: vault, clock, pool engine and (optionally) the guard.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from swapguard.escrow.config import GuardConfig
from swapguard.escrow.guard import SandwichGuard
from swapguard.pool.context import HostEntropy, ManualClock
from swapguard.pool.engine import InMemoryPoolEngine
from swapguard.pool.router import SwapRouter
from swapguard.pool.schemas import PoolKey
from swapguard.pool.sqrt_price_math import price_from_sqrt_price_x96, sqrt_price_x96_from_price
from swapguard.pool.vault import TokenVault

from .config import PoolSetup, SimulationConfig

logger = logging.getLogger(__name__)


@dataclass
class SimulatedPool:
    """Everything a scenario needs to trade against one pool."""
    vault: TokenVault
    clock: ManualClock
    engine: InMemoryPoolEngine
    router: SwapRouter
    key: PoolKey
    guard: Optional[SandwichGuard]
    initial_balance: int

    @property
    def pool_id(self) -> str:
        return self.key.pool_id

    @property
    def sqrt_price_x96(self) -> int:
        return self.engine.get_pool_state(self.pool_id).sqrt_price_x96

    @property
    def price(self) -> float:
        return price_from_sqrt_price_x96(self.sqrt_price_x96)

    def fund(self, account: str):
        """Mint the initial balance of both currencies to an account seen for the first time."""
        if self.vault.balances(account):
            return
        self.vault.mint(self.key.currency0, account, self.initial_balance)
        self.vault.mint(self.key.currency1, account, self.initial_balance)

    def balance(self, account: str, currency: str) -> int:
        return self.vault.balance_of(account, currency)


def build_pool(
    pool_setup: Optional[PoolSetup] = None,
    guard_config: Optional[GuardConfig] = None,
    sim_config: Optional[SimulationConfig] = None,
    guarded: Optional[bool] = None,
) -> SimulatedPool:
    """
    Create a pool, with the guard attached unless guarded is False.

    Args:
        pool_setup: Currencies, fee, price and liquidity
        guard_config: Guard parameters
        sim_config: Start time, balances and entropy seed
        guarded: Overrides sim_config.guarded

    Returns:
        SimulatedPool
    """
    pool_setup = pool_setup or PoolSetup()
    sim_config = sim_config or SimulationConfig()
    if guarded is None:
        guarded = sim_config.guarded

    vault = TokenVault()
    clock = ManualClock(sim_config.start_time)
    engine = InMemoryPoolEngine(vault, clock=clock)

    guard = None
    if guarded:
        rng = np.random.default_rng(sim_config.seed)
        guard = SandwichGuard(
            engine,
            vault,
            config=guard_config or GuardConfig(),
            clock=clock,
            entropy=HostEntropy(lambda: rng.bytes(32)),
        )

    key = PoolKey(pool_setup.currency0, pool_setup.currency1, pool_setup.fee_pips, hooks=guard)
    engine.initialize(key, sqrt_price_x96_from_price(pool_setup.price), pool_setup.liquidity)

    logger.debug(
        f"Simulated pool {key.pool_id[:10]} ({'guarded' if guarded else 'unguarded'}) "
        f"price={pool_setup.price} L={pool_setup.liquidity}"
    )

    return SimulatedPool(
        vault=vault,
        clock=clock,
        engine=engine,
        router=SwapRouter(engine),
        key=key,
        guard=guard,
        initial_balance=sim_config.initial_balance,
    )
