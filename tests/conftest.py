"""
Pytest configuration and shared fixtures.
"""

import pytest

from swapguard.escrow.config import GuardConfig
from swapguard.escrow.guard import SandwichGuard
from swapguard.pool.context import HostEntropy, ManualClock
from swapguard.pool.engine import InMemoryPoolEngine
from swapguard.pool.router import SwapRouter
from swapguard.pool.schemas import PoolKey
from swapguard.pool.sqrt_price_math import Q96
from swapguard.pool.vault import TokenVault

START_TIME = 1_700_000_000
LIQUIDITY = 10**21  # At price 1.0 both virtual reserves are 1e21
THRESHOLD = 10**19  # 100 bps of the reserve
INITIAL_BALANCE = 10**24

SMALL_AMOUNT = 10**18
LARGE_AMOUNT = 5 * 10**19


@pytest.fixture
def clock() -> ManualClock:
    """Manual host clock starting at a fixed timestamp."""
    return ManualClock(START_TIME)


@pytest.fixture
def entropy() -> HostEntropy:
    """Deterministic entropy so windows are reproducible."""
    return HostEntropy(lambda: bytes(32))


@pytest.fixture
def vault() -> TokenVault:
    """Vault with two funded traders."""
    vault = TokenVault()
    for account in ("alice", "bob"):
        vault.mint("TOKEN0", account, INITIAL_BALANCE)
        vault.mint("TOKEN1", account, INITIAL_BALANCE)
    return vault


@pytest.fixture
def engine(vault, clock) -> InMemoryPoolEngine:
    return InMemoryPoolEngine(vault, clock=clock)


@pytest.fixture
def guard_config() -> GuardConfig:
    return GuardConfig()


@pytest.fixture
def guard(engine, vault, guard_config, clock, entropy) -> SandwichGuard:
    """Sandwich guard with default parameters."""
    return SandwichGuard(engine, vault, guard_config, clock=clock, entropy=entropy)


@pytest.fixture
def pool_key(engine, guard) -> PoolKey:
    """Guarded pool at price 1.0 with 1e21 liquidity."""
    key = PoolKey("TOKEN0", "TOKEN1", 3000, hooks=guard)
    engine.initialize(key, sqrt_price_x96=Q96, liquidity=LIQUIDITY)
    return key


@pytest.fixture
def plain_key(engine) -> PoolKey:
    """Unguarded pool at price 1.0 with 1e21 liquidity."""
    key = PoolKey("TOKEN0", "TOKEN1", 3000)
    engine.initialize(key, sqrt_price_x96=Q96, liquidity=LIQUIDITY)
    return key


@pytest.fixture
def router(engine) -> SwapRouter:
    return SwapRouter(engine)
