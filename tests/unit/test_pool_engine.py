"""
Unit tests for the in-memory pool engine, token vault and router.
"""

import pytest

from swapguard.pool.context import ManualClock
from swapguard.pool.engine import InMemoryPoolEngine
from swapguard.pool.errors import (
    AlreadyUnlocked,
    CurrencyNotSettled,
    InsufficientBalance,
    ManagerLocked,
    PoolAlreadyInitialized,
    PoolError,
    PoolNotInitialized,
    PriceLimitOutOfBounds,
)
from swapguard.pool.router import SwapRouter
from swapguard.pool.schemas import BalanceDelta, Direction, PoolKey, SwapParams
from swapguard.pool.sqrt_price_math import MIN_SQRT_PRICE, Q96
from swapguard.pool.vault import TokenVault


class TestTokenVault:
    """Tests for TokenVault."""

    def test_mint_and_transfer(self):
        vault = TokenVault()
        vault.mint("USDC", "alice", 1000)
        vault.transfer("USDC", "alice", "bob", 250)

        assert vault.balance_of("alice", "USDC") == 750
        assert vault.balance_of("bob", "USDC") == 250

    def test_insufficient_balance(self):
        """Overdrafts are refused and leave balances unchanged."""
        vault = TokenVault()
        vault.mint("USDC", "alice", 10)

        with pytest.raises(InsufficientBalance):
            vault.transfer("USDC", "alice", "bob", 11)

        assert vault.balance_of("alice", "USDC") == 10

    def test_receive_hook_runs_after_credit(self):
        """The recipient's hook sees the funds already credited."""
        vault = TokenVault()
        vault.mint("USDC", "alice", 10)
        seen = []
        vault.on_receive("bob", lambda currency, sender, amount: seen.append(
            (currency, sender, amount, vault.balance_of("bob", currency))
        ))

        vault.transfer("USDC", "alice", "bob", 4)

        assert seen == [("USDC", "alice", 4, 4)]

    def test_balances(self):
        vault = TokenVault()
        vault.mint("A", "alice", 1)
        vault.mint("B", "alice", 2)
        assert vault.balances("alice") == {"A": 1, "B": 2}


class TestInMemoryPoolEngine:
    """Tests for InMemoryPoolEngine."""

    def test_initialize_seeds_reserves(self, engine, vault, plain_key):
        """Virtual reserves are minted to the engine account."""
        assert vault.balance_of("pool_engine", "TOKEN0") == 10**21
        assert vault.balance_of("pool_engine", "TOKEN1") == 10**21

        state = engine.get_pool_state(plain_key.pool_id)
        assert state.sqrt_price_x96 == Q96
        assert state.liquidity == 10**21

    def test_initialize_twice(self, engine, plain_key):
        with pytest.raises(PoolAlreadyInitialized):
            engine.initialize(plain_key, Q96, 1)

    def test_unknown_pool(self, engine):
        with pytest.raises(PoolNotInitialized):
            engine.get_pool_state("0xmissing")

    def test_swap_requires_unlock(self, engine, plain_key):
        """Swapping outside unlock is refused."""
        params = SwapParams(True, -10**18, MIN_SQRT_PRICE + 1)
        with pytest.raises(ManagerLocked):
            engine.swap("alice", plain_key, params)

    def test_unsettled_deltas_fail(self, engine, plain_key):
        """Ending unlock with an outstanding delta raises."""
        params = SwapParams(True, -10**18, MIN_SQRT_PRICE + 1)

        with pytest.raises(CurrencyNotSettled):
            engine.unlock(lambda: engine.swap("alice", plain_key, params))

        assert not engine.is_unlocked

    def test_nested_unlock(self, engine):
        with pytest.raises(AlreadyUnlocked):
            engine.unlock(lambda: engine.unlock(lambda: None))

    def test_zero_amount(self, engine, plain_key):
        params = SwapParams(True, 0, MIN_SQRT_PRICE + 1)
        with pytest.raises(PoolError):
            engine.unlock(lambda: engine.swap("alice", plain_key, params))

    def test_price_limit_wrong_side(self, engine, plain_key):
        """A zero_for_one limit above the current price is out of bounds."""
        params = SwapParams(True, -10**18, Q96 + 1)

        with pytest.raises(PriceLimitOutOfBounds):
            engine.unlock(lambda: engine.swap("alice", plain_key, params))

    def test_swap_delta_signs(self, engine, plain_key):
        """Caller owes input (negative) and is owed output (positive)."""
        params = SwapParams(True, -10**18, MIN_SQRT_PRICE + 1)

        def trade():
            delta = engine.swap("alice", plain_key, params)
            engine.settle("alice", "TOKEN0", -delta.amount0)
            engine.take("alice", "TOKEN1", delta.amount1)
            return delta

        delta = engine.unlock(trade)

        assert delta.amount0 == -10**18
        assert 0 < delta.amount1 < 10**18
        assert engine.get_pool_state(plain_key.pool_id).sqrt_price_x96 < Q96

    def test_pool_id_ignores_hook_object_but_not_address(self):
        """Pool ids depend on the hook's address."""
        class Hook:
            address = "guard"

        a = PoolKey("A", "B", 3000)
        b = PoolKey("A", "B", 3000, hooks=Hook())

        assert a.pool_id != b.pool_id
        assert a.pool_id == PoolKey("A", "B", 3000).pool_id


class TestSwapRouter:
    """Tests for SwapRouter."""

    def test_exact_input_fill(self, router, vault, plain_key):
        """An unguarded swap moves balances immediately."""
        before0 = vault.balance_of("alice", "TOKEN0")
        before1 = vault.balance_of("alice", "TOKEN1")

        result = router.swap_exact_input("alice", plain_key, Direction.ZERO_FOR_ONE, 10**18)

        assert not result.paused
        assert result.trade_id is None
        assert result.amount_in == 10**18
        assert vault.balance_of("alice", "TOKEN0") == before0 - 10**18
        assert vault.balance_of("alice", "TOKEN1") == before1 + result.amount_out

    def test_rejects_non_positive(self, router, plain_key):
        with pytest.raises(ValueError):
            router.swap_exact_input("alice", plain_key, Direction.ZERO_FOR_ONE, 0)

    def test_insufficient_funds(self, router, plain_key):
        """A trader who cannot pay fails the whole unit of work."""
        with pytest.raises(InsufficientBalance):
            router.swap_exact_input("carol", plain_key, Direction.ZERO_FOR_ONE, 10**18)


class TestBalanceDelta:
    """Tests for BalanceDelta helpers."""

    def test_amounts_by_direction(self):
        delta = BalanceDelta(-100, 95)
        assert delta.amount_in(Direction.ZERO_FOR_ONE) == 100
        assert delta.amount_out(Direction.ZERO_FOR_ONE) == 95

    def test_arithmetic(self):
        assert BalanceDelta(1, 2) + BalanceDelta(3, 4) == BalanceDelta(4, 6)
        assert BalanceDelta(1, 2) - BalanceDelta(3, 4) == BalanceDelta(-2, -2)


def test_engine_default_clock():
    """An engine without an explicit clock uses wall-clock time."""
    engine = InMemoryPoolEngine(TokenVault())
    assert engine.clock.now() > 1_600_000_000


def test_manual_clock_cannot_go_backwards():
    clock = ManualClock(100)
    clock.advance(5)
    assert clock.now() == 105
    with pytest.raises(ValueError):
        clock.set(50)
