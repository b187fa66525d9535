"""
Pool Engine - holds reserves and performs price discovery.

The guard only talks to the engine through the PoolEngine interface:
- pool state query (price and liquidity)
- exact-input swap returning signed balance deltas
- custody primitives: settle (pay the pool) and take (withdraw from it)
- unlock, the atomic unit of work every swap and transfer runs inside

InMemoryPoolEngine implements it with single-range concentrated
liquidity, enough to drive the guard in tests and simulations.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .context import Clock, SystemClock
from .errors import (
    AlreadyUnlocked,
    CurrencyNotSettled,
    ManagerLocked,
    PoolAlreadyInitialized,
    PoolError,
    PoolNotInitialized,
    PriceLimitOutOfBounds,
)
from .schemas import BalanceDelta, BeforeSwapResult, PoolKey, PoolState, SwapParams
from .sqrt_price_math import (
    FEE_DENOMINATOR,
    MAX_SQRT_PRICE,
    MIN_SQRT_PRICE,
    Q96,
    compute_swap_step,
    mul_div,
)
from .vault import TokenVault

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SwapHook(ABC):
    """Callback attached to a pool and invoked before every swap."""

    address: str

    @abstractmethod
    def before_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        hook_data: bytes,
    ) -> BeforeSwapResult:
        ...


class PoolEngine(ABC):
    """Interface the guard needs from the liquidity engine."""

    clock: Clock

    @property
    @abstractmethod
    def is_unlocked(self) -> bool:
        """True while a unit of work is open."""
        ...

    @abstractmethod
    def get_pool_state(self, pool_id: str) -> PoolState:
        ...

    @abstractmethod
    def get_pool_key(self, pool_id: str) -> PoolKey:
        ...

    @abstractmethod
    def unlock(self, callback: Callable[[], T]) -> T:
        ...

    @abstractmethod
    def swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        hook_data: bytes = b"",
    ) -> BalanceDelta:
        ...

    @abstractmethod
    def settle(self, account: str, currency: str, amount: int, payer: Optional[str] = None):
        ...

    @abstractmethod
    def take(self, account: str, currency: str, amount: int, recipient: Optional[str] = None):
        ...


@dataclass
class _PoolSlot:
    key: PoolKey
    sqrt_price_x96: int
    liquidity: int
    swaps: int = 0


class InMemoryPoolEngine(PoolEngine):
    """
    Concentrated-liquidity engine over a single, unbounded liquidity range.

    Balance deltas are tracked per (account, currency) while unlocked and
    must all net to zero when the unlock callback returns.

    Usage:
        engine = InMemoryPoolEngine(vault, clock=ManualClock())
        pool_id = engine.initialize(key, sqrt_price_x96=Q96, liquidity=10**21)

        def trade():
            delta = engine.swap("alice", key, params)
            engine.settle("alice", key.currency0, -delta.amount0)
            engine.take("alice", key.currency1, delta.amount1)

        engine.unlock(trade)
    """

    def __init__(
        self,
        vault: TokenVault,
        clock: Optional[Clock] = None,
        address: str = "pool_engine",
    ):
        """
        Initialize pool engine.

        Args:
            vault: Token balances shared with every participant
            clock: Host clock (block time)
            address: Account that holds pool reserves in the vault
        """
        self.vault = vault
        self.clock = clock or SystemClock()
        self.address = address

        self._pools: dict[str, _PoolSlot] = {}
        self._deltas: dict[tuple[str, str], int] = defaultdict(int)
        self._unlocked = False

    def initialize(
        self,
        key: PoolKey,
        sqrt_price_x96: int,
        liquidity: int,
        seed_reserves: bool = True,
    ) -> str:
        """
        Create a pool.

        Args:
            key: Pool key (currencies, fee, hook)
            sqrt_price_x96: Starting price
            liquidity: In-range liquidity
            seed_reserves: Mint the virtual reserves into the engine's vault account

        Returns:
            Pool id
        """
        pool_id = key.pool_id
        if pool_id in self._pools:
            raise PoolAlreadyInitialized(pool_id)
        if not MIN_SQRT_PRICE <= sqrt_price_x96 < MAX_SQRT_PRICE:
            raise PoolError(f"sqrt price out of range: {sqrt_price_x96}")
        if not 0 <= key.fee < FEE_DENOMINATOR:
            raise PoolError(f"invalid fee: {key.fee}")
        if liquidity < 0:
            raise PoolError("liquidity must be non-negative")

        self._pools[pool_id] = _PoolSlot(key=key, sqrt_price_x96=sqrt_price_x96, liquidity=liquidity)

        if seed_reserves and liquidity > 0:
            self.vault.mint(key.currency0, self.address, mul_div(liquidity, Q96, sqrt_price_x96))
            self.vault.mint(key.currency1, self.address, mul_div(liquidity, sqrt_price_x96, Q96))

        logger.info(f"Pool initialized: {pool_id[:10]} price={sqrt_price_x96} L={liquidity}")
        return pool_id

    def get_pool_state(self, pool_id: str) -> PoolState:
        slot = self._get_slot(pool_id)
        return PoolState(
            pool_id=pool_id,
            sqrt_price_x96=slot.sqrt_price_x96,
            liquidity=slot.liquidity,
            fee=slot.key.fee,
        )

    def get_pool_key(self, pool_id: str) -> PoolKey:
        return self._get_slot(pool_id).key

    def set_liquidity(self, pool_id: str, liquidity: int):
        """Replace in-range liquidity (liquidity provision is outside this engine)."""
        if liquidity < 0:
            raise PoolError("liquidity must be non-negative")
        self._get_slot(pool_id).liquidity = liquidity

    @property
    def is_unlocked(self) -> bool:
        return self._unlocked

    def unlock(self, callback: Callable[[], T]) -> T:
        """
        Run callback as one atomic unit of work.

        Raises:
            AlreadyUnlocked: If called from inside another unlock
            CurrencyNotSettled: If any balance delta is non-zero afterwards
        """
        if self._unlocked:
            raise AlreadyUnlocked()

        self._unlocked = True
        try:
            result = callback()
            outstanding = {k: v for k, v in self._deltas.items() if v != 0}
            if outstanding:
                raise CurrencyNotSettled(outstanding)
            return result
        finally:
            self._deltas.clear()
            self._unlocked = False

    def swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        hook_data: bytes = b"",
    ) -> BalanceDelta:
        """
        Swap against a pool.

        Args:
            sender: Account the resulting delta is charged to
            key: Pool key
            params: Swap parameters (exact input only)
            hook_data: Opaque data forwarded to the pool's hook

        Returns:
            BalanceDelta owed by / to the sender
        """
        self._require_unlocked()
        slot = self._get_slot(key.pool_id)

        if params.amount_specified == 0:
            raise PoolError("swap amount cannot be zero")

        hook_result = BeforeSwapResult.passthrough()
        if key.hooks is not None:
            hook_result = key.hooks.before_swap(sender, key, params, hook_data)

        amount_to_swap = params.amount_specified + hook_result.specified_delta

        if amount_to_swap > 0:
            raise PoolError("exact-output swaps are not supported by this engine")

        swap_delta = BalanceDelta()
        if amount_to_swap < 0:
            swap_delta = self._swap(slot, params, -amount_to_swap)

        caller_delta = swap_delta
        if hook_result.specified_delta:
            currency_in = key.currency_in(params.direction)
            hook_share = self._specified_delta(params, hook_result.specified_delta)
            caller_delta = swap_delta - hook_share
            self._account_delta(key.hooks.address, currency_in, hook_result.specified_delta)

        self._account_delta(sender, key.currency0, caller_delta.amount0)
        self._account_delta(sender, key.currency1, caller_delta.amount1)

        return caller_delta

    def settle(self, account: str, currency: str, amount: int, payer: Optional[str] = None):
        """Pay tokens into the pool, crediting the account's delta."""
        self._require_unlocked()
        if amount < 0:
            raise ValueError("settle amount must be non-negative")
        self.vault.transfer(currency, payer or account, self.address, amount)
        self._account_delta(account, currency, amount)

    def take(self, account: str, currency: str, amount: int, recipient: Optional[str] = None):
        """Withdraw tokens from the pool, debiting the account's delta."""
        self._require_unlocked()
        if amount < 0:
            raise ValueError("take amount must be non-negative")
        self._account_delta(account, currency, -amount)
        self.vault.transfer(currency, self.address, recipient or account, amount)

    def delta_of(self, account: str, currency: str) -> int:
        return self._deltas.get((account, currency), 0)

    def _swap(self, slot: _PoolSlot, params: SwapParams, amount_in: int) -> BalanceDelta:
        limit = params.sqrt_price_limit_x96
        current = slot.sqrt_price_x96

        if params.zero_for_one:
            if not MIN_SQRT_PRICE < limit < current:
                raise PriceLimitOutOfBounds(limit, current, True)
        else:
            if not current < limit < MAX_SQRT_PRICE:
                raise PriceLimitOutOfBounds(limit, current, False)

        sqrt_next, step_in, step_out, fee_amount = compute_swap_step(
            current, limit, slot.liquidity, amount_in, slot.key.fee
        )

        slot.sqrt_price_x96 = sqrt_next
        slot.swaps += 1
        consumed = step_in + fee_amount

        logger.debug(
            f"Swap on {slot.key.pool_id[:10]}: in={consumed} out={step_out} "
            f"price {current} -> {sqrt_next}"
        )

        if params.zero_for_one:
            return BalanceDelta(-consumed, step_out)
        return BalanceDelta(step_out, -consumed)

    @staticmethod
    def _specified_delta(params: SwapParams, amount: int) -> BalanceDelta:
        # Exact input: the specified currency is the input currency
        if params.zero_for_one:
            return BalanceDelta(amount, 0)
        return BalanceDelta(0, amount)

    def _account_delta(self, account: str, currency: str, delta: int):
        if delta:
            self._deltas[(account, currency)] += delta

    def _require_unlocked(self):
        if not self._unlocked:
            raise ManagerLocked()

    def _get_slot(self, pool_id: str) -> _PoolSlot:
        slot = self._pools.get(pool_id)
        if slot is None:
            raise PoolNotInitialized(pool_id)
        return slot
