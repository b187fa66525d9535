"""
Swap Router - submits trades to the pool engine on behalf of a trader.

Settles whatever the swap leaves owed in either direction, so the
trader sees either an immediate fill or a paused trade whose input has
been claimed by the pool's hook.
"""

import logging
from typing import Optional

from .engine import PoolEngine
from .schemas import (
    BalanceDelta,
    Direction,
    PoolKey,
    SwapParams,
    SwapResult,
    derive_trade_id,
    encode_min_amount_out,
)
from .sqrt_price_math import MAX_SQRT_PRICE, MIN_SQRT_PRICE

logger = logging.getLogger(__name__)


def default_price_limit(direction: Direction) -> int:
    """Loosest valid price limit for a direction."""
    return MIN_SQRT_PRICE + 1 if direction.zero_for_one else MAX_SQRT_PRICE - 1


class SwapRouter:
    """
    Exact-input swap router.

    Usage:
        router = SwapRouter(engine)
        result = router.swap_exact_input("alice", key, Direction.ZERO_FOR_ONE, 10**18)
        if result.paused:
            print(f"Trade escrowed as {result.trade_id}")
    """

    def __init__(self, engine: PoolEngine):
        self.engine = engine

    def swap_exact_input(
        self,
        trader: str,
        key: PoolKey,
        direction: Direction,
        amount_in: int,
        price_limit: Optional[int] = None,
        min_amount_out: Optional[int] = None,
    ) -> SwapResult:
        """
        Swap an exact input amount.

        Args:
            trader: Account paying the input and receiving the output
            key: Pool key
            direction: Which currency is sold
            amount_in: Exact input amount
            price_limit: Worst acceptable sqrt price (defaults to no limit)
            min_amount_out: Slippage floor forwarded to the hook

        Returns:
            SwapResult; paused results carry the reconstructed trade id
        """
        if amount_in <= 0:
            raise ValueError("amount_in must be positive")

        params = SwapParams(
            zero_for_one=direction.zero_for_one,
            amount_specified=-amount_in,
            sqrt_price_limit_x96=price_limit or default_price_limit(direction),
        )
        hook_data = encode_min_amount_out(min_amount_out) if min_amount_out is not None else b""

        # Public inputs needed to rebuild the id of a paused trade
        nonce = getattr(key.hooks, "pending_count", None)
        timestamp = self.engine.clock.now()

        def _swap_and_settle() -> BalanceDelta:
            delta = self.engine.swap(trader, key, params, hook_data)
            self._settle(trader, key, delta)
            return delta

        delta = self.engine.unlock(_swap_and_settle)

        paid = delta.amount_in(direction)
        received = delta.amount_out(direction)
        # The hook's pending count only moves when it escrows this trade
        paused = nonce is not None and getattr(key.hooks, "pending_count") > nonce

        trade_id = None
        if paused:
            trade_id = derive_trade_id(trader, key.pool_id, amount_in, timestamp, nonce)

        if paused:
            logger.info(f"Swap paused for {trader}: {amount_in} {key.currency_in(direction)}")
        else:
            logger.info(
                f"Swap filled for {trader}: {paid} {key.currency_in(direction)} -> "
                f"{received} {key.currency_out(direction)}"
            )

        return SwapResult(
            paused=paused,
            amount_in=paid,
            amount_out=received,
            delta=delta,
            trade_id=trade_id,
        )

    def _settle(self, trader: str, key: PoolKey, delta: BalanceDelta):
        for currency, amount in ((key.currency0, delta.amount0), (key.currency1, delta.amount1)):
            if amount < 0:
                self.engine.settle(trader, currency, -amount)
            elif amount > 0:
                self.engine.take(trader, currency, amount)
