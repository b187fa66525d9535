"""
Reserve Estimation from Pool State.

A concentrated-liquidity pool does not hold "reserves" in the
constant-product sense, but liquidity L at sqrt price P implies virtual
reserves near the current price:

    reserve0 = L / sqrt(P)
    reserve1 = L * sqrt(P)

With P carried as a Q64.96 sqrt price these become

    reserve0 = L * 2^96 / sqrtPriceX96
    reserve1 = L * sqrtPriceX96 / 2^96

Both are computed with full-width multiply-then-divide and rounded down,
so the estimate never overstates depth.
"""

from dataclasses import dataclass

from swapguard.pool.schemas import Direction, PoolState
from swapguard.pool.sqrt_price_math import Q96, mul_div


@dataclass(frozen=True)
class ReserveEstimate:
    """Virtual reserves of both currencies near the current price."""
    reserve0: int
    reserve1: int
    sqrt_price_x96: int
    liquidity: int

    @property
    def can_classify(self) -> bool:
        """A pool with no in-range liquidity cannot execute anything."""
        return self.liquidity > 0

    def reserve_for(self, direction: Direction) -> int:
        """Reserve of the currency being sold."""
        return self.reserve0 if direction.zero_for_one else self.reserve1


class ReserveEstimator:
    """
    Derives single-sided reserves from price and liquidity.

    Usage:
        estimator = ReserveEstimator()
        estimate = estimator.estimate(pool_state)
        depth = estimate.reserve_for(Direction.ZERO_FOR_ONE)
    """

    def estimate(self, state: PoolState) -> ReserveEstimate:
        return self.from_price(state.sqrt_price_x96, state.liquidity)

    def from_price(self, sqrt_price_x96: int, liquidity: int) -> ReserveEstimate:
        """
        Estimate reserves.

        Args:
            sqrt_price_x96: Current sqrt price (Q64.96)
            liquidity: Current in-range liquidity

        Returns:
            ReserveEstimate (all zero when liquidity is zero)
        """
        if sqrt_price_x96 <= 0:
            raise ValueError("sqrt price must be positive")
        if liquidity < 0:
            raise ValueError("liquidity must be non-negative")

        if liquidity == 0:
            return ReserveEstimate(0, 0, sqrt_price_x96, 0)

        return ReserveEstimate(
            reserve0=mul_div(liquidity, Q96, sqrt_price_x96),
            reserve1=mul_div(liquidity, sqrt_price_x96, Q96),
            sqrt_price_x96=sqrt_price_x96,
            liquidity=liquidity,
        )
