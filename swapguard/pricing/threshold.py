"""
Large-Trade Threshold.

A trade is "large" when its input strictly exceeds a basis-point fraction
of the estimated reserve of the currency being sold. The threshold is
recomputed from live pool state on every request, so thin pools escrow
proportionally smaller trades.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from swapguard.pool.schemas import Direction, PoolState

from .reserves import ReserveEstimate, ReserveEstimator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeClassification:
    """Result of classifying one trade request."""
    is_large: bool
    amount_in: int
    threshold: int
    reserve: int
    direction: Direction
    can_classify: bool  # False when the pool has no liquidity

    @property
    def utilisation_bps(self) -> float:
        """Input as basis points of the sold-side reserve."""
        if self.reserve == 0:
            return 0.0
        return self.amount_in * 10_000 / self.reserve


class ThresholdEvaluator:
    """
    Classifies trades against a dynamic, reserve-derived threshold.

    Usage:
        evaluator = ThresholdEvaluator(threshold_bps=100)
        result = evaluator.classify(pool_state, Direction.ZERO_FOR_ONE, amount_in)
        if result.is_large:
            # escrow
    """

    def __init__(
        self,
        threshold_bps: int = 100,
        bps_denominator: int = 10_000,
        estimator: Optional[ReserveEstimator] = None,
    ):
        """
        Initialize threshold evaluator.

        Args:
            threshold_bps: Fraction of the reserve, in basis points, above which a trade is large
            bps_denominator: Basis-point denominator
            estimator: Reserve estimator
        """
        if not 0 < threshold_bps <= bps_denominator:
            raise ValueError(f"threshold_bps must be in (0, {bps_denominator}]")
        self.threshold_bps = threshold_bps
        self.bps_denominator = bps_denominator
        self.estimator = estimator or ReserveEstimator()

    def threshold_for(self, reserve: int) -> int:
        return reserve * self.threshold_bps // self.bps_denominator

    def classify(
        self,
        state: PoolState,
        direction: Direction,
        amount_in: int,
    ) -> TradeClassification:
        """
        Classify a trade against the pool's current depth.

        Args:
            state: Live pool state
            direction: Which currency is sold
            amount_in: Exact input amount

        Returns:
            TradeClassification; never large when the pool has no liquidity
        """
        estimate = self.estimator.estimate(state)
        return self.classify_estimate(estimate, direction, amount_in)

    def classify_estimate(
        self,
        estimate: ReserveEstimate,
        direction: Direction,
        amount_in: int,
    ) -> TradeClassification:
        reserve = estimate.reserve_for(direction)
        threshold = self.threshold_for(reserve)

        if not estimate.can_classify:
            logger.debug("Pool has no liquidity; trade not classified as large")
            return TradeClassification(
                is_large=False,
                amount_in=amount_in,
                threshold=0,
                reserve=0,
                direction=direction,
                can_classify=False,
            )

        return TradeClassification(
            is_large=amount_in > threshold,
            amount_in=amount_in,
            threshold=threshold,
            reserve=reserve,
            direction=direction,
            can_classify=True,
        )
