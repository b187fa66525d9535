"""
Unit tests for reserve estimation and large-trade classification.
"""

import pytest

from swapguard.pool.schemas import Direction, PoolState
from swapguard.pool.sqrt_price_math import Q96
from swapguard.pricing.reserves import ReserveEstimator
from swapguard.pricing.threshold import ThresholdEvaluator


def make_state(sqrt_price_x96: int = Q96, liquidity: int = 10**21) -> PoolState:
    return PoolState(pool_id="0x00", sqrt_price_x96=sqrt_price_x96, liquidity=liquidity, fee=3000)


class TestReserveEstimator:
    """Tests for ReserveEstimator."""

    def test_unit_price_reserves_equal_liquidity(self):
        """At price 1.0 both reserves equal L."""
        estimate = ReserveEstimator().estimate(make_state())

        assert estimate.reserve0 == 10**21
        assert estimate.reserve1 == 10**21

    def test_price_four(self):
        """At sqrt price 2 (price 4): reserve0 = L/2, reserve1 = 2L."""
        estimate = ReserveEstimator().estimate(make_state(sqrt_price_x96=2 * Q96, liquidity=1000))

        assert estimate.reserve0 == 500
        assert estimate.reserve1 == 2000

    def test_rounds_down(self):
        """Inexact reserves are floored."""
        estimate = ReserveEstimator().estimate(make_state(sqrt_price_x96=3 * Q96, liquidity=10))

        assert estimate.reserve0 == 3  # 10 / 3
        assert estimate.reserve1 == 30

    def test_zero_liquidity(self):
        """A pool without liquidity has no reserves and cannot classify."""
        estimate = ReserveEstimator().estimate(make_state(liquidity=0))

        assert estimate.reserve0 == 0
        assert estimate.reserve1 == 0
        assert not estimate.can_classify

    def test_reserve_for_direction(self):
        """The sold-side reserve depends on direction."""
        estimate = ReserveEstimator().estimate(make_state(sqrt_price_x96=2 * Q96, liquidity=1000))

        assert estimate.reserve_for(Direction.ZERO_FOR_ONE) == 500
        assert estimate.reserve_for(Direction.ONE_FOR_ZERO) == 2000

    def test_rejects_bad_price(self):
        with pytest.raises(ValueError):
            ReserveEstimator().from_price(0, 10)


class TestThresholdEvaluator:
    """Tests for ThresholdEvaluator."""

    def test_threshold_is_bps_of_reserve(self):
        """100 bps of 1e21 is 1e19."""
        evaluator = ThresholdEvaluator(threshold_bps=100)
        assert evaluator.threshold_for(10**21) == 10**19

    def test_threshold_floors(self):
        """Threshold arithmetic rounds down."""
        evaluator = ThresholdEvaluator(threshold_bps=100)
        assert evaluator.threshold_for(199) == 1

    def test_equal_to_threshold_is_not_large(self):
        """Only amounts strictly above the threshold are large."""
        evaluator = ThresholdEvaluator(threshold_bps=100)
        result = evaluator.classify(make_state(), Direction.ZERO_FOR_ONE, 10**19)

        assert not result.is_large
        assert result.threshold == 10**19

    def test_above_threshold_is_large(self):
        """One unit above the threshold is large."""
        evaluator = ThresholdEvaluator(threshold_bps=100)
        result = evaluator.classify(make_state(), Direction.ZERO_FOR_ONE, 10**19 + 1)

        assert result.is_large
        assert result.can_classify

    def test_direction_uses_sold_reserve(self):
        """The same amount can be large in one direction only."""
        evaluator = ThresholdEvaluator(threshold_bps=100)
        state = make_state(sqrt_price_x96=2 * Q96, liquidity=10**21)  # reserve0 = 5e20, reserve1 = 2e21
        amount = 10**19  # 2% of reserve0, 0.5% of reserve1

        assert evaluator.classify(state, Direction.ZERO_FOR_ONE, amount).is_large
        assert not evaluator.classify(state, Direction.ONE_FOR_ZERO, amount).is_large

    def test_zero_liquidity_never_large(self):
        """An empty pool classifies nothing as large."""
        evaluator = ThresholdEvaluator(threshold_bps=100)
        result = evaluator.classify(make_state(liquidity=0), Direction.ZERO_FOR_ONE, 10**30)

        assert not result.is_large
        assert not result.can_classify

    def test_threshold_tracks_liquidity(self):
        """Halving liquidity halves the threshold."""
        evaluator = ThresholdEvaluator(threshold_bps=100)
        deep = evaluator.classify(make_state(liquidity=10**21), Direction.ZERO_FOR_ONE, 1)
        thin = evaluator.classify(make_state(liquidity=5 * 10**20), Direction.ZERO_FOR_ONE, 1)

        assert thin.threshold * 2 == deep.threshold

    def test_utilisation_bps(self):
        """Utilisation reports input as bps of the reserve."""
        evaluator = ThresholdEvaluator(threshold_bps=100)
        result = evaluator.classify(make_state(), Direction.ZERO_FOR_ONE, 5 * 10**19)

        assert result.utilisation_bps == pytest.approx(50.0)

    @pytest.mark.parametrize("bps", [0, -1, 10_001])
    def test_invalid_bps(self, bps):
        with pytest.raises(ValueError):
            ThresholdEvaluator(threshold_bps=bps)
