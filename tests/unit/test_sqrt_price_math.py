"""
Unit tests for concentrated-liquidity price math.
"""

import pytest

from swapguard.pool.sqrt_price_math import (
    MAX_SQRT_PRICE,
    MIN_SQRT_PRICE,
    Q96,
    compute_swap_step,
    get_amount0_delta,
    get_amount1_delta,
    mul_div,
    mul_div_rounding_up,
    price_from_sqrt_price_x96,
    sqrt_price_x96_from_price,
)


class TestMulDiv:
    """Tests for full-width multiply-divide."""

    def test_rounds_down(self):
        """mul_div should floor the quotient."""
        assert mul_div(7, 3, 2) == 10

    def test_rounding_up(self):
        """mul_div_rounding_up should ceil inexact quotients only."""
        assert mul_div_rounding_up(7, 3, 2) == 11
        assert mul_div_rounding_up(6, 3, 2) == 9

    def test_no_overflow_on_wide_products(self):
        """Products wider than 256 bits should still divide exactly."""
        a = 2**200
        assert mul_div(a, a, a) == a

    def test_zero_denominator(self):
        """Division by zero should raise."""
        with pytest.raises(ZeroDivisionError):
            mul_div(1, 1, 0)


class TestPriceConversion:
    """Tests for price <-> sqrt price conversion."""

    def test_unit_price(self):
        """Price 1.0 should map to exactly 2^96."""
        assert sqrt_price_x96_from_price(1.0) == Q96

    def test_price_four(self):
        """Price 4.0 should map to 2 * 2^96."""
        assert sqrt_price_x96_from_price(4.0) == 2 * Q96

    def test_round_trip_close(self):
        """Converting back should recover the price closely."""
        price = 1234.5
        assert price_from_sqrt_price_x96(sqrt_price_x96_from_price(price)) == pytest.approx(price)

    def test_rejects_non_positive(self):
        """Non-positive prices are invalid."""
        with pytest.raises(ValueError):
            sqrt_price_x96_from_price(0)


class TestAmountDeltas:
    """Tests for amount deltas between prices."""

    def test_amount1_delta(self):
        """amount1 between P and 2P is L * (sqrtB - sqrtA)."""
        liquidity = 10**18
        assert get_amount1_delta(Q96, 2 * Q96, liquidity, False) == liquidity

    def test_amount0_delta(self):
        """amount0 between sqrt 1 and sqrt 2 (x96) is L / 2."""
        liquidity = 10**18
        assert get_amount0_delta(Q96, 2 * Q96, liquidity, False) == liquidity // 2

    def test_round_up_never_smaller(self):
        """Rounding up should be >= rounding down."""
        a, b, liquidity = Q96, Q96 + 12345, 10**18 + 7
        assert get_amount0_delta(a, b, liquidity, True) >= get_amount0_delta(a, b, liquidity, False)
        assert get_amount1_delta(a, b, liquidity, True) >= get_amount1_delta(a, b, liquidity, False)


class TestComputeSwapStep:
    """Tests for a single exact-input swap step."""

    def test_zero_for_one_consumes_exact_input(self):
        """Without reaching the limit, input plus fee equals the amount given."""
        amount = 10**18
        sqrt_next, amount_in, amount_out, fee = compute_swap_step(
            Q96, MIN_SQRT_PRICE + 1, 10**21, amount, 3000
        )

        assert amount_in + fee == amount
        assert sqrt_next < Q96
        assert 0 < amount_out < amount

    def test_one_for_zero_moves_price_up(self):
        """Selling currency1 should raise the price."""
        sqrt_next, amount_in, amount_out, fee = compute_swap_step(
            Q96, MAX_SQRT_PRICE - 1, 10**21, 10**18, 3000
        )

        assert sqrt_next > Q96
        assert amount_in + fee == 10**18

    def test_fee_is_charged(self):
        """Output with a fee should be below output without one."""
        _, _, out_with_fee, _ = compute_swap_step(Q96, MIN_SQRT_PRICE + 1, 10**21, 10**18, 3000)
        _, _, out_no_fee, _ = compute_swap_step(Q96, MIN_SQRT_PRICE + 1, 10**21, 10**18, 0)

        assert out_with_fee < out_no_fee

    def test_stops_at_price_limit(self):
        """A tight limit should stop the swap with input left over."""
        limit = Q96 - Q96 // 1000  # ~0.2% price move
        amount = 10**20
        sqrt_next, amount_in, amount_out, fee = compute_swap_step(Q96, limit, 10**21, amount, 3000)

        assert sqrt_next == limit
        assert amount_in + fee < amount
