"""
Concentrated-liquidity price math.

Prices are carried as sqrt(currency1 / currency0) in Q64.96 fixed point.
All arithmetic stays in Python integers so nothing is lost to floating
point; every rounding decision favours the pool.
"""

from decimal import Decimal, localcontext

Q96 = 2 ** 96
MIN_SQRT_PRICE = 4295128739
MAX_SQRT_PRICE = 1461446703485210103287273052203988822378723970342
FEE_DENOMINATOR = 1_000_000  # LP fees are quoted in pips


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with a full-width intermediate product."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    return -((-a * b) // denominator)


def div_rounding_up(a: int, b: int) -> int:
    return -((-a) // b)


def sqrt_price_x96_from_price(price: float) -> int:
    """Convert a plain price (currency1 per currency0) into a Q64.96 sqrt price."""
    if price <= 0:
        raise ValueError("price must be positive")
    with localcontext() as ctx:
        ctx.prec = 78
        return int(Decimal(str(price)).sqrt() * Q96)


def price_from_sqrt_price_x96(sqrt_price_x96: int) -> float:
    """Convert a Q64.96 sqrt price back into a plain price."""
    with localcontext() as ctx:
        ctx.prec = 78
        ratio = Decimal(sqrt_price_x96) / Q96
        return float(ratio * ratio)


def get_amount0_delta(sqrt_a: int, sqrt_b: int, liquidity: int, round_up: bool) -> int:
    """Amount of currency0 between two sqrt prices for the given liquidity."""
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a
    if sqrt_a <= 0:
        raise ValueError("sqrt price must be positive")

    numerator1 = liquidity << 96
    numerator2 = sqrt_b - sqrt_a

    if round_up:
        return div_rounding_up(mul_div_rounding_up(numerator1, numerator2, sqrt_b), sqrt_a)
    return mul_div(numerator1, numerator2, sqrt_b) // sqrt_a


def get_amount1_delta(sqrt_a: int, sqrt_b: int, liquidity: int, round_up: bool) -> int:
    """Amount of currency1 between two sqrt prices for the given liquidity."""
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_b - sqrt_a, Q96)
    return mul_div(liquidity, sqrt_b - sqrt_a, Q96)


def get_next_sqrt_price_from_amount0(sqrt_price: int, liquidity: int, amount: int) -> int:
    """Price after adding currency0 to the pool (rounds up, price falls less)."""
    if amount == 0:
        return sqrt_price
    numerator1 = liquidity << 96
    denominator = numerator1 + amount * sqrt_price
    return mul_div_rounding_up(numerator1, sqrt_price, denominator)


def get_next_sqrt_price_from_amount1(sqrt_price: int, liquidity: int, amount: int) -> int:
    """Price after adding currency1 to the pool (rounds down, price rises less)."""
    if amount == 0:
        return sqrt_price
    return sqrt_price + (amount << 96) // liquidity


def get_next_sqrt_price_from_input(
    sqrt_price: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool,
) -> int:
    if sqrt_price <= 0 or liquidity <= 0:
        raise ValueError("sqrt price and liquidity must be positive")
    if zero_for_one:
        return get_next_sqrt_price_from_amount0(sqrt_price, liquidity, amount_in)
    return get_next_sqrt_price_from_amount1(sqrt_price, liquidity, amount_in)


def compute_swap_step(
    sqrt_price_current: int,
    sqrt_price_target: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
) -> tuple[int, int, int, int]:
    """
    Swap an exact input amount within one liquidity range.

    Args:
        sqrt_price_current: Starting sqrt price
        sqrt_price_target: Price the step may not cross (the price limit)
        liquidity: In-range liquidity
        amount_remaining: Exact input still to be swapped (positive)
        fee_pips: LP fee in pips

    Returns:
        (sqrt_price_next, amount_in, amount_out, fee_amount); amount_in
        excludes the fee.
    """
    zero_for_one = sqrt_price_current >= sqrt_price_target
    amount_less_fee = mul_div(amount_remaining, FEE_DENOMINATOR - fee_pips, FEE_DENOMINATOR)

    if zero_for_one:
        amount_in = get_amount0_delta(sqrt_price_target, sqrt_price_current, liquidity, True)
    else:
        amount_in = get_amount1_delta(sqrt_price_current, sqrt_price_target, liquidity, True)

    if amount_less_fee >= amount_in:
        sqrt_price_next = sqrt_price_target
    else:
        sqrt_price_next = get_next_sqrt_price_from_input(
            sqrt_price_current, liquidity, amount_less_fee, zero_for_one
        )

    reached_target = sqrt_price_next == sqrt_price_target

    if zero_for_one:
        if not reached_target:
            amount_in = get_amount0_delta(sqrt_price_next, sqrt_price_current, liquidity, True)
        amount_out = get_amount1_delta(sqrt_price_next, sqrt_price_current, liquidity, False)
    else:
        if not reached_target:
            amount_in = get_amount1_delta(sqrt_price_current, sqrt_price_next, liquidity, True)
        amount_out = get_amount0_delta(sqrt_price_current, sqrt_price_next, liquidity, False)

    if reached_target:
        fee_amount = mul_div_rounding_up(amount_in, fee_pips, FEE_DENOMINATOR - fee_pips)
    else:
        # Whatever was not swapped is kept as fee
        fee_amount = amount_remaining - amount_in

    return sqrt_price_next, amount_in, amount_out, fee_amount
