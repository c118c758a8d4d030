"""
Acceptable-price protection for position orders.

All prices are USD precision (30 decimals) per whole index token. The side
that pays more when the price rises (increase long, decrease short) is
priced off ``max_price`` and gets an upward slippage bound; every other
case uses ``min_price`` and a downward bound.
"""

from __future__ import annotations

from typing import Optional

from synthetics.core.numbers import BASIS_POINTS_DIVISOR, mul_div
from synthetics.market_data.tokens import TokenPrices


def get_should_use_max_price(is_increase: bool, is_long: bool) -> bool:
    return is_long if is_increase else not is_long


def get_mark_price(prices: TokenPrices, is_increase: bool, is_long: bool) -> int:
    return prices.max_price if get_should_use_max_price(is_increase, is_long) else prices.min_price


def get_acceptable_price(
    index_price: int,
    size_delta_usd: int,
    is_increase: bool,
    is_long: bool,
    price_impact_delta: int = 0,
) -> int:
    """``index_price * (size + impact) / size``, with the impact sign flipped on the max-price side."""
    if not price_impact_delta or size_delta_usd <= 0:
        return index_price
    impact = -price_impact_delta if get_should_use_max_price(is_increase, is_long) else price_impact_delta
    return mul_div(index_price, size_delta_usd + impact, size_delta_usd)


def apply_slippage_to_price(allowed_slippage: int, price: int, is_increase: bool, is_long: bool) -> int:
    if not 0 <= allowed_slippage < BASIS_POINTS_DIVISOR:
        raise ValueError(f"allowed slippage out of range: {allowed_slippage} bps")
    if get_should_use_max_price(is_increase, is_long):
        bps = BASIS_POINTS_DIVISOR + allowed_slippage
    else:
        bps = BASIS_POINTS_DIVISOR - allowed_slippage
    return mul_div(price, bps, BASIS_POINTS_DIVISOR)


def get_acceptable_price_for_position_order(
    *,
    is_increase: bool,
    is_long: bool,
    index_prices: TokenPrices,
    size_delta_usd: int,
    allowed_slippage: int,
    price_impact_delta: int = 0,
    trigger_price: Optional[int] = None,
) -> int:
    """
    Worst price the order may execute at.

    The base is the trigger price for limit orders and the mark price
    otherwise; price impact then slippage are applied on top of it.
    """
    base = trigger_price if trigger_price else get_mark_price(index_prices, is_increase, is_long)
    price = get_acceptable_price(base, size_delta_usd, is_increase, is_long, price_impact_delta)
    return apply_slippage_to_price(allowed_slippage, price, is_increase, is_long)
