"""
Market data package.

Token, market and price snapshot types plus the async oracle price feed.
"""

from synthetics.market_data.markets import Market, MarketsInfo
from synthetics.market_data.price_feed import AsyncPriceFeed
from synthetics.market_data.tokens import (
    NATIVE_TOKEN_ADDRESS,
    PriceSnapshot,
    Token,
    TokenData,
    TokenPrices,
)

__all__ = [
    "Market",
    "MarketsInfo",
    "AsyncPriceFeed",
    "NATIVE_TOKEN_ADDRESS",
    "PriceSnapshot",
    "Token",
    "TokenData",
    "TokenPrices",
]
