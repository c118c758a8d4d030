"""
Pytest configuration and fixtures.
Adds the repo root to Python path so tests can import the synthetics package.
"""

import sys
from pathlib import Path

import pytest

repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from synthetics.config.tokens import ARBITRUM, TokenCatalog  # noqa: E402
from synthetics.core.numbers import expand_decimals, parse_value  # noqa: E402
from synthetics.market_data.markets import MarketsInfo  # noqa: E402
from synthetics.market_data.tokens import (  # noqa: E402
    NATIVE_TOKEN_ADDRESS,
    PriceSnapshot,
    TokenPrices,
    normalize_address,
)

WETH = normalize_address("0x82aF49447D8a07e3bd95BD0d56f35241523fBab1")
BTC = normalize_address("0x2f2a2543B76A4166549F7aaB2e75Bef0aefC5B0f")
USDC = normalize_address("0xaf88d065e77c8cC2239327C5EDb3A432268e5831")
ARB = normalize_address("0x912CE59144191C1204E64559FE8253a0e49E6548")
NATIVE = NATIVE_TOKEN_ADDRESS

ETH_MARKET = normalize_address("0x70d95587d40a2caf56bd97485ab3eec10bee6336")
BTC_MARKET = normalize_address("0x47c031236e19d024b42f8ae6780e44a573170703")
ETH_USDC_ALT_MARKET = normalize_address("0x" + "5e" * 20)

ACCOUNT = normalize_address("0x" + "a1" * 20)
ORDER_STORE = normalize_address("0x" + "0d" * 20)
EXCHANGE_ROUTER = normalize_address("0x" + "e7" * 20)
DATA_STORE = normalize_address("0x" + "d5" * 20)


def usd(text: str) -> int:
    return parse_value(text, 30)


@pytest.fixture
def catalog_overrides():
    return {
        ARBITRUM: {
            "markets": [
                {"address": ETH_MARKET, "index": WETH, "long": WETH, "short": USDC, "name": "ETH/USD"},
                {"address": BTC_MARKET, "index": BTC, "long": BTC, "short": USDC, "name": "BTC/USD"},
            ]
        }
    }


@pytest.fixture
def catalog(catalog_overrides):
    return TokenCatalog(catalog_overrides)


@pytest.fixture
def markets_info(catalog):
    return MarketsInfo(catalog.markets(ARBITRUM))


@pytest.fixture
def tokens(catalog):
    return {t.address: t for t in catalog.tokens(ARBITRUM)}


@pytest.fixture
def prices():
    snapshot = PriceSnapshot(
        {
            WETH: TokenPrices(min_price=usd("1800.00"), max_price=usd("1800.10")),
            BTC: TokenPrices(min_price=usd("30000"), max_price=usd("30001")),
            USDC: TokenPrices.single(expand_decimals(1, 30)),
        },
        timestamp_ms=1_700_000_000_000,
    )
    return snapshot.with_native(NATIVE, WETH)
