"""
Oracle price feed over a mocked keeper API.
"""

import asyncio

import httpx
import pytest

from synthetics.config.tokens import ARBITRUM
from synthetics.core.event_bus import EventBus, EventType
from synthetics.market_data.price_feed import AsyncPriceFeed

from conftest import NATIVE, USDC, WETH, usd

TICKERS = [
    {"tokenAddress": WETH.lower(), "tokenSymbol": "ETH", "minPrice": str(usd("1800") // 10**18), "maxPrice": str(usd("1800.1") // 10**18)},
    {"tokenAddress": USDC, "tokenSymbol": "USDC", "minPrice": str(10**24), "maxPrice": str(10**24)},
    {"tokenAddress": "0x" + "99" * 20, "tokenSymbol": "???", "minPrice": "1", "maxPrice": "1"},
]


def make_feed(catalog, handler, bus=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AsyncPriceFeed("https://oracle.test/", ARBITRUM, catalog, client=client, event_bus=bus)


def test_fetch_parses_tickers(catalog):
    bus = EventBus()
    updates = []
    bus.subscribe(EventType.PRICES_UPDATED, updates.append)

    def handler(request):
        assert request.url.path == "/prices/tickers"
        return httpx.Response(200, json=TICKERS)

    snapshot = asyncio.run(make_feed(catalog, handler, bus).fetch())

    assert snapshot[WETH].min_price == usd("1800")
    assert snapshot[WETH].max_price == usd("1800.1")
    assert snapshot[USDC].min_price == usd("1")
    # native mirrors wrapped; unknown tokens are dropped
    assert snapshot[NATIVE] == snapshot[WETH]
    assert len(snapshot) == 3
    assert updates[0].data["snapshot"] is snapshot


def test_http_error_propagates(catalog):
    feed = make_feed(catalog, lambda request: httpx.Response(503))
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(feed.fetch())


def test_unexpected_payload(catalog):
    feed = make_feed(catalog, lambda request: httpx.Response(200, json={"error": "nope"}))
    with pytest.raises(ValueError):
        asyncio.run(feed.fetch())


def test_get_single_token(catalog):
    feed = make_feed(catalog, lambda request: httpx.Response(200, json=TICKERS))
    prices = asyncio.run(feed.get(USDC.lower()))
    assert prices.max_price == usd("1")


def test_malformed_ticker_is_skipped(catalog):
    tickers = [
        {"tokenAddress": WETH, "tokenSymbol": "ETH", "minPrice": str(usd("1800") // 10**18)},
        {"tokenAddress": USDC, "tokenSymbol": "USDC", "minPrice": "oops", "maxPrice": str(10**24)},
        TICKERS[1],
    ]
    snapshot = make_feed(catalog, lambda request: httpx.Response(200, json=tickers)).parse_tickers(tickers)
    assert WETH not in snapshot
    assert snapshot[USDC].min_price == usd("1")
