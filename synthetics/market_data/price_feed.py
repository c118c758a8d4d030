"""
Async oracle price feed over the keeper REST API.

``GET /prices/tickers`` returns contract prices (per smallest token unit);
they are converted to USD precision per whole token using catalog decimals.
Each fetch yields a fresh, immutable PriceSnapshot. Retries are the
caller's decision.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, List, Optional

import httpx

from synthetics.core.errors import ValidationError
from synthetics.core.event_bus import EventBus, EventType
from synthetics.core.numbers import parse_contract_price
from synthetics.infra.logging_cfg import log_event
from synthetics.market_data.tokens import PriceSnapshot, TokenPrices, normalize_address

if TYPE_CHECKING:
    from synthetics.config.tokens import TokenCatalog

log = logging.getLogger("synthetics")


class AsyncPriceFeed:
    def __init__(
        self,
        base_url: str,
        chain_id: int,
        catalog: TokenCatalog,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.chain_id = chain_id
        self.catalog = catalog
        self.event_bus = event_bus
        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
            self._owns_client = True

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get_tickers(self) -> List[dict]:
        resp = await self.client.get(f"{self.base_url}/prices/tickers")
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, list):
            raise ValueError(f"unexpected tickers payload: {type(data).__name__}")
        return data

    def parse_tickers(self, tickers: List[dict]) -> PriceSnapshot:
        prices = {}
        skipped = 0
        malformed = []
        for item in tickers:
            address = item.get("tokenAddress")
            token = self.catalog.find(self.chain_id, address)
            if token is None:
                skipped += 1
                continue
            try:
                prices[token.address] = TokenPrices(
                    min_price=parse_contract_price(int(item["minPrice"]), token.decimals),
                    max_price=parse_contract_price(int(item["maxPrice"]), token.decimals),
                )
            except (KeyError, TypeError, ValueError):
                malformed.append(token.symbol)
        if skipped:
            log.debug("price_feed_skipped_unknown_tokens count=%s", skipped)
        if malformed:
            log_event(log, "price_feed_malformed_tickers", level=logging.WARNING,
                      chain_id=self.chain_id, tokens=malformed)
        snapshot = PriceSnapshot(prices, timestamp_ms=int(time.time() * 1000))
        try:
            native = self.catalog.native_token(self.chain_id)
            wrapped = self.catalog.wrapped_token(self.chain_id)
        except ValidationError:
            return snapshot
        return snapshot.with_native(native.address, wrapped.address)

    async def fetch(self) -> PriceSnapshot:
        """Fetch and parse the current tickers into a new snapshot."""
        try:
            tickers = await self._get_tickers()
        except (httpx.HTTPError, ValueError) as exc:
            log_event(log, "price_fetch_error", level=logging.WARNING, chain_id=self.chain_id, err=str(exc))
            raise
        snapshot = self.parse_tickers(tickers)
        log_event(log, "prices_fetched", level=logging.DEBUG, chain_id=self.chain_id, tokens=len(snapshot))
        if self.event_bus is not None:
            self.event_bus.emit(EventType.PRICES_UPDATED, source="price_feed", snapshot=snapshot)
        return snapshot

    async def get(self, token_address: str) -> Optional[TokenPrices]:
        """Prices for one token from a fresh fetch, or None when absent."""
        snapshot = await self.fetch()
        return snapshot.get(normalize_address(token_address))

