"""
Leaderboard scores for open positions.

Scores are computed for a whole batch from one price snapshot. A batch with
any unresolvable position fails as a whole: a leaderboard built from a
partial set would rank accounts inconsistently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from synthetics.config.tokens import TokenCatalog
from synthetics.core.errors import ValidationError
from synthetics.core.numbers import convert_to_usd, get_position_pnl, get_position_value
from synthetics.market_data.markets import MarketsInfo
from synthetics.market_data.tokens import PriceSnapshot, normalize_address


@dataclass(frozen=True)
class Position:
    id: str
    account: str
    market: str
    is_long: bool
    collateral_token: str
    size_in_usd: int
    size_in_tokens: int
    collateral_amount: int
    entry_price: int
    max_size: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Position":
        """Build from an indexer record (camelCase keys, integers as decimal strings)."""
        return cls(
            id=str(data["id"]),
            account=str(data["account"]),
            market=str(data["market"]),
            is_long=bool(data["isLong"]),
            collateral_token=str(data["collateralToken"]),
            size_in_usd=int(data["sizeInUsd"]),
            size_in_tokens=int(data["sizeInTokens"]),
            collateral_amount=int(data["collateralAmount"]),
            entry_price=int(data.get("entryPrice", 0)),
            max_size=int(data.get("maxSize", 0)),
        )


@dataclass(frozen=True)
class PositionScore:
    id: str
    account: str
    is_long: bool
    market: str
    collateral_token: str
    unrealized_pnl: int
    entry_price: int
    size_in_usd: int
    liq_price: int
    collateral_amount: int
    collateral_amount_usd: int
    max_size: int
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "account": self.account,
            "isLong": self.is_long,
            "market": self.market,
            "collateralToken": self.collateral_token,
            "unrealizedPnl": self.unrealized_pnl,
            "entryPrice": self.entry_price,
            "sizeInUsd": self.size_in_usd,
            "liqPrice": self.liq_price,
            "collateralAmount": self.collateral_amount,
            "collateralAmountUsd": self.collateral_amount_usd,
            "maxSize": self.max_size,
            "value": self.value,
        }


def compute_scores(
    positions: Iterable[Position],
    prices: PriceSnapshot,
    markets: MarketsInfo,
    catalog: TokenCatalog,
    chain_id: int,
) -> List[PositionScore]:
    """
    Value every position and its collateral at current prices.

    Raises ValidationError naming the first collateral token without a
    price, market that cannot be resolved, or index token without a price.
    """
    scores: List[PositionScore] = []
    for p in positions:
        collateral_address = normalize_address(p.collateral_token)
        collateral_prices = prices.get(collateral_address)
        if collateral_prices is None:
            raise ValidationError(f"Unable to find price for token {collateral_address}", address=collateral_address)

        market = markets.get(p.market)
        if market is None:
            raise ValidationError(f'Unable to identify market "{p.market}" in chain id: {chain_id}', address=p.market)

        index_prices = prices.get(market.index_token_address)
        if index_prices is None:
            raise ValidationError(
                f"Unable to find price for token {market.index_token_address}",
                address=market.index_token_address,
            )

        collateral_token = catalog.get(chain_id, collateral_address)
        index_token = catalog.get(chain_id, market.index_token_address)

        collateral_amount_usd = convert_to_usd(p.collateral_amount, collateral_token.decimals, collateral_prices.min_price)
        exit_price = index_prices.min_price if p.is_long else index_prices.max_price
        value = get_position_value(p.size_in_tokens, index_token.decimals, exit_price)

        scores.append(PositionScore(
            id=p.id,
            account=p.account,
            is_long=p.is_long,
            market=p.market,
            collateral_token=p.collateral_token,
            unrealized_pnl=get_position_pnl(p.is_long, p.size_in_usd, value),
            entry_price=p.entry_price,
            size_in_usd=p.size_in_usd,
            # no liquidation model here; downstream risk tooling owns it
            liq_price=0,
            collateral_amount=p.collateral_amount,
            collateral_amount_usd=collateral_amount_usd,
            max_size=p.max_size,
            value=value,
        ))
    return scores
