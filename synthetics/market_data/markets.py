"""
Market definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from synthetics.market_data.tokens import normalize_address


@dataclass(frozen=True)
class Market:
    market_token_address: str
    index_token_address: str
    long_token_address: str
    short_token_address: str
    name: str = ""

    def __post_init__(self) -> None:
        for attr in ("market_token_address", "index_token_address", "long_token_address", "short_token_address"):
            object.__setattr__(self, attr, normalize_address(getattr(self, attr)))

    @property
    def address(self) -> str:
        return self.market_token_address

    def collateral_for_side(self, is_long: bool) -> str:
        return self.long_token_address if is_long else self.short_token_address

    def is_collateral(self, token_address: Optional[str]) -> bool:
        if not token_address:
            return False
        return normalize_address(token_address) in (self.long_token_address, self.short_token_address)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Market":
        """Accepts snake_case or the API's camelCase field names."""
        def pick(*keys: str) -> Any:
            for k in keys:
                if k in data:
                    return data[k]
            raise KeyError(keys[0])

        return cls(
            market_token_address=pick("market_token_address", "marketTokenAddress", "address"),
            index_token_address=pick("index_token_address", "indexTokenAddress"),
            long_token_address=pick("long_token_address", "longTokenAddress"),
            short_token_address=pick("short_token_address", "shortTokenAddress"),
            name=str(data.get("name", "")),
        )


class MarketsInfo:
    """Read-only market lookup keyed by market token address."""

    def __init__(self, markets: Iterable[Market]) -> None:
        self._markets: Dict[str, Market] = {}
        for m in markets:
            self._markets[m.address] = m

    def get(self, address: Optional[str]) -> Optional[Market]:
        if not address:
            return None
        try:
            return self._markets.get(normalize_address(address))
        except ValueError:
            return None

    def __iter__(self):
        return iter(self._markets.values())

    def __len__(self) -> int:
        return len(self._markets)

    def for_index_token(self, index_token_address: str) -> List[Market]:
        target = normalize_address(index_token_address)
        return [m for m in self._markets.values() if m.index_token_address == target]
