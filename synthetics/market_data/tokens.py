"""
Token and price snapshot types.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from eth_utils import to_checksum_address

NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"


def normalize_address(address: str) -> str:
    """EIP-55 checksum form; every mapping in this package is keyed by it."""
    return to_checksum_address(address)


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    if a is None or b is None:
        return False
    return a.lower() == b.lower()


@dataclass(frozen=True)
class TokenPrices:
    """Min/max oracle prices at USD precision, per whole token."""
    min_price: int
    max_price: int

    def __post_init__(self) -> None:
        if self.min_price < 0 or self.max_price < 0:
            raise ValueError("prices must be non-negative")

    @classmethod
    def single(cls, price: int) -> "TokenPrices":
        return cls(min_price=price, max_price=price)

    def to_dict(self) -> Dict[str, str]:
        return {"minPrice": str(self.min_price), "maxPrice": str(self.max_price)}


@dataclass(frozen=True)
class Token:
    address: str
    symbol: str
    decimals: int
    name: str = ""
    is_stable: bool = False
    is_native: bool = False
    is_wrapped: bool = False
    wrapped_address: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 <= self.decimals <= 18:
            raise ValueError(f"{self.symbol}: decimals out of range: {self.decimals}")
        object.__setattr__(self, "address", normalize_address(self.address))
        if self.wrapped_address:
            object.__setattr__(self, "wrapped_address", normalize_address(self.wrapped_address))


@dataclass(frozen=True)
class TokenData:
    """A token joined with its prices from one snapshot."""
    token: Token
    prices: TokenPrices

    @property
    def address(self) -> str:
        return self.token.address

    @property
    def decimals(self) -> int:
        return self.token.decimals

    @property
    def symbol(self) -> str:
        return self.token.symbol


class PriceSnapshot(Mapping[str, TokenPrices]):
    """
    Immutable address -> TokenPrices mapping captured at one instant.

    Lookups accept any address casing. Acceptable-price computation and
    simulation overrides must read from the same snapshot instance.
    """

    def __init__(self, prices: Mapping[str, TokenPrices], timestamp_ms: int = 0) -> None:
        self._prices = MappingProxyType({normalize_address(a): p for a, p in prices.items()})
        self.timestamp_ms = timestamp_ms

    def __getitem__(self, address: str) -> TokenPrices:
        return self._prices[normalize_address(address)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._prices)

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        try:
            return normalize_address(address) in self._prices
        except ValueError:
            return False

    def get(self, address: str, default: Optional[TokenPrices] = None) -> Optional[TokenPrices]:  # type: ignore[override]
        if address not in self:
            return default
        return self[address]

    def with_native(self, native_address: str, wrapped_address: str) -> "PriceSnapshot":
        """Copy in which the native token mirrors its wrapped token's prices."""
        wrapped = self.get(wrapped_address)
        if wrapped is None:
            return self
        merged = dict(self._prices)
        merged[normalize_address(native_address)] = wrapped
        return PriceSnapshot(merged, self.timestamp_ms)


def get_is_wrap(from_token: Optional[Token], to_token: Optional[Token]) -> bool:
    return bool(
        from_token and to_token
        and from_token.is_native and to_token.is_wrapped
        and same_address(from_token.wrapped_address, to_token.address)
    )


def get_is_unwrap(from_token: Optional[Token], to_token: Optional[Token]) -> bool:
    return get_is_wrap(to_token, from_token)
