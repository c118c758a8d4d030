"""
Token catalog per chain, with optional YAML overrides.

Built-in tables cover the supported chains. A YAML file (env
``SYN_CATALOG_PATH``, default ``configs/catalog.yaml``) may add tokens and
list the markets of a chain:

    42161:
      tokens:
        - {address: "0x...", symbol: "GMX", decimals: 18}
      markets:
        - {address: "0x...", index: "0x...", long: "0x...", short: "0x..."}
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from synthetics.core.errors import ValidationError
from synthetics.market_data.markets import Market
from synthetics.market_data.tokens import NATIVE_TOKEN_ADDRESS, Token, normalize_address

log = logging.getLogger("synthetics")

ARBITRUM = 42161
AVALANCHE = 43114

_BUILTIN_TOKENS: Dict[int, List[Token]] = {
    ARBITRUM: [
        Token(NATIVE_TOKEN_ADDRESS, "ETH", 18, name="Ethereum", is_native=True,
              wrapped_address="0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"),
        Token("0x82aF49447D8a07e3bd95BD0d56f35241523fBab1", "WETH", 18, name="Wrapped Ethereum", is_wrapped=True),
        Token("0x2f2a2543B76A4166549F7aaB2e75Bef0aefC5B0f", "BTC", 8, name="Wrapped Bitcoin"),
        Token("0x912CE59144191C1204E64559FE8253a0e49E6548", "ARB", 18, name="Arbitrum"),
        Token("0xaf88d065e77c8cC2239327C5EDb3A432268e5831", "USDC", 6, name="USD Coin", is_stable=True),
        Token("0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9", "USDT", 6, name="Tether", is_stable=True),
    ],
    AVALANCHE: [
        Token(NATIVE_TOKEN_ADDRESS, "AVAX", 18, name="Avalanche", is_native=True,
              wrapped_address="0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7"),
        Token("0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7", "WAVAX", 18, name="Wrapped AVAX", is_wrapped=True),
        Token("0x49D5c2BdFfac6CE2BFdB6640F4F80f226bc10bAB", "ETH", 18, name="Wrapped Ethereum"),
        Token("0x152b9d0FdC40C096757F570A51E494bd4b943E50", "BTC", 8, name="Bitcoin"),
        Token("0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E", "USDC", 6, name="USD Coin", is_stable=True),
    ],
}


def load_catalog_overrides(path: Optional[str] = None) -> Dict[int, Dict[str, Any]]:
    """Read the YAML overrides file; missing file means no overrides."""
    if path is None:
        path = os.getenv("SYN_CATALOG_PATH", "configs/catalog.yaml")
    p = Path(path)
    if not p.exists():
        return {}
    with p.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if not isinstance(data, dict):
        return {}
    return {int(k): v for k, v in data.items() if isinstance(v, dict)}


def _token_from_yaml(entry: Dict[str, Any]) -> Token:
    return Token(
        address=entry["address"],
        symbol=str(entry["symbol"]),
        decimals=int(entry["decimals"]),
        name=str(entry.get("name", "")),
        is_stable=bool(entry.get("is_stable", False)),
        is_native=bool(entry.get("is_native", False)),
        is_wrapped=bool(entry.get("is_wrapped", False)),
        wrapped_address=entry.get("wrapped_address"),
    )


def _market_from_yaml(entry: Dict[str, Any]) -> Market:
    return Market(
        market_token_address=entry["address"],
        index_token_address=entry["index"],
        long_token_address=entry["long"],
        short_token_address=entry["short"],
        name=str(entry.get("name", "")),
    )


class TokenCatalog:
    """
    Static token metadata and market list for each chain.

    ``get(chain_id, address)`` raises ValidationError for unknown tokens.
    """

    def __init__(self, overrides: Optional[Dict[int, Dict[str, Any]]] = None) -> None:
        self._tokens: Dict[int, Dict[str, Token]] = {}
        self._markets: Dict[int, List[Market]] = {}
        for chain_id, tokens in _BUILTIN_TOKENS.items():
            self._tokens[chain_id] = {t.address: t for t in tokens}
        for chain_id, section in (overrides or {}).items():
            chain_tokens = self._tokens.setdefault(chain_id, {})
            for entry in section.get("tokens") or []:
                token = _token_from_yaml(entry)
                chain_tokens[token.address] = token
            self._markets[chain_id] = [_market_from_yaml(e) for e in section.get("markets") or []]
        log.debug("token_catalog_loaded chains=%s", sorted(self._tokens))

    @classmethod
    def load(cls, path: Optional[str] = None) -> "TokenCatalog":
        return cls(load_catalog_overrides(path))

    def get(self, chain_id: int, address: str) -> Token:
        token = self.find(chain_id, address)
        if token is None:
            raise ValidationError(f"Unknown token {address} on chain {chain_id}", address=address)
        return token

    def find(self, chain_id: int, address: Optional[str]) -> Optional[Token]:
        if not address:
            return None
        try:
            return self._tokens.get(chain_id, {}).get(normalize_address(address))
        except ValueError:
            return None

    def tokens(self, chain_id: int) -> List[Token]:
        return list(self._tokens.get(chain_id, {}).values())

    def markets(self, chain_id: int) -> List[Market]:
        return list(self._markets.get(chain_id, []))

    def native_token(self, chain_id: int) -> Token:
        for token in self._tokens.get(chain_id, {}).values():
            if token.is_native:
                return token
        raise ValidationError(f"No native token configured for chain {chain_id}")

    def wrapped_token(self, chain_id: int) -> Token:
        for token in self._tokens.get(chain_id, {}).values():
            if token.is_wrapped:
                return token
        raise ValidationError(f"No wrapped native token configured for chain {chain_id}")

    def converted_address(self, chain_id: int, address: str, convert_to: str) -> str:
        """Swap the native address for the wrapped one ("wrapped") or back ("native")."""
        native = self.native_token(chain_id)
        wrapped = self.wrapped_token(chain_id)
        normalized = normalize_address(address)
        if convert_to == "wrapped" and normalized == native.address:
            return wrapped.address
        if convert_to == "native" and normalized == wrapped.address:
            return native.address
        return normalized
