"""
Immutable trade options record.

TradeConfig is never mutated: every change goes through a ``with_*`` method
that returns a new snapshot. Per-key selections (index token x side,
market x side) use entry-or-insert so switching pairs keeps earlier choices.

The persisted form keeps the storage field names used by existing sessions
(``tradeType``, ``tokens.fromTokenAddress``, ``markets``, ``collaterals``).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from synthetics.core.errors import StaleConfigurationError
from synthetics.market_data.markets import Market, MarketsInfo
from synthetics.market_data.tokens import Token, get_is_unwrap, get_is_wrap, normalize_address, same_address


class TradeType(str, Enum):
    LONG = "Long"
    SHORT = "Short"
    SWAP = "Swap"


class TradeMode(str, Enum):
    MARKET = "Market"
    LIMIT = "Limit"
    TRIGGER = "Trigger"


AVAILABLE_TRADE_MODES: Dict[TradeType, List[TradeMode]] = {
    TradeType.LONG: [TradeMode.MARKET, TradeMode.LIMIT, TradeMode.TRIGGER],
    TradeType.SHORT: [TradeMode.MARKET, TradeMode.LIMIT, TradeMode.TRIGGER],
    TradeType.SWAP: [TradeMode.MARKET, TradeMode.LIMIT],
}


@dataclass(frozen=True)
class TradeFlags:
    is_long: bool
    is_short: bool
    is_swap: bool
    is_position: bool
    is_market: bool
    is_limit: bool
    is_trigger: bool
    is_increase: bool

    @classmethod
    def of(cls, trade_type: TradeType, trade_mode: TradeMode) -> "TradeFlags":
        is_position = trade_type in (TradeType.LONG, TradeType.SHORT)
        is_trigger = trade_mode == TradeMode.TRIGGER
        return cls(
            is_long=trade_type == TradeType.LONG,
            is_short=trade_type == TradeType.SHORT,
            is_swap=trade_type == TradeType.SWAP,
            is_position=is_position,
            is_market=trade_mode == TradeMode.MARKET,
            is_limit=trade_mode == TradeMode.LIMIT,
            is_trigger=is_trigger,
            is_increase=is_position and not is_trigger,
        )


def _addr(value: Optional[str]) -> Optional[str]:
    return normalize_address(value) if value else None


@dataclass(frozen=True)
class SideSelection:
    """A pair of selections keyed by position side."""
    long: Optional[str] = None
    short: Optional[str] = None

    def get(self, is_long: bool) -> Optional[str]:
        return self.long if is_long else self.short

    def with_side(self, is_long: bool, value: Optional[str]) -> "SideSelection":
        if is_long:
            return replace(self, long=_addr(value))
        return replace(self, short=_addr(value))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"long": self.long, "short": self.short}

    @classmethod
    def from_dict(cls, data: Any) -> "SideSelection":
        if not isinstance(data, Mapping):
            return cls()
        return cls(long=_addr(data.get("long")), short=_addr(data.get("short")))


def _entry_with_side(
    mapping: Mapping[str, SideSelection], key: str, is_long: bool, value: Optional[str]
) -> Mapping[str, SideSelection]:
    """Copy of ``mapping`` whose entry for ``key`` (inserted if absent) has ``value`` on one side."""
    key = normalize_address(key)
    updated = dict(mapping)
    updated[key] = updated.get(key, SideSelection()).with_side(is_long, value)
    return MappingProxyType(updated)


def _frozen(mapping: Mapping[str, SideSelection]) -> Mapping[str, SideSelection]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class TokenSelection:
    from_token_address: Optional[str] = None
    swap_to_token_address: Optional[str] = None
    index_token_address: Optional[str] = None


@dataclass(frozen=True)
class TradeConfig:
    trade_type: TradeType = TradeType.LONG
    trade_mode: TradeMode = TradeMode.MARKET
    tokens: TokenSelection = field(default_factory=TokenSelection)
    markets: Mapping[str, SideSelection] = field(default_factory=lambda: MappingProxyType({}))
    collaterals: Mapping[str, SideSelection] = field(default_factory=lambda: MappingProxyType({}))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TradeConfig):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.trade_type, self.trade_mode, self.tokens))

    # ---- derived selections ----

    @property
    def flags(self) -> TradeFlags:
        return TradeFlags.of(self.trade_type, self.trade_mode)

    @property
    def available_trade_modes(self) -> List[TradeMode]:
        return list(AVAILABLE_TRADE_MODES[self.trade_type])

    @property
    def from_token_address(self) -> Optional[str]:
        return self.tokens.from_token_address

    @property
    def to_token_address(self) -> Optional[str]:
        if self.trade_type == TradeType.SWAP:
            return self.tokens.swap_to_token_address
        return self.tokens.index_token_address

    @property
    def market_address(self) -> Optional[str]:
        to_token = self.to_token_address
        if not to_token:
            return None
        entry = self.markets.get(to_token)
        return entry.get(self.flags.is_long) if entry else None

    @property
    def collateral_address(self) -> Optional[str]:
        market = self.market_address
        if not market:
            return None
        entry = self.collaterals.get(market)
        return entry.get(self.flags.is_long) if entry else None

    # ---- copy-with operations ----

    def with_trade_type(self, trade_type: TradeType) -> "TradeConfig":
        return replace(self, trade_type=TradeType(trade_type))

    def with_trade_mode(self, trade_mode: TradeMode) -> "TradeConfig":
        return replace(self, trade_mode=TradeMode(trade_mode))

    def with_from_token(self, address: Optional[str]) -> "TradeConfig":
        return replace(self, tokens=replace(self.tokens, from_token_address=_addr(address)))

    def with_to_token(self, address: Optional[str]) -> "TradeConfig":
        if self.trade_type == TradeType.SWAP:
            return replace(self, tokens=replace(self.tokens, swap_to_token_address=_addr(address)))
        return replace(self, tokens=replace(self.tokens, index_token_address=_addr(address)))

    def with_market(self, index_token_address: str, is_long: bool, market_address: Optional[str]) -> "TradeConfig":
        return replace(self, markets=_entry_with_side(self.markets, index_token_address, is_long, market_address))

    def with_collateral(self, market_address: str, is_long: bool, token_address: Optional[str]) -> "TradeConfig":
        return replace(self, collaterals=_entry_with_side(self.collaterals, market_address, is_long, token_address))

    # ---- persistence ----

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tradeType": self.trade_type.value,
            "tradeMode": self.trade_mode.value,
            "tokens": {
                "fromTokenAddress": self.tokens.from_token_address,
                "swapToTokenAddress": self.tokens.swap_to_token_address,
                "indexTokenAddress": self.tokens.index_token_address,
            },
            "markets": {k: v.to_dict() for k, v in sorted(self.markets.items())},
            "collaterals": {k: v.to_dict() for k, v in sorted(self.collaterals.items())},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "TradeConfig":
        """Rehydrate persisted options; unknown or malformed fields fall back to defaults."""
        if not isinstance(data, Mapping):
            return cls()
        try:
            trade_type = TradeType(data.get("tradeType", TradeType.LONG.value))
        except ValueError:
            trade_type = TradeType.LONG
        try:
            trade_mode = TradeMode(data.get("tradeMode", TradeMode.MARKET.value))
        except ValueError:
            trade_mode = TradeMode.MARKET
        tokens = data.get("tokens") if isinstance(data.get("tokens"), Mapping) else {}
        markets = data.get("markets") if isinstance(data.get("markets"), Mapping) else {}
        collaterals = data.get("collaterals") if isinstance(data.get("collaterals"), Mapping) else {}
        return cls(
            trade_type=trade_type,
            trade_mode=trade_mode,
            tokens=TokenSelection(
                from_token_address=_addr(tokens.get("fromTokenAddress")),
                swap_to_token_address=_addr(tokens.get("swapToTokenAddress")),
                index_token_address=_addr(tokens.get("indexTokenAddress")),
            ),
            markets=_frozen({normalize_address(k): SideSelection.from_dict(v) for k, v in markets.items()}),
            collaterals=_frozen({normalize_address(k): SideSelection.from_dict(v) for k, v in collaterals.items()}),
        )


# ---- available options and the derived selection ----


@dataclass(frozen=True)
class AvailableTokenOptions:
    """Tokens the venue lets you pay with or swap into, and tokens you can trade."""
    swap_tokens: Tuple[Token, ...] = ()
    index_tokens: Tuple[Token, ...] = ()

    def is_swappable(self, address: Optional[str]) -> bool:
        return any(same_address(t.address, address) for t in self.swap_tokens)

    def is_tradeable(self, address: Optional[str]) -> bool:
        return any(same_address(t.address, address) for t in self.index_tokens)


def get_available_token_options(tokens: Mapping[str, Token], markets: Iterable[Market]) -> AvailableTokenOptions:
    """
    Swap tokens are the distinct long/short tokens of all markets, plus the
    native token when its wrapped form is one of them. Index tokens are the
    distinct index tokens. Addresses missing from ``tokens`` are skipped.
    """
    swap: Dict[str, Token] = {}
    index: Dict[str, Token] = {}
    for market in markets:
        for address in (market.long_token_address, market.short_token_address):
            token = tokens.get(address)
            if token is not None:
                swap.setdefault(token.address, token)
        token = tokens.get(market.index_token_address)
        if token is not None:
            index.setdefault(token.address, token)

    for token in tokens.values():
        if token.is_native and token.wrapped_address and token.wrapped_address in swap:
            swap.setdefault(token.address, token)

    return AvailableTokenOptions(swap_tokens=tuple(swap.values()), index_tokens=tuple(index.values()))


@dataclass(frozen=True)
class SelectedTradeOption:
    trade_type: TradeType
    trade_mode: TradeMode
    flags: TradeFlags
    is_wrap_or_unwrap: bool
    available_trade_modes: List[TradeMode]
    available_token_options: AvailableTokenOptions
    from_token_address: Optional[str] = None
    from_token: Optional[Token] = None
    to_token_address: Optional[str] = None
    to_token: Optional[Token] = None
    market_address: Optional[str] = None
    market: Optional[Market] = None
    collateral_address: Optional[str] = None
    collateral_token: Optional[Token] = None


def select(
    config: TradeConfig,
    tokens: Mapping[str, Token],
    markets_info: MarketsInfo,
    options: Optional[AvailableTokenOptions] = None,
) -> SelectedTradeOption:
    """Resolve the stored addresses of ``config`` against token and market data."""
    if options is None:
        options = get_available_token_options(tokens, markets_info)
    flags = config.flags
    from_token = tokens.get(config.from_token_address) if config.from_token_address else None
    to_token = tokens.get(config.to_token_address) if config.to_token_address else None
    is_wrap_or_unwrap = bool(
        flags.is_swap and (get_is_wrap(from_token, to_token) or get_is_unwrap(from_token, to_token))
    )
    collateral_address = config.collateral_address
    return SelectedTradeOption(
        trade_type=config.trade_type,
        trade_mode=config.trade_mode,
        flags=flags,
        is_wrap_or_unwrap=is_wrap_or_unwrap,
        available_trade_modes=config.available_trade_modes,
        available_token_options=options,
        from_token_address=config.from_token_address,
        from_token=from_token,
        to_token_address=config.to_token_address,
        to_token=to_token,
        market_address=config.market_address,
        market=markets_info.get(config.market_address),
        collateral_address=collateral_address,
        collateral_token=tokens.get(collateral_address) if collateral_address else None,
    )


# ---- reconciliation ----


def _reconcile(
    config: TradeConfig, options: AvailableTokenOptions, markets_info: MarketsInfo
) -> Tuple[TradeConfig, List[str]]:
    issues: List[str] = []
    allowed = AVAILABLE_TRADE_MODES[config.trade_type]
    if config.trade_mode not in allowed:
        issues.append(f"trade mode {config.trade_mode.value} not allowed for {config.trade_type.value}")
        config = config.with_trade_mode(allowed[0])

    flags = config.flags
    swap_tokens = options.swap_tokens

    if flags.is_swap:
        if swap_tokens:
            if not options.is_swappable(config.from_token_address):
                issues.append(f"from token {config.from_token_address} is not swappable")
                config = config.with_from_token(swap_tokens[0].address)
            if not options.is_swappable(config.to_token_address):
                issues.append(f"to token {config.to_token_address} is not swappable")
                config = config.with_to_token(swap_tokens[0].address)
        return config, issues

    if swap_tokens and not options.is_swappable(config.from_token_address):
        issues.append(f"from token {config.from_token_address} is not swappable")
        config = config.with_from_token(swap_tokens[0].address)

    if options.index_tokens and not options.is_tradeable(config.to_token_address):
        issues.append(f"index token {config.to_token_address} is not tradeable")
        config = config.with_to_token(options.index_tokens[0].address)

    index_token = config.to_token_address
    if index_token and markets_info.get(config.market_address) is None:
        candidates = markets_info.for_index_token(index_token)
        if candidates:
            issues.append(f"no market selected for {index_token}")
            config = config.with_market(index_token, flags.is_long, candidates[0].address)

    market = markets_info.get(config.market_address)
    if market is not None and not market.is_collateral(config.collateral_address):
        issues.append(f"collateral {config.collateral_address} is not a token of market {market.address}")
        config = config.with_collateral(market.address, flags.is_long, market.collateral_for_side(flags.is_long))

    return config, issues


def validate_trade_config(
    config: TradeConfig, options: AvailableTokenOptions, markets_info: MarketsInfo
) -> None:
    """Raise StaleConfigurationError listing every selection that no longer holds."""
    _, issues = _reconcile(config, options, markets_info)
    if issues:
        raise StaleConfigurationError(issues)


def reconcile_trade_config(
    config: TradeConfig, options: AvailableTokenOptions, markets_info: MarketsInfo
) -> TradeConfig:
    """Corrected copy of ``config``; returns ``config`` itself when nothing is stale."""
    corrected, issues = _reconcile(config, options, markets_info)
    return corrected if issues else config
