"""
Persisted trade options for one chain.

The machine owns a single TradeConfig snapshot. It is rehydrated lazily from
the key-value store on first access, replaced (never mutated) by each setter,
written back once per change and announced on the machine's event bus.

Every setter re-applies reconciliation inside the same snapshot, against the
last token/market lists the machine was given (or only the trade-mode rule
when it has none yet). When the lists themselves change, ``reconcile``
corrects stale selections silently; the correction is logged at debug and
published as TRADE_OPTIONS_CORRECTED.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping, Optional, Protocol

from synthetics.core.errors import StaleConfigurationError
from synthetics.core.event_bus import Event, EventBus, EventType, Subscription
from synthetics.infra.logging_cfg import log_event
from synthetics.market_data.markets import MarketsInfo
from synthetics.market_data.tokens import Token
from synthetics.state.trade_config import (
    AvailableTokenOptions,
    SelectedTradeOption,
    TradeConfig,
    TradeMode,
    TradeType,
    get_available_token_options,
    reconcile_trade_config,
    select,
    validate_trade_config,
)

log = logging.getLogger("synthetics")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


def trade_options_key(chain_id: int) -> str:
    return f"{chain_id}-syntheticsTradeOptions"


class ActivePosition(Protocol):
    is_long: bool
    market: str
    collateral_token: str


class TradeConfigStateMachine:
    def __init__(
        self,
        store: KeyValueStore,
        chain_id: int,
        event_bus: Optional[EventBus] = None,
        options: Optional[AvailableTokenOptions] = None,
        markets_info: Optional[MarketsInfo] = None,
    ) -> None:
        self.store = store
        self.chain_id = chain_id
        self.key = trade_options_key(chain_id)
        self.event_bus = event_bus or EventBus()
        self._lock = threading.RLock()
        self._config: Optional[TradeConfig] = None
        self._options = options or AvailableTokenOptions()
        self._markets_info = markets_info or MarketsInfo([])

    # ---- snapshot access ----

    @property
    def config(self) -> TradeConfig:
        with self._lock:
            if self._config is None:
                self._config = TradeConfig.from_dict(self.store.get(self.key))
            return self._config

    def _commit(self, updated: TradeConfig, event_type: EventType = EventType.TRADE_OPTIONS_CHANGED, **data: Any) -> bool:
        """Persist ``updated`` if it differs from the current snapshot. Caller holds the lock."""
        current = self.config
        if updated == current:
            return False
        self._config = updated
        self.store.set(self.key, updated.to_dict())
        self.event_bus.emit(event_type, source="trade_options", chain_id=self.chain_id, config=updated, **data)
        return True

    def _update(self, fn: Callable[[TradeConfig], TradeConfig]) -> TradeConfig:
        with self._lock:
            updated = reconcile_trade_config(fn(self.config), self._options, self._markets_info)
            self._commit(updated)
            return self.config

    # ---- setters ----

    def set_trade_type(self, trade_type: TradeType) -> TradeConfig:
        return self._update(lambda c: c.with_trade_type(trade_type))

    def set_trade_mode(self, trade_mode: TradeMode) -> TradeConfig:
        return self._update(lambda c: c.with_trade_mode(trade_mode))

    def set_from_token(self, address: Optional[str]) -> TradeConfig:
        return self._update(lambda c: c.with_from_token(address))

    def set_to_token(self, address: Optional[str]) -> TradeConfig:
        return self._update(lambda c: c.with_to_token(address))

    def set_market(self, market_address: Optional[str]) -> TradeConfig:
        """
        Select the market for the current to-token and side. No-op without a
        to-token. The collateral is moved onto the market's side token when
        the current one does not belong to it.
        """
        def apply(c: TradeConfig) -> TradeConfig:
            if not c.to_token_address:
                return c
            return c.with_market(c.to_token_address, c.flags.is_long, market_address)

        return self._update(apply)

    def set_collateral(self, token_address: Optional[str]) -> TradeConfig:
        """
        Select the collateral for the current market and side. No-op without
        a market. A token that is not one of the market's long/short tokens is
        replaced by the side token.
        """
        def apply(c: TradeConfig) -> TradeConfig:
            if not c.market_address:
                return c
            return c.with_collateral(c.market_address, c.flags.is_long, token_address)

        return self._update(apply)

    def set_active_position(self, position: Optional[ActivePosition], index_token_address: Optional[str] = None,
                            markets_info: Optional[MarketsInfo] = None) -> TradeConfig:
        """
        Point the options at an open position: direction, index token, market
        and collateral, all in one snapshot. ``None`` leaves options untouched.

        The index token comes from ``index_token_address`` or, when omitted,
        from the position's market in ``markets_info``.
        """
        if position is None:
            return self.config
        if index_token_address is None:
            market = markets_info.get(position.market) if markets_info is not None else None
            if market is None:
                raise ValueError(f"cannot resolve index token for market {position.market}")
            index_token_address = market.index_token_address

        def apply(c: TradeConfig) -> TradeConfig:
            c = c.with_trade_type(TradeType.LONG if position.is_long else TradeType.SHORT)
            c = c.with_to_token(index_token_address)
            c = c.with_market(index_token_address, position.is_long, position.market)
            return c.with_collateral(position.market, position.is_long, position.collateral_token)

        return self._update(apply)

    # ---- derived view and reconciliation ----

    def selected(self, tokens: Mapping[str, Token], markets_info: MarketsInfo) -> SelectedTradeOption:
        return select(self.config, tokens, markets_info)

    def reconcile(
        self,
        options: AvailableTokenOptions,
        markets_info: MarketsInfo,
    ) -> TradeConfig:
        """
        Correct stale selections against the current lists. Idempotent; writes
        at most once and not at all when everything still holds.
        """
        with self._lock:
            self._options = options
            self._markets_info = markets_info
            current = self.config
            try:
                validate_trade_config(current, options, markets_info)
            except StaleConfigurationError as exc:
                log_event(log, "trade_options_corrected", level=logging.DEBUG,
                          chain_id=self.chain_id, issues=exc.issues)
                self._commit(
                    reconcile_trade_config(current, options, markets_info),
                    EventType.TRADE_OPTIONS_CORRECTED,
                    issues=exc.issues,
                )
            return self.config

    def reconcile_with(self, tokens: Mapping[str, Token], markets_info: MarketsInfo) -> TradeConfig:
        return self.reconcile(get_available_token_options(tokens, markets_info), markets_info)

    def subscribe(self, handler: Callable[[Event], Any], corrections: bool = True) -> Subscription:
        """Receive every new snapshot. Call ``unsubscribe()`` on the result to stop."""
        if corrections:
            kinds = (EventType.TRADE_OPTIONS_CHANGED, EventType.TRADE_OPTIONS_CORRECTED)
            return self.event_bus.subscribe(None, handler, filter_fn=lambda e: e.type in kinds,
                                            name=getattr(handler, "__name__", None))
        return self.event_bus.subscribe(EventType.TRADE_OPTIONS_CHANGED, handler)
