"""
State package.

Persisted key-value stores and the trade options state machine.
"""

from synthetics.state.state import MemoryStore, StateStore
from synthetics.state.state_atomic import AtomicStateStore
from synthetics.state.trade_config import (
    AVAILABLE_TRADE_MODES,
    AvailableTokenOptions,
    SelectedTradeOption,
    TradeConfig,
    TradeFlags,
    TradeMode,
    TradeType,
    get_available_token_options,
    reconcile_trade_config,
    select,
    validate_trade_config,
)
from synthetics.state.trade_options import TradeConfigStateMachine, trade_options_key

__all__ = [
    "MemoryStore",
    "StateStore",
    "AtomicStateStore",
    "AVAILABLE_TRADE_MODES",
    "AvailableTokenOptions",
    "SelectedTradeOption",
    "TradeConfig",
    "TradeFlags",
    "TradeMode",
    "TradeType",
    "get_available_token_options",
    "reconcile_trade_config",
    "select",
    "validate_trade_config",
    "TradeConfigStateMachine",
    "trade_options_key",
]
