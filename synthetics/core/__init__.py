"""
Core utilities package.

Storage key hashing, fixed-point arithmetic, the error taxonomy, the event
bus and JSON helpers.
"""

from synthetics.core.errors import (
    EncodingError,
    RpcError,
    SimulationRevertError,
    StaleConfigurationError,
    SyntheticsError,
    UserCancellationError,
    ValidationError,
)
from synthetics.core.event_bus import Event, EventBus, EventType, Subscription
from synthetics.core.hashing import derive_key, hash_data, hash_string
from synthetics.core.numbers import FixedAmount, USD_DECIMALS

__all__ = [
    "EncodingError",
    "RpcError",
    "SimulationRevertError",
    "StaleConfigurationError",
    "SyntheticsError",
    "UserCancellationError",
    "ValidationError",
    "Event",
    "EventBus",
    "EventType",
    "Subscription",
    "derive_key",
    "hash_data",
    "hash_string",
    "FixedAmount",
    "USD_DECIMALS",
]
