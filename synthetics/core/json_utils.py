"""
JSON utilities backed by orjson.

orjson rejects integers outside the 64-bit range, and settlement-layer
amounts (30-decimal USD values, wei amounts) routinely exceed it. Such
integers are written as decimal strings.

Usage:
    from synthetics.core.json_utils import dumps, loads

    log.info(dumps({"event": "order_simulated", "value": 10**30}))
"""

from __future__ import annotations

from typing import Any

import orjson

_INT64_MIN = -(2**63)
_UINT64_MAX = 2**64 - 1


def _coerce(obj: Any) -> Any:
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        if _INT64_MIN <= obj <= _UINT64_MAX:
            return obj
        return str(obj)
    if isinstance(obj, dict):
        return {str(k): _coerce(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_coerce(v) for v in obj]
    if hasattr(obj, "to_dict"):
        return _coerce(obj.to_dict())
    return obj


def dumps(obj: Any) -> str:
    """Compact JSON encode to string."""
    return orjson.dumps(_coerce(obj)).decode("utf-8")


def dumps_bytes(obj: Any, indent: bool = False) -> bytes:
    """JSON encode to bytes (optionally indented for files humans read)."""
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(_coerce(obj), option=option)


def loads(s: str | bytes) -> Any:
    """JSON decode."""
    return orjson.loads(s)
