"""
Infrastructure package.

Logging configuration, the JSON-RPC client and submission coordination.
"""

from synthetics.infra.logging_cfg import build_logger, log_event
from synthetics.infra.nonce import NonceCoordinator
from synthetics.infra.rpc import AsyncRpc

__all__ = [
    "build_logger",
    "log_event",
    "NonceCoordinator",
    "AsyncRpc",
]
