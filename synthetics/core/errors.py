"""
Error taxonomy for the synthetics client core.

- ValidationError: a referenced price, market or token could not be resolved.
  Reported to the caller, never retried automatically.
- EncodingError: malformed key or calldata arguments. Programmer error.
- SimulationRevertError: the settlement layer rejected the dry run. Carries
  the decoded reason; the user may adjust the order and retry.
- UserCancellationError: the signer rejected the request. Not a contract
  failure and not retried.
- StaleConfigurationError: persisted trade options no longer match the
  available tokens/markets. Corrected silently by the state machine.
- RpcError: transport or node-level JSON-RPC failure that is not a revert.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple


class SyntheticsError(Exception):
    """Base exception for all synthetics errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ValidationError(SyntheticsError):
    """A price, market or token referenced by the input could not be resolved."""

    def __init__(self, message: str, address: Optional[str] = None) -> None:
        super().__init__(message, {"address": address} if address else None)
        self.address = address


class EncodingError(SyntheticsError):
    """Key or calldata arguments do not match their declared ABI types."""


class SimulationRevertError(SyntheticsError):
    """The pre-submission simulation reverted with a decodable reason."""

    def __init__(
        self,
        reason: str,
        error_name: Optional[str] = None,
        args: Tuple[Any, ...] = (),
        data: Optional[str] = None,
    ) -> None:
        super().__init__(reason, {"error_name": error_name, "data": data})
        self.reason = reason
        self.error_name = error_name
        self.error_args = args
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["error_args"] = [str(a) for a in self.error_args]
        return payload


class UserCancellationError(SyntheticsError):
    """The wallet or node signer rejected the request."""


class StaleConfigurationError(SyntheticsError):
    """Persisted trade options reference tokens/markets that are no longer valid."""

    def __init__(self, issues: List[str]) -> None:
        super().__init__("stale trade options: " + ", ".join(issues), {"issues": list(issues)})
        self.issues = list(issues)


class RpcError(SyntheticsError):
    """JSON-RPC error that is neither a revert nor a user rejection."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None) -> None:
        super().__init__(message, {"code": code})
        self.code = code
        self.data = data
