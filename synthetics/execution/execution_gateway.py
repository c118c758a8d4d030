"""
OrderGateway: simulate-then-submit entry point for increase orders.

Flow per order:
    build payload from one price snapshot (pure)
    -> take the account's submission lock
    -> simulate against the router with that snapshot's overrides
    -> submit the same encoded calls and value

Failures the user can act on (missing prices, simulation reverts, rejected
signatures, node errors) come back as a SubmitResult carrying a readable
message; anything else propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from synthetics.core.errors import (
    RpcError,
    SimulationRevertError,
    SyntheticsError,
    UserCancellationError,
    ValidationError,
)
from synthetics.core.event_bus import EventBus, EventType
from synthetics.core.json_utils import dumps
from synthetics.execution.contract_caller import RpcContractCaller
from synthetics.execution.order_builder import IncreaseOrderParams, OrderPayloadBuilder
from synthetics.infra.nonce import NonceCoordinator
from synthetics.market_data.tokens import PriceSnapshot

log = logging.getLogger("synthetics")

GENERIC_FAILURE = "Something went wrong, please try again"


def describe_failure(exc: BaseException, label: Optional[str] = None) -> str:
    """User-facing message for a failed order."""
    prefix = f"{label} order failed" if label else "Order failed"
    if isinstance(exc, UserCancellationError):
        return f"{prefix}: transaction was cancelled"
    if isinstance(exc, SimulationRevertError):
        return f"{prefix}: {exc.reason}"
    if isinstance(exc, ValidationError):
        return f"{prefix}: {exc.message}"
    if isinstance(exc, RpcError):
        return f"{prefix}: {exc.message}"
    return f"{prefix}. {GENERIC_FAILURE}"


@dataclass
class SubmitResult:
    """Result of order submission."""
    success: bool
    label: Optional[str] = None
    tx_hash: Optional[str] = None
    order_key: Optional[str] = None
    error: Optional[str] = None
    cancelled: bool = False


@dataclass
class OrderGatewayConfig:
    simulate_orders: bool = True
    log_event_callback: Optional[Callable[..., None]] = None


class OrderGateway:
    def __init__(
        self,
        builder: OrderPayloadBuilder,
        caller: RpcContractCaller,
        nonce_coordinator: Optional[NonceCoordinator] = None,
        event_bus: Optional[EventBus] = None,
        config: Optional[OrderGatewayConfig] = None,
    ) -> None:
        self.builder = builder
        self.caller = caller
        self.nonce_coordinator = nonce_coordinator or NonceCoordinator()
        self.event_bus = event_bus or EventBus()
        self.config = config or OrderGatewayConfig()
        self._log_event = self.config.log_event_callback or self._default_log

    def _default_log(self, event: str, **kwargs: Any) -> None:
        payload = {"event": event, "chain_id": self.builder.chain_id, **kwargs}
        log.info(dumps(payload))

    def _failed(self, exc: Exception, label: Optional[str]) -> SubmitResult:
        message = describe_failure(exc, label)
        cancelled = isinstance(exc, UserCancellationError)
        if cancelled:
            event_type = EventType.ORDER_CANCELLED
        elif isinstance(exc, (SimulationRevertError, ValidationError)):
            event_type = EventType.ORDER_REJECTED
        else:
            event_type = EventType.ORDER_FAILED
        details = exc.to_dict() if isinstance(exc, SyntheticsError) else {"error_type": type(exc).__name__}
        self._log_event(event_type.name.lower(), label=label, error=details)
        self.event_bus.emit(event_type, source="order_gateway", label=label, error=message)
        return SubmitResult(success=False, label=label, error=message, cancelled=cancelled)

    async def submit_increase_order(self, params: IncreaseOrderParams, prices: PriceSnapshot) -> SubmitResult:
        """Build, simulate and submit an increase order from one price snapshot."""
        try:
            payload = self.builder.build_increase_order(params, prices)
        except ValidationError as exc:
            return self._failed(exc, None)

        label = payload.label
        self._log_event(
            "order_intent",
            label=label,
            steps=payload.methods,
            value=str(payload.value),
            acceptable_price=str(payload.acceptable_price),
        )

        lock = await self.nonce_coordinator.get_lock(self.caller.account)
        async with lock:
            try:
                order_key = None
                if self.config.simulate_orders:
                    result = await self.caller.simulate(payload.encoded_calls, payload.value, payload.price_overrides)
                    order_key = result.order_key
                    self.event_bus.emit(EventType.ORDER_SIMULATED, source="order_gateway", label=label, order_key=order_key)
                tx_hash = await self.caller.submit(payload.encoded_calls, payload.value)
            except (SyntheticsError, httpx.HTTPError) as exc:
                return self._failed(exc, label)

        self._log_event("order_submitted", label=label, tx_hash=tx_hash, order_key=order_key)
        self.event_bus.emit(EventType.ORDER_SUBMITTED, source="order_gateway", label=label, tx_hash=tx_hash)
        return SubmitResult(success=True, label=label, tx_hash=tx_hash, order_key=order_key)

    async def withdraw_from_subaccount(self, main_account: str, amount: int) -> SubmitResult:
        """Send ``amount`` of the native token from the caller's account to ``main_account``."""
        transfer = self.builder.build_subaccount_withdrawal(main_account, amount)
        lock = await self.nonce_coordinator.get_lock(self.caller.account)
        async with lock:
            try:
                tx_hash = await self.caller.send_value(transfer.to, transfer.value)
            except (SyntheticsError, httpx.HTTPError) as exc:
                return self._failed(exc, transfer.label)
        self._log_event("subaccount_withdrawal_sent", label=transfer.label, tx_hash=tx_hash)
        return SubmitResult(success=True, label=transfer.label, tx_hash=tx_hash)
