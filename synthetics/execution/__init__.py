"""
Execution package.

Acceptable-price protection, router calldata, simulation, the increase-order
payload builder and the simulate-then-submit gateway.
"""

from synthetics.execution.acceptable_price import (
    apply_slippage_to_price,
    get_acceptable_price,
    get_acceptable_price_for_position_order,
    get_mark_price,
    get_should_use_max_price,
)
from synthetics.execution.contract_caller import RpcContractCaller
from synthetics.execution.execution_gateway import OrderGateway, OrderGatewayConfig, SubmitResult, describe_failure
from synthetics.execution.multicall import OrderType, encode_referral_code
from synthetics.execution.order_builder import (
    IncreaseOrderParams,
    IncreaseOrderPayload,
    MulticallStep,
    OrderPayloadBuilder,
    ValueTransfer,
)
from synthetics.execution.simulation import PriceOverrides, SimulationResult, decode_revert

__all__ = [
    "apply_slippage_to_price",
    "get_acceptable_price",
    "get_acceptable_price_for_position_order",
    "get_mark_price",
    "get_should_use_max_price",
    "RpcContractCaller",
    "OrderGateway",
    "OrderGatewayConfig",
    "SubmitResult",
    "describe_failure",
    "OrderType",
    "encode_referral_code",
    "IncreaseOrderParams",
    "IncreaseOrderPayload",
    "MulticallStep",
    "OrderPayloadBuilder",
    "ValueTransfer",
    "PriceOverrides",
    "SimulationResult",
    "decode_revert",
]
