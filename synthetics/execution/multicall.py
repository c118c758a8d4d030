"""
ExchangeRouter calldata.

Each helper returns the full calldata for one router call: the four-byte
selector followed by the ABI-encoded arguments.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, List, Optional, Sequence

from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingError as AbiEncodingError

from synthetics.core.errors import EncodingError
from synthetics.core.hashing import function_selector
from synthetics.market_data.tokens import normalize_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_REFERRAL_CODE_BYTES = 31

_CREATE_ORDER_PARAMS = "((address,address,address,address,address[]),(uint256,uint256,uint256,uint256,uint256,uint256),uint8,bool,bool)"
_PRICE_PROPS = "(uint256,uint256)"
_SIMULATE_PRICES = f"(address[],{_PRICE_PROPS}[],address[],{_PRICE_PROPS}[])"

SEND_WNT = "sendWnt(address,uint256)"
SEND_TOKENS = "sendTokens(address,address,uint256)"
CREATE_ORDER = f"createOrder({_CREATE_ORDER_PARAMS},bytes32)"
SIMULATE_EXECUTE_ORDER = f"simulateExecuteOrder(bytes32,{_SIMULATE_PRICES})"
MULTICALL = "multicall(bytes[])"
GET_UINT = "getUint(bytes32)"


class OrderType(IntEnum):
    MARKET_SWAP = 0
    LIMIT_SWAP = 1
    MARKET_INCREASE = 2
    LIMIT_INCREASE = 3
    MARKET_DECREASE = 4
    LIMIT_DECREASE = 5
    STOP_LOSS_DECREASE = 6
    LIQUIDATION = 7


def encode_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> bytes:
    try:
        encoded = abi_encode(list(arg_types), list(args))
    except (AbiEncodingError, TypeError, ValueError, OverflowError) as exc:
        raise EncodingError(f"cannot encode {signature}: {exc}") from exc
    return function_selector(signature) + encoded


def encode_referral_code(code: Optional[str]) -> bytes:
    """UTF-8 code right-padded to bytes32; empty means no referral."""
    raw = (code or "").encode("utf-8")
    if len(raw) > MAX_REFERRAL_CODE_BYTES:
        raise EncodingError(f"referral code longer than {MAX_REFERRAL_CODE_BYTES} bytes: {code!r}")
    return raw.ljust(32, b"\x00")


def encode_send_wnt(receiver: str, amount: int) -> bytes:
    return encode_call(SEND_WNT, ["address", "uint256"], [normalize_address(receiver), amount])


def encode_send_tokens(token: str, receiver: str, amount: int) -> bytes:
    return encode_call(
        SEND_TOKENS,
        ["address", "address", "uint256"],
        [normalize_address(token), normalize_address(receiver), amount],
    )


def encode_create_order(
    *,
    receiver: str,
    initial_collateral_token: str,
    market: str,
    swap_path: Sequence[str],
    size_delta_usd: int,
    trigger_price: int,
    acceptable_price: int,
    execution_fee: int,
    order_type: OrderType,
    is_long: bool,
    should_unwrap_native_token: bool,
    referral_code: bytes,
    callback_contract: str = ZERO_ADDRESS,
    callback_gas_limit: int = 0,
    min_output_amount: int = 0,
) -> bytes:
    """createOrder(CreateOrderParams, referralCode). Prices are in contract precision."""
    addresses = (
        normalize_address(receiver),
        normalize_address(initial_collateral_token),
        normalize_address(callback_contract),
        normalize_address(market),
        [normalize_address(a) for a in swap_path],
    )
    numbers = (
        size_delta_usd,
        trigger_price,
        acceptable_price,
        execution_fee,
        callback_gas_limit,
        min_output_amount,
    )
    params = (addresses, numbers, int(order_type), bool(is_long), bool(should_unwrap_native_token))
    return encode_call(CREATE_ORDER, [_CREATE_ORDER_PARAMS, "bytes32"], [params, referral_code])


def encode_simulate_execute_order(
    key: bytes,
    primary_tokens: List[str],
    primary_prices: List[tuple],
    secondary_tokens: List[str],
    secondary_prices: List[tuple],
) -> bytes:
    params = (
        [normalize_address(a) for a in primary_tokens],
        list(primary_prices),
        [normalize_address(a) for a in secondary_tokens],
        list(secondary_prices),
    )
    return encode_call(SIMULATE_EXECUTE_ORDER, ["bytes32", _SIMULATE_PRICES], [key, params])


def encode_multicall(calls: Sequence[bytes]) -> bytes:
    return encode_call(MULTICALL, ["bytes[]"], [list(calls)])


def encode_get_uint(key: bytes) -> bytes:
    return encode_call(GET_UINT, ["bytes32"], [key])
