"""
Order simulation helpers: oracle price overrides and revert decoding.

The router's ``simulateExecuteOrder`` always reverts. ``EndOfOracleSimulation``
means the order would have executed; any other revert is the reason it
would not.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex

from synthetics.core.errors import SimulationRevertError
from synthetics.core.hashing import function_selector
from synthetics.core.numbers import convert_to_contract_price
from synthetics.market_data.tokens import TokenPrices, normalize_address

END_OF_ORACLE_SIMULATION = "EndOfOracleSimulation"

# name -> argument types
CUSTOM_ERRORS: Dict[str, Tuple[str, ...]] = {
    END_OF_ORACLE_SIMULATION: (),
    "OrderNotFulfillableAtAcceptablePrice": ("uint256", "uint256"),
    "InsufficientCollateralAmount": ("uint256", "int256"),
    "InsufficientReserve": ("uint256", "uint256"),
    "MaxOpenInterestExceeded": ("uint256", "uint256"),
    "InsufficientExecutionFee": ("uint256", "uint256"),
    "InsufficientSwapOutputAmount": ("uint256", "uint256"),
    "MinPositionSize": ("uint256", "uint256"),
    "InvalidPositionSizeValues": ("uint256", "uint256"),
    "DisabledMarket": ("address",),
    "InvalidTokenIn": ("address", "address"),
    "EmptyOrder": (),
    "EmptyPosition": (),
    "UnsupportedOrderType": (),
    "LiquidatablePosition": (),
}

_ERROR_STRING = "Error(string)"
_PANIC = "Panic(uint256)"

PANIC_CODES = {
    0x01: "assertion failed",
    0x11: "arithmetic overflow or underflow",
    0x12: "division by zero",
    0x21: "invalid enum value",
    0x32: "array index out of bounds",
}


def _signature(name: str, arg_types: Tuple[str, ...]) -> str:
    return f"{name}({','.join(arg_types)})"


_SELECTORS: Dict[bytes, Tuple[str, Tuple[str, ...]]] = {
    function_selector(_signature(name, types)): (name, types) for name, types in CUSTOM_ERRORS.items()
}
_SELECTORS[function_selector(_ERROR_STRING)] = ("Error", ("string",))
_SELECTORS[function_selector(_PANIC)] = ("Panic", ("uint256",))


def decode_revert(data: Optional[str]) -> SimulationRevertError:
    """
    Turn raw revert bytes into a SimulationRevertError.

    Known selectors are decoded into name and arguments; anything else is
    reported with the raw hex so it can still be looked up by hand.
    """
    if not data or data == "0x":
        return SimulationRevertError("execution reverted without a reason", data=data)
    try:
        raw = decode_hex(data)
    except (ValueError, TypeError):
        return SimulationRevertError(f"malformed revert data {data!r}", data=data)
    selector, body = raw[:4], raw[4:]
    known = _SELECTORS.get(selector)
    if known is None:
        return SimulationRevertError(f"unknown revert {data}", data=data)
    name, types = known
    try:
        args = tuple(abi_decode(list(types), body)) if types else ()
    except (DecodingError, ValueError) as exc:
        return SimulationRevertError(f"{name} (undecodable arguments: {exc})", error_name=name, data=data)

    if name == "Error":
        reason = str(args[0])
    elif name == "Panic":
        code = int(args[0])
        reason = f"panic 0x{code:02x}: {PANIC_CODES.get(code, 'unknown panic')}"
    else:
        reason = _signature(name, tuple(str(a) for a in args)) if args else name
    return SimulationRevertError(reason, error_name=name, args=args, data=data)


def is_end_of_simulation(data: Optional[str]) -> bool:
    if not data or len(data) < 10:
        return False
    try:
        selector = decode_hex(data)[:4]
    except (ValueError, TypeError):
        return False
    return selector == function_selector(_signature(END_OF_ORACLE_SIMULATION, ()))


@dataclass(frozen=True)
class PriceOverrides:
    """
    Oracle prices handed to the simulation, at USD precision per whole token.

    ``decimals`` holds the token decimals needed to convert each override to
    contract precision.
    """
    primary: Mapping[str, TokenPrices] = field(default_factory=dict)
    secondary: Mapping[str, TokenPrices] = field(default_factory=dict)
    decimals: Mapping[str, int] = field(default_factory=dict)

    def _contract_prices(self, prices: Mapping[str, TokenPrices]) -> Tuple[List[str], List[Tuple[int, int]]]:
        tokens: List[str] = []
        values: List[Tuple[int, int]] = []
        for address, p in prices.items():
            address = normalize_address(address)
            d = self.decimals[address]
            tokens.append(address)
            values.append((convert_to_contract_price(p.min_price, d), convert_to_contract_price(p.max_price, d)))
        return tokens, values

    def oracle_params(self) -> Tuple[List[str], List[Tuple[int, int]], List[str], List[Tuple[int, int]]]:
        """(primary tokens, primary prices, secondary tokens, secondary prices) in contract precision."""
        primary_tokens, primary_prices = self._contract_prices(self.primary)
        secondary_tokens, secondary_prices = self._contract_prices(self.secondary)
        return primary_tokens, primary_prices, secondary_tokens, secondary_prices

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": {a: p.to_dict() for a, p in self.primary.items()},
            "secondary": {a: p.to_dict() for a, p in self.secondary.items()},
        }


@dataclass(frozen=True)
class SimulationResult:
    order_key: str
    block: str = "latest"
