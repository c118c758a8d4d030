"""
Increase-order payload assembly.

``OrderPayloadBuilder.build_increase_order`` is pure: it reads one
PriceSnapshot and returns everything the gateway needs to simulate and
submit the order. The acceptable price and the simulation overrides come
from that same snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from synthetics.config.tokens import TokenCatalog
from synthetics.core.errors import ValidationError
from synthetics.core.numbers import convert_to_contract_price, format_amount, format_usd
from synthetics.execution.acceptable_price import get_acceptable_price_for_position_order
from synthetics.execution.multicall import (
    OrderType,
    encode_create_order,
    encode_referral_code,
    encode_send_tokens,
    encode_send_wnt,
)
from synthetics.execution.simulation import PriceOverrides
from synthetics.infra.logging_cfg import log_event
from synthetics.market_data.tokens import (
    NATIVE_TOKEN_ADDRESS,
    PriceSnapshot,
    TokenPrices,
    normalize_address,
    same_address,
)

log = logging.getLogger("synthetics")

INCREASE_ORDER_TYPES = (OrderType.MARKET_INCREASE, OrderType.LIMIT_INCREASE)


@dataclass(frozen=True)
class IncreaseOrderParams:
    account: str
    market: str
    index_token_address: str
    initial_collateral_address: str
    initial_collateral_amount: int
    size_delta_usd: int
    is_long: bool
    execution_fee: int
    allowed_slippage: int
    order_type: OrderType = OrderType.MARKET_INCREASE
    swap_path: Tuple[str, ...] = ()
    trigger_price: Optional[int] = None
    price_impact_delta: int = 0
    referral_code: Optional[str] = None


@dataclass(frozen=True)
class MulticallStep:
    method: str
    args: Tuple[Any, ...]
    calldata: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"method": self.method, "args": [str(a) for a in self.args], "calldata": "0x" + self.calldata.hex()}


@dataclass(frozen=True)
class IncreaseOrderPayload:
    steps: Tuple[MulticallStep, ...]
    value: int
    acceptable_price: int
    trigger_price: Optional[int]
    is_native_payment: bool
    price_overrides: PriceOverrides
    label: str

    @property
    def encoded_calls(self) -> List[bytes]:
        return [s.calldata for s in self.steps]

    @property
    def methods(self) -> List[str]:
        return [s.method for s in self.steps]


@dataclass(frozen=True)
class ValueTransfer:
    to: str
    value: int
    label: str = ""
    data: bytes = field(default=b"")


class OrderPayloadBuilder:
    def __init__(self, chain_id: int, catalog: TokenCatalog, order_store: str) -> None:
        self.chain_id = chain_id
        self.catalog = catalog
        self.order_store = normalize_address(order_store)

    def _price_overrides(
        self,
        prices: PriceSnapshot,
        index_token: str,
        acceptable_price: int,
        trigger_price: Optional[int],
    ) -> PriceOverrides:
        """Every snapshot price under its wrapped address, with the index token pinned."""
        primary: Dict[str, TokenPrices] = {}
        decimals: Dict[str, int] = {}
        for address, token_prices in prices.items():
            if same_address(address, NATIVE_TOKEN_ADDRESS):
                continue
            token = self.catalog.get(self.chain_id, address)
            primary[token.address] = token_prices
            decimals[token.address] = token.decimals

        secondary: Dict[str, TokenPrices] = {}
        if trigger_price:
            secondary[index_token] = TokenPrices.single(trigger_price)
        else:
            primary[index_token] = TokenPrices.single(acceptable_price)
        return PriceOverrides(primary=primary, secondary=secondary, decimals=decimals)

    def build_increase_order(self, params: IncreaseOrderParams, prices: PriceSnapshot) -> IncreaseOrderPayload:
        index_prices = prices.get(params.index_token_address)
        if index_prices is None:
            raise ValidationError(
                f"Index token prices are not available: {params.index_token_address}",
                address=params.index_token_address,
            )
        if params.order_type not in INCREASE_ORDER_TYPES:
            raise ValueError(f"not an increase order type: {params.order_type!r}")
        if params.order_type == OrderType.LIMIT_INCREASE and not params.trigger_price:
            raise ValueError("limit increase orders need a trigger price")

        index_token = self.catalog.get(self.chain_id, params.index_token_address)
        is_native_payment = same_address(params.initial_collateral_address, NATIVE_TOKEN_ADDRESS)
        value = (params.initial_collateral_amount if is_native_payment else 0) + params.execution_fee

        acceptable_price = get_acceptable_price_for_position_order(
            is_increase=True,
            is_long=params.is_long,
            index_prices=index_prices,
            size_delta_usd=params.size_delta_usd,
            allowed_slippage=params.allowed_slippage,
            price_impact_delta=params.price_impact_delta,
            trigger_price=params.trigger_price,
        )

        steps: List[MulticallStep] = [
            MulticallStep("sendWnt", (self.order_store, value), encode_send_wnt(self.order_store, value)),
        ]
        if not is_native_payment:
            args = (normalize_address(params.initial_collateral_address), self.order_store, params.initial_collateral_amount)
            steps.append(MulticallStep("sendTokens", args, encode_send_tokens(*args)))

        collateral_token = self.catalog.converted_address(self.chain_id, params.initial_collateral_address, "wrapped")
        trigger_contract_price = convert_to_contract_price(params.trigger_price or 0, index_token.decimals)
        acceptable_contract_price = convert_to_contract_price(acceptable_price, index_token.decimals)
        referral = encode_referral_code(params.referral_code)
        create_order = encode_create_order(
            receiver=params.account,
            initial_collateral_token=collateral_token,
            market=params.market,
            swap_path=params.swap_path,
            size_delta_usd=params.size_delta_usd,
            trigger_price=trigger_contract_price,
            acceptable_price=acceptable_contract_price,
            execution_fee=params.execution_fee,
            order_type=params.order_type,
            is_long=params.is_long,
            should_unwrap_native_token=is_native_payment,
            referral_code=referral,
        )
        steps.append(MulticallStep(
            "createOrder",
            (params.account, collateral_token, params.market, params.size_delta_usd,
             trigger_contract_price, acceptable_contract_price, int(params.order_type), params.is_long),
            create_order,
        ))

        side = "Long" if params.is_long else "Short"
        symbol = self.catalog.native_token(self.chain_id).symbol if index_token.is_wrapped else index_token.symbol
        label = f"Increase {side} {symbol} by {format_usd(params.size_delta_usd)}"

        log_event(
            log, "increase_order_built", level=logging.DEBUG,
            label=label,
            steps=[s.method for s in steps],
            value=value,
            acceptable_price=format_usd(acceptable_price),
            trigger_price=format_usd(params.trigger_price) if params.trigger_price else None,
        )

        return IncreaseOrderPayload(
            steps=tuple(steps),
            value=value,
            acceptable_price=acceptable_price,
            trigger_price=params.trigger_price,
            is_native_payment=is_native_payment,
            price_overrides=self._price_overrides(prices, index_token.address, acceptable_price, params.trigger_price),
            label=label,
        )

    def build_subaccount_withdrawal(self, main_account: str, amount: int) -> ValueTransfer:
        """Native-token transfer from a subaccount back to its main account."""
        if amount <= 0:
            raise ValueError("withdrawal amount must be positive")
        native = self.catalog.native_token(self.chain_id)
        label = f"Withdraw {format_amount(amount, native.decimals, 4)} {native.symbol} to main account"
        return ValueTransfer(to=normalize_address(main_account), value=amount, label=label)
