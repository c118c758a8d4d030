"""
OrderGateway: simulate-then-submit flow, failure reporting and events.
"""

import asyncio

import pytest

from synthetics.config.tokens import ARBITRUM
from synthetics.core.errors import RpcError, SimulationRevertError, UserCancellationError, ValidationError
from synthetics.core.event_bus import EventBus, EventType
from synthetics.execution.contract_caller import RpcContractCaller
from synthetics.execution.execution_gateway import (
    GENERIC_FAILURE,
    OrderGateway,
    OrderGatewayConfig,
    describe_failure,
)
from synthetics.execution.order_builder import IncreaseOrderParams, OrderPayloadBuilder
from synthetics.market_data.tokens import PriceSnapshot, TokenPrices

from conftest import ACCOUNT, DATA_STORE, ETH_MARKET, EXCHANGE_ROUTER, ORDER_STORE, USDC, WETH, usd
from test_simulation import FakeNode, revert_data


def params():
    return IncreaseOrderParams(
        account=ACCOUNT,
        market=ETH_MARKET,
        index_token_address=WETH,
        initial_collateral_address=USDC,
        initial_collateral_amount=500 * 10**6,
        size_delta_usd=usd("9000"),
        is_long=True,
        execution_fee=10**15,
        allowed_slippage=30,
    )


def make_gateway(catalog, node, simulate=True, logged=None):
    builder = OrderPayloadBuilder(ARBITRUM, catalog, ORDER_STORE)
    caller = RpcContractCaller(node.rpc(), EXCHANGE_ROUTER, DATA_STORE, ACCOUNT)

    def record(event, **kwargs):
        if logged is not None:
            logged.append((event, kwargs))

    config = OrderGatewayConfig(simulate_orders=simulate, log_event_callback=record)
    return OrderGateway(builder, caller, event_bus=EventBus(), config=config)


class TestDescribeFailure:
    def test_simulation_reason(self):
        exc = SimulationRevertError("OrderNotFulfillableAtAcceptablePrice(5,4)")
        message = describe_failure(exc, "Increase Long ETH by $9,000.00")
        assert message == "Increase Long ETH by $9,000.00 order failed: OrderNotFulfillableAtAcceptablePrice(5,4)"

    def test_cancellation(self):
        assert "cancelled" in describe_failure(UserCancellationError("User rejected"), "X")

    def test_validation(self):
        message = describe_failure(ValidationError("Index token prices are not available: 0x1"))
        assert message.startswith("Order failed: Index token prices")

    def test_rpc_error(self):
        assert describe_failure(RpcError("nonce too low"), "X") == "X order failed: nonce too low"

    def test_unexpected_error_is_generic(self):
        message = describe_failure(KeyError("boom"), "X")
        assert GENERIC_FAILURE in message
        assert "boom" not in message


class TestOrderGateway:
    def test_simulates_then_submits(self, catalog, prices):
        node = FakeNode(nonce=9)
        logged = []
        gateway = make_gateway(catalog, node, logged=logged)
        submitted = []
        gateway.event_bus.subscribe(EventType.ORDER_SUBMITTED, submitted.append)

        result = asyncio.run(gateway.submit_increase_order(params(), prices))

        assert result.success
        assert result.tx_hash == "0x" + "ab" * 32
        assert result.label == "Increase Long ETH by $9,000.00"
        methods = [r["method"] for r in node.requests]
        assert methods == ["eth_call", "eth_call", "eth_sendTransaction"]
        assert len(submitted) == 1
        assert [e for e, _ in logged] == ["order_intent", "order_submitted"]

    def test_simulation_can_be_disabled(self, catalog, prices):
        node = FakeNode()
        gateway = make_gateway(catalog, node, simulate=False)
        result = asyncio.run(gateway.submit_increase_order(params(), prices))
        assert result.success
        assert result.order_key is None
        assert [r["method"] for r in node.requests] == ["eth_sendTransaction"]

    def test_revert_is_reported_and_not_submitted(self, catalog, prices):
        node = FakeNode(router_revert=revert_data("Error(string)", ["string"], ["market disabled"]))
        gateway = make_gateway(catalog, node)
        rejected = []
        gateway.event_bus.subscribe(EventType.ORDER_REJECTED, rejected.append)

        result = asyncio.run(gateway.submit_increase_order(params(), prices))

        assert not result.success
        assert result.error == "Increase Long ETH by $9,000.00 order failed: market disabled"
        assert node.sent == []
        assert len(rejected) == 1

    def test_missing_price_is_reported(self, catalog):
        node = FakeNode()
        gateway = make_gateway(catalog, node)
        snapshot = PriceSnapshot({USDC: TokenPrices.single(usd("1"))})
        result = asyncio.run(gateway.submit_increase_order(params(), snapshot))
        assert not result.success
        assert "Index token prices are not available" in result.error
        assert node.requests == []

    def test_user_cancellation(self, catalog, prices):
        node = FakeNode(error={"code": 4001, "message": "User rejected the request."})
        gateway = make_gateway(catalog, node, simulate=False)
        cancelled = []
        gateway.event_bus.subscribe(EventType.ORDER_CANCELLED, cancelled.append)
        result = asyncio.run(gateway.submit_increase_order(params(), prices))
        assert result.cancelled
        assert len(cancelled) == 1

    def test_withdraw_from_subaccount(self, catalog):
        node = FakeNode()
        gateway = make_gateway(catalog, node)
        result = asyncio.run(gateway.withdraw_from_subaccount(ACCOUNT, 10**17))
        assert result.success
        assert node.sent[0]["value"] == hex(10**17)

    def test_withdraw_requires_amount(self, catalog):
        gateway = make_gateway(catalog, FakeNode())
        with pytest.raises(ValueError):
            asyncio.run(gateway.withdraw_from_subaccount(ACCOUNT, 0))
