"""
JSON-RPC adapter for the ExchangeRouter and DataStore contracts.

Transactions are handed to the node with ``eth_sendTransaction``; whatever
sits behind the RPC URL (a local signer, a wallet bridge) signs them.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from eth_abi import decode as abi_decode
from eth_utils import decode_hex

from synthetics.core.data_store import NONCE_KEY, order_key
from synthetics.core.errors import RpcError
from synthetics.execution.multicall import encode_get_uint, encode_multicall, encode_simulate_execute_order
from synthetics.execution.simulation import PriceOverrides, SimulationResult, decode_revert, is_end_of_simulation
from synthetics.infra.logging_cfg import log_event
from synthetics.infra.rpc import AsyncRpc, extract_revert_data
from synthetics.market_data.tokens import normalize_address

log = logging.getLogger("synthetics")


def _hex(data: bytes) -> str:
    return "0x" + data.hex()


class RpcContractCaller:
    def __init__(self, rpc: AsyncRpc, exchange_router: str, data_store: str, account: str) -> None:
        self.rpc = rpc
        self.exchange_router = normalize_address(exchange_router)
        self.data_store = normalize_address(data_store)
        self.account = normalize_address(account)

    async def get_uint(self, key: str) -> int:
        """DataStore.getUint(key)."""
        result = await self.rpc.eth_call({"to": self.data_store, "data": _hex(encode_get_uint(decode_hex(key)))})
        return int(abi_decode(["uint256"], decode_hex(result))[0])

    async def next_order_key(self) -> str:
        nonce = await self.get_uint(NONCE_KEY)
        return order_key(nonce + 1)

    def _router_tx(self, encoded_calls: Sequence[bytes], value: int) -> dict:
        return {
            "from": self.account,
            "to": self.exchange_router,
            "data": _hex(encode_multicall(encoded_calls)),
            "value": hex(value),
        }

    async def simulate(
        self,
        encoded_calls: Sequence[bytes],
        value: int,
        price_overrides: PriceOverrides,
    ) -> SimulationResult:
        """
        Dry-run the multicall followed by ``simulateExecuteOrder`` for the
        order it would create.

        Raises SimulationRevertError with the decoded reason unless the run
        ends in EndOfOracleSimulation. Node errors without revert data
        propagate as RpcError.
        """
        key = await self.next_order_key()
        simulate_call = encode_simulate_execute_order(decode_hex(key), *price_overrides.oracle_params())
        tx = self._router_tx([*encoded_calls, simulate_call], value)
        try:
            await self.rpc.eth_call(tx)
        except RpcError as exc:
            revert = extract_revert_data(exc.data)
            if is_end_of_simulation(revert):
                log_event(log, "order_simulated", level=logging.DEBUG, order_key=key)
                return SimulationResult(order_key=key)
            if revert is None and "revert" not in exc.message.lower():
                raise
            raise decode_revert(revert) from exc
        log_event(log, "order_simulated", level=logging.DEBUG, order_key=key, reverted=False)
        return SimulationResult(order_key=key)

    async def submit(self, encoded_calls: Sequence[bytes], value: int) -> str:
        """Send ``multicall(encoded_calls)`` to the router. Returns the tx hash."""
        return await self.rpc.send_transaction(self._router_tx(encoded_calls, value))

    async def send_value(self, to: str, value: int, data: Optional[bytes] = None) -> str:
        tx = {"from": self.account, "to": normalize_address(to), "value": hex(value)}
        if data:
            tx["data"] = _hex(data)
        return await self.rpc.send_transaction(tx)
