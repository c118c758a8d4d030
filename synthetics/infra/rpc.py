"""
Minimal async JSON-RPC client for EVM nodes over httpx.
"""

from __future__ import annotations

import itertools
from typing import Any, Optional

import httpx

from synthetics.core.errors import RpcError, UserCancellationError

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001
_REJECTION_MARKERS = ("user rejected", "user denied", "action_rejected")


def extract_revert_data(data: Any) -> Optional[str]:
    """Pull 0x-prefixed revert bytes out of the node-specific error ``data`` shapes."""
    if isinstance(data, str) and data.startswith("0x"):
        return data
    if isinstance(data, dict):
        for key in ("data", "result", "revertData"):
            found = extract_revert_data(data.get(key))
            if found:
                return found
    return None


class AsyncRpc:
    def __init__(self, url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None) -> None:
        self.url = url
        # A shared client passed in is not closed by close(); otherwise we own it.
        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.AsyncClient(timeout=timeout)
            self._owns_client = True
        self._ids = itertools.count(1)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def call(self, method: str, params: list) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        resp = await self.client.post(self.url, json=payload)
        resp.raise_for_status()
        body = resp.json()
        error = body.get("error") if isinstance(body, dict) else None
        if error:
            code = error.get("code")
            message = str(error.get("message", "rpc error"))
            if code == USER_REJECTED_CODE or any(m in message.lower() for m in _REJECTION_MARKERS):
                raise UserCancellationError(message, {"code": code})
            raise RpcError(message, code=code, data=error.get("data"))
        return body.get("result")

    async def eth_call(self, tx: dict, block: str = "latest") -> str:
        return await self.call("eth_call", [tx, block])

    async def send_transaction(self, tx: dict) -> str:
        """eth_sendTransaction: the node or wallet behind ``url`` signs."""
        return await self.call("eth_sendTransaction", [tx])

    async def block_number(self) -> int:
        return int(await self.call("eth_blockNumber", []), 16)

    async def chain_id(self) -> int:
        return int(await self.call("eth_chainId", []), 16)
