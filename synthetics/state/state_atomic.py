"""
Async wrapper around StateStore for use from the event loop.

File IO runs in the default executor; an asyncio.Lock serialises access so
concurrent tasks in one process cannot interleave read-modify-write cycles.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from synthetics.state.state import StateStore


class AtomicStateStore:
    def __init__(self, chain_id: int, account: Optional[str], state_dir: str) -> None:
        self._store = StateStore(chain_id, account, state_dir)
        self._lock = asyncio.Lock()

    @property
    def store(self) -> StateStore:
        return self._store

    async def load(self) -> Dict[str, Any]:
        async with self._lock:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self._store.load)

    async def get(self, key: str) -> Any:
        async with self._lock:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self._store.get, key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._store.set, key, value)
