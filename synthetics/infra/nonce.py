"""
Account-level submission coordinator.

Provides a single asyncio.Lock per account so every gateway sharing an
account serialises its transaction submissions (one nonce at a time).
"""

from __future__ import annotations

import asyncio
from typing import Dict


class NonceCoordinator:
    def __init__(self) -> None:
        # account (lowercase) -> asyncio.Lock
        self._locks: Dict[str, asyncio.Lock] = {}
        # guard for creating locks
        self._guard = asyncio.Lock()

    async def get_lock(self, account: str) -> asyncio.Lock:
        """Return the shared lock for ``account`` (addresses compare case-insensitively)."""
        key = account.lower()
        async with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[key] = lock
            return lock
