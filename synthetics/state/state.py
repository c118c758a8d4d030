"""
Persisted key-value store scoped per chain and account.

One JSON file per (chain, account); writes go to a temp file that atomically
replaces the original, so readers never observe a partial write.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from synthetics.core.json_utils import dumps_bytes, loads

log = logging.getLogger("synthetics")


class StateStore:
    def __init__(self, chain_id: int, account: Optional[str], state_dir: str) -> None:
        owner = (account or "anonymous").lower()
        self.path = Path(state_dir) / f"state_{chain_id}_{owner}.json"
        self.tmp = self.path.with_suffix(".tmp")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = loads(self.path.read_bytes())
        except ValueError as exc:
            # A corrupt file must not brick the session; start from defaults.
            log.error(f"state_load_error:{exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> Dict[str, Any]:
        with self._lock:
            return self._read_all()

    def get(self, key: str) -> Any:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self.tmp.write_bytes(dumps_bytes(data, indent=True))
            self.tmp.replace(self.path)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if data.pop(key, None) is not None:
                self.tmp.write_bytes(dumps_bytes(data, indent=True))
                self.tmp.replace(self.path)


class MemoryStore:
    """In-process store with the StateStore get/set interface."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.writes += 1
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
