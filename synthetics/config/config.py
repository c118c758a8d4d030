"""
Environment-driven configuration with validation.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from synthetics.core.json_utils import dumps

load_dotenv()

log = logging.getLogger("synthetics")

DEFAULT_ALLOWED_SLIPPAGE_BPS = 30


def env_bool(key: str, default: bool) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "y"}


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return int(raw)


def _float_env(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    chain_id: int
    rpc_url: str
    oracle_url: str
    account: str | None
    private_key: str | None
    # Settlement-layer contracts
    exchange_router: str | None
    order_store: str | None
    data_store: str | None
    # Trading defaults
    allowed_slippage_bps: int
    referral_code: str | None
    simulate_orders: bool
    # Persistence / catalog
    state_dir: str
    catalog_path: str
    # Transport
    http_timeout: float
    # Logging
    log_level: str
    log_file: str | None

    def dump(self) -> dict:
        """Settings for logging; the private key is never included."""
        data = self.__dict__.copy()
        data["private_key"] = "***" if self.private_key else None
        return data

    @classmethod
    def load(cls) -> "Settings":
        cfg = cls(
            chain_id=_int_env("SYN_CHAIN_ID", 42161),
            rpc_url=os.getenv("SYN_RPC_URL", "https://arb1.arbitrum.io/rpc"),
            oracle_url=os.getenv("SYN_ORACLE_URL", "https://arbitrum-api.gmxinfra.io"),
            account=os.getenv("SYN_ACCOUNT"),
            private_key=os.getenv("SYN_PRIVATE_KEY"),
            exchange_router=os.getenv("SYN_EXCHANGE_ROUTER"),
            order_store=os.getenv("SYN_ORDER_STORE"),
            data_store=os.getenv("SYN_DATA_STORE"),
            allowed_slippage_bps=_int_env("SYN_ALLOWED_SLIPPAGE_BPS", DEFAULT_ALLOWED_SLIPPAGE_BPS),
            referral_code=os.getenv("SYN_REFERRAL_CODE") or None,
            simulate_orders=env_bool("SYN_SIMULATE_ORDERS", True),
            state_dir=os.getenv("SYN_STATE_DIR", "state"),
            catalog_path=os.getenv("SYN_CATALOG_PATH", "configs/catalog.yaml"),
            http_timeout=_float_env("SYN_HTTP_TIMEOUT", 10.0),
            log_level=os.getenv("SYN_LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("SYN_LOG_FILE") or None,
        )
        cfg._validate()
        _sanity_check(cfg)
        return cfg

    def resolve_account(self) -> str:
        if self.private_key:
            from eth_account import Account

            return Account.from_key(self.private_key).address
        if self.account:
            return self.account
        raise RuntimeError("Missing SYN_ACCOUNT or SYN_PRIVATE_KEY")

    def require_contracts(self) -> None:
        missing = [
            name for name, value in (
                ("SYN_EXCHANGE_ROUTER", self.exchange_router),
                ("SYN_ORDER_STORE", self.order_store),
                ("SYN_DATA_STORE", self.data_store),
            ) if not value
        ]
        if missing:
            raise RuntimeError(f"Missing contract addresses: {', '.join(missing)}")

    def _validate(self) -> None:
        if self.chain_id <= 0:
            raise ValueError("SYN_CHAIN_ID must be > 0")
        if not 0 <= self.allowed_slippage_bps < 10_000:
            raise ValueError("SYN_ALLOWED_SLIPPAGE_BPS must be in [0, 10000)")
        if self.http_timeout <= 0:
            raise ValueError("SYN_HTTP_TIMEOUT must be > 0")
        if self.referral_code and len(self.referral_code.encode("utf-8")) > 31:
            raise ValueError("SYN_REFERRAL_CODE must fit in 31 bytes")
        if self.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"SYN_LOG_LEVEL invalid: {self.log_level}")

        if self.allowed_slippage_bps > 200:
            log.warning(
                f"WARNING: SYN_ALLOWED_SLIPPAGE_BPS is {self.allowed_slippage_bps} "
                f"({self.allowed_slippage_bps / 100:.2f}%). Market orders may fill far from the mark price."
            )
        if not self.simulate_orders:
            log.warning(
                "WARNING: SYN_SIMULATE_ORDERS is disabled. "
                "Orders that would revert will only fail on-chain."
            )


def _sanity_check(cfg: Settings) -> None:
    """Log the settings that most often surprise people, once at startup."""
    payload = {
        "event": "config_loaded",
        "chain_id": cfg.chain_id,
        "allowed_slippage_bps": cfg.allowed_slippage_bps,
        "simulate_orders": cfg.simulate_orders,
        "state_dir": cfg.state_dir,
    }
    log.info(dumps(payload))
