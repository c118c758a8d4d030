"""
Settings from the environment and the token catalog.
"""

import subprocess
import sys
from pathlib import Path

import pytest
from eth_account import Account

from synthetics.config.config import Settings
from synthetics.config.tokens import ARBITRUM, AVALANCHE, TokenCatalog, load_catalog_overrides
from synthetics.core.errors import ValidationError

from conftest import ETH_MARKET, NATIVE, USDC, WETH

TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SYN_CHAIN_ID", "SYN_ALLOWED_SLIPPAGE_BPS", "SYN_PRIVATE_KEY", "SYN_ACCOUNT",
                 "SYN_REFERRAL_CODE", "SYN_LOG_LEVEL", "SYN_HTTP_TIMEOUT", "SYN_SIMULATE_ORDERS",
                 "SYN_EXCHANGE_ROUTER", "SYN_ORDER_STORE", "SYN_DATA_STORE"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        cfg = Settings.load()
        assert cfg.chain_id == ARBITRUM
        assert cfg.allowed_slippage_bps == 30
        assert cfg.simulate_orders is True

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SYN_CHAIN_ID", "43114")
        monkeypatch.setenv("SYN_ALLOWED_SLIPPAGE_BPS", "50")
        monkeypatch.setenv("SYN_SIMULATE_ORDERS", "false")
        cfg = Settings.load()
        assert cfg.chain_id == AVALANCHE
        assert cfg.allowed_slippage_bps == 50
        assert cfg.simulate_orders is False

    @pytest.mark.parametrize("name,value", [
        ("SYN_CHAIN_ID", "0"),
        ("SYN_ALLOWED_SLIPPAGE_BPS", "10000"),
        ("SYN_HTTP_TIMEOUT", "0"),
        ("SYN_REFERRAL_CODE", "r" * 32),
        ("SYN_LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            Settings.load()

    def test_resolve_account_from_key(self, monkeypatch):
        monkeypatch.setenv("SYN_PRIVATE_KEY", TEST_KEY)
        cfg = Settings.load()
        assert cfg.resolve_account() == Account.from_key(TEST_KEY).address
        assert cfg.dump()["private_key"] == "***"

    def test_resolve_account_missing(self):
        with pytest.raises(RuntimeError):
            Settings.load().resolve_account()

    def test_require_contracts(self, monkeypatch):
        cfg = Settings.load()
        with pytest.raises(RuntimeError) as exc_info:
            cfg.require_contracts()
        assert "SYN_ORDER_STORE" in str(exc_info.value)


class TestTokenCatalog:
    def test_builtin_tokens(self):
        catalog = TokenCatalog()
        assert catalog.get(ARBITRUM, USDC.lower()).decimals == 6
        assert catalog.native_token(ARBITRUM).symbol == "ETH"
        assert catalog.wrapped_token(ARBITRUM).address == WETH

    def test_unknown_token(self):
        with pytest.raises(ValidationError) as exc_info:
            TokenCatalog().get(ARBITRUM, "0x" + "99" * 20)
        assert exc_info.value.address == "0x" + "99" * 20

    def test_converted_address(self):
        catalog = TokenCatalog()
        assert catalog.converted_address(ARBITRUM, NATIVE, "wrapped") == WETH
        assert catalog.converted_address(ARBITRUM, WETH, "native") == NATIVE
        assert catalog.converted_address(ARBITRUM, USDC, "wrapped") == USDC

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "42161:\n"
            "  tokens:\n"
            "    - {address: '0x" + "12" * 20 + "', symbol: GMX, decimals: 18}\n"
            "  markets:\n"
            f"    - {{address: '{ETH_MARKET}', index: '{WETH}', long: '{WETH}', short: '{USDC}'}}\n"
        )
        catalog = TokenCatalog.load(str(path))
        assert catalog.get(ARBITRUM, "0x" + "12" * 20).symbol == "GMX"
        (market,) = catalog.markets(ARBITRUM)
        assert market.collateral_for_side(False) == USDC

    def test_missing_overrides_file(self, tmp_path):
        assert load_catalog_overrides(str(tmp_path / "absent.yaml")) == {}


@pytest.mark.parametrize("module", ["synthetics.config", "synthetics.market_data", "synthetics.execution", "synthetics.state"])
def test_package_imports_in_any_order(module):
    repo_root = Path(__file__).parent.parent
    result = subprocess.run([sys.executable, "-c", f"import {module}"], cwd=repo_root, capture_output=True, text=True)
    assert result.returncode == 0, result.stderr
