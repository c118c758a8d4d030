"""
Storage key derivation against fixed reference vectors.
"""

import pytest

from synthetics.core import data_store
from synthetics.core.errors import EncodingError
from synthetics.core.hashing import derive_key, function_selector, hash_data, hash_string

from conftest import ACCOUNT, ETH_MARKET, USDC

ZERO_WORD_HASH = "0x290decd9548b62a8d60345a988386fc84ba6bc95484008f6362f93160ef3e563"
ONE_WORD_HASH = "0xb10e2d527612073b26eecdfd717e6a320cf44b4afac2b0732d9fcbe2b7fa0cf6"
TWO_ZERO_WORDS_HASH = "0xad3228b676f7d3cd4284a5443f17f1962b36e491b30a40b2405849e597ba5fb5"


class TestHashData:
    def test_uint256_zero(self):
        assert hash_data(["uint256"], [0]) == ZERO_WORD_HASH

    def test_uint256_one(self):
        assert hash_data(["uint256"], [1]) == ONE_WORD_HASH

    def test_bytes32_and_bool(self):
        assert hash_data(["bytes32", "bool"], [b"\x00" * 32, False]) == TWO_ZERO_WORDS_HASH

    def test_bytes32_hex_string_matches_raw_bytes(self):
        assert hash_data(["bytes32", "bool"], ["0x" + "00" * 32, False]) == TWO_ZERO_WORDS_HASH

    def test_address_case_does_not_change_key(self):
        lower = hash_data(["address"], [USDC.lower()])
        checksummed = hash_data(["address"], [USDC])
        assert lower == checksummed

    def test_is_deterministic(self):
        args = (["bytes32", "address", "bool"], [data_store.POSITION_IMPACT_FACTOR_KEY, ETH_MARKET, True])
        assert hash_data(*args) == hash_data(*args)

    def test_result_is_32_byte_hex(self):
        key = hash_data(["string"], ["NONCE"])
        assert key.startswith("0x")
        assert len(key) == 66

    def test_count_mismatch_raises(self):
        with pytest.raises(EncodingError):
            hash_data(["uint256", "bool"], [1])

    def test_invalid_address_raises(self):
        with pytest.raises(EncodingError):
            hash_data(["address"], ["0x1234"])

    def test_bool_in_uint_slot_raises(self):
        with pytest.raises(EncodingError):
            hash_data(["uint256"], [True])

    def test_negative_uint_raises(self):
        with pytest.raises(EncodingError):
            hash_data(["uint256"], [-1])

    def test_bad_bytes32_hex_raises(self):
        with pytest.raises(EncodingError):
            hash_data(["bytes32"], ["0xzz"])

    @pytest.mark.parametrize("value", ["0x12", "0x" + "00" * 33, b"\x12", b"\x00" * 31])
    def test_wrong_width_bytes32_raises(self, value):
        with pytest.raises(EncodingError):
            hash_data(["bytes32"], [value])


class TestDeriveKey:
    def test_hash_string_is_string_encoding(self):
        assert hash_string("POOL_AMOUNT") == hash_data(["string"], ["POOL_AMOUNT"])

    def test_derive_key_prefixes_selector(self):
        expected = hash_data(
            ["bytes32", "address", "address"],
            [hash_string("POOL_AMOUNT"), ETH_MARKET, USDC],
        )
        assert derive_key("POOL_AMOUNT", ("address", ETH_MARKET), ("address", USDC)) == expected

    def test_argument_order_matters(self):
        a = derive_key("POOL_AMOUNT", ("address", ETH_MARKET), ("address", USDC))
        b = derive_key("POOL_AMOUNT", ("address", USDC), ("address", ETH_MARKET))
        assert a != b

    def test_malformed_typed_arg_raises(self):
        with pytest.raises(EncodingError):
            derive_key("POOL_AMOUNT", "address")


class TestDataStoreKeys:
    def test_order_key_is_nonce_hash(self):
        assert data_store.order_key(0) == ZERO_WORD_HASH
        assert data_store.order_key(1) == ONE_WORD_HASH

    def test_pool_amount_key_matches_derive_key(self):
        assert data_store.pool_amount_key(ETH_MARKET, USDC) == derive_key(
            "POOL_AMOUNT", ("address", ETH_MARKET), ("address", USDC)
        )

    def test_open_interest_key_depends_on_side(self):
        long_key = data_store.open_interest_key(ETH_MARKET, USDC, True)
        short_key = data_store.open_interest_key(ETH_MARKET, USDC, False)
        assert long_key != short_key
        assert long_key == derive_key(
            "OPEN_INTEREST", ("address", ETH_MARKET), ("address", USDC), ("bool", True)
        )

    def test_position_impact_factor_key(self):
        assert data_store.position_impact_factor_key(ETH_MARKET, False) == derive_key(
            "POSITION_IMPACT_FACTOR", ("address", ETH_MARKET), ("bool", False)
        )

    def test_account_lists(self):
        assert data_store.account_order_list_key(ACCOUNT) == derive_key("ACCOUNT_ORDER_LIST", ("address", ACCOUNT))
        assert data_store.account_position_list_key(ACCOUNT) != data_store.account_order_list_key(ACCOUNT)

    def test_deposit_gas_limit_key(self):
        assert data_store.deposit_gas_limit_key(True) == derive_key("DEPOSIT_GAS_LIMIT", ("bool", True))


class TestFunctionSelector:
    def test_transfer(self):
        assert function_selector("transfer(address,uint256)").hex() == "a9059cbb"

    def test_error_string(self):
        assert function_selector("Error(string)").hex() == "08c379a0"

    def test_panic(self):
        assert function_selector("Panic(uint256)").hex() == "4e487b71"
