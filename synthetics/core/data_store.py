"""
Named DataStore keys.

Each constant is the bytes32 selector of a key family; the functions below
combine a selector with its typed arguments in the exact order the
settlement layer's Keys library uses.
"""

from __future__ import annotations

from synthetics.core.hashing import hash_data, hash_string

POSITION_IMPACT_FACTOR_KEY = hash_string("POSITION_IMPACT_FACTOR")
MAX_POSITION_IMPACT_FACTOR_KEY = hash_string("MAX_POSITION_IMPACT_FACTOR")
POSITION_IMPACT_EXPONENT_FACTOR_KEY = hash_string("POSITION_IMPACT_EXPONENT_FACTOR")
POSITION_FEE_FACTOR_KEY = hash_string("POSITION_FEE_FACTOR")
SWAP_IMPACT_FACTOR_KEY = hash_string("SWAP_IMPACT_FACTOR")
SWAP_IMPACT_EXPONENT_FACTOR_KEY = hash_string("SWAP_IMPACT_EXPONENT_FACTOR")
SWAP_FEE_FACTOR_KEY = hash_string("SWAP_FEE_FACTOR")
FEE_RECEIVER_DEPOSIT_FACTOR_KEY = hash_string("FEE_RECEIVER_DEPOSIT_FACTOR")
FEE_RECEIVER_WITHDRAWAL_FACTOR_KEY = hash_string("FEE_RECEIVER_WITHDRAWAL_FACTOR")
FEE_RECEIVER_SWAP_FACTOR_KEY = hash_string("FEE_RECEIVER_SWAP_FACTOR")
FEE_RECEIVER_POSITION_FACTOR_KEY = hash_string("FEE_RECEIVER_POSITION_FACTOR")
OPEN_INTEREST_KEY = hash_string("OPEN_INTEREST")
OPEN_INTEREST_IN_TOKENS_KEY = hash_string("OPEN_INTEREST_IN_TOKENS")
POOL_AMOUNT_KEY = hash_string("POOL_AMOUNT")
RESERVE_FACTOR_KEY = hash_string("RESERVE_FACTOR")
NONCE_KEY = hash_string("NONCE")
BORROWING_FACTOR_KEY = hash_string("BORROWING_FACTOR")
TOTAL_BORROWING_KEY = hash_string("TOTAL_BORROWING")
POSITION_IMPACT_POOL_AMOUNT_KEY = hash_string("POSITION_IMPACT_POOL_AMOUNT")
SWAP_IMPACT_POOL_AMOUNT_KEY = hash_string("SWAP_IMPACT_POOL_AMOUNT")
CUMULATIVE_BORROWING_FACTOR_KEY = hash_string("CUMULATIVE_BORROWING_FACTOR")
MIN_COLLATERAL_USD_KEY = hash_string("MIN_COLLATERAL_USD")
MAX_LEVERAGE_KEY = hash_string("MAX_LEVERAGE")
DEPOSIT_GAS_LIMIT_KEY = hash_string("DEPOSIT_GAS_LIMIT")
WITHDRAWAL_GAS_LIMIT_KEY = hash_string("WITHDRAWAL_GAS_LIMIT")
INCREASE_ORDER_GAS_LIMIT_KEY = hash_string("INCREASE_ORDER_GAS_LIMIT")
DECREASE_ORDER_GAS_LIMIT_KEY = hash_string("DECREASE_ORDER_GAS_LIMIT")
SWAP_ORDER_GAS_LIMIT_KEY = hash_string("SWAP_ORDER_GAS_LIMIT")
SINGLE_SWAP_GAS_LIMIT_KEY = hash_string("SINGLE_SWAP_GAS_LIMIT")
TOKEN_TRANSFER_GAS_LIMIT_KEY = hash_string("TOKEN_TRANSFER_GAS_LIMIT")
NATIVE_TOKEN_TRANSFER_GAS_LIMIT_KEY = hash_string("NATIVE_TOKEN_TRANSFER_GAS_LIMIT")
ESTIMATED_FEE_BASE_GAS_LIMIT_KEY = hash_string("ESTIMATED_FEE_BASE_GAS_LIMIT")
ESTIMATED_FEE_MULTIPLIER_FACTOR_KEY = hash_string("ESTIMATED_FEE_MULTIPLIER_FACTOR")
MARKET_LIST_KEY = hash_string("MARKET_LIST")
POSITION_LIST_KEY = hash_string("POSITION_LIST")
ACCOUNT_POSITION_LIST_KEY = hash_string("ACCOUNT_POSITION_LIST")
ORDER_LIST_KEY = hash_string("ORDER_LIST")
ACCOUNT_ORDER_LIST_KEY = hash_string("ACCOUNT_ORDER_LIST")


def position_impact_factor_key(market: str, is_positive: bool) -> str:
    return hash_data(["bytes32", "address", "bool"], [POSITION_IMPACT_FACTOR_KEY, market, is_positive])


def position_impact_exponent_factor_key(market: str) -> str:
    return hash_data(["bytes32", "address"], [POSITION_IMPACT_EXPONENT_FACTOR_KEY, market])


def max_position_impact_factor_key(market: str, is_positive: bool) -> str:
    return hash_data(["bytes32", "address", "bool"], [MAX_POSITION_IMPACT_FACTOR_KEY, market, is_positive])


def position_fee_factor_key(market: str) -> str:
    return hash_data(["bytes32", "address"], [POSITION_FEE_FACTOR_KEY, market])


def swap_impact_factor_key(market: str, is_positive: bool) -> str:
    return hash_data(["bytes32", "address", "bool"], [SWAP_IMPACT_FACTOR_KEY, market, is_positive])


def swap_impact_exponent_factor_key(market: str) -> str:
    return hash_data(["bytes32", "address"], [SWAP_IMPACT_EXPONENT_FACTOR_KEY, market])


def swap_fee_factor_key(market: str) -> str:
    return hash_data(["bytes32", "address"], [SWAP_FEE_FACTOR_KEY, market])


def open_interest_key(market: str, collateral_token: str, is_long: bool) -> str:
    return hash_data(
        ["bytes32", "address", "address", "bool"],
        [OPEN_INTEREST_KEY, market, collateral_token, is_long],
    )


def open_interest_in_tokens_key(market: str, collateral_token: str, is_long: bool) -> str:
    return hash_data(
        ["bytes32", "address", "address", "bool"],
        [OPEN_INTEREST_IN_TOKENS_KEY, market, collateral_token, is_long],
    )


def pool_amount_key(market: str, token: str) -> str:
    return hash_data(["bytes32", "address", "address"], [POOL_AMOUNT_KEY, market, token])


def reserve_factor_key(market: str, is_long: bool) -> str:
    return hash_data(["bytes32", "address", "bool"], [RESERVE_FACTOR_KEY, market, is_long])


def borrowing_factor_key(market: str, is_long: bool) -> str:
    return hash_data(["bytes32", "address", "bool"], [BORROWING_FACTOR_KEY, market, is_long])


def cumulative_borrowing_factor_key(market: str, is_long: bool) -> str:
    return hash_data(["bytes32", "address", "bool"], [CUMULATIVE_BORROWING_FACTOR_KEY, market, is_long])


def total_borrowing_key(market: str, is_long: bool) -> str:
    return hash_data(["bytes32", "address", "bool"], [TOTAL_BORROWING_KEY, market, is_long])


def position_impact_pool_amount_key(market: str) -> str:
    return hash_data(["bytes32", "address"], [POSITION_IMPACT_POOL_AMOUNT_KEY, market])


def swap_impact_pool_amount_key(market: str, token: str) -> str:
    return hash_data(["bytes32", "address", "address"], [SWAP_IMPACT_POOL_AMOUNT_KEY, market, token])


def order_key(nonce: int) -> str:
    """Key of the order created with the given DataStore nonce."""
    return hash_data(["uint256"], [nonce])


def deposit_gas_limit_key(single_token: bool) -> str:
    return hash_data(["bytes32", "bool"], [DEPOSIT_GAS_LIMIT_KEY, single_token])


def withdrawal_gas_limit_key(single_token: bool) -> str:
    return hash_data(["bytes32", "bool"], [WITHDRAWAL_GAS_LIMIT_KEY, single_token])


def single_swap_gas_limit_key() -> str:
    return hash_data(["bytes32"], [SINGLE_SWAP_GAS_LIMIT_KEY])


def increase_order_gas_limit_key() -> str:
    return hash_data(["bytes32"], [INCREASE_ORDER_GAS_LIMIT_KEY])


def decrease_order_gas_limit_key() -> str:
    return hash_data(["bytes32"], [DECREASE_ORDER_GAS_LIMIT_KEY])


def swap_order_gas_limit_key() -> str:
    return hash_data(["bytes32"], [SWAP_ORDER_GAS_LIMIT_KEY])


def account_order_list_key(account: str) -> str:
    return hash_data(["bytes32", "address"], [ACCOUNT_ORDER_LIST_KEY, account])


def account_position_list_key(account: str) -> str:
    return hash_data(["bytes32", "address"], [ACCOUNT_POSITION_LIST_KEY, account])
