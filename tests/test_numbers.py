"""
Fixed-point arithmetic: truncation, precision conversions and formatting.
"""

import pytest

from synthetics.core.numbers import (
    BASIS_POINTS_DIVISOR,
    USD_DECIMALS,
    FixedAmount,
    apply_factor,
    convert_to_contract_price,
    convert_to_token_amount,
    convert_to_usd,
    div_trunc,
    expand_decimals,
    format_amount,
    format_usd,
    get_basis_points,
    get_position_pnl,
    get_position_value,
    mul_div,
    parse_contract_price,
    parse_value,
)

from conftest import usd


class TestDivision:
    def test_truncates_toward_zero_for_negatives(self):
        assert div_trunc(-7, 2) == -3
        assert -7 // 2 == -4

    def test_positive(self):
        assert div_trunc(7, 2) == 3

    def test_negative_divisor(self):
        assert div_trunc(7, -2) == -3
        assert div_trunc(-7, -2) == 3

    def test_zero_divisor(self):
        with pytest.raises(ZeroDivisionError):
            div_trunc(1, 0)

    def test_mul_div_multiplies_first(self):
        assert mul_div(1, 3, 2) == 1
        assert mul_div(10**40, 10**40, 10**50) == 10**30


class TestConversions:
    def test_expand_decimals(self):
        assert expand_decimals(5, 3) == 5000

    def test_contract_price_round_trip(self):
        price = usd("1800.10")
        contract = convert_to_contract_price(price, 18)
        assert contract == 1800_10 * 10**10
        assert parse_contract_price(contract, 18) == price

    def test_contract_price_for_six_decimals(self):
        assert convert_to_contract_price(usd("1"), 6) == 10**24

    def test_contract_price_rejects_bad_decimals(self):
        with pytest.raises(ValueError):
            convert_to_contract_price(usd("1"), 19)

    def test_convert_to_usd(self):
        # 2.5 ETH at $1800
        assert convert_to_usd(25 * 10**17, 18, usd("1800")) == usd("4500")

    def test_convert_to_token_amount(self):
        assert convert_to_token_amount(usd("4500"), 18, usd("1800")) == 25 * 10**17

    def test_convert_to_token_amount_needs_price(self):
        with pytest.raises(ValueError):
            convert_to_token_amount(usd("1"), 18, 0)


class TestPositionMath:
    def test_value(self):
        assert get_position_value(5 * 10**18, 18, usd("1900")) == usd("9500")

    def test_long_pnl(self):
        assert get_position_pnl(True, usd("9000"), usd("9500")) == usd("500")

    def test_short_pnl(self):
        assert get_position_pnl(False, usd("9000"), usd("9500")) == -usd("500")

    def test_basis_points(self):
        assert get_basis_points(30, 10_000) == 30
        assert get_basis_points(1, 0) == 0
        assert BASIS_POINTS_DIVISOR == 10_000

    def test_apply_factor(self):
        half = expand_decimals(5, 29)
        assert apply_factor(usd("100"), half) == usd("50")


class TestFixedAmount:
    def test_same_precision_arithmetic(self):
        a = FixedAmount(150, 2)
        b = FixedAmount(50, 2)
        assert a + b == FixedAmount(200, 2)
        assert a - b == FixedAmount(100, 2)
        assert b < a
        assert a >= b

    def test_mixed_precision_refused(self):
        with pytest.raises(ValueError):
            FixedAmount(1, 6) + FixedAmount(1, 18)
        with pytest.raises(ValueError):
            FixedAmount(1, 6) < FixedAmount(1, 18)

    def test_non_amount_refused(self):
        with pytest.raises(TypeError):
            FixedAmount(1, 6) + 1

    def test_rescale(self):
        assert FixedAmount(1_500_000, 6).rescale(18) == FixedAmount(15 * 10**17, 18)
        assert FixedAmount(-15, 1).rescale(0) == FixedAmount(-1, 0)

    def test_to_usd(self):
        assert FixedAmount(2 * 10**6, 6).to_usd(usd("1")) == FixedAmount(usd("2"), USD_DECIMALS)

    def test_str(self):
        assert str(FixedAmount(1_500_000, 6)) == "1.500000"


class TestText:
    def test_parse_value(self):
        assert parse_value("1800.10", 30) == 180010 * 10**28
        assert parse_value("1,000", 2) == 100000

    def test_parse_value_truncates_extra_digits(self):
        assert parse_value("1.239", 2) == 123

    def test_parse_value_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_value("abc", 18)

    def test_format_amount_truncates(self):
        assert format_amount(123456, 4, 2) == "12.34"
        assert format_amount(-123456, 4, 2) == "-12.34"

    def test_format_usd(self):
        assert format_usd(usd("9000")) == "$9,000.00"
        assert format_usd(-usd("12.5")) == "-$12.50"
        assert format_usd(None) == "..."
