"""
Fixed-point arithmetic matching the settlement layer.

Conventions:
- Token amounts are integers scaled by 10**token.decimals (0-18).
- USD values and prices are integers scaled by 10**USD_DECIMALS and are
  expressed per whole token.
- Contract prices are USD prices per smallest token unit, i.e.
  ``price / 10**token_decimals``.
- Division truncates toward zero like Solidity, not toward negative infinity
  like Python's ``//``. Always multiply before dividing.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

USD_DECIMALS = 30
BASIS_POINTS_DIVISOR = 10_000
FLOAT_PRECISION = 10**30
MAX_TOKEN_DECIMALS = 18


def expand_decimals(n: int, decimals: int) -> int:
    return n * 10**decimals


def div_trunc(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    if b == 0:
        raise ZeroDivisionError("division by zero")
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def mul_div(a: int, b: int, c: int) -> int:
    """a * b / c with a full-width intermediate and truncation toward zero."""
    return div_trunc(a * b, c)


def _check_decimals(decimals: int) -> None:
    if not 0 <= decimals <= MAX_TOKEN_DECIMALS:
        raise ValueError(f"token decimals out of range: {decimals}")


def convert_to_contract_price(price: int, token_decimals: int) -> int:
    """USD-precision price per token -> contract price per smallest unit."""
    _check_decimals(token_decimals)
    return div_trunc(price, expand_decimals(1, token_decimals))


def parse_contract_price(price: int, token_decimals: int) -> int:
    """Contract price per smallest unit -> USD-precision price per token."""
    _check_decimals(token_decimals)
    return price * expand_decimals(1, token_decimals)


def convert_to_usd(token_amount: int, token_decimals: int, price: int) -> int:
    _check_decimals(token_decimals)
    return mul_div(token_amount, price, expand_decimals(1, token_decimals))


def convert_to_token_amount(usd: int, token_decimals: int, price: int) -> int:
    _check_decimals(token_decimals)
    if price <= 0:
        raise ValueError("price must be positive")
    return mul_div(usd, expand_decimals(1, token_decimals), price)


def get_position_value(size_in_tokens: int, token_decimals: int, price: int) -> int:
    """Current USD value of a position size at the given exit price."""
    return convert_to_usd(size_in_tokens, token_decimals, price)


def get_position_pnl(is_long: bool, size_in_usd: int, value: int) -> int:
    return value - size_in_usd if is_long else size_in_usd - value


def get_basis_points(numerator: int, denominator: int) -> int:
    if denominator == 0:
        return 0
    return mul_div(numerator, BASIS_POINTS_DIVISOR, denominator)


def apply_factor(value: int, factor: int) -> int:
    return mul_div(value, factor, FLOAT_PRECISION)


@dataclass(frozen=True)
class FixedAmount:
    """
    Integer amount tagged with its decimal precision.

    Arithmetic and comparisons only combine amounts of equal precision;
    call ``rescale`` first to align them.
    """

    value: int
    decimals: int

    def _aligned(self, other: "FixedAmount") -> int:
        if not isinstance(other, FixedAmount):
            raise TypeError(f"cannot combine FixedAmount with {type(other).__name__}")
        if other.decimals != self.decimals:
            raise ValueError(
                f"precision mismatch: {self.decimals} vs {other.decimals} decimals"
            )
        return other.value

    def __add__(self, other: "FixedAmount") -> "FixedAmount":
        return FixedAmount(self.value + self._aligned(other), self.decimals)

    def __sub__(self, other: "FixedAmount") -> "FixedAmount":
        return FixedAmount(self.value - self._aligned(other), self.decimals)

    def __lt__(self, other: "FixedAmount") -> bool:
        return self.value < self._aligned(other)

    def __le__(self, other: "FixedAmount") -> bool:
        return self.value <= self._aligned(other)

    def __gt__(self, other: "FixedAmount") -> bool:
        return self.value > self._aligned(other)

    def __ge__(self, other: "FixedAmount") -> bool:
        return self.value >= self._aligned(other)

    def rescale(self, decimals: int) -> "FixedAmount":
        """Change precision; scaling down truncates toward zero."""
        if decimals >= self.decimals:
            return FixedAmount(self.value * 10 ** (decimals - self.decimals), decimals)
        return FixedAmount(div_trunc(self.value, 10 ** (self.decimals - decimals)), decimals)

    def to_usd(self, price: int) -> "FixedAmount":
        """Value of this token amount at a USD-precision price."""
        return FixedAmount(convert_to_usd(self.value, self.decimals, price), USD_DECIMALS)

    def __str__(self) -> str:
        return format_amount(self.value, self.decimals, self.decimals)


def parse_value(text: str, decimals: int) -> int:
    """Parse a human decimal string ("1800.10") into a scaled integer, truncating extra digits."""
    try:
        with localcontext() as ctx:
            ctx.prec = 80
            scaled = (Decimal(text.replace(",", "").strip()) * (Decimal(10) ** decimals))
            return int(scaled.to_integral_value(rounding=ROUND_DOWN))
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"not a decimal value: {text!r}") from exc


def format_amount(value: int, decimals: int, display_decimals: int = 4, use_commas: bool = False) -> str:
    """Render a scaled integer, truncated to ``display_decimals`` places."""
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(value), 10**decimals)
    if display_decimals > 0:
        frac_str = str(frac).rjust(decimals, "0")[:display_decimals].ljust(display_decimals, "0")
    else:
        frac_str = ""
    whole_str = f"{whole:,}" if use_commas else str(whole)
    return f"{sign}{whole_str}.{frac_str}" if frac_str else f"{sign}{whole_str}"


def format_usd(value: int | None, display_decimals: int = 2) -> str:
    if value is None:
        return "..."
    text = format_amount(value, USD_DECIMALS, display_decimals, use_commas=True)
    if text.startswith("-"):
        return "-$" + text[1:]
    return "$" + text
