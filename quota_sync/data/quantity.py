"""Kubernetes resource quantity parsing and canonical formatting.

Quota maps arrive as quantity strings ("500m", "2Gi", "1.5") or occasionally
bare JSON numbers. Events carry them in the same canonical form Kubernetes
prints them in, so two spellings of one amount ("1024Mi" and "1Gi") always
publish identically.

Three formats exist, decided by the suffix:
1. Binary SI: Ki, Mi, Gi, Ti, Pi, Ei (powers of 1024)
2. Decimal SI: n, u, m, (none), k, M, G, T, P, E (powers of 1000)
3. Decimal exponent: e<N> / E<N> (powers of 10)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_UP, Decimal, DecimalException, localcontext
from enum import Enum
from typing import Tuple, Union


class QuantityFormat(str, Enum):
    """Formatting family of a quantity, taken from its suffix."""

    BINARY_SI = "BinarySI"
    DECIMAL_SI = "DecimalSI"
    DECIMAL_EXPONENT = "DecimalExponent"


class QuantityError(ValueError):
    """Raised when a value is not a valid quantity."""


BINARY_SUFFIXES = {
    "Ki": 10,
    "Mi": 20,
    "Gi": 30,
    "Ti": 40,
    "Pi": 50,
    "Ei": 60,
}

DECIMAL_SUFFIXES = {
    "n": -9,
    "u": -6,
    "m": -3,
    "": 0,
    "k": 3,
    "M": 6,
    "G": 9,
    "T": 12,
    "P": 15,
    "E": 18,
}

# Reverse lookups for formatting
BINARY_BY_EXPONENT = {exp: suffix for suffix, exp in BINARY_SUFFIXES.items()}
DECIMAL_BY_EXPONENT = {exp: suffix for suffix, exp in DECIMAL_SUFFIXES.items()}

NANO = Decimal("1e-9")
PRECISION = 100

_QUANTITY_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+))([a-zA-Z]*[+-]?\d*)$")
_EXPONENT_RE = re.compile(r"^[eE]([+-]?\d+)$")


@dataclass(frozen=True)
class Quantity:
    """A parsed quantity: exact amount plus its formatting family."""

    amount: Decimal
    format: QuantityFormat

    def __str__(self) -> str:
        return format_quantity(self)


def _parse_suffix(suffix: str) -> Tuple[int, int, QuantityFormat]:
    """Return (base, exponent, format) for a suffix."""
    if suffix in BINARY_SUFFIXES:
        return 2, BINARY_SUFFIXES[suffix], QuantityFormat.BINARY_SI
    if suffix in DECIMAL_SUFFIXES:
        return 10, DECIMAL_SUFFIXES[suffix], QuantityFormat.DECIMAL_SI
    match = _EXPONENT_RE.match(suffix)
    if match:
        try:
            exponent = int(match.group(1))
        except ValueError as e:
            raise QuantityError(f"Quantity exponent out of range: {suffix[:32]!r}") from e
        return 10, exponent, QuantityFormat.DECIMAL_EXPONENT
    raise QuantityError(f"Unknown quantity suffix: {suffix!r}")


def parse_quantity(value: Union[str, int, float, Decimal]) -> Quantity:
    """Parse a quantity string or number.

    Args:
        value: e.g. "500m", "2Gi", "1e3", "4", or a JSON number

    Returns:
        Parsed Quantity

    Raises:
        QuantityError: If the value is empty or not a valid quantity.
    """
    if isinstance(value, bool) or value is None:
        raise QuantityError(f"Not a quantity: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        value = str(value)
    if not isinstance(value, str):
        raise QuantityError(f"Not a quantity: {value!r}")

    text = value.strip()
    match = _QUANTITY_RE.match(text)
    if not match:
        raise QuantityError(f"Invalid quantity: {value!r}")

    number, suffix = match.group(1), match.group(2)
    base, exponent, fmt = _parse_suffix(suffix)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        try:
            amount = Decimal(number) * (Decimal(base) ** exponent)
        except DecimalException as e:
            raise QuantityError(f"Quantity out of range: {value!r}") from e

    return Quantity(amount=amount, format=fmt)


def _decimal_mantissa(amount: Decimal) -> Tuple[int, int]:
    """Split an amount into an integer mantissa and an exponent divisible by 3.

    The amount is first rounded up (away from zero) to nano precision.

    Raises:
        QuantityError: If the amount has more digits than PRECISION allows.
    """
    with localcontext() as ctx:
        ctx.prec = PRECISION
        try:
            rounded = amount.quantize(NANO, rounding=ROUND_UP)
        except DecimalException as e:
            raise QuantityError(f"Quantity out of range: {amount}") from e
        if rounded == 0:
            return 0, 0

        sign, digits, exponent = rounded.normalize().as_tuple()
        mantissa = int("".join(str(d) for d in digits))
        if sign:
            mantissa = -mantissa

    while exponent % 3 != 0:
        mantissa *= 10
        exponent -= 1
    return mantissa, exponent


def _binary_mantissa(amount: int) -> Tuple[int, int]:
    """Divide out the largest exact power of 1024 (up to Ei)."""
    exponent = 0
    while amount != 0 and amount % 1024 == 0 and exponent < 60:
        amount //= 1024
        exponent += 10
    return amount, exponent


def format_quantity(quantity: Quantity) -> str:
    """Render a Quantity in canonical Kubernetes form."""
    fmt = quantity.format
    amount = quantity.amount

    if fmt == QuantityFormat.BINARY_SI:
        # Small or fractional binary amounts print as decimal SI
        if -1024 < amount < 1024 or amount != amount.to_integral_value():
            fmt = QuantityFormat.DECIMAL_SI
        else:
            mantissa, exponent = _binary_mantissa(int(amount))
            return f"{mantissa}{BINARY_BY_EXPONENT.get(exponent, '')}"

    mantissa, exponent = _decimal_mantissa(amount)
    if fmt == QuantityFormat.DECIMAL_EXPONENT:
        return f"{mantissa}e{exponent}" if exponent else str(mantissa)

    if exponent in DECIMAL_BY_EXPONENT:
        return f"{mantissa}{DECIMAL_BY_EXPONENT[exponent]}"
    return f"{mantissa}e{exponent}"


def canonical_quantity(value: Union[str, int, float, Decimal]) -> str:
    """Parse and re-render a quantity in canonical form.

    Examples:
        "1.5" -> "1500m", "1000" -> "1k", "2048Mi" -> "2Gi", "0.5Gi" -> "512Mi"

    Raises:
        QuantityError: If the value is not a valid quantity.
    """
    return format_quantity(parse_quantity(value))
