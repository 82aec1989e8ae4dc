"""
Precifica - Canonical Money & Percentage Types
==============================================

Money:  float reais (R$), as stored by the hosted table API
        - Displayed with Brazilian formatting (1.234,56)
        - Rounded UP to the cent for display, never for arithmetic

Percentage: float 0-100
        - Validated at the business-settings boundary
        - The pricing engine itself never validates, it guards

Locale-sensitive parsing of pasted report values lives here so the import
parser can stay format-agnostic.
"""

import math
import re
from typing import Annotated, Any

from pydantic import BeforeValidator, WithJsonSchema


# =============================================================================
# MONEY (float reais)
# =============================================================================

CURRENCY_SYMBOL = "R$"

# Leading numeric prefix, mirroring how report tools truncate trailing garbage
_DECIMAL_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^[+-]?\d+")
_WHITESPACE = re.compile(r"\s")


def _decimal_prefix(text: str) -> float:
    match = _DECIMAL_PREFIX.match(text)
    if not match:
        return 0.0
    value = float(match.group(0))
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


class Money:
    """
    Money utilities for values in reais.

    Usage:
        Money.parse_brl("R$ 2.024,88")  # -> 2024.88
        Money.parse_quantity("1.250")   # -> 1250
        Money.format_brl(1234.561)      # -> "1.234,57"
    """

    @staticmethod
    def parse_brl(value: str | None) -> float:
        """
        Parse a Brazilian-locale currency string.

        Strips the first "R$", all whitespace and thousands dots, then turns
        the first comma into the decimal point. Anything unparseable is 0.
        """
        if not value:
            return 0.0
        clean = value.replace(CURRENCY_SYMBOL, "", 1)
        clean = _WHITESPACE.sub("", clean).replace(".", "").replace(",", ".", 1)
        return _decimal_prefix(clean.strip())

    @staticmethod
    def parse_quantity(value: str | None) -> int:
        """Parse a whole-unit quantity with thousands dots; unparseable is 0."""
        if not value:
            return 0
        match = _INT_PREFIX.match(value.replace(".", "").strip())
        return int(match.group(0)) if match else 0

    @staticmethod
    def ceil_cents(value: float) -> float:
        """Round up to the next cent (float noise below 1e-6 cent ignored)."""
        return math.ceil(round(value * 100, 6)) / 100

    @staticmethod
    def format_brl(value: float, symbol: bool = False) -> str:
        """Format as pt-BR money with two decimals, rounding up to the cent."""
        rounded = Money.ceil_cents(value)
        text = f"{rounded:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
        return f"{CURRENCY_SYMBOL} {text}" if symbol else text


# =============================================================================
# PERCENTAGE (float, 0-100)
# =============================================================================

def _validate_percentage(v: Any) -> float:
    """Validate percentage as float 0-100."""
    if isinstance(v, bool):
        raise ValueError(f"Invalid percentage type: {type(v)}")

    try:
        value = float(v)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid percentage: {v}")

    if math.isnan(value) or value < 0 or value > 100:
        raise ValueError(f"Percentage must be 0-100, got: {value}")

    return value


Percentage = Annotated[
    float,
    BeforeValidator(_validate_percentage),
    WithJsonSchema({"type": "number", "description": "Percentage 0-100"}),
]


def _validate_non_negative(v: Any) -> float:
    """Validate a non-negative money amount."""
    try:
        value = float(v)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid amount: {v}")

    if math.isnan(value) or value < 0:
        raise ValueError(f"Amount must be >= 0, got: {value}")

    return value


NonNegativeMoney = Annotated[
    float,
    BeforeValidator(_validate_non_negative),
    WithJsonSchema({"type": "number", "description": "Amount in reais (>= 0)"}),
]


__all__ = [
    "CURRENCY_SYMBOL",
    "Money",
    "NonNegativeMoney",
    "Percentage",
]
