"""
Currency and precision handling for MonChantier.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal
from enum import Enum


class RoundingPolicy(Enum):
    """Rounding policies for displayed amounts."""

    BANKERS = ROUND_HALF_EVEN
    HALF_UP = ROUND_HALF_UP


class Currency:
    """
    Currency definition with precision and rounding rules.

    Attributes:
        code: Currency code as used by the application (e.g., 'DNT', 'EUR')
        decimals: Number of decimal places for this currency
        rounding: Rounding policy applied by :meth:`quantize`
    """

    def __init__(
        self,
        code: str,
        decimals: int = 2,
        rounding: RoundingPolicy = RoundingPolicy.BANKERS,
    ):
        self.code = code.upper()
        self.decimals = decimals
        self.rounding = rounding

    def quantize(self, amount: Decimal | float) -> Decimal:
        """Quantize amount to currency precision."""
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        quantum = Decimal("1").scaleb(-self.decimals)  # 0.001 for DNT, 0.01 for EUR
        return amount.quantize(quantum, rounding=self.rounding.value)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency('{self.code}', decimals={self.decimals})"


@dataclass(frozen=True)
class MonetaryAmount:
    """
    Amount expressed in a given currency.

    Values are kept as floats so they can flow through pandas aggregations;
    rounding only happens when an amount is displayed.

    Attributes:
        value: Finite numeric value (negative and zero values are allowed)
        currency: Currency code, normalized to upper case
    """

    value: float
    currency: str = "DNT"

    def __post_init__(self):
        value = float(self.value)
        if not math.isfinite(value):
            raise ValueError(f"Amount value must be finite, got {self.value!r}")
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "currency", str(self.currency).upper())

    def __str__(self) -> str:
        return f"{self.value} {self.currency}"


# Tunisian dinar is split into 1000 millimes
DNT = Currency("DNT", decimals=3)
EUR = Currency("EUR", decimals=2)
USD = Currency("USD", decimals=2)

BASE_CURRENCY = "DNT"

# Currency registry
CURRENCIES: dict[str, Currency] = {
    "DNT": DNT,
    "EUR": EUR,
    "USD": USD,
}


def get_currency(code: str) -> Currency:
    """Get currency by code."""
    code = code.upper()
    if code not in CURRENCIES:
        # Default to 2 decimal places for unknown currencies
        return Currency(code, decimals=2)
    return CURRENCIES[code]


def create_amount(value: Decimal | float | str, currency_code: str) -> MonetaryAmount:
    """Create a MonetaryAmount from a loosely typed value."""
    return MonetaryAmount(float(value), currency_code)
