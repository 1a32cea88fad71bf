"""
Aggregation exceptions for MonChantier.

The aggregation engine performs no I/O, so every failure it reports is a data
inconsistency that the caller must see in full: a pass never returns partial
results after one of these is raised.
"""

from __future__ import annotations


class AggregationError(Exception):
    """Base class for failures raised during an aggregation pass."""


class UnknownCurrency(AggregationError, LookupError):
    """
    Raised when an amount's currency has no entry in the exchange-rate table.

    Attributes:
        currency: The currency code that could not be converted
        record_id: Identifier of the offending record, when known
    """

    def __init__(self, currency: str, record_id: str | None = None):
        self.currency = currency
        self.record_id = record_id
        super().__init__(self._fmt())

    def _fmt(self) -> str:
        msg = f"No exchange rate for currency '{self.currency}'"
        if self.record_id is not None:
            msg += f" (record {self.record_id})"
        return msg


class DivisionByZero(AggregationError, ZeroDivisionError):
    """
    Raised when converting to a currency whose rate is zero or missing.

    Attributes:
        currency: The target currency code
    """

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(
            f"Cannot convert to '{currency}': rate is zero or missing"
        )
