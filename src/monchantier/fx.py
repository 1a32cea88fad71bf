"""
Foreign Exchange (FX) conversion utilities for multi-currency chantiers.

Every amount is converted through a common BASE currency using a rate table
that maps each currency to the value of one unit expressed in BASE units
(``1 EUR = 3.35 DNT``). Aggregates are always computed in BASE; conversion to
the user's display currency happens only when values are presented.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping

import pandas as pd

from .core.currency import BASE_CURRENCY, MonetaryAmount, get_currency
from .core.errors import ConfigError
from .core.exceptions import DivisionByZero, UnknownCurrency

DEFAULT_RATES: dict[str, float] = {
    "DNT": 1.0,
    "EUR": 3.35,  # 1 EUR = 3.35 DNT
    "USD": 3.10,  # 1 USD = 3.10 DNT
}


class ExchangeRateTable(Mapping):
    """
    Read-only mapping from currency code to rate-to-base.

    The table always contains ``base_currency -> 1.0``. It is loaded once per
    aggregation pass and never changes during that pass; edits go through
    :meth:`update`, which returns a new table.

    Attributes:
        base_currency: Internal accounting currency (default: 'DNT')
    """

    def __init__(
        self,
        base_currency: str = BASE_CURRENCY,
        rates: Mapping[str, float] | None = None,
    ):
        """
        Initialize the rate table.

        Args:
            base_currency: Currency all aggregates are expressed in
            rates: Optional mapping ``{currency: rate_to_base}``

        Raises:
            ConfigError: If a rate is not a positive finite number, or the
                base currency is given a rate other than 1
        """
        self.base_currency = base_currency.upper()
        self._rates: dict[str, float] = {self.base_currency: 1.0}
        for code, rate in (rates or {}).items():
            self._set(code, rate)

    def _set(self, code: str, rate: float) -> None:
        code = str(code).upper()
        try:
            value = float(rate)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Rate for {code} must be a number, got {rate!r}") from exc
        if not math.isfinite(value) or value <= 0:
            raise ConfigError(f"Rate for {code} must be positive and finite, got {rate!r}")
        if code == self.base_currency and value != 1.0:
            raise ConfigError(
                f"Base currency {code} must have rate 1.0, got {value}"
            )
        self._rates[code] = value

    def __getitem__(self, code: str) -> float:
        return self._rates[code.upper()]

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.upper() in self._rates

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ExchangeRateTable):
            return (
                self.base_currency == other.base_currency
                and self._rates == other._rates
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.base_currency, tuple(sorted(self._rates.items()))))

    def __repr__(self) -> str:
        return f"ExchangeRateTable(base_currency='{self.base_currency}', rates={self._rates})"

    def update(self, rates: Mapping[str, float]) -> ExchangeRateTable:
        """
        Return a new table with the given rates added or replaced.

        Args:
            rates: Mapping of currency codes to new rates-to-base

        Returns:
            New ExchangeRateTable; ``self`` is left untouched
        """
        merged = dict(self._rates)
        merged.update({str(k).upper(): v for k, v in rates.items()})
        return ExchangeRateTable(self.base_currency, merged)

    def as_dict(self) -> dict[str, float]:
        """Plain dict copy, suitable for JSON/YAML serialization."""
        return dict(self._rates)


def to_base(amount: MonetaryAmount, rates: Mapping[str, float]) -> float:
    """
    Convert an amount to the BASE currency.

    Args:
        amount: Amount to convert
        rates: Rate table (currency -> rate-to-base)

    Returns:
        ``amount.value * rates[amount.currency]``

    Raises:
        UnknownCurrency: If the amount's currency has no rate
    """
    try:
        rate = rates[amount.currency]
    except KeyError:
        raise UnknownCurrency(amount.currency) from None
    return amount.value * rate


def from_base(
    value_base: float, target_currency: str, rates: Mapping[str, float]
) -> float:
    """
    Convert a BASE-currency value to ``target_currency``.

    Raises:
        DivisionByZero: If the target rate is zero or missing
    """
    rate = rates.get(target_currency.upper()) if target_currency else None
    if not rate:
        raise DivisionByZero(target_currency)
    return value_base / rate


def convert(
    value: float,
    from_currency: str,
    to_currency: str,
    rates: Mapping[str, float],
) -> float:
    """Convert ``value`` between two currencies through the BASE currency."""
    if from_currency.upper() == to_currency.upper():
        return value
    value_base = to_base(MonetaryAmount(value, from_currency), rates)
    return from_base(value_base, to_currency, rates)


def convert_frame(
    df: pd.DataFrame,
    rates: Mapping[str, float],
    amount_col: str = "amount",
    currency_col: str = "currency",
    out_col: str = "amount_base",
) -> pd.DataFrame:
    """
    Add a BASE-currency column to a record DataFrame.

    Args:
        df: DataFrame with one row per record
        rates: Rate table (currency -> rate-to-base)
        amount_col: Column holding the amount in the record currency
        currency_col: Column holding the currency code
        out_col: Name of the converted column

    Returns:
        Copy of ``df`` with ``out_col`` added

    Raises:
        UnknownCurrency: On the first row whose currency has no rate
    """
    converted_df = df.copy()
    if df.empty:
        converted_df[out_col] = pd.Series(dtype="float64")
        return converted_df

    codes = df[currency_col].astype(str).str.upper()
    factors = codes.map(lambda code: rates.get(code))
    missing = factors.isna()
    if missing.any():
        first = missing.idxmax()
        record_id = str(df.at[first, "id"]) if "id" in df.columns else None
        raise UnknownCurrency(codes.at[first], record_id)

    converted_df[out_col] = df[amount_col].astype("float64") * factors.astype("float64")
    return converted_df


def format_amount(
    value_base: float,
    display_currency: str,
    rates: Mapping[str, float],
) -> str:
    """
    Format a BASE-currency value for display in ``display_currency``.

    Uses French grouping (space thousands separator, comma decimal mark) and the
    display currency's precision, e.g. ``"1 234,500 DNT"``.
    """
    currency = get_currency(display_currency)
    value = currency.quantize(from_base(value_base, currency.code, rates))
    text = f"{value:,.{currency.decimals}f}"
    text = text.replace(",", " ").replace(".", ",")
    return f"{text} {currency.code}"


def create_rate_table(
    base_currency: str = BASE_CURRENCY,
    rates: Mapping[str, float] | None = None,
) -> ExchangeRateTable:
    """
    Create a rate table seeded with MonChantier's default rates.

    Args:
        base_currency: Base currency for conversions
        rates: Optional overrides merged over :data:`DEFAULT_RATES`

    Returns:
        Configured ExchangeRateTable
    """
    seed = dict(DEFAULT_RATES) if base_currency.upper() == BASE_CURRENCY else {}
    seed.update(rates or {})
    return ExchangeRateTable(base_currency, seed)
