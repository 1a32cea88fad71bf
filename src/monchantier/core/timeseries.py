"""
Monthly time buckets with running cumulative totals.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import pandas as pd

from .records import FinancialRecord, records_frame


@dataclass(frozen=True)
class TimeBucket:
    """
    Totals for one calendar month, in BASE currency.

    Attributes:
        month_key: ``"YYYY-MM"``
        period_total_base: Sum of the month's records
        cumulative_total_base: Running total up to and including this month
    """

    month_key: str
    period_total_base: float
    cumulative_total_base: float


def bucket_by_month(
    records: Iterable[FinancialRecord], rates: Mapping[str, float]
) -> list[TimeBucket]:
    """
    Group records into calendar months and accumulate them chronologically.

    Records are stably sorted by date before accumulating so the cumulative
    series does not depend on input order.

    Args:
        records: Expenses, quotes and/or transfers
        rates: Rate table (currency -> rate-to-base)

    Returns:
        One TimeBucket per month present, ascending by ``month_key``;
        empty input yields an empty list

    Raises:
        UnknownCurrency: If any record currency has no rate
    """
    df = records_frame(records, rates)
    if df.empty:
        return []

    df = df.sort_values("date", kind="stable")
    period = df.groupby("month", sort=True)["amount_base"].sum()
    cumulative = period.cumsum()

    return [
        TimeBucket(
            month_key=str(month),
            period_total_base=float(period.loc[month]),
            cumulative_total_base=float(cumulative.loc[month]),
        )
        for month in period.index
    ]


def buckets_frame(buckets: Iterable[TimeBucket]) -> pd.DataFrame:
    """
    DataFrame view of buckets indexed by a monthly ``PeriodIndex``.

    Columns: ``period_total_base``, ``cumulative_total_base``.
    """
    buckets = list(buckets)
    index = pd.PeriodIndex([b.month_key for b in buckets], freq="M", name="month")
    return pd.DataFrame(
        {
            "period_total_base": [b.period_total_base for b in buckets],
            "cumulative_total_base": [b.cumulative_total_base for b in buckets],
        },
        index=index,
    )


def to_freq(buckets: Iterable[TimeBucket], freq: str = "Q") -> pd.DataFrame:
    """
    Re-aggregate monthly buckets to a coarser frequency.

    Period totals are summed; the cumulative total is the last month's value.

    Args:
        buckets: Monthly buckets from :func:`bucket_by_month`
        freq: Target frequency ('Q', 'Y', ...)

    Returns:
        DataFrame with a ``PeriodIndex`` at ``freq``
    """
    monthly = buckets_frame(buckets)
    if monthly.empty:
        return monthly
    grouped = monthly.groupby(monthly.index.asfreq(freq))
    out = pd.DataFrame(
        {
            "period_total_base": grouped["period_total_base"].sum(),
            "cumulative_total_base": grouped["cumulative_total_base"].last(),
        }
    )
    out.index.name = "period"
    return out
