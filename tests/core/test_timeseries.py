"""
Tests for monthly bucketing and frequency re-aggregation.
"""

from datetime import date

import pandas as pd
import pytest
from monchantier.core.currency import MonetaryAmount
from monchantier.core.records import Expense
from monchantier.core.timeseries import (
    TimeBucket,
    bucket_by_month,
    buckets_frame,
    to_freq,
)


def _expense(id, day, amount, currency="DNT"):
    return Expense(
        id=id, date=day, amount=MonetaryAmount(amount, currency), chantier_id="X"
    )


@pytest.fixture
def three_expenses():
    return [
        _expense("e1", date(2025, 1, 5), 50),
        _expense("e2", date(2025, 1, 20), 70),
        _expense("e3", date(2025, 2, 1), 30),
    ]


class TestBucketByMonth:
    """Test monthly buckets and the cumulative series."""

    def test_two_months(self, three_expenses, rates):
        buckets = bucket_by_month(three_expenses, rates)
        assert buckets == [
            TimeBucket("2025-01", 120.0, 120.0),
            TimeBucket("2025-02", 30.0, 150.0),
        ]

    def test_input_order_irrelevant(self, three_expenses, rates):
        """Unsorted input gives the same buckets."""
        shuffled = [three_expenses[2], three_expenses[0], three_expenses[1]]
        assert bucket_by_month(shuffled, rates) == bucket_by_month(
            three_expenses, rates
        )

    def test_cumulative_of_last_equals_total(self, snapshot, rates):
        buckets = bucket_by_month(snapshot.expenses, rates)
        assert buckets[-1].cumulative_total_base == pytest.approx(1835.0)
        assert [b.month_key for b in buckets] == ["2025-01", "2025-02"]

    def test_converts_to_base(self, rates):
        buckets = bucket_by_month([_expense("e1", date(2024, 12, 31), 10, "USD")], rates)
        assert buckets[0].month_key == "2024-12"
        assert buckets[0].period_total_base == pytest.approx(31.0)

    def test_months_without_records_are_absent(self, rates):
        records = [
            _expense("e1", date(2025, 1, 1), 1),
            _expense("e2", date(2025, 4, 1), 1),
        ]
        keys = [b.month_key for b in bucket_by_month(records, rates)]
        assert keys == ["2025-01", "2025-04"]

    def test_empty(self, rates):
        assert bucket_by_month([], rates) == []


class TestFrames:
    """Test the pandas views of buckets."""

    def test_buckets_frame_period_index(self, three_expenses, rates):
        df = buckets_frame(bucket_by_month(three_expenses, rates))
        assert isinstance(df.index, pd.PeriodIndex)
        assert df.index.name == "month"
        assert df.loc[pd.Period("2025-02", freq="M"), "cumulative_total_base"] == 150.0

    def test_to_freq_quarterly(self, three_expenses, rates):
        records = three_expenses + [_expense("e4", date(2025, 5, 3), 100)]
        quarterly = to_freq(bucket_by_month(records, rates), "Q")

        assert len(quarterly) == 2
        assert quarterly.index.name == "period"
        assert list(quarterly["period_total_base"]) == [150.0, 100.0]
        assert list(quarterly["cumulative_total_base"]) == [150.0, 250.0]

    def test_to_freq_empty(self):
        assert to_freq([]).empty
