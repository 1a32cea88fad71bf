"""
Property-based tests using Hypothesis for conversion and aggregation identities.
"""

import math
from datetime import date, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st
from monchantier.core.balances import compute_balances
from monchantier.core.currency import MonetaryAmount
from monchantier.core.records import Expense, Transfer
from monchantier.core.rollup import RollupDimension, rollup_by
from monchantier.core.selection import (
    CrossFilterState,
    SelectionDimension,
    multi_select,
    toggle_select,
)
from monchantier.core.timeseries import bucket_by_month
from monchantier.fx import create_rate_table, from_base, to_base

RATES = create_rate_table()

currency_strategy = st.sampled_from(["DNT", "EUR", "USD"])

value_strategy = st.floats(
    min_value=-1_000_000.0, max_value=1_000_000.0, allow_nan=False, allow_infinity=False
).map(lambda x: round(x, 3))

date_strategy = st.dates(min_value=date(2023, 1, 1), max_value=date(2026, 12, 31))

key_strategy = st.sampled_from(["A", "B", "C", None])


@st.composite
def expenses(draw, max_size=25):
    rows = draw(
        st.lists(
            st.tuples(
                value_strategy,
                currency_strategy,
                date_strategy,
                key_strategy,
                st.sampled_from(["Karim", "Sophie", None]),
            ),
            max_size=max_size,
        )
    )
    return [
        Expense(
            id=f"e{i}",
            date=day,
            amount=MonetaryAmount(value, currency),
            chantier_id=key or "",
            category_id=key,
            payer=payer,
        )
        for i, (value, currency, day, key, payer) in enumerate(rows)
    ]


class TestConversionProperties:
    """Conversion round trips."""

    @given(value=value_strategy, currency=currency_strategy)
    def test_round_trip(self, value, currency):
        amount = MonetaryAmount(value, currency)
        back = from_base(to_base(amount, RATES), currency, RATES)
        assert math.isclose(back, value, rel_tol=1e-9, abs_tol=1e-9)


class TestAggregationProperties:
    """Totals are preserved by every grouping."""

    @given(records=expenses())
    def test_rollups_preserve_total(self, records):
        expected = sum(to_base(r.amount, RATES) for r in records)
        for dimension in RollupDimension:
            rollups = rollup_by(records, dimension, RATES)
            keys = [r.key for r in rollups]
            assert len(keys) == len(set(keys))
            assert sum(r.total_base for r in rollups) == pytest.approx(
                expected, abs=1e-3
            )

    @given(records=expenses())
    def test_buckets_cumulative(self, records):
        buckets = bucket_by_month(records, RATES)
        keys = [b.month_key for b in buckets]
        assert keys == sorted(keys)
        running = 0.0
        for bucket in buckets:
            running += bucket.period_total_base
            assert bucket.cumulative_total_base == pytest.approx(running, abs=1e-3)
        if buckets:
            expected = sum(to_base(r.amount, RATES) for r in records)
            assert buckets[-1].cumulative_total_base == pytest.approx(
                expected, abs=1e-3
            )

    @given(
        moves=st.lists(
            st.tuples(
                st.sampled_from(["A", "B", "C", "D"]),
                st.sampled_from(["A", "B", "C", "D"]),
                st.floats(min_value=0.01, max_value=100_000.0).map(
                    lambda x: round(x, 2)
                ),
                currency_strategy,
            ),
            max_size=20,
        )
    )
    def test_transfer_balances_sum_to_zero(self, moves):
        transfers = [
            Transfer(
                id=f"t{i}",
                date=date(2025, 1, 1) + timedelta(days=i),
                amount=MonetaryAmount(value, currency),
                source=src,
                destination=dst,
            )
            for i, (src, dst, value, currency) in enumerate(moves)
        ]
        balances = compute_balances(transfers, [], RATES)
        assert sum(b.balance for b in balances) == pytest.approx(0.0, abs=1e-6)


class TestSelectionProperties:
    """Selection transitions are involutions."""

    @given(
        initial=st.frozensets(st.sampled_from(["A", "B", "C"])),
        key=st.sampled_from(["A", "B", "C", "D"]),
    )
    def test_multi_select_twice_is_identity(self, initial, key):
        state = CrossFilterState(chantier_ids=initial)
        dim = SelectionDimension.CHANTIER
        assert multi_select(multi_select(state, dim, key), dim, key) == state

    @given(key=st.sampled_from(["A", "B", "C"]))
    def test_toggle_twice_from_empty_is_identity(self, key):
        state = CrossFilterState()
        dim = SelectionDimension.CATEGORY
        assert toggle_select(toggle_select(state, dim, key), dim, key) == state

    @given(
        moves=st.lists(
            st.tuples(
                st.sampled_from(["Karim", "Sophie", "Lafarge"]),
                st.sampled_from(["Karim", "Sophie", "Lafarge"]),
                value_strategy,
                currency_strategy,
            ),
            max_size=15,
        ),
        records=expenses(max_size=15),
    )
    def test_balances_sum_to_minus_expenses_paid(self, moves, records):
        transfers = [
            Transfer(
                id=f"t{i}",
                date=date(2025, 1, 1),
                amount=MonetaryAmount(value, currency),
                source=src,
                destination=dst,
            )
            for i, (src, dst, value, currency) in enumerate(moves)
        ]
        balances = compute_balances(transfers, records, RATES)

        paid = sum(to_base(r.amount, RATES) for r in records if r.payer)
        assert sum(b.expenses_paid for b in balances) == pytest.approx(paid, abs=1e-3)
        assert sum(b.balance for b in balances) == pytest.approx(-paid, abs=1e-3)

        named = {t.source for t in transfers} | {t.destination for t in transfers}
        named |= {r.payer for r in records if r.payer}
        assert {b.actor_name for b in balances} == named
