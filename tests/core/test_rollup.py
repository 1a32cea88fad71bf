"""
Tests for per-chantier and per-category rollups.
"""

from datetime import date

import pytest
from monchantier.core.currency import MonetaryAmount
from monchantier.core.exceptions import UnknownCurrency
from monchantier.core.records import Expense, Transfer, make_resolver
from monchantier.core.rollup import (
    UNASSIGNED_KEY,
    Rollup,
    RollupDimension,
    resolve_label,
    rollup_by,
    rollup_frame,
)


def _expense(id, amount, currency="DNT", chantier="X", category=None):
    return Expense(
        id=id,
        date=date(2025, 1, 5),
        amount=MonetaryAmount(amount, currency),
        chantier_id=chantier,
        category_id=category,
    )


class TestRollupBy:
    """Test rollup_by grouping and totals."""

    def test_single_eur_expense(self, rates):
        """100 EUR on chantier X rolls up to 335 DNT."""
        result = rollup_by([_expense("e1", 100, "EUR")], RollupDimension.CHANTIER, rates)

        assert len(result) == 1
        assert result[0].key == "X"
        assert result[0].label == "X"
        assert result[0].total_base == pytest.approx(335.0)

    def test_mixed_currencies_same_key(self, rates):
        records = [
            _expense("e1", 100, "EUR"),
            _expense("e2", 10, "USD"),
            _expense("e3", 4, "DNT"),
        ]
        result = rollup_by(records, RollupDimension.CHANTIER, rates)
        assert [r.key for r in result] == ["X"]
        assert result[0].total_base == pytest.approx(335.0 + 31.0 + 4.0)

    def test_one_rollup_per_key_in_first_seen_order(self, rates):
        records = [
            _expense("e1", 1, chantier="B"),
            _expense("e2", 2, chantier="A"),
            _expense("e3", 3, chantier="B"),
        ]
        result = rollup_by(records, RollupDimension.CHANTIER, rates)
        assert [r.key for r in result] == ["B", "A"]
        assert [r.total_base for r in result] == pytest.approx([4.0, 2.0])

    def test_category_dimension_with_unassigned(self, rates):
        """Records without a category are not dropped."""
        records = [
            _expense("e1", 10, category="materiel"),
            _expense("e2", 5),
            _expense("e3", 7, category=""),
        ]
        result = rollup_by(records, RollupDimension.CATEGORY, rates)
        totals = {r.key: r.total_base for r in result}
        assert totals == {"materiel": 10.0, UNASSIGNED_KEY: 12.0}

    def test_transfers_without_chantier_go_unassigned(self, rates):
        transfer = Transfer(
            id="t1",
            date=date(2025, 1, 2),
            amount=MonetaryAmount(2, "EUR"),
            source="A",
            destination="B",
        )
        result = rollup_by(
            [_expense("e1", 1), transfer], RollupDimension.CHANTIER, rates
        )
        totals = {r.key: r.total_base for r in result}
        assert totals["X"] == 1.0
        assert totals[UNASSIGNED_KEY] == pytest.approx(6.7)

    def test_total_preserved(self, snapshot, rates):
        """Grouping never loses money."""
        records = snapshot.records()
        for dimension in RollupDimension:
            result = rollup_by(records, dimension, rates)
            assert sum(r.total_base for r in result) == pytest.approx(
                1000 + 335 + 500 + 670 + 3350
            )

    def test_labels_resolved(self, snapshot, rates):
        result = rollup_by(
            snapshot.expenses,
            RollupDimension.CHANTIER,
            rates,
            snapshot.chantier_resolver(),
        )
        labels = {r.key: r.label for r in result}
        assert labels == {"villa": "Villa Sousse", "lyon": "Immeuble Lyon"}

    def test_empty_input(self, rates):
        assert rollup_by([], RollupDimension.CHANTIER, rates) == []

    def test_unknown_currency_aborts(self, rates):
        with pytest.raises(UnknownCurrency):
            rollup_by(
                [_expense("e1", 1), _expense("e2", 1, "GBP")],
                RollupDimension.CHANTIER,
                rates,
            )


class TestResolveLabel:
    """Label resolution never raises."""

    def test_no_resolver(self):
        assert resolve_label("X", None) == "X"

    def test_unknown_id_falls_back(self):
        resolver = make_resolver({"A": "Chantier A"})
        assert resolve_label("A", resolver) == "Chantier A"
        assert resolve_label("B", resolver) == "B"

    def test_failing_resolver_falls_back(self):
        def broken(key):
            raise RuntimeError("backend down")

        assert resolve_label("X", broken) == "X"

    def test_empty_label_falls_back(self):
        assert resolve_label("X", lambda key: "") == "X"


class TestRollupFrame:
    def test_sorted_by_total_descending(self):
        df = rollup_frame(
            [Rollup("a", "A", 1.0), Rollup("b", "B", 5.0), Rollup("c", "C", 3.0)]
        )
        assert list(df["key"]) == ["b", "c", "a"]
        assert list(df.columns) == ["key", "label", "total_base"]
