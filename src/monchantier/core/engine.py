"""
Dashboard aggregation engine.

This module ties the converter, filters, selection state and aggregators into
a single pass over an in-memory snapshot:

    snapshot -> primary filter AND cross filter -> rollups / buckets /
    balances / KPIs -> DashboardView

A pass is a pure function of (snapshot, rates, primary, cross): it performs no
I/O, never mutates its inputs, and either returns a complete view or raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..fx import from_base
from ..kpi import dashboard_kpis
from .balances import ActorBalance, compute_balances, sort_by_magnitude
from .currency import BASE_CURRENCY, get_currency
from .filters import FilterCriteria, select_records
from .records import (
    Category,
    Chantier,
    EntityResolver,
    Expense,
    FinancialRecord,
    Quote,
    Transfer,
    make_resolver,
)
from .rollup import Rollup, RollupDimension, rollup_by
from .selection import CrossFilterState, SelectionDimension
from .selection import reset as reset_selection
from .selection import select as select_transition
from .timeseries import TimeBucket, bucket_by_month

logger = logging.getLogger(__name__)

_ViewKey = tuple[FilterCriteria, CrossFilterState]


@dataclass(frozen=True)
class Snapshot:
    """
    Records and reference entities fetched for one dashboard load.

    The lists are assumed deduplicated; see
    :func:`monchantier.core.validation.validate_snapshot` to check.
    """

    chantiers: tuple[Chantier, ...] = ()
    expenses: tuple[Expense, ...] = ()
    quotes: tuple[Quote, ...] = ()
    transfers: tuple[Transfer, ...] = ()
    categories: tuple[Category, ...] = ()

    def __post_init__(self):
        for name in ("chantiers", "expenses", "quotes", "transfers", "categories"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def records(self) -> list[FinancialRecord]:
        """All financial records: expenses, then quotes, then transfers."""
        return [*self.expenses, *self.quotes, *self.transfers]

    def chantier_resolver(self) -> EntityResolver:
        return make_resolver(self.chantiers)

    def category_resolver(self) -> EntityResolver:
        return make_resolver(self.categories)


@dataclass(frozen=True)
class DashboardView:
    """
    Display-ready aggregates of one pass, all amounts in BASE currency.

    Attributes:
        records: Working set after filtering
        chantier_rollups: Expense totals per chantier
        category_rollups: Expense totals per category
        buckets: Monthly expense totals with cumulative series
        balances: Actor balances over transfers and paid expenses
        kpis: Headline figures over the whole working set
        rates: Rate table used for the pass
    """

    records: list[FinancialRecord]
    chantier_rollups: list[Rollup]
    category_rollups: list[Rollup]
    buckets: list[TimeBucket]
    balances: list[ActorBalance]
    kpis: dict[str, float | int]
    rates: Mapping[str, float] = field(repr=False, default_factory=dict)

    def summary(self, display_currency: str | None = None) -> dict[str, Any]:
        """
        JSON-ready summary with amounts converted to ``display_currency``.

        This is the presentation boundary: the only place BASE totals are
        converted.

        Args:
            display_currency: Target currency (default: BASE currency)

        Raises:
            DivisionByZero: If the display currency has no usable rate
        """
        base = getattr(self.rates, "base_currency", BASE_CURRENCY)
        display = (display_currency or base).upper()
        currency = get_currency(display)

        def money(value_base: float) -> float:
            return float(currency.quantize(from_base(value_base, display, self.rates)))

        kpis = {
            key: money(value) if key.startswith(("total_", "average_")) else value
            for key, value in self.kpis.items()
        }
        return {
            "base_currency": base,
            "display_currency": display,
            "kpis": kpis,
            "by_chantier": [
                {"key": r.key, "label": r.label, "total": money(r.total_base)}
                for r in self.chantier_rollups
            ],
            "by_category": [
                {"key": r.key, "label": r.label, "total": money(r.total_base)}
                for r in self.category_rollups
            ],
            "evolution": [
                {
                    "month": b.month_key,
                    "period_total": money(b.period_total_base),
                    "cumulative_total": money(b.cumulative_total_base),
                }
                for b in self.buckets
            ],
            "balances": [
                {
                    "actor": b.actor_name,
                    "received": money(b.received),
                    "given": money(b.given),
                    "expenses_paid": money(b.expenses_paid),
                    "balance": money(b.balance),
                }
                for b in sort_by_magnitude(self.balances)
            ],
        }


def aggregate(
    snapshot: Snapshot,
    rates: Mapping[str, float],
    primary: FilterCriteria | None = None,
    cross: CrossFilterState | None = None,
) -> DashboardView:
    """
    Run one full aggregation pass.

    Charts (rollups, monthly evolution) are built from expenses, as on the
    dashboard; KPIs cover every record of the working set and balances combine
    transfers with paid expenses.

    **Args:**
        snapshot: Records and entities loaded for this dashboard
        rates: Rate table, treated as read-only for the whole pass
        primary: User filter (default: no constraint)
        cross: Chart selection (default: nothing pinned)

    **Returns:**
        DashboardView with every aggregate of the working set

    **Raises:**
        UnknownCurrency: If any selected record has no rate; the pass aborts

    **Example:**
        ```python
        view = aggregate(snapshot, create_rate_table())
        view.summary("EUR")["by_chantier"]
        ```
    """
    working = select_records(snapshot.records(), primary, cross)
    expenses = [r for r in working if isinstance(r, Expense)]
    transfers = [r for r in working if isinstance(r, Transfer)]

    chantier_resolver = snapshot.chantier_resolver()
    category_resolver = snapshot.category_resolver()

    view = DashboardView(
        records=working,
        chantier_rollups=rollup_by(
            expenses, RollupDimension.CHANTIER, rates, chantier_resolver
        ),
        category_rollups=rollup_by(
            expenses, RollupDimension.CATEGORY, rates, category_resolver
        ),
        buckets=bucket_by_month(expenses, rates),
        balances=compute_balances(transfers, expenses, rates),
        kpis=dashboard_kpis(working, rates),
        rates=rates,
    )
    logger.debug(
        "Aggregated %d of %d records (%d expenses, %d transfers)",
        len(working),
        len(snapshot.records()),
        len(expenses),
        len(transfers),
    )
    return view


class DashboardEngine:
    """
    Convenience holder for one dashboard session.

    Keeps the current primary filter and cross-filter selection next to the
    snapshot and recomputes the view on demand. Only the last view is
    memoized, keyed by ``(primary, cross)``; changing the rate table drops it.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        rates: Mapping[str, float],
        primary: FilterCriteria | None = None,
    ):
        self.snapshot = snapshot
        self.rates = rates
        self.primary = primary or FilterCriteria()
        self.cross = CrossFilterState()
        self._last: tuple[_ViewKey, DashboardView] | None = None

    def set_filters(self, primary: FilterCriteria) -> DashboardView:
        """Replace the primary filter and return the new view."""
        self.primary = primary
        return self.view()

    def select(
        self, dimension: SelectionDimension, key: str, modifier: bool = False
    ) -> DashboardView:
        """Apply a chart click and return the new view."""
        self.cross = select_transition(self.cross, dimension, key, modifier)
        return self.view()

    def reset(self) -> DashboardView:
        """Clear the chart selection and return the new view."""
        self.cross = reset_selection(self.cross)
        return self.view()

    def update_rates(self, rates: Mapping[str, float]) -> DashboardView:
        """Swap the rate table; the memoized view is discarded."""
        self.rates = rates
        self._last = None
        return self.view()

    def view(self) -> DashboardView:
        key = (self.primary, self.cross)
        if self._last is None or self._last[0] != key:
            view = aggregate(self.snapshot, self.rates, self.primary, self.cross)
            self._last = (key, view)
        return self._last[1]
