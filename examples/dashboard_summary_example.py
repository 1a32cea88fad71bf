#!/usr/bin/env python3
"""
Dashboard Summary Example

This example loads a two-site dataset (one site in dinars, one in euros),
runs the aggregation engine and walks through the main dashboard
interactions: primary filters, chart cross-filtering, rate edits and the
display-currency switch.
"""

from datetime import date
from pathlib import Path

import pandas as pd
from monchantier import (
    DashboardEngine,
    FilterCriteria,
    PeriodPreset,
    SelectionDimension,
    budget_stats,
    create_rate_table,
    format_amount,
    load_snapshot,
    operations_table,
    portfolio_stats,
)
from monchantier.core.timeseries import buckets_frame, to_freq

pd.options.display.float_format = "{:,.3f}".format

DATA = Path(__file__).parent / "data" / "chantiers.yaml"


def print_view(view, rates, display="DNT"):
    """Print rollups and balances of a view in the display currency."""
    for rollup in view.chantier_rollups:
        print(f"  {rollup.label:<20} {format_amount(rollup.total_base, display, rates)}")
    for balance in view.balances:
        print(
            f"  {balance.actor_name:<20} balance "
            f"{format_amount(balance.balance, display, rates)}"
        )


def main():
    """Demonstrate the dashboard engine end to end."""
    print("=== MonChantier Dashboard Example ===\n")

    snapshot = load_snapshot(DATA)
    rates = create_rate_table()
    engine = DashboardEngine(snapshot, rates)

    # === FULL VIEW ===
    view = engine.view()
    print(f"Loaded {len(view.records)} records")
    print_view(view, rates)

    # === PORTFOLIO AND BUDGETS ===
    print("\nPortfolio:")
    stats = portfolio_stats(snapshot.chantiers, snapshot.expenses, rates)
    print(f"  budget {format_amount(stats['budget_total'], 'DNT', rates)}")
    print(f"  spent  {format_amount(stats['spent_total'], 'DNT', rates)}")
    for chantier in snapshot.chantiers:
        budget = budget_stats(chantier, snapshot.expenses, rates)
        flag = " (over budget)" if budget.is_over_budget else ""
        print(f"  {chantier.name:<20} {budget.progress_pct:6.1f}%{flag}")

    # === MONTHLY EVOLUTION ===
    print("\nMonthly evolution (DNT):")
    print(buckets_frame(view.buckets))
    print("\nQuarterly:")
    print(to_freq(view.buckets, "Q"))

    # === PRIMARY FILTERS ===
    print("\nExpenses of 2025 only:")
    criteria = FilterCriteria().with_period(PeriodPreset.THIS_YEAR, date(2025, 6, 30))
    view = engine.set_filters(criteria)
    print_view(view, rates)

    # === CROSS-FILTER ===
    print("\nClick on 'Immeuble Lyon' in the site chart:")
    view = engine.select(SelectionDimension.CHANTIER, "immeuble-lyon")
    print(operations_table(view.records, snapshot.chantier_resolver()))

    print("\nCtrl-click on 'Villa Sousse' as well:")
    view = engine.select(SelectionDimension.CHANTIER, "villa-sousse", modifier=True)
    print_view(view, rates)

    view = engine.reset()

    # === RATE EDIT AND DISPLAY CURRENCY ===
    print("\nEUR moves to 3.50 DNT, totals shown in EUR:")
    view = engine.update_rates(rates.update({"EUR": 3.50}))
    print_view(view, engine.rates, display="EUR")

    summary = view.summary("EUR")
    print(f"\nKPIs (EUR): {summary['kpis']}")


if __name__ == "__main__":
    main()
