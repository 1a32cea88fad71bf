"""
KPI calculation utilities for the construction-site dashboard.

All functions take already-filtered records and return values in the BASE
currency. Display conversion is left to :func:`monchantier.fx.format_amount`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .core.balances import transfer_base_amount
from .core.currency import MonetaryAmount
from .core.records import (
    Chantier,
    ChantierStatus,
    Expense,
    FinancialRecord,
    RecordType,
    Transfer,
    records_frame,
)
from .fx import to_base


@dataclass(frozen=True)
class BudgetStats:
    """
    Budget consumption of one chantier.

    Attributes:
        budget_base: Planned budget in BASE currency
        spent_base: Sum of the chantier's expenses in BASE currency
        remaining_base: ``budget_base - spent_base``
        progress_pct: Share of the budget spent, in percent (0 for no budget)
        is_over_budget: True when progress exceeds 100%
    """

    budget_base: float
    spent_base: float
    remaining_base: float
    progress_pct: float
    is_over_budget: bool


def dashboard_kpis(
    records: Iterable[FinancialRecord], rates: Mapping[str, float]
) -> dict[str, float | int]:
    """
    Headline KPI cards of the dashboard.

    Transfers use their stored BASE snapshot when they have one, like the
    actor balances do.

    Args:
        records: Working set of records
        rates: Rate table (currency -> rate-to-base)

    Returns:
        Dictionary with ``total_expenses``, ``total_quotes``,
        ``total_transfers``, ``nb_expenses``, ``nb_quotes``,
        ``nb_transfers`` and ``average_expense``
    """
    records = list(records)
    df = records_frame(records, rates)

    amounts = df["amount_base"].copy()
    transfers = [r for r in records if isinstance(r, Transfer)]
    if transfers:
        snapshot = pd.Series(
            [transfer_base_amount(t, rates) for t in transfers],
            index=df.index[df["record_type"] == RecordType.TRANSFER.value],
            dtype="float64",
        )
        amounts.loc[snapshot.index] = snapshot

    by_type = amounts.groupby(df["record_type"]).agg(["sum", "count"])

    def _stat(kind: RecordType, col: str) -> float:
        if kind.value in by_type.index:
            return by_type.at[kind.value, col]
        return 0

    total_expenses = float(_stat(RecordType.EXPENSE, "sum"))
    nb_expenses = int(_stat(RecordType.EXPENSE, "count"))
    return {
        "total_expenses": total_expenses,
        "total_quotes": float(_stat(RecordType.QUOTE, "sum")),
        "total_transfers": float(_stat(RecordType.TRANSFER, "sum")),
        "nb_expenses": nb_expenses,
        "nb_quotes": int(_stat(RecordType.QUOTE, "count")),
        "nb_transfers": int(_stat(RecordType.TRANSFER, "count")),
        "average_expense": total_expenses / nb_expenses if nb_expenses else 0.0,
    }


def budget_stats(
    chantier: Chantier,
    expenses: Iterable[Expense],
    rates: Mapping[str, float],
) -> BudgetStats:
    """
    Budget consumption for one chantier.

    Only expenses whose ``chantier_id`` matches ``chantier.id`` are counted.
    The budget is expressed in the chantier currency and converted to BASE.
    """
    budget_base = to_base(MonetaryAmount(chantier.budget, chantier.currency), rates)
    spent_base = float(
        sum(to_base(e.amount, rates) for e in expenses if e.chantier_id == chantier.id)
    )
    progress = (spent_base / budget_base) * 100 if budget_base > 0 else 0.0
    return BudgetStats(
        budget_base=budget_base,
        spent_base=spent_base,
        remaining_base=budget_base - spent_base,
        progress_pct=progress,
        is_over_budget=progress > 100,
    )


def portfolio_stats(
    chantiers: Iterable[Chantier],
    expenses: Iterable[Expense],
    rates: Mapping[str, float],
) -> dict[str, float | int]:
    """
    Portfolio overview across every chantier.

    Returns:
        Dictionary with ``budget_total``, ``spent_total``, ``remaining_total``
        and one ``nb_<status>`` count per :class:`ChantierStatus`
    """
    chantiers = list(chantiers)
    expenses = list(expenses)

    budgets = np.array(
        [to_base(MonetaryAmount(c.budget, c.currency), rates) for c in chantiers],
        dtype="float64",
    )
    spent = records_frame(expenses, rates)["amount_base"].sum()

    stats: dict[str, float | int] = {
        "budget_total": float(budgets.sum()),
        "spent_total": float(spent),
        "remaining_total": float(budgets.sum() - spent),
    }
    for status in ChantierStatus:
        stats[f"nb_{status.value}"] = sum(1 for c in chantiers if c.status is status)
    return stats
