"""
Per-entity rollups of financial records.

Records are grouped by chantier or by category and summed in the BASE
currency. Records that carry no id for the requested dimension are grouped
under :data:`UNASSIGNED_KEY` so that no money disappears from the totals.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

import pandas as pd

from .records import EntityResolver, FinancialRecord, records_frame

logger = logging.getLogger(__name__)

UNASSIGNED_KEY = "unassigned"


class RollupDimension(Enum):
    """Grouping dimension for :func:`rollup_by`."""

    CHANTIER = "chantier_id"
    CATEGORY = "category_id"


@dataclass(frozen=True)
class Rollup:
    """
    Grouped total for one chantier or category.

    Attributes:
        key: Chantier/category id, or ``"unassigned"``
        label: Display name (falls back to ``key``)
        total_base: Sum of the group's amounts in BASE currency
    """

    key: str
    label: str
    total_base: float


def resolve_label(key: str, entity_resolver: EntityResolver | None) -> str:
    """
    Resolve a display label, falling back to the raw key.

    Resolution never raises: any resolver failure degrades to ``key``.
    """
    if entity_resolver is None:
        return key
    try:
        label = entity_resolver(key)
    except Exception:
        logger.debug("Unresolved label for %r, using raw id", key)
        return key
    return label if label else key


def rollup_by(
    records: Iterable[FinancialRecord],
    dimension: RollupDimension,
    rates: Mapping[str, float],
    entity_resolver: EntityResolver | None = None,
) -> list[Rollup]:
    """
    Group records by chantier or category and total them in BASE currency.

    **Args:**
        records: Expenses, quotes and/or transfers
        dimension: Grouping dimension
        rates: Rate table (currency -> rate-to-base)
        entity_resolver: Optional id -> name callable for labels

    **Returns:**
        One Rollup per distinct key, in order of first appearance

    **Raises:**
        UnknownCurrency: If any record currency has no rate

    **Example:**
        ```python
        rates = {"DNT": 1.0, "EUR": 3.35, "USD": 3.10}
        expense = Expense("e1", date(2025, 1, 5), MonetaryAmount(100, "EUR"), "X")
        rollup_by([expense], RollupDimension.CHANTIER, rates)
        # [Rollup(key='X', label='X', total_base=335.0)]
        ```
    """
    df = records_frame(records, rates)
    if df.empty:
        return []

    keys = df[dimension.value].fillna(UNASSIGNED_KEY).astype(str)
    keys = keys.where(keys != "", UNASSIGNED_KEY)
    totals = df["amount_base"].groupby(keys, sort=False).sum()

    return [
        Rollup(
            key=key,
            label=resolve_label(key, entity_resolver),
            total_base=float(total),
        )
        for key, total in totals.items()
    ]


def rollup_frame(rollups: Iterable[Rollup]) -> pd.DataFrame:
    """Tabular view of rollups, sorted by total descending for display."""
    df = pd.DataFrame(
        [(r.key, r.label, r.total_base) for r in rollups],
        columns=["key", "label", "total_base"],
    )
    return df.sort_values("total_base", ascending=False, kind="stable").reset_index(
        drop=True
    )
