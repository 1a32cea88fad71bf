"""
Unified operations table mixing expenses, quotes and transfers.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from .records import (
    EntityResolver,
    Expense,
    FinancialRecord,
    Quote,
    RecordType,
    Transfer,
)
from .rollup import resolve_label

OPERATION_COLUMNS = [
    "id",
    "record_type",
    "date",
    "description",
    "chantier",
    "category",
    "amount",
    "currency",
]


def _describe(record: FinancialRecord) -> str:
    if isinstance(record, Expense):
        return record.description
    if isinstance(record, Quote):
        return record.supplier
    return f"{record.source} -> {record.destination}"


def operations_table(
    records: Iterable[FinancialRecord],
    chantier_resolver: EntityResolver | None = None,
    category_resolver: EntityResolver | None = None,
    record_type: RecordType = RecordType.ALL,
) -> pd.DataFrame:
    """
    Build the detail table shown under the dashboard charts.

    Amounts are left in their record currency; the table is sorted by date,
    most recent first.

    Args:
        records: Working set of records
        chantier_resolver: Optional id -> chantier name
        category_resolver: Optional id -> category name
        record_type: Keep only one kind of record

    Returns:
        DataFrame with :data:`OPERATION_COLUMNS`
    """
    rows = []
    for record in records:
        if record_type is not RecordType.ALL and record.record_type is not record_type:
            continue
        if isinstance(record, Transfer) and record.chantier_id is None:
            chantier = "-"
        else:
            chantier = resolve_label(record.chantier_id or "", chantier_resolver)
        rows.append(
            {
                "id": record.id,
                "record_type": record.record_type.value,
                "date": pd.Timestamp(record.date),
                "description": _describe(record),
                "chantier": chantier,
                "category": resolve_label(record.category_id or "", category_resolver),
                "amount": record.amount.value,
                "currency": record.amount.currency,
            }
        )

    df = pd.DataFrame(rows, columns=OPERATION_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("date", ascending=False, kind="stable").reset_index(drop=True)
