"""
Financial records and reference entities handled by the aggregation engine.

Records are immutable snapshots of what the persistence layer returned for
one dashboard load. The engine never mutates them; all derived values live in
the canonical DataFrame built by :func:`records_frame`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Union

import pandas as pd

from ..fx import convert_frame
from .currency import BASE_CURRENCY, MonetaryAmount


class RecordType(Enum):
    """Kinds of financial records shown on the dashboard."""

    ALL = "all"
    EXPENSE = "expense"
    QUOTE = "quote"
    TRANSFER = "transfer"


class ChantierStatus(Enum):
    """Lifecycle status of a chantier."""

    IN_PROGRESS = "en_cours"
    COMPLETED = "termine"
    SUSPENDED = "suspendu"


@dataclass(frozen=True)
class Chantier:
    """
    A construction site, the top-level cost-tracking entity.

    Attributes:
        id: Unique identifier
        name: Display name
        currency: Currency the chantier is budgeted and invoiced in
        budget: Planned budget, in ``currency``
        status: Lifecycle status
    """

    id: str
    name: str
    currency: str = BASE_CURRENCY
    budget: float = 0.0
    status: ChantierStatus = ChantierStatus.IN_PROGRESS


@dataclass(frozen=True)
class Category:
    """Expense category (work package or "lot"), optionally nested."""

    id: str
    name: str
    parent_id: str | None = None


@dataclass(frozen=True)
class Expense:
    """
    Money spent on a chantier.

    Attributes:
        id: Unique identifier
        date: Day the expense was made
        amount: Amount and currency
        chantier_id: Owning chantier (None when unassigned)
        category_id: Category reference, if any
        payer: Named actor who paid, if known
        beneficiary: Named actor who was paid, if known
        description: Free text
    """

    id: str
    date: date
    amount: MonetaryAmount
    chantier_id: str | None
    category_id: str | None = None
    payer: str | None = None
    beneficiary: str | None = None
    description: str = ""

    @property
    def record_type(self) -> RecordType:
        return RecordType.EXPENSE


@dataclass(frozen=True)
class Quote:
    """Supplier quote ("devis") attached to a chantier."""

    id: str
    date: date
    amount: MonetaryAmount
    chantier_id: str | None
    category_id: str | None = None
    supplier: str = ""

    @property
    def record_type(self) -> RecordType:
        return RecordType.QUOTE


@dataclass(frozen=True)
class Transfer:
    """
    Budget transfer between two named actors.

    Attributes:
        id: Unique identifier
        date: Day of the transfer
        amount: Amount and currency as entered
        source: Actor giving the money
        destination: Actor receiving the money
        chantier_id: Chantier the transfer funds, usually None
        category_id: Category reference, usually None
        converted_base: Stored BASE-currency snapshot taken when the transfer
            was recorded, if any
    """

    id: str
    date: date
    amount: MonetaryAmount
    source: str
    destination: str
    chantier_id: str | None = None
    category_id: str | None = None
    converted_base: float | None = None

    @property
    def record_type(self) -> RecordType:
        return RecordType.TRANSFER


FinancialRecord = Union[Expense, Quote, Transfer]

EntityResolver = Callable[[str], str]

RECORD_COLUMNS = [
    "id",
    "record_type",
    "date",
    "month",
    "chantier_id",
    "category_id",
    "source",
    "destination",
    "payer",
    "currency",
    "amount",
    "amount_base",
]


def make_resolver(entities: Iterable[Chantier | Category] | Mapping[str, str]) -> EntityResolver:
    """
    Build an id -> display name resolver.

    Args:
        entities: Chantiers/categories, or a plain ``{id: name}`` mapping

    Returns:
        Callable raising KeyError for unknown ids
    """
    if isinstance(entities, Mapping):
        names = dict(entities)
    else:
        names = {entity.id: entity.name for entity in entities}

    def resolve(key: str) -> str:
        return names[key]

    return resolve


def records_frame(
    records: Iterable[FinancialRecord], rates: Mapping[str, float]
) -> pd.DataFrame:
    """
    Build the canonical DataFrame for a list of records.

    One row per record, input order preserved, with ``amount_base`` converted
    at the live rates and ``month`` as a monthly ``Period``.

    Args:
        records: Expenses, quotes and/or transfers
        rates: Rate table (currency -> rate-to-base)

    Returns:
        DataFrame with :data:`RECORD_COLUMNS`

    Raises:
        UnknownCurrency: If any record currency has no rate
    """
    rows = [
        {
            "id": r.id,
            "record_type": r.record_type.value,
            "date": pd.Timestamp(r.date),
            "chantier_id": r.chantier_id,
            "category_id": r.category_id,
            "source": getattr(r, "source", None),
            "destination": getattr(r, "destination", None),
            "payer": getattr(r, "payer", None),
            "currency": r.amount.currency,
            "amount": r.amount.value,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=[c for c in RECORD_COLUMNS if c not in {"month", "amount_base"}])
    df["date"] = pd.to_datetime(df["date"])
    df["amount"] = df["amount"].astype("float64")
    df["month"] = df["date"].dt.to_period("M")
    df = convert_frame(df, rates)
    return df[RECORD_COLUMNS]
