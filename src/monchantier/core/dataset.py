"""Utilities for loading dashboard snapshots from YAML/JSON sources."""

from __future__ import annotations

import json
import warnings
from copy import deepcopy
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from .currency import BASE_CURRENCY, MonetaryAmount
from .engine import Snapshot
from .errors import DatasetError
from .records import Category, Chantier, ChantierStatus, Expense, Quote, Transfer

__all__ = [
    "DatasetError",
    "load_snapshot",
    "snapshot_to_dict",
]


def load_snapshot(
    source: str | Path | dict[str, Any], *, format: str | None = None
) -> Snapshot:
    """
    Parse a dataset from YAML/JSON/dict into a :class:`Snapshot`.

    Expenses and quotes without an explicit ``currency`` inherit the currency
    of their chantier; transfers default to the base currency.
    """
    mapping, label = _read_source(source, format=format)
    chantiers = _normalize_chantiers(mapping.get("chantiers"), label)
    currencies = {c.id: c.currency for c in chantiers}
    return Snapshot(
        chantiers=chantiers,
        categories=_normalize_categories(mapping.get("categories"), label),
        expenses=_normalize_expenses(mapping.get("expenses"), currencies, label),
        quotes=_normalize_quotes(mapping.get("quotes"), currencies, label),
        transfers=_normalize_transfers(mapping.get("transfers"), label),
    )


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    """Serializable mapping accepted back by :func:`load_snapshot`."""
    return {
        "chantiers": [
            {
                "id": c.id,
                "name": c.name,
                "currency": c.currency,
                "budget": c.budget,
                "status": c.status.value,
            }
            for c in snapshot.chantiers
        ],
        "categories": [
            {"id": c.id, "name": c.name, "parent_id": c.parent_id}
            for c in snapshot.categories
        ],
        "expenses": [
            {
                "id": e.id,
                "date": e.date.isoformat(),
                "amount": e.amount.value,
                "currency": e.amount.currency,
                "chantier_id": e.chantier_id,
                "category_id": e.category_id,
                "payer": e.payer,
                "beneficiary": e.beneficiary,
                "description": e.description,
            }
            for e in snapshot.expenses
        ],
        "quotes": [
            {
                "id": q.id,
                "date": q.date.isoformat(),
                "amount": q.amount.value,
                "currency": q.amount.currency,
                "chantier_id": q.chantier_id,
                "category_id": q.category_id,
                "supplier": q.supplier,
            }
            for q in snapshot.quotes
        ],
        "transfers": [
            {
                "id": t.id,
                "date": t.date.isoformat(),
                "amount": t.amount.value,
                "currency": t.amount.currency,
                "source": t.source,
                "destination": t.destination,
                "chantier_id": t.chantier_id,
                "converted_base": t.converted_base,
            }
            for t in snapshot.transfers
        ],
    }


def _read_source(
    source: str | Path | dict[str, Any], *, format: str | None
) -> tuple[dict[str, Any], str]:
    if isinstance(source, dict):
        return deepcopy(source), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    if fmt in {"yaml", "yml", ""}:
        data = yaml.safe_load(text)
    elif fmt == "json":
        data = json.loads(text)
    else:
        raise DatasetError(f"Unsupported dataset format '{fmt}' for {path}")

    if not isinstance(data, dict):
        raise DatasetError(f"Dataset root must be a mapping (source={path})")
    return data, str(path)


def _normalize_chantiers(raw: Any, label: str) -> list[Chantier]:
    chantiers: list[Chantier] = []
    for idx, entry in enumerate(_ensure_list(raw, f"{label}::chantiers")):
        ctx = f"{label}::chantiers[{idx}]"
        data = _ensure_dict(entry, ctx)
        status = data.get("status", ChantierStatus.IN_PROGRESS.value)
        try:
            status = ChantierStatus(status)
        except ValueError as exc:
            raise DatasetError(f"{ctx}.status: unknown status '{status}'") from exc
        chantiers.append(
            Chantier(
                id=_coerce_str(data.get("id"), f"{ctx}.id"),
                name=_coerce_str(data.get("name"), f"{ctx}.name"),
                currency=_coerce_str(
                    data.get("currency") or BASE_CURRENCY, f"{ctx}.currency"
                ).upper(),
                budget=_coerce_float(data.get("budget", 0.0), f"{ctx}.budget"),
                status=status,
            )
        )
    return chantiers


def _normalize_categories(raw: Any, label: str) -> list[Category]:
    categories: list[Category] = []
    for idx, entry in enumerate(_ensure_list(raw, f"{label}::categories")):
        ctx = f"{label}::categories[{idx}]"
        data = _ensure_dict(entry, ctx)
        categories.append(
            Category(
                id=_coerce_str(data.get("id"), f"{ctx}.id"),
                name=_coerce_str(data.get("name"), f"{ctx}.name"),
                parent_id=_coerce_optional_str(data.get("parent_id"), f"{ctx}.parent_id"),
            )
        )
    return categories


def _normalize_expenses(
    raw: Any, currencies: dict[str, str], label: str
) -> list[Expense]:
    expenses: list[Expense] = []
    for idx, entry in enumerate(_ensure_list(raw, f"{label}::expenses")):
        ctx = f"{label}::expenses[{idx}]"
        data = _ensure_dict(entry, ctx)
        chantier_id = _coerce_optional_str(data.get("chantier_id"), f"{ctx}.chantier_id")
        expenses.append(
            Expense(
                id=_coerce_str(data.get("id"), f"{ctx}.id"),
                date=_coerce_date(data.get("date"), f"{ctx}.date"),
                amount=_amount(
                    data, _inherited_currency(data, chantier_id, currencies, ctx), ctx
                ),
                chantier_id=chantier_id,
                category_id=_coerce_optional_str(
                    data.get("category_id"), f"{ctx}.category_id"
                ),
                payer=_coerce_optional_str(data.get("payer"), f"{ctx}.payer"),
                beneficiary=_coerce_optional_str(
                    data.get("beneficiary"), f"{ctx}.beneficiary"
                ),
                description=str(data.get("description") or ""),
            )
        )
    return expenses


def _normalize_quotes(raw: Any, currencies: dict[str, str], label: str) -> list[Quote]:
    quotes: list[Quote] = []
    for idx, entry in enumerate(_ensure_list(raw, f"{label}::quotes")):
        ctx = f"{label}::quotes[{idx}]"
        data = _ensure_dict(entry, ctx)
        chantier_id = _coerce_optional_str(data.get("chantier_id"), f"{ctx}.chantier_id")
        quotes.append(
            Quote(
                id=_coerce_str(data.get("id"), f"{ctx}.id"),
                date=_coerce_date(data.get("date"), f"{ctx}.date"),
                amount=_amount(
                    data, _inherited_currency(data, chantier_id, currencies, ctx), ctx
                ),
                chantier_id=chantier_id,
                category_id=_coerce_optional_str(
                    data.get("category_id"), f"{ctx}.category_id"
                ),
                supplier=str(data.get("supplier") or ""),
            )
        )
    return quotes


def _normalize_transfers(raw: Any, label: str) -> list[Transfer]:
    transfers: list[Transfer] = []
    for idx, entry in enumerate(_ensure_list(raw, f"{label}::transfers")):
        ctx = f"{label}::transfers[{idx}]"
        data = _ensure_dict(entry, ctx)
        converted = data.get("converted_base")
        transfers.append(
            Transfer(
                id=_coerce_str(data.get("id"), f"{ctx}.id"),
                date=_coerce_date(data.get("date"), f"{ctx}.date"),
                amount=_amount(data, None, ctx),
                source=_coerce_str(data.get("source"), f"{ctx}.source"),
                destination=_coerce_str(data.get("destination"), f"{ctx}.destination"),
                chantier_id=_coerce_optional_str(
                    data.get("chantier_id"), f"{ctx}.chantier_id"
                ),
                category_id=_coerce_optional_str(
                    data.get("category_id"), f"{ctx}.category_id"
                ),
                converted_base=(
                    None
                    if converted is None
                    else _coerce_float(converted, f"{ctx}.converted_base")
                ),
            )
        )
    return transfers


def _inherited_currency(
    data: dict[str, Any], chantier_id: str | None, currencies: dict[str, str], ctx: str
) -> str | None:
    if data.get("currency") or chantier_id is None or chantier_id in currencies:
        return currencies.get(chantier_id or "")
    warnings.warn(
        f"{ctx}: no currency and unknown chantier '{chantier_id}', "
        f"assuming {BASE_CURRENCY}",
        stacklevel=3,
    )
    return None


def _amount(data: dict[str, Any], default_currency: str | None, ctx: str) -> MonetaryAmount:
    value = _coerce_float(data.get("amount"), f"{ctx}.amount")
    currency = data.get("currency") or default_currency or BASE_CURRENCY
    try:
        return MonetaryAmount(value, _coerce_str(currency, f"{ctx}.currency"))
    except ValueError as exc:
        raise DatasetError(f"{ctx}.amount: {exc}") from exc


def _coerce_date(value: Any, ctx: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            # Accept full ISO timestamps as stored by the API
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise DatasetError(f"{ctx}: invalid ISO date '{value}'") from exc
    raise DatasetError(f"{ctx}: expected ISO date string")


def _coerce_float(value: Any, ctx: str) -> float:
    if isinstance(value, bool) or value is None:  # Avoid bool being treated as int
        raise DatasetError(f"{ctx}: expected a number")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise DatasetError(f"{ctx}: expected a number, got {value!r}") from exc


def _coerce_str(value: Any, ctx: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise DatasetError(f"{ctx}: expected non-empty string")
    return value


def _coerce_optional_str(value: Any, ctx: str) -> str | None:
    if value is None or value == "":
        return None
    return _coerce_str(value, ctx)


def _ensure_dict(value: Any, ctx: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DatasetError(f"{ctx}: expected a mapping")
    return value


def _ensure_list(value: Any, ctx: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DatasetError(f"{ctx}: expected a list")
    return list(value)
