"""
Validation and reporting utilities for MonChantier snapshots.

The aggregation engine trusts its input; this module lets callers check a
snapshot before a pass and report problems in a structured way.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .engine import Snapshot


@dataclass
class ValidationReport:
    """
    Structured validation report for a dashboard snapshot.

    Duplicate ids and currencies without a rate are errors (the aggregation
    would double-count or abort). References to unknown chantiers or
    categories are warnings: labels fall back to the raw id.
    """

    duplicate_ids: list[str] = field(default_factory=list)
    unknown_currencies: dict[str, list[str]] = field(default_factory=dict)
    unresolved_chantiers: list[str] = field(default_factory=list)
    unresolved_categories: list[str] = field(default_factory=list)

    def has_errors(self) -> bool:
        """Check if there are any hard errors (duplicates, missing rates)."""
        return bool(self.duplicate_ids or self.unknown_currencies)

    def has_warnings(self) -> bool:
        """Check if there are any warnings (unresolved references)."""
        return bool(self.unresolved_chantiers or self.unresolved_categories)

    def is_valid(self) -> bool:
        """Check if validation passed (no errors, warnings are OK)."""
        return not self.has_errors()

    def get_exit_code(self) -> int:
        """
        Get appropriate CLI exit code.

        Returns:
            0: Valid (no errors)
            1: Errors present
            2: Warnings only
        """
        if self.has_errors():
            return 1
        elif self.has_warnings():
            return 2
        else:
            return 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "duplicate_ids": self.duplicate_ids,
            "unknown_currencies": self.unknown_currencies,
            "unresolved_chantiers": self.unresolved_chantiers,
            "unresolved_categories": self.unresolved_categories,
            "has_errors": self.has_errors(),
            "has_warnings": self.has_warnings(),
            "is_valid": self.is_valid(),
            "exit_code": self.get_exit_code(),
        }

    def __str__(self) -> str:
        """Human-readable string representation."""
        lines = []

        if self.is_valid():
            lines.append("Validation passed")
        else:
            lines.append("Validation failed")

        if self.duplicate_ids:
            lines.append(f"Duplicate IDs: {', '.join(self.duplicate_ids)}")

        for currency, record_ids in self.unknown_currencies.items():
            lines.append(
                f"No exchange rate for {currency}: {', '.join(record_ids)}"
            )

        if self.unresolved_chantiers:
            lines.append(
                f"Unknown chantiers referenced: {', '.join(self.unresolved_chantiers)}"
            )

        if self.unresolved_categories:
            lines.append(
                f"Unknown categories referenced: {', '.join(self.unresolved_categories)}"
            )

        return "\n".join(lines)


def validate_snapshot(
    snapshot: Snapshot, rates: Mapping[str, float]
) -> ValidationReport:
    """
    Check a snapshot for duplicates, missing rates and dangling references.

    Args:
        snapshot: Snapshot to check
        rates: Rate table the snapshot will be aggregated with

    Returns:
        ValidationReport; lists are sorted for stable output
    """
    report = ValidationReport()

    groups = {
        "chantier": [c.id for c in snapshot.chantiers],
        "category": [c.id for c in snapshot.categories],
        "record": [r.id for r in snapshot.records()],
    }
    for kind, ids in groups.items():
        for dup, count in sorted(Counter(ids).items()):
            if count > 1:
                report.duplicate_ids.append(f"{kind}:{dup}")

    missing: dict[str, list[str]] = {}
    for record in snapshot.records():
        if record.amount.currency not in rates:
            missing.setdefault(record.amount.currency, []).append(record.id)
    for chantier in snapshot.chantiers:
        if chantier.currency not in rates:
            missing.setdefault(chantier.currency, []).append(chantier.id)
    report.unknown_currencies = {k: missing[k] for k in sorted(missing)}

    chantier_ids = {c.id for c in snapshot.chantiers}
    category_ids = {c.id for c in snapshot.categories}
    report.unresolved_chantiers = sorted(
        {
            r.chantier_id
            for r in snapshot.records()
            if r.chantier_id and r.chantier_id not in chantier_ids
        }
    )
    report.unresolved_categories = sorted(
        {
            r.category_id
            for r in snapshot.records()
            if r.category_id and r.category_id not in category_ids
        }
        | {
            c.parent_id
            for c in snapshot.categories
            if c.parent_id and c.parent_id not in category_ids
        }
    )
    return report
