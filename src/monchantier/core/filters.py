"""
Primary dashboard filters and working-set selection.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum

from .records import FinancialRecord, RecordType
from .selection import CrossFilterState


class PeriodPreset(Enum):
    """Quick period buttons of the filter bar."""

    ALL = "all"
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    THIS_YEAR = "year"


_PRESET_DAYS = {
    PeriodPreset.LAST_7_DAYS: 7,
    PeriodPreset.LAST_30_DAYS: 30,
    PeriodPreset.LAST_90_DAYS: 90,
}


@dataclass(frozen=True)
class FilterCriteria:
    """
    User-facing filter set. All constraints are combined with AND.

    Attributes:
        entity_ids: Chantier ids to keep (empty = all)
        category_ids: Category ids to keep (empty = all)
        date_from: Inclusive lower date bound
        date_to: Inclusive upper date bound
        record_type: Restrict to one kind of record
    """

    entity_ids: frozenset[str] = field(default_factory=frozenset)
    category_ids: frozenset[str] = field(default_factory=frozenset)
    date_from: date | None = None
    date_to: date | None = None
    record_type: RecordType = RecordType.ALL

    def __post_init__(self):
        object.__setattr__(self, "entity_ids", frozenset(self.entity_ids))
        object.__setattr__(self, "category_ids", frozenset(self.category_ids))
        if (
            self.date_from is not None
            and self.date_to is not None
            and self.date_from > self.date_to
        ):
            raise ValueError(
                f"date_from {self.date_from} is after date_to {self.date_to}"
            )

    def matches(self, record: FinancialRecord) -> bool:
        """Check a single record against every constraint."""
        if (
            self.record_type is not RecordType.ALL
            and record.record_type is not self.record_type
        ):
            return False
        if self.entity_ids and record.chantier_id not in self.entity_ids:
            return False
        if self.category_ids and record.category_id not in self.category_ids:
            return False
        if self.date_from is not None and record.date < self.date_from:
            return False
        if self.date_to is not None and record.date > self.date_to:
            return False
        return True

    def with_period(self, preset: PeriodPreset, today: date | None = None) -> FilterCriteria:
        """
        Return a copy with the date bounds set from a period preset.

        Args:
            preset: Period button pressed
            today: Reference day (default: ``date.today()``)
        """
        today = today or date.today()
        if preset is PeriodPreset.ALL:
            return replace(self, date_from=None, date_to=None)
        if preset is PeriodPreset.THIS_YEAR:
            return replace(self, date_from=date(today.year, 1, 1), date_to=today)
        start = today - timedelta(days=_PRESET_DAYS[preset])
        return replace(self, date_from=start, date_to=today)


def select_records(
    records: Iterable[FinancialRecord],
    primary: FilterCriteria | None = None,
    cross: CrossFilterState | None = None,
) -> list[FinancialRecord]:
    """
    Narrow records to the working set.

    A record is kept iff it passes the primary criteria and the cross filter.
    Input order is preserved.
    """
    primary = primary or FilterCriteria()
    cross = cross or CrossFilterState()
    return [r for r in records if primary.matches(r) and cross.passes(r)]
