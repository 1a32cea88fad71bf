"""
Cross-filter selection state driven by chart clicks.

Clicking a bar or a pie slice pins a chantier or category. A plain click
selects only that id (or clears it when it was the only selection); a click
with the modifier key (ctrl/meta) adds or removes the id while keeping the
rest. The state object is owned by the caller and every transition returns a
new state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from .records import FinancialRecord


class SelectionDimension(Enum):
    """Dimensions that can be pinned from the charts."""

    CHANTIER = "chantier"
    CATEGORY = "category"


_FIELDS = {
    SelectionDimension.CHANTIER: "chantier_ids",
    SelectionDimension.CATEGORY: "category_ids",
}


@dataclass(frozen=True)
class CrossFilterState:
    """
    Ids pinned per dimension. An empty set means "no constraint".

    Attributes:
        chantier_ids: Pinned chantier ids
        category_ids: Pinned category ids
    """

    chantier_ids: frozenset[str] = field(default_factory=frozenset)
    category_ids: frozenset[str] = field(default_factory=frozenset)

    def selected(self, dimension: SelectionDimension) -> frozenset[str]:
        """Return the ids pinned for ``dimension``."""
        return getattr(self, _FIELDS[dimension])

    @property
    def is_active(self) -> bool:
        return bool(self.chantier_ids or self.category_ids)

    def passes(self, record: FinancialRecord) -> bool:
        """Check whether a record survives the cross filter."""
        if self.chantier_ids and record.chantier_id not in self.chantier_ids:
            return False
        if self.category_ids and record.category_id not in self.category_ids:
            return False
        return True


def _with(
    state: CrossFilterState, dimension: SelectionDimension, ids: frozenset[str]
) -> CrossFilterState:
    return replace(state, **{_FIELDS[dimension]: ids})


def toggle_select(
    state: CrossFilterState, dimension: SelectionDimension, key: str
) -> CrossFilterState:
    """Single selection: ``{key}`` becomes empty, anything else becomes ``{key}``."""
    current = state.selected(dimension)
    if current == {key}:
        return _with(state, dimension, frozenset())
    return _with(state, dimension, frozenset({key}))


def multi_select(
    state: CrossFilterState, dimension: SelectionDimension, key: str
) -> CrossFilterState:
    """Modifier selection: add ``key`` if absent, remove it otherwise."""
    current = state.selected(dimension)
    if key in current:
        return _with(state, dimension, current - {key})
    return _with(state, dimension, current | {key})


def select(
    state: CrossFilterState,
    dimension: SelectionDimension,
    key: str,
    modifier: bool = False,
) -> CrossFilterState:
    """
    Apply one chart click.

    Args:
        state: Current selection
        dimension: Which chart was clicked
        key: Id of the clicked chantier or category
        modifier: Whether ctrl/meta was held

    Returns:
        The next selection state
    """
    if modifier:
        return multi_select(state, dimension, key)
    return toggle_select(state, dimension, key)


def reset(state: CrossFilterState | None = None) -> CrossFilterState:
    """Clear both dimensions."""
    return CrossFilterState()
