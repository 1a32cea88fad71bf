"""
Core module for MonChantier.

This module contains the building blocks of the dashboard aggregation engine.
"""

from .balances import ActorBalance, compute_balances, sort_by_magnitude
from .config import AppConfig, load_config, save_config, update_rates
from .currency import (
    BASE_CURRENCY,
    CURRENCIES,
    Currency,
    MonetaryAmount,
    RoundingPolicy,
    create_amount,
    get_currency,
)
from .dataset import load_snapshot, snapshot_to_dict
from .engine import DashboardEngine, DashboardView, Snapshot, aggregate
from .errors import ConfigError, DatasetError
from .exceptions import AggregationError, DivisionByZero, UnknownCurrency
from .filters import FilterCriteria, PeriodPreset, select_records
from .operations import operations_table
from .records import (
    Category,
    Chantier,
    ChantierStatus,
    Expense,
    FinancialRecord,
    Quote,
    RecordType,
    Transfer,
    make_resolver,
    records_frame,
)
from .rollup import UNASSIGNED_KEY, Rollup, RollupDimension, rollup_by, rollup_frame
from .selection import (
    CrossFilterState,
    SelectionDimension,
    multi_select,
    reset,
    select,
    toggle_select,
)
from .timeseries import TimeBucket, bucket_by_month, buckets_frame, to_freq
from .validation import ValidationReport, validate_snapshot

__all__ = [
    # Errors
    "ConfigError",
    "DatasetError",
    "AggregationError",
    "UnknownCurrency",
    "DivisionByZero",
    # Currency
    "BASE_CURRENCY",
    "CURRENCIES",
    "Currency",
    "MonetaryAmount",
    "RoundingPolicy",
    "create_amount",
    "get_currency",
    # Records
    "RecordType",
    "ChantierStatus",
    "Chantier",
    "Category",
    "Expense",
    "Quote",
    "Transfer",
    "FinancialRecord",
    "make_resolver",
    "records_frame",
    # Filters and selection
    "FilterCriteria",
    "PeriodPreset",
    "select_records",
    "CrossFilterState",
    "SelectionDimension",
    "toggle_select",
    "multi_select",
    "select",
    "reset",
    # Aggregators
    "UNASSIGNED_KEY",
    "Rollup",
    "RollupDimension",
    "rollup_by",
    "rollup_frame",
    "TimeBucket",
    "bucket_by_month",
    "buckets_frame",
    "to_freq",
    "ActorBalance",
    "compute_balances",
    "sort_by_magnitude",
    "operations_table",
    # Engine
    "Snapshot",
    "DashboardView",
    "DashboardEngine",
    "aggregate",
    # Config and datasets
    "AppConfig",
    "load_config",
    "save_config",
    "update_rates",
    "load_snapshot",
    "snapshot_to_dict",
    # Validation
    "ValidationReport",
    "validate_snapshot",
]
