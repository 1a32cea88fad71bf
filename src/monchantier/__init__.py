"""
MonChantier - Financial aggregation engine for construction-site dashboards

MonChantier turns the raw financial records of construction sites (chantiers)
into display-ready aggregates. Expenses, supplier quotes and budget transfers
may be recorded in different currencies; every figure is normalized to a
common BASE currency before it is summed, and converted to the user's display
currency only when it is shown.

Key Features:
- **Currency Converter**: Pairwise conversion through the BASE currency
- **Entity Rollups**: Totals per chantier and per category, nothing dropped
- **Time Series**: Monthly totals with a running cumulative series
- **Actor Balances**: Who holds money and who advanced it
- **Cross Filtering**: Chart-click selection combined with the filter bar
- **Pure Passes**: Deterministic recomputation from an in-memory snapshot

Architecture Overview:
- **fx**: ExchangeRateTable, to_base/from_base, display formatting
- **core.records**: Expense, Quote, Transfer, Chantier, Category
- **core.filters / core.selection**: Primary filter and cross-filter state
- **core.rollup / core.timeseries / core.balances**: Aggregators
- **core.engine**: Snapshot -> DashboardView in a single pass
- **kpi**: Headline figures and per-chantier budget consumption
- **cli**: ``monchantier`` command for datasets on disk

Quick Start:
    ```python
    from datetime import date
    from monchantier import (
        Chantier, Expense, MonetaryAmount, Snapshot, aggregate, create_rate_table,
    )

    snapshot = Snapshot(
        chantiers=[Chantier(id="villa", name="Villa Sousse", currency="EUR")],
        expenses=[
            Expense(id="e1", date=date(2025, 1, 5),
                    amount=MonetaryAmount(100, "EUR"), chantier_id="villa"),
        ],
    )
    view = aggregate(snapshot, create_rate_table())
    view.chantier_rollups   # [Rollup(key='villa', label='Villa Sousse', total_base=335.0)]
    view.summary("EUR")     # JSON-ready, converted at the presentation boundary
    ```
"""

# Version information
__version__ = "0.1.0"
__author__ = "MonChantier Team"
__description__ = "Multi-currency financial aggregation for construction-site dashboards"

from .core import (
    UNASSIGNED_KEY,
    ActorBalance,
    AggregationError,
    AppConfig,
    Category,
    Chantier,
    ChantierStatus,
    ConfigError,
    CrossFilterState,
    DashboardEngine,
    DashboardView,
    DatasetError,
    DivisionByZero,
    Expense,
    FilterCriteria,
    MonetaryAmount,
    PeriodPreset,
    Quote,
    RecordType,
    Rollup,
    RollupDimension,
    SelectionDimension,
    Snapshot,
    TimeBucket,
    Transfer,
    UnknownCurrency,
    ValidationReport,
    aggregate,
    bucket_by_month,
    compute_balances,
    load_config,
    load_snapshot,
    operations_table,
    rollup_by,
    select_records,
    validate_snapshot,
)
from .core.selection import multi_select, reset, select, toggle_select
from .fx import (
    DEFAULT_RATES,
    ExchangeRateTable,
    convert,
    convert_frame,
    create_rate_table,
    format_amount,
    from_base,
    to_base,
)
from .kpi import BudgetStats, budget_stats, dashboard_kpis, portfolio_stats

__all__ = [
    # Version
    "__version__",
    # FX
    "DEFAULT_RATES",
    "ExchangeRateTable",
    "create_rate_table",
    "to_base",
    "from_base",
    "convert",
    "convert_frame",
    "format_amount",
    # Records
    "MonetaryAmount",
    "RecordType",
    "ChantierStatus",
    "Chantier",
    "Category",
    "Expense",
    "Quote",
    "Transfer",
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
    "TimeBucket",
    "bucket_by_month",
    "ActorBalance",
    "compute_balances",
    "operations_table",
    # KPIs
    "BudgetStats",
    "budget_stats",
    "dashboard_kpis",
    "portfolio_stats",
    # Engine
    "Snapshot",
    "DashboardView",
    "DashboardEngine",
    "aggregate",
    # Config and datasets
    "AppConfig",
    "load_config",
    "load_snapshot",
    "ValidationReport",
    "validate_snapshot",
    # Errors
    "AggregationError",
    "UnknownCurrency",
    "DivisionByZero",
    "ConfigError",
    "DatasetError",
]
