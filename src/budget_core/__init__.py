"""Budget Core - personal budget history aggregation and forecasting.

This package turns a user's financial records into next month's budget plan:

- **History**: raw expenses, commitments, events and savings ledgers are
  aggregated into zero-filled monthly series
- **Models**: baselines and a robust ARX regression compete per series
- **Plan**: the winners are clamped, rounded and assembled into a BudgetPlan

Module Structure:
    budget_core.forecasting: Forecast engine (api, models, selection, plan)
    budget_core.sources: Data source and plan store interfaces
    budget_core.periods: Calendar-month helpers

Quick Start:
    >>> from pathlib import Path
    >>> from budget_core.sources import JsonPlanStore
    >>> from budget_core.forecasting import forecast_plan, apply_forecast_plan
    >>> from budget_core.forecasting.data import load_export
    >>>
    >>> source = load_export(Path("export.json"))
    >>> result = forecast_plan(source, months_back=18)
    >>> apply_forecast_plan(result.period, result.plan, JsonPlanStore("plans.json"))
"""

__version__ = "0.1.0"

from budget_core.exceptions import (
    BudgetCoreError,
    ConfigError,
    DataQualityError,
    ForecastCancelledError,
    NoHistoryError,
)

__all__ = [
    "BudgetCoreError",
    "ConfigError",
    "DataQualityError",
    "ForecastCancelledError",
    "NoHistoryError",
    "__version__",
]
