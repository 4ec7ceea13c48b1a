"""Budget forecasting module.

This module projects next month's budget plan from the user's history.

Example:
    >>> from budget_core.sources import StaticDataSource
    >>> from budget_core.forecasting import ForecastConfig, forecast_plan
    >>>
    >>> source = StaticDataSource(expenses=[...], commitments=[...], events=[...],
    ...                           savings_goals=[...], categories=[...])
    >>>
    >>> # Run forecast
    >>> config = ForecastConfig(months_back=18)
    >>> result = forecast_plan(source, config=config)
    >>>
    >>> # Access results
    >>> print(result.plan.to_payload())  # Plan in plan-store format
    >>> print(result.metrics["targets"])  # Chosen method per series

"""

from budget_core.forecasting.api import (
    CancellationToken,
    PlanForecast,
    apply_forecast_plan,
    fetch_sources,
    forecast_plan,
)
from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.types import BudgetPlan, ForecastResult, SubBudget

__all__ = [
    "BudgetPlan",
    "CancellationToken",
    "ForecastConfig",
    "ForecastResult",
    "PlanForecast",
    "SubBudget",
    "apply_forecast_plan",
    "fetch_sources",
    "forecast_plan",
]
