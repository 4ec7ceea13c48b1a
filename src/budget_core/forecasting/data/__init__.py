"""Data loading and preparation utilities."""

from budget_core.forecasting.data.loaders import load_export
from budget_core.forecasting.data.preparation import (
    MonthlyHistory,
    aggregate_history,
    resolve_category_names,
)

__all__ = ["MonthlyHistory", "aggregate_history", "load_export", "resolve_category_names"]
