"""Rolling-origin backtesting for candidate models."""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from budget_core.forecasting.metrics import smape
from budget_core.forecasting.models.base import ForecastModel, as_array

__all__ = ["backtest", "smape"]


def backtest(
    series: Sequence[float],
    model: ForecastModel,
    min_start: int,
    periods: pd.PeriodIndex | None = None,
) -> float:
    """Score a model by one-step-ahead replay over the history.

    For every ``k`` from ``min_start`` to the end, the model sees only
    ``series[:k]`` and predicts ``series[k]``.

    Args:
        series: Historical values in major units, oldest first.
        model: Candidate to evaluate.
        min_start: First index to predict (clamped at 0).
        periods: Optional Period of each value, passed to the model.

    Returns:
        sMAPE over all replayed steps (0.0 when there are none).
    """
    values = as_array(series)
    preds: list[float] = []
    actuals: list[float] = []
    for k in range(max(0, min_start), values.size):
        period = periods[k] if periods is not None else None
        preds.append(model.predict(values[:k], period))
        actuals.append(float(values[k]))
    return smape(actuals, preds)
