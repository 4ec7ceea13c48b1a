"""Parameter-free baseline models.

These baselines need no training and are cheap to backtest:

- median3: median of the last three months
- ma3: mean of the last three months
- seasonal12: same month last year
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from budget_core.forecasting.config import BASELINE_MIN_START, SEASONAL_PERIOD
from budget_core.forecasting.models.base import ForecastModel, as_array
from budget_core.forecasting.types import ModelDebugInfo


def median3(history: Sequence[float]) -> float:
    """Median of the last three points (upper median when two remain).

    Returns 0.0 for an empty history.
    """
    window = np.sort(as_array(history)[-3:])
    if window.size == 0:
        return 0.0
    return float(window[window.size // 2])


def moving_average3(history: Sequence[float]) -> float:
    """Arithmetic mean of the last three points, 0.0 when empty."""
    window = as_array(history)[-3:]
    if window.size == 0:
        return 0.0
    return float(window.mean())


def seasonal(history: Sequence[float], season: int = SEASONAL_PERIOD) -> float:
    """Value ``season`` periods back, else the last value, else 0.0."""
    values = as_array(history)
    if values.size >= season:
        return float(values[values.size - season])
    if values.size:
        return float(values[-1])
    return 0.0


class Median3Model(ForecastModel):
    """Median of the trailing three months."""

    name = "median3"

    def __init__(self, min_start: int = BASELINE_MIN_START) -> None:
        super().__init__()
        self._min_start = min_start

    def min_start(self, n: int) -> int:
        return self._min_start

    def predict(self, history: Sequence[float], period: pd.Period | None = None) -> float:
        value = median3(history)
        self.debug_ = ModelDebugInfo(model_name=self.name, data={"window": list(as_array(history)[-3:])})
        return value


class MovingAverage3Model(ForecastModel):
    """Mean of the trailing three months."""

    name = "ma3"

    def __init__(self, min_start: int = BASELINE_MIN_START) -> None:
        super().__init__()
        self._min_start = min_start

    def min_start(self, n: int) -> int:
        return self._min_start

    def predict(self, history: Sequence[float], period: pd.Period | None = None) -> float:
        value = moving_average3(history)
        self.debug_ = ModelDebugInfo(model_name=self.name, data={"window": list(as_array(history)[-3:])})
        return value


class Seasonal12Model(ForecastModel):
    """Same month one season back.

    Backtesting starts once a full season of lookback exists, so its warm-up
    is ``min(season, n - 1)``.
    """

    name = "seasonal12"

    def __init__(self, season: int = SEASONAL_PERIOD) -> None:
        super().__init__()
        self.season = season

    def min_start(self, n: int) -> int:
        return min(self.season, n - 1)

    def predict(self, history: Sequence[float], period: pd.Period | None = None) -> float:
        values = as_array(history)
        value = seasonal(values, self.season)
        self.debug_ = ModelDebugInfo(
            model_name=self.name,
            data={"season": self.season, "full_season": bool(values.size >= self.season)},
        )
        return value


def default_baselines(
    min_start: int = BASELINE_MIN_START, season: int = SEASONAL_PERIOD
) -> list[ForecastModel]:
    """Baselines in selection order: median3, ma3, seasonal12."""
    return [Median3Model(min_start), MovingAverage3Model(min_start), Seasonal12Model(season)]
