"""Base model interface for forecasting models.

This module defines the abstract base class that all candidate models must
implement, enabling the selector to score baselines and the regression
through one interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np
import pandas as pd

from budget_core.forecasting.types import ModelDebugInfo


class ForecastModel(ABC):
    """Abstract base class for one-step-ahead forecasting models.

    Models are pure: predict() depends only on its arguments. Histories are
    contiguous monthly values in major currency units, oldest first.
    """

    name: str = "model"

    def __init__(self) -> None:
        self.debug_: ModelDebugInfo | None = None

    def min_start(self, n: int) -> int:
        """First backtest index for a history of length ``n``."""
        return 3

    @abstractmethod
    def predict(self, history: Sequence[float], period: pd.Period | None = None) -> float:
        """Predict the value following ``history``.

        Args:
            history: Observed values in major units, oldest first.
            period: Month being predicted. History periods are the months
                immediately before it.

        Returns:
            Predicted value in major units. Empty histories predict 0.0.
        """
        pass


def as_array(history: Sequence[float]) -> np.ndarray:
    """History as a float array with NaN/inf replaced by 0.0."""
    values = np.asarray(history, dtype=float)
    return np.nan_to_num(values, nan=0.0, posinf=0.0, neginf=0.0)
