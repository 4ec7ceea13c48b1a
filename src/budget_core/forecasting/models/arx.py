"""Regression ARX model for monthly budget series.

The model is linear in:

- the time index, standardized over the training window (trend)
- a one-hot encoding of the calendar month (seasonality)
- the values one and two months back (autocorrelation)

Inputs are clipped at a high percentile to limit outlier influence and can be
log1p-transformed for heavy-tailed series such as event spend. Weights are
trained by a HuberTrainer instantiated per fit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.metrics import smape
from budget_core.forecasting.models.base import ForecastModel, as_array
from budget_core.forecasting.models.trainer import HuberTrainer, LinearFit
from budget_core.forecasting.policies import clip_high, ema, percentile_lower
from budget_core.forecasting.types import ModelDebugInfo

logger = logging.getLogger(__name__)

# Rows need two lags, so at least three points are required to train
MIN_TRAIN_POINTS = 3


def month_one_hot(period: pd.Period | None) -> np.ndarray:
    """12-slot calendar-month indicator (all zeros when period is None)."""
    vec = np.zeros(12)
    if period is not None:
        vec[period.month - 1] = 1.0
    return vec


def history_periods(n: int, next_period: pd.Period | None) -> list[pd.Period | None]:
    """Periods of a contiguous history of length ``n`` ending before ``next_period``."""
    if next_period is None:
        return [None] * n
    return [next_period - (n - i) for i in range(n)]


@dataclass(frozen=True)
class ARXDesign:
    """Design matrix for one training window.

    Attributes:
        X: Feature rows ``[t_std, month one-hot (12), lag1, lag2]``.
        y: Targets aligned with X.
        t_mean: Mean of the time index over the window.
        t_std: Standard deviation of the time index (1.0 when degenerate).
        values: Training values (already clipped/transformed).
    """

    X: np.ndarray
    y: np.ndarray
    t_mean: float
    t_std: float
    values: np.ndarray

    def next_features(self, next_period: pd.Period | None) -> np.ndarray:
        n = self.values.size
        lag1 = self.values[n - 1] if n >= 1 else 0.0
        lag2 = self.values[n - 2] if n >= 2 else 0.0
        t_next = (n - self.t_mean) / self.t_std
        return np.concatenate([[t_next], month_one_hot(next_period), [lag1, lag2]])


def build_design(values: Sequence[float], periods: Sequence[pd.Period | None]) -> ARXDesign:
    """Build the ARX design matrix from a training window.

    Args:
        values: Training values, oldest first.
        periods: Period of each value.

    Returns:
        ARXDesign with one row per index that has two lags.
    """
    values = as_array(values)
    n = values.size
    t = np.arange(n, dtype=float)
    t_mean = float(t.mean()) if n else 0.0
    t_std = float(t.std()) if n else 0.0
    if t_std == 0.0:
        t_std = 1.0

    rows = []
    targets = []
    for i in range(2, n):
        t_i = (i - t_mean) / t_std
        rows.append(np.concatenate([[t_i], month_one_hot(periods[i]), [values[i - 1], values[i - 2]]]))
        targets.append(values[i])

    X = np.vstack(rows) if rows else np.empty((0, 15))
    return ARXDesign(X=X, y=np.asarray(targets, dtype=float), t_mean=t_mean, t_std=t_std, values=values)


@dataclass(frozen=True)
class ARXEvaluation:
    """Walk-forward error and smoothed next-period projection of the regression.

    Attributes:
        error: sMAPE of the walk-forward retrains (1.0 if none was possible).
        prediction: Next-period value in major units after smoothing, >= 0.
        raw_prediction: Next-period value before smoothing.
        steps: Number of walk-forward retrains.
    """

    error: float
    prediction: float
    raw_prediction: float
    steps: int


class RegressionARXModel(ForecastModel):
    """Trend + calendar season + two-lag regression with robust training."""

    name = "arx"

    def __init__(self, use_log: bool = False, config: ForecastConfig | None = None) -> None:
        """Initialize the regression.

        Args:
            use_log: Train on log1p values and map predictions back with expm1.
            config: ForecastConfig with training hyperparameters. If None, uses defaults.
        """
        super().__init__()
        self.use_log = use_log
        self.config = config if config is not None else ForecastConfig()

    def min_start(self, n: int) -> int:
        return self.config.regression_min_start

    def _new_trainer(self, epochs: int) -> HuberTrainer:
        return HuberTrainer(
            epochs=epochs,
            learning_rate=self.config.learning_rate,
            l2_penalty=self.config.l2_penalty,
            delta=self.config.huber_delta,
        )

    def prepare(self, history: Sequence[float]) -> np.ndarray:
        """Clip at the outlier percentile and apply the optional log transform."""
        values = as_array(history)
        high = percentile_lower(values, self.config.outlier_percentile)
        clipped = clip_high(values, high)
        if self.use_log:
            return np.log1p(np.clip(clipped, 0.0, None))
        return clipped

    def _inverse(self, value: float) -> float:
        return float(np.expm1(value)) if self.use_log else float(value)

    def train(
        self, prepared: np.ndarray, periods: Sequence[pd.Period | None], epochs: int
    ) -> tuple[LinearFit, ARXDesign]:
        """Fit weights on prepared values.

        Raises:
            ValueError: If fewer than three points are available.
        """
        if prepared.size < MIN_TRAIN_POINTS:
            raise ValueError(f"Insufficient data: only {prepared.size} observations")
        design = build_design(prepared, periods)
        fit = self._new_trainer(epochs).fit(design.X, design.y)
        return fit, design

    def _forecast(
        self, fit: LinearFit, design: ARXDesign, next_period: pd.Period | None
    ) -> float:
        x_next = design.next_features(next_period).reshape(1, -1)
        value = self._inverse(float(fit.predict(x_next)[0]))
        # expm1 can overflow on a diverged fit
        return value if np.isfinite(value) else 0.0

    def predict(self, history: Sequence[float], period: pd.Period | None = None) -> float:
        """Train on the full history and project the next value (unsmoothed).

        Histories too short to train fall back to the last value (0.0 if empty).
        """
        values = as_array(history)
        if values.size < MIN_TRAIN_POINTS:
            return float(values[-1]) if values.size else 0.0
        prepared = self.prepare(values)
        fit, design = self.train(prepared, history_periods(values.size, period), self.config.final_epochs)
        return self._forecast(fit, design, period)

    def evaluate(self, history: Sequence[float], next_period: pd.Period | None) -> ARXEvaluation:
        """Walk-forward evaluation plus the final smoothed projection.

        Every index ``k`` from ``regression_min_start`` onwards retrains a fresh
        model on ``[0, k)`` and predicts ``k``; errors are sMAPE against the raw
        actuals. The final model is trained on the whole history and its
        projection is smoothed toward the last actual.

        Args:
            history: Values in major units, oldest first.
            next_period: Month being forecast.

        Returns:
            ARXEvaluation with the walk-forward error and projection.
        """
        values = as_array(history)
        n = values.size
        periods = history_periods(n, next_period)
        prepared = self.prepare(values)

        preds: list[float] = []
        actuals: list[float] = []
        for k in range(max(self.config.regression_min_start, MIN_TRAIN_POINTS), n):
            fit_k, design_k = self.train(prepared[:k], periods[:k], self.config.backtest_epochs)
            preds.append(self._forecast(fit_k, design_k, periods[k]))
            actuals.append(float(values[k]))
        error = smape(actuals, preds) if preds else 1.0

        if n < MIN_TRAIN_POINTS:
            raw = float(values[-1]) if n else 0.0
            fit = None
        else:
            fit, design = self.train(prepared, periods, self.config.final_epochs)
            raw = self._forecast(fit, design, next_period)

        last = float(values[-1]) if n else 0.0
        smoothed = max(0.0, ema(raw, last, self.config.smoothing_alpha))

        self.debug_ = ModelDebugInfo(
            model_name=self.name,
            version="v1",
            data={
                "use_log": self.use_log,
                "walk_forward_steps": len(preds),
                "smape": error,
                "raw_prediction": raw,
                "kernel": fit.kernel.tolist() if fit is not None else [],
                "bias": fit.bias if fit is not None else 0.0,
                "final_loss": fit.loss if fit is not None else None,
            },
        )
        logger.debug(
            f"ARX (log={self.use_log}): {len(preds)} walk-forward steps, "
            f"sMAPE={error:.4f}, next={smoothed:.2f}"
        )

        return ARXEvaluation(error=error, prediction=smoothed, raw_prediction=raw, steps=len(preds))
