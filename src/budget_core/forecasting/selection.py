"""Backtest-driven model selection for a single target series.

For each series every baseline is backtested, the regression runs its own
walk-forward evaluation, and the lowest-error candidate wins. When the
regression is within ``blend_tolerance`` of a winning baseline the two are
blended. The result then passes through the clamp/round policies.

Short series (fewer than ``min_history`` points) skip all of this and use a
deterministic median/EMA fallback.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import numpy as np
import pandas as pd

from budget_core.forecasting.backtest import backtest
from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.models.arx import ARXEvaluation, RegressionARXModel
from budget_core.forecasting.models.baselines import default_baselines, median3
from budget_core.forecasting.policies import clamp_and_round, ema, round_to_unit, to_minor_units
from budget_core.forecasting.types import ForecastCandidateResult, ForecastResult, ModelDebugInfo

logger = logging.getLogger(__name__)

FALLBACK_METHOD = "fallback"


class RegressionCandidate(Protocol):
    """What the selector needs from a regression model."""

    name: str
    debug_: ModelDebugInfo | None

    def evaluate(self, history: Sequence[float], next_period: pd.Period | None) -> ARXEvaluation: ...


def to_major_units(series: pd.Series) -> np.ndarray:
    """Minor-unit series as a float array of major units."""
    values = pd.to_numeric(series, errors="coerce").fillna(0).to_numpy(dtype=float)
    return values / 100.0


def fallback_forecast(values: Sequence[float], config: ForecastConfig) -> int:
    """``round(ema(median3(values), last))`` in minor units.

    Used for histories too short for model comparison.
    """
    values = np.asarray(values, dtype=float)
    last = float(values[-1]) if values.size else 0.0
    smoothed = ema(median3(values), last, config.smoothing_alpha)
    return round_to_unit(to_minor_units(smoothed), config.rounding_unit)


def forecast_target(
    series: pd.Series,
    next_period: pd.Period | None,
    config: ForecastConfig | None = None,
    use_log: bool = False,
    regression: RegressionCandidate | None = None,
    target: str | None = None,
    debug: dict[str, ModelDebugInfo] | None = None,
) -> ForecastResult:
    """Forecast the next value of one monthly series.

    Args:
        series: Monthly amounts in minor units, oldest first.
        next_period: Month being forecast.
        config: ForecastConfig. If None, uses defaults.
        use_log: Train the default regression on log1p values.
        regression: Regression candidate to use instead of RegressionARXModel.
        target: Name recorded on the result (defaults to the series name).
        debug: If given, receives each model's debug info keyed by model name.

    Returns:
        ForecastResult with the value in minor units.
    """
    if config is None:
        config = ForecastConfig()
    target = target if target is not None else str(series.name)
    values = to_major_units(series)
    n = values.size

    if n < config.min_history:
        value = fallback_forecast(values, config)
        logger.debug(f"{target}: {n} points < {config.min_history}, fallback -> {value}")
        return ForecastResult(
            target=target, period=next_period, value=value, chosen_method=FALLBACK_METHOD
        )

    periods = series.index if isinstance(series.index, pd.PeriodIndex) else None

    baseline_results: list[ForecastCandidateResult] = []
    for model in default_baselines(config.baseline_min_start, config.seasonal_period):
        error = backtest(values, model, model.min_start(n), periods)
        prediction = model.predict(values, next_period)
        baseline_results.append(ForecastCandidateResult(model.name, error, prediction))
        if debug is not None and model.debug_ is not None:
            debug[model.name] = model.debug_

    if regression is None:
        regression = RegressionARXModel(use_log=use_log, config=config)
    evaluation = regression.evaluate(values, next_period)
    if debug is not None and regression.debug_ is not None:
        debug[regression.name] = regression.debug_
    regression_result = ForecastCandidateResult(
        regression.name, evaluation.error, evaluation.prediction
    )

    # The regression is the incumbent; a baseline must be strictly better
    best = regression_result
    for candidate in baseline_results:
        if candidate.backtest_error < best.backtest_error:
            best = candidate

    value = best.predicted_value
    blended = False
    if best is not regression_result and (
        regression_result.backtest_error <= best.backtest_error * (1.0 + config.blend_tolerance)
    ):
        value = (1.0 - config.blend_weight) * value + config.blend_weight * evaluation.prediction
        blended = True

    final = clamp_and_round(value, values, config)
    logger.debug(
        f"{target}: chose {best.method_name} (sMAPE={best.backtest_error:.4f}, "
        f"blended={blended}) -> {final}"
    )

    return ForecastResult(
        target=target,
        period=next_period,
        value=final,
        chosen_method=best.method_name,
        blended=blended,
        candidates=tuple([*baseline_results, regression_result]),
    )

