"""Post-processing policies applied to forecasts.

Policies are applied in a fixed order to the selected (or blended) value:

1. Non-negativity: forecasts are floored at zero.
2. Growth ceiling: capped at ``growth_cap`` x the trailing 12-month maximum
   (skipped with fewer than 12 months of history or no positive actuals).
3. Rounding: converted to minor units and rounded to ``rounding_unit``.

Helpers here never raise on empty input; they degrade to 0.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from budget_core.forecasting.config import ForecastConfig, ROUNDING_UNIT


def ema(current: float, previous: float, alpha: float = 0.7) -> float:
    """Exponential smoothing step: ``alpha * current + (1 - alpha) * previous``."""
    return alpha * current + (1.0 - alpha) * previous


def percentile_lower(values: Sequence[float], q: float) -> float:
    """Percentile without interpolation (nearest lower rank), 0.0 when empty."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.percentile(arr, q, method="lower"))


def clip_high(values: Sequence[float], high: float) -> np.ndarray:
    return np.minimum(np.asarray(values, dtype=float), high)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def to_minor_units(value: float) -> int:
    """Major units to whole minor units (cents), rounding half up."""
    if not math.isfinite(value):
        return 0
    return _round_half_up(value * 100.0)


def round_to_unit(minor: float, unit: int = ROUNDING_UNIT) -> int:
    """Round minor units to the nearest multiple of ``unit``, floored at zero.

    Examples:
        >>> round_to_unit(123_456, 10_000)
        120000
        >>> round_to_unit(-5_000, 10_000)
        0
    """
    if not math.isfinite(minor):
        return 0
    return max(0, _round_half_up(minor / unit) * unit)


def trailing_max(actuals: Sequence[float], window: int = 12) -> float | None:
    """Max of the trailing ``window`` actuals.

    None when fewer than ``window`` actuals exist or none is positive.
    """
    arr = np.asarray(actuals, dtype=float)
    if arr.size < window or window <= 0:
        return None
    peak = float(arr[-window:].max())
    if peak <= 0:
        return None
    return peak


def clamp_and_round(value: float, actuals: Sequence[float], config: ForecastConfig) -> int:
    """Apply non-negativity, growth ceiling and rounding in order.

    Rounding is to the nearest unit. When that lands above the ceiling the
    value is rounded down instead, as long as the result stays at or above
    the trailing max; small amounts with a coarse unit may therefore end up
    one unit over the ceiling, never under the peak they are capping.

    Args:
        value: Selected forecast in major units.
        actuals: Historical values in major units, oldest first.
        config: ForecastConfig supplying cap, window and rounding unit.

    Returns:
        Forecast in minor units, a non-negative multiple of ``config.rounding_unit``.
    """
    if not math.isfinite(value):
        value = 0.0
    value = max(0.0, value)
    peak = trailing_max(actuals, config.growth_window)
    if peak is None:
        return round_to_unit(to_minor_units(value), config.rounding_unit)

    bound = peak * config.growth_cap
    value = min(value, bound)
    rounded = round_to_unit(to_minor_units(value), config.rounding_unit)
    if rounded > bound * 100.0:
        # Round down under the ceiling unless that drops below the peak itself
        floored = math.floor(bound * 100.0 / config.rounding_unit) * config.rounding_unit
        if floored >= peak * 100.0:
            rounded = floored
    return rounded
