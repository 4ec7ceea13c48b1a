"""Forecast accuracy metrics."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def smape(actuals: Sequence[float], forecasts: Sequence[float]) -> float:
    """Symmetric mean absolute percentage error.

    Each term is ``|y - f| / (|y| + |f|)``; when both are zero the denominator
    falls back to 1 so the term is 0. Empty input scores 0.0.

    Args:
        actuals: Observed values.
        forecasts: Predicted values, aligned with actuals.

    Returns:
        Mean error in [0, 1]; lower is better.
    """
    y = np.asarray(actuals, dtype=float)
    f = np.asarray(forecasts, dtype=float)
    if y.size == 0:
        return 0.0
    denom = np.abs(y) + np.abs(f)
    denom = np.where(denom == 0, 1.0, denom)
    return float(np.mean(np.abs(y - f) / denom))
