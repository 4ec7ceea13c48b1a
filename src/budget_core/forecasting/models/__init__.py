"""Candidate forecasting models.

Forecasting Model Debug Checklist
==================================

When adding a new candidate model, follow this checklist so the selector can
score it and debug information is exposed consistently:

1. Subclass ForecastModel and set a unique ``name`` class attribute.

2. Implement ``predict(history, period)``:
   - ``history`` is a contiguous sequence of monthly values in major units
   - ``period`` is the month being predicted (may be None)
   - return a float; empty histories must return 0.0, never raise

3. Override ``min_start(n)`` if the model needs more warm-up than the default
   three points before its first backtest step.

4. Populate ``self.debug_`` with a ModelDebugInfo after predicting:
   ```python
   self.debug_ = ModelDebugInfo(
       model_name=self.name,
       version="v1",  # optional
       data={...},  # JSON-like, model-specific
   )
   ```

5. If forecast_plan(debug=True) uses this model, its ``debug_`` is collected
   into PlanForecast.debug[target][model_name].

Example implementations:
- Median3Model, MovingAverage3Model, Seasonal12Model: see models/baselines.py
- RegressionARXModel: see models/arx.py
"""

from budget_core.forecasting.models.arx import ARXEvaluation, RegressionARXModel
from budget_core.forecasting.models.base import ForecastModel
from budget_core.forecasting.models.baselines import (
    Median3Model,
    MovingAverage3Model,
    Seasonal12Model,
    default_baselines,
)
from budget_core.forecasting.models.trainer import HuberTrainer, LinearFit

__all__ = [
    "ARXEvaluation",
    "ForecastModel",
    "HuberTrainer",
    "LinearFit",
    "Median3Model",
    "MovingAverage3Model",
    "RegressionARXModel",
    "Seasonal12Model",
    "default_baselines",
]
