"""Configuration for the budget forecasting engine."""

from __future__ import annotations

from dataclasses import dataclass

from budget_core.exceptions import ConfigError

# Lookback window (number of fully elapsed months)
MONTHS_BACK = 12

# Series shorter than this skip model selection entirely
MIN_HISTORY = 6

# Warm-up points before the first backtest step
BASELINE_MIN_START = 3
REGRESSION_MIN_START = 4

# Seasonal period for monthly data (12 = yearly seasonality)
SEASONAL_PERIOD = 12

# Round emitted amounts to 100 major units (10,000 minor units)
ROUNDING_UNIT = 10_000

# Categories whose display name contains this keyword keep their last value
RENT_KEYWORD = "rent"


@dataclass(frozen=True)
class ForecastConfig:
    """Immutable configuration for a forecast run.

    Attributes:
        months_back: Number of fully elapsed months aggregated into each series.
        savings_clamp_zero: Floor each month's net savings flow at zero before
            forecasting.
        min_history: Series with fewer points use the median/EMA fallback
            instead of model selection.
        baseline_min_start: First backtest index for the median and moving
            average candidates.
        seasonal_period: Lookback of the seasonal candidate, also the upper
            bound of its backtest warm-up.
        regression_min_start: First walk-forward index for the regression.
        blend_tolerance: Relative error margin within which the regression is
            blended into a winning baseline.
        blend_weight: Weight of the regression value in a blend.
        smoothing_alpha: Weight of the regression projection when smoothing it
            against the last actual.
        growth_cap: Forecasts are capped at this multiple of the trailing max.
        growth_window: Number of trailing actuals the growth cap looks at.
        rounding_unit: Emitted amounts are multiples of this many minor units.
        outlier_percentile: Percentile at which regression inputs are clipped.
        backtest_epochs: Training epochs for each walk-forward retrain.
        final_epochs: Training epochs for the final regression fit.
        learning_rate: Adam step size for the regression trainer.
        l2_penalty: L2 penalty on regression weights (bias excluded).
        huber_delta: Threshold between the quadratic and linear Huber regimes.
        fallback_category_count: Categories kept when none has positive spend.
        rent_keyword: Case-insensitive substring marking fixed-rent categories.
        events_use_log: Train the events regression on log1p values.
        dtd_use_log: Train day-to-day category regressions on log1p values.
        max_workers: Worker threads used to forecast independent series.
    """

    months_back: int = MONTHS_BACK
    savings_clamp_zero: bool = True
    min_history: int = MIN_HISTORY
    baseline_min_start: int = BASELINE_MIN_START
    seasonal_period: int = SEASONAL_PERIOD
    regression_min_start: int = REGRESSION_MIN_START
    blend_tolerance: float = 0.10
    blend_weight: float = 0.5
    smoothing_alpha: float = 0.7
    growth_cap: float = 1.2
    growth_window: int = 12
    rounding_unit: int = ROUNDING_UNIT
    outlier_percentile: float = 95.0
    backtest_epochs: int = 250
    final_epochs: int = 300
    learning_rate: float = 1e-2
    l2_penalty: float = 1e-5
    huber_delta: float = 1.0
    fallback_category_count: int = 8
    rent_keyword: str = RENT_KEYWORD
    events_use_log: bool = True
    dtd_use_log: bool = True
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.months_back < 1:
            raise ConfigError(f"months_back must be >= 1, got {self.months_back}")
        if self.rounding_unit < 1:
            raise ConfigError(f"rounding_unit must be >= 1, got {self.rounding_unit}")
        if not 0.0 <= self.smoothing_alpha <= 1.0:
            raise ConfigError(f"smoothing_alpha must be in [0, 1], got {self.smoothing_alpha}")
        if not 0.0 <= self.blend_weight <= 1.0:
            raise ConfigError(f"blend_weight must be in [0, 1], got {self.blend_weight}")
        if not 0.0 < self.outlier_percentile <= 100.0:
            raise ConfigError(
                f"outlier_percentile must be in (0, 100], got {self.outlier_percentile}"
            )
        if self.growth_cap <= 0:
            raise ConfigError(f"growth_cap must be positive, got {self.growth_cap}")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {self.max_workers}")
