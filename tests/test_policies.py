"""Tests for clamp, smoothing and rounding policies."""

import pytest

from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.policies import (
    clamp_and_round,
    ema,
    percentile_lower,
    round_to_unit,
    to_minor_units,
    trailing_max,
)


def test_ema() -> None:
    """Test the smoothing step weights the current value by alpha."""
    assert ema(10.0, 0.0, 0.7) == pytest.approx(7.0)
    assert ema(5.0, 5.0) == pytest.approx(5.0)


def test_percentile_lower() -> None:
    """Test the nearest-lower-rank percentile."""
    assert percentile_lower([1.0, 2.0, 3.0, 4.0], 95) == 3.0
    assert percentile_lower([], 95) == 0.0


def test_round_to_unit_half_up() -> None:
    """Test rounding to the nearest 10,000 minor units, halves up."""
    assert round_to_unit(125_000, 10_000) == 130_000
    assert round_to_unit(124_999, 10_000) == 120_000
    assert round_to_unit(-5_000, 10_000) == 0


def test_to_minor_units() -> None:
    """Test major to minor unit conversion."""
    assert to_minor_units(12.5) == 1250
    assert to_minor_units(float("nan")) == 0


def test_trailing_max_requires_full_window() -> None:
    """Test that the ceiling is skipped with too little or non-positive history."""
    assert trailing_max([100.0] * 11) is None
    assert trailing_max([0.0] * 12) is None
    assert trailing_max([50.0] * 11 + [100.0]) == 100.0
    assert trailing_max([500.0] + [10.0] * 12) == 10.0


def test_clamp_and_round_negative() -> None:
    """Test that negative forecasts become zero."""
    assert clamp_and_round(-5.0, [10.0] * 12, ForecastConfig()) == 0


def test_clamp_and_round_caps_spike() -> None:
    """Test that a runaway forecast is capped at 1.2x the trailing max."""
    assert clamp_and_round(1e9, [10_000.0] * 12, ForecastConfig()) == 1_200_000


def test_clamp_and_round_rounds_down_under_ceiling() -> None:
    """Test that rounding falls back to flooring when it would exceed the cap."""
    # ceiling 12,060 major = 1,206,000 minor; nearest unit 1,210,000 is over it
    value = clamp_and_round(1e9, [10_050.0] * 12, ForecastConfig())
    assert value == 1_200_000


def test_clamp_and_round_never_floors_below_peak() -> None:
    """Test that a small spike is not rounded down below the spike itself."""
    actuals = [10.0] * 11 + [130.0]
    value = clamp_and_round(1e9, actuals, ForecastConfig())

    # ceiling 15,600 minor; flooring to 10,000 would undercut the 13,000 spike
    assert value == 20_000
    assert value >= 13_000


def test_clamp_and_round_floor_at_cap_of_one() -> None:
    """Test that with no headroom the nearest unit is kept over the floor."""
    value = clamp_and_round(1e9, [12_050.0] * 12, ForecastConfig(growth_cap=1.0))
    assert value == 1_210_000


def test_clamp_and_round_non_finite() -> None:
    """Test that NaN forecasts are treated as zero."""
    assert clamp_and_round(float("nan"), [], ForecastConfig()) == 0
