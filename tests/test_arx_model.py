"""Tests for the ARX regression model."""

import numpy as np
import pandas as pd
import pytest

from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.models.arx import (
    RegressionARXModel,
    build_design,
    history_periods,
    month_one_hot,
)

FAST = ForecastConfig(backtest_epochs=10, final_epochs=10)


def test_month_one_hot() -> None:
    """Test the calendar-month indicator."""
    vec = month_one_hot(pd.Period("2025-03", freq="M"))
    assert vec.sum() == 1.0
    assert vec[2] == 1.0
    assert month_one_hot(None).sum() == 0.0


def test_history_periods() -> None:
    """Test that history periods end the month before the forecast month."""
    periods = history_periods(3, pd.Period("2025-01", freq="M"))
    assert [str(p) for p in periods] == ["2024-10", "2024-11", "2024-12"]
    assert history_periods(2, None) == [None, None]


def test_build_design_layout() -> None:
    """Test rows, targets, month columns and lag columns of the design."""
    periods = list(pd.period_range("2025-01", periods=6, freq="M"))
    design = build_design(np.arange(6.0), periods)

    assert design.X.shape == (4, 15)
    np.testing.assert_array_equal(design.y, [2.0, 3.0, 4.0, 5.0])
    # First row predicts March from February (lag1) and January (lag2)
    assert design.X[0, 3] == 1.0
    assert design.X[0, 13] == 1.0
    assert design.X[0, 14] == 0.0
    # Standardized time index is centred on the window
    assert design.X[:, 0].mean() == pytest.approx((3.5 - 2.5) / np.arange(6.0).std())


def test_prepare_clips_outliers() -> None:
    """Test that training values are clipped at the 95th percentile."""
    model = RegressionARXModel(config=FAST)
    prepared = model.prepare([1.0] * 19 + [100.0])
    assert prepared.max() == 1.0


def test_prepare_log_transform() -> None:
    """Test log1p preparation for heavy-tailed series."""
    model = RegressionARXModel(use_log=True, config=FAST)
    np.testing.assert_allclose(model.prepare([9.0] * 5), np.log(10.0))


def test_evaluate_short_history() -> None:
    """Test that too few points give the worst error and the last value."""
    evaluation = RegressionARXModel(config=FAST).evaluate([5.0, 7.0], None)

    assert evaluation.error == 1.0
    assert evaluation.steps == 0
    assert evaluation.prediction == pytest.approx(7.0)


def test_evaluate_walk_forward() -> None:
    """Test walk-forward step count, error range and non-negative projection."""
    next_period = pd.Period("2025-07", freq="M")
    model = RegressionARXModel(config=FAST)
    evaluation = model.evaluate([1000.0, 1100.0, 900.0, 1000.0, 1050.0, 950.0], next_period)

    assert evaluation.steps == 2
    assert 0.0 <= evaluation.error <= 1.0
    assert evaluation.prediction >= 0.0
    assert model.debug_ is not None
    assert model.debug_.model_name == "arx"
    assert model.debug_.data["walk_forward_steps"] == 2


def test_evaluate_is_deterministic() -> None:
    """Test that repeated evaluations give identical results."""
    history = [float(v) for v in [300, 320, 310, 500, 330, 340, 360, 350]]
    period = pd.Period("2025-09", freq="M")
    first = RegressionARXModel(config=FAST).evaluate(history, period)
    second = RegressionARXModel(config=FAST).evaluate(history, period)

    assert first == second


def test_train_requires_three_points() -> None:
    """Test that training on fewer than three points raises ValueError."""
    model = RegressionARXModel(config=FAST)
    with pytest.raises(ValueError, match="Insufficient data"):
        model.train(np.array([1.0, 2.0]), [None, None], epochs=5)


def test_predict_matches_final_fit() -> None:
    """Test that predict is the unsmoothed projection of the final fit."""
    history = [float(v) for v in [300, 320, 310, 500, 330, 340, 360, 350]]
    period = pd.Period("2025-09", freq="M")
    prediction = RegressionARXModel(config=FAST).predict(history, period)
    evaluation = RegressionARXModel(config=FAST).evaluate(history, period)

    assert np.isfinite(prediction)
    assert prediction == pytest.approx(evaluation.raw_prediction)


def test_predict_short_history() -> None:
    """Test that histories too short to train repeat the last value."""
    model = RegressionARXModel(config=FAST)
    assert model.predict([4.0, 6.0]) == 6.0
    assert model.predict([]) == 0.0
