"""Tests for the Huber/Adam regression trainer."""

import numpy as np
import pytest

from budget_core.forecasting.models.trainer import HuberTrainer


def _line():
    x = np.linspace(-1.0, 1.0, 21)
    return x.reshape(-1, 1), 2.0 * x + 1.0


def test_trainer_recovers_linear_relation() -> None:
    """Test that enough epochs recover slope and intercept."""
    X, y = _line()
    fit = HuberTrainer(epochs=3000, learning_rate=0.05, l2_penalty=0.0).fit(X, y)

    assert fit.kernel[0] == pytest.approx(2.0, abs=0.1)
    assert fit.bias == pytest.approx(1.0, abs=0.1)
    assert fit.epochs == 3000


def test_trainer_is_deterministic() -> None:
    """Test that identical inputs produce identical weights."""
    X, y = _line()
    first = HuberTrainer(epochs=50).fit(X, y)
    second = HuberTrainer(epochs=50).fit(X, y)

    np.testing.assert_array_equal(first.kernel, second.kernel)
    assert first.bias == second.bias


def test_trainer_loss_decreases_with_epochs() -> None:
    """Test that longer training reaches a lower loss."""
    X, y = _line()
    short = HuberTrainer(epochs=5, learning_rate=0.05).fit(X, y)
    long = HuberTrainer(epochs=500, learning_rate=0.05).fit(X, y)

    assert long.loss < short.loss


def test_trainer_predict_shape() -> None:
    """Test that the fitted map predicts one value per row."""
    X, y = _line()
    fit = HuberTrainer(epochs=10).fit(X, y)
    assert fit.predict(X).shape == (21,)


def test_trainer_rejects_empty_input() -> None:
    """Test that an empty design matrix raises ValueError."""
    with pytest.raises(ValueError, match="empty"):
        HuberTrainer(epochs=10).fit(np.empty((0, 3)), np.empty(0))


def test_trainer_rejects_shape_mismatch() -> None:
    """Test that misaligned targets raise ValueError."""
    with pytest.raises(ValueError, match="Shape mismatch"):
        HuberTrainer(epochs=10).fit(np.ones((4, 2)), np.ones(3))
