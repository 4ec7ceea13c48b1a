"""Robust linear regression trainer.

Fits ``y ≈ X @ kernel + bias`` with a single ``torch.nn.Linear`` layer by
minimising the mean Huber loss plus an L2 penalty on the kernel, using
full-batch Adam for a fixed number of epochs.

A trainer builds a fresh layer and optimizer per fit, so no state is shared
between series or threads.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import torch
from torch import nn


@dataclass(frozen=True)
class LinearFit:
    """Trained weights of a bias-inclusive linear map."""

    kernel: np.ndarray
    bias: float
    loss: float
    epochs: int

    def predict(self, X: np.ndarray) -> np.ndarray:
        return np.asarray(X, dtype=float) @ self.kernel + self.bias


class HuberTrainer:
    """Full-batch Adam on Huber loss with L2 regularisation.

    Weights start at zero, so identical inputs always produce identical
    weights. There is no early stopping: training always runs ``epochs``
    steps.
    """

    def __init__(
        self,
        epochs: int,
        learning_rate: float = 1e-2,
        l2_penalty: float = 1e-5,
        delta: float = 1.0,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-7,
    ) -> None:
        """Initialize the trainer.

        Args:
            epochs: Number of optimisation steps.
            learning_rate: Adam step size.
            l2_penalty: Coefficient of the squared-kernel penalty (bias excluded).
            delta: Huber threshold between quadratic and linear loss.
            beta1: Adam first-moment decay.
            beta2: Adam second-moment decay.
            epsilon: Adam numerical stabiliser.
        """
        self.epochs = epochs
        self.learning_rate = learning_rate
        self.l2_penalty = l2_penalty
        self.loss_fn = nn.HuberLoss(delta=delta)
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon

    def _objective(self, layer: nn.Linear, X: torch.Tensor, y: torch.Tensor) -> torch.Tensor:
        return self.loss_fn(layer(X), y) + self.l2_penalty * layer.weight.pow(2).sum()

    def fit(self, X: np.ndarray, y: np.ndarray) -> LinearFit:
        """Train on a design matrix.

        Args:
            X: Feature matrix of shape (rows, features).
            y: Targets of shape (rows,).

        Returns:
            LinearFit with the trained kernel and bias.

        Raises:
            ValueError: If X has no rows or shapes disagree.
        """
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float).reshape(-1)
        if X.ndim != 2 or X.shape[0] == 0:
            raise ValueError("Cannot train on an empty design matrix")
        if X.shape[0] != y.shape[0]:
            raise ValueError(f"Shape mismatch: X has {X.shape[0]} rows, y has {y.shape[0]}")

        X_t = torch.as_tensor(X, dtype=torch.float64)
        y_t = torch.as_tensor(y, dtype=torch.float64).reshape(-1, 1)

        layer = nn.Linear(X.shape[1], 1, dtype=torch.float64)
        with torch.no_grad():
            layer.weight.zero_()
            layer.bias.zero_()
        optimizer = torch.optim.Adam(
            layer.parameters(),
            lr=self.learning_rate,
            betas=(self.beta1, self.beta2),
            eps=self.epsilon,
        )

        for _ in range(self.epochs):
            optimizer.zero_grad()
            loss = self._objective(layer, X_t, y_t)
            loss.backward()
            optimizer.step()

        with torch.no_grad():
            final_loss = float(self._objective(layer, X_t, y_t).item())
        kernel = layer.weight.detach().numpy().reshape(-1).copy()
        bias = float(layer.bias.detach().item())
        return LinearFit(kernel=kernel, bias=bias, loss=final_loss, epochs=self.epochs)
