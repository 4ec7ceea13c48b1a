"""Shared types for the forecasting engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from budget_core.periods import to_period


@dataclass(frozen=True)
class ModelDebugInfo:
    """Generic container for model-specific debug information.

    Attributes:
        model_name: Short identifier for the model, e.g. "median3", "arx".
        version: Optional version string if model behavior changes over time.
        data: Arbitrary model-specific payload (dict of JSON-like values).
    """

    model_name: str
    version: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CategorySeries:
    """Monthly spend series for one day-to-day category.

    Attributes:
        category_id: Stable category identifier.
        name: Best-effort display name.
        series: Monthly amounts in minor units indexed by Period.
    """

    category_id: str
    name: str
    series: pd.Series


@dataclass(frozen=True)
class ForecastCandidateResult:
    """Backtest score and next-period prediction of one candidate model."""

    method_name: str
    backtest_error: float
    predicted_value: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method_name,
            "backtest_error": self.backtest_error,
            "predicted_value": self.predicted_value,
        }


@dataclass(frozen=True)
class ForecastResult:
    """Final forecast for one target series.

    Attributes:
        target: Series name, e.g. "savings" or a category id.
        period: Month being forecast.
        value: Forecast in minor units, non-negative and rounded.
        chosen_method: Winning candidate, "fallback" for short histories or
            "rent_last_value" for fixed-rent categories.
        blended: True when the regression was blended into a baseline winner.
        candidates: Scores of every evaluated candidate (empty for fallbacks).
    """

    target: str
    period: pd.Period
    value: int
    chosen_method: str
    blended: bool = False
    candidates: tuple[ForecastCandidateResult, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": str(self.period),
            "value": self.value,
            "method": self.chosen_method,
            "blended": self.blended,
            "candidates": [c.to_dict() for c in self.candidates],
        }


@dataclass(frozen=True)
class SubBudget:
    """Per-category day-to-day allocation."""

    category_id: str
    name: str
    amount: int


@dataclass(frozen=True)
class BudgetPlan:
    """Budget allocation for one month, all amounts in minor units.

    The day-to-day total is derived from the sub-budgets so it can never
    disagree with them.
    """

    period: pd.Period
    savings: int
    commitments: int
    events: int
    sub_budgets: tuple[SubBudget, ...] = ()

    @property
    def dtd_amount(self) -> int:
        return sum(sb.amount for sb in self.sub_budgets)

    @property
    def total(self) -> int:
        return self.savings + self.commitments + self.events + self.dtd_amount

    def to_payload(self) -> dict[str, Any]:
        """Render the plan in the plan store's wire format."""
        return {
            "period": str(self.period),
            "savings": {"amount": self.savings},
            "commitments": {"amount": self.commitments},
            "events": {"amount": self.events},
            "dtd": {
                "amount": self.dtd_amount,
                "subBudgets": [
                    {"categoryId": sb.category_id, "name": sb.name, "amount": sb.amount}
                    for sb in self.sub_budgets
                ],
            },
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> BudgetPlan:
        """Parse a plan store payload back into a BudgetPlan."""
        dtd = payload.get("dtd") or {}
        sub_budgets = tuple(
            SubBudget(
                category_id=str(item.get("categoryId", "")),
                name=str(item.get("name", "")),
                amount=int(item.get("amount", 0) or 0),
            )
            for item in dtd.get("subBudgets") or []
        )
        return cls(
            period=to_period(payload["period"]),
            savings=int((payload.get("savings") or {}).get("amount", 0) or 0),
            commitments=int((payload.get("commitments") or {}).get("amount", 0) or 0),
            events=int((payload.get("events") or {}).get("amount", 0) or 0),
            sub_budgets=sub_budgets,
        )
