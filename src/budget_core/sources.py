"""Collaborator interfaces for history sources and plan stores.

The forecasting engine only reads from a BudgetDataSource and never writes.
Plans are persisted by the caller through a PlanStore (see
``budget_core.forecasting.api.apply_forecast_plan``).

Records are plain JSON-like dicts using the application's camelCase field
names, for example an expense::

    {"date": "2025-01-14", "amountMinorUnits": 125000, "categoryId": "c1",
     "categoryName": "Groceries"}
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import pandas as pd

from budget_core.periods import to_period

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class BudgetDataSource(Protocol):
    """Read-only access to the user's financial records."""

    def get_expenses(self) -> list[Record]: ...

    def get_commitments(self) -> list[Record]: ...

    def get_events(self) -> list[Record]: ...

    def get_savings_ledger(self) -> list[Record]: ...

    def get_categories(self) -> list[Record]: ...


class PlanStore(Protocol):
    """Persistence for monthly budget plans, keyed by period."""

    def get_plan(self, period: pd.Period) -> Record | None: ...

    def create_plan(self, payload: Record) -> Record: ...

    def replace_plan(self, period: pd.Period, payload: Record) -> Record: ...


@dataclass
class StaticDataSource:
    """In-memory data source backed by lists of records.

    Attributes:
        expenses: Day-to-day expense records.
        commitments: Bank commitment records.
        events: Event expense records.
        savings_goals: Savings goals, each with an ``entries`` ledger.
        categories: Category catalog entries (``{"id", "name"}``).
    """

    expenses: list[Record] = field(default_factory=list)
    commitments: list[Record] = field(default_factory=list)
    events: list[Record] = field(default_factory=list)
    savings_goals: list[Record] = field(default_factory=list)
    categories: list[Record] = field(default_factory=list)

    def get_expenses(self) -> list[Record]:
        return list(self.expenses)

    def get_commitments(self) -> list[Record]:
        return list(self.commitments)

    def get_events(self) -> list[Record]:
        return list(self.events)

    def get_savings_ledger(self) -> list[Record]:
        return list(self.savings_goals)

    def get_categories(self) -> list[Record]:
        return list(self.categories)


class JsonPlanStore:
    """Plan store persisted as a single JSON document keyed by ``YYYY-MM``."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Record]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            return {}
        return data

    def _save(self, plans: dict[str, Record]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(plans, handle, indent=2, sort_keys=True)

    def get_plan(self, period: pd.Period) -> Record | None:
        with self._lock:
            return self._load().get(str(to_period(period)))

    def create_plan(self, payload: Record) -> Record:
        key = str(to_period(payload["period"]))
        with self._lock:
            plans = self._load()
            if key in plans:
                raise ValueError(f"Plan for {key} already exists")
            plans[key] = payload
            self._save(plans)
        logger.info(f"Created plan for {key} in {self.path}")
        return payload

    def replace_plan(self, period: pd.Period, payload: Record) -> Record:
        key = str(to_period(period))
        with self._lock:
            plans = self._load()
            if key not in plans:
                raise KeyError(f"No plan for {key} to replace")
            plans[key] = {**payload, "period": key}
            self._save(plans)
        logger.info(f"Replaced plan for {key} in {self.path}")
        return plans[key]
