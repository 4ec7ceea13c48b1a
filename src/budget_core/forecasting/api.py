"""Public API for the budget forecasting engine.

This module provides the two entry points used by the application:

- forecast_plan: fetch history, aggregate it and forecast next month's plan
- apply_forecast_plan: hand a plan to the plan store (create or replace)

forecast_plan does NOT write anything. History fetches run concurrently and
fail fast: the first collaborator error aborts the run and is re-raised
unmodified, so no partial plan is ever produced.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any

import pandas as pd

from budget_core.exceptions import ForecastCancelledError, NoHistoryError
from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.data.preparation import MonthlyHistory, aggregate_history
from budget_core.forecasting.plan import RegressionFactory, assemble_plan
from budget_core.forecasting.types import BudgetPlan, ForecastResult, ModelDebugInfo
from budget_core.periods import to_period
from budget_core.sources import BudgetDataSource, PlanStore, Record

logger = logging.getLogger(__name__)

FORECAST_NOTE = (
    "Forecast: best-of baselines + ARX (trend, month, lags), "
    "clamped at +20% of trailing 12 months, rounded."
)

# Snapshot field -> data source method
SOURCE_METHODS = {
    "expenses": "get_expenses",
    "commitments": "get_commitments",
    "events": "get_events",
    "savings_ledger": "get_savings_ledger",
    "categories": "get_categories",
}


class CancellationToken:
    """Thread-safe cancellation flag passed down to the point before any write."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str = "") -> None:
        if self._event.is_set():
            raise ForecastCancelledError(f"Cancelled{f' before {stage}' if stage else ''}")


def _check(cancel_token: CancellationToken | None, stage: str) -> None:
    if cancel_token is not None:
        cancel_token.raise_if_cancelled(stage)


@dataclass(frozen=True)
class SourceSnapshot:
    """Immutable snapshot of every collaborator's records for one run."""

    expenses: list[Record] = field(default_factory=list)
    commitments: list[Record] = field(default_factory=list)
    events: list[Record] = field(default_factory=list)
    savings_ledger: list[Record] = field(default_factory=list)
    categories: list[Record] = field(default_factory=list)


@dataclass
class PlanForecast:
    """Result of forecast_plan.

    Attributes:
        plan: Forecast budget plan for the next period.
        metrics: Summary with the note, periods and per-target selection details.
        rows: Monthly series used for training (top-level targets, then categories).
        history: The aggregated history the forecast was built from.
        results: ForecastResult per target.
        debug: Optional nested debug info, debug[target][model_name] = ModelDebugInfo.
            Only populated when forecast_plan is called with debug=True.
    """

    plan: BudgetPlan
    metrics: dict[str, Any]
    rows: list[pd.Series]
    history: MonthlyHistory
    results: dict[str, ForecastResult] = field(default_factory=dict)
    debug: dict[str, dict[str, ModelDebugInfo]] | None = None

    @property
    def period(self) -> pd.Period:
        return self.plan.period


def fetch_sources(
    source: BudgetDataSource,
    cancel_token: CancellationToken | None = None,
    timeout: float | None = None,
) -> SourceSnapshot:
    """Fetch all collaborator data concurrently.

    Args:
        source: Read-only data source.
        cancel_token: Optional cancellation token, checked before and after.
        timeout: Seconds to wait for all fetches (default: no limit).

    Returns:
        SourceSnapshot with every collection.

    Raises:
        ForecastCancelledError: If cancelled.
        TimeoutError: If the fetches do not finish within ``timeout``.
        Exception: The first collaborator failure, unmodified. Pending fetches
            are cancelled.
    """
    _check(cancel_token, "fetching history")

    pool = ThreadPoolExecutor(max_workers=len(SOURCE_METHODS), thread_name_prefix="fetch")
    try:
        futures = {
            name: pool.submit(getattr(source, method)) for name, method in SOURCE_METHODS.items()
        }
        done, pending = wait(futures.values(), timeout=timeout, return_when=FIRST_EXCEPTION)
        for name, future in futures.items():
            if future in done and future.exception() is not None:
                logger.error(f"Fetching {name} failed: {future.exception()}")
                for other in pending:
                    other.cancel()
                raise future.exception()  # type: ignore[misc]
        if pending:
            for other in pending:
                other.cancel()
            raise TimeoutError(f"Fetching history timed out after {timeout}s")
        data = {name: list(future.result() or []) for name, future in futures.items()}
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    _check(cancel_token, "aggregating history")
    logger.debug(
        "Fetched " + ", ".join(f"{len(records)} {name}" for name, records in data.items())
    )
    return SourceSnapshot(**data)


def forecast_plan(
    source: BudgetDataSource,
    months_back: int | None = None,
    next_period: str | pd.Period | None = None,
    config: ForecastConfig | None = None,
    as_of: date | datetime | pd.Timestamp | None = None,
    cancel_token: CancellationToken | None = None,
    regression_factory: RegressionFactory | None = None,
    debug: bool = False,
) -> PlanForecast:
    """Forecast next month's budget plan from the user's history.

    This function:
    - does NOT persist the plan (see apply_forecast_plan),
    - fetches all history collaborators concurrently and fails fast,
    - MAY log progress via the logging module.

    Args:
        source: Read-only data source for expenses, commitments, events,
            savings ledgers and categories.
        months_back: Lookback window in months; overrides config.months_back.
        next_period: Month to plan for ("YYYY-MM" or Period). Defaults to the
            month after the last history month.
        config: ForecastConfig. If None, uses defaults.
        as_of: Reference date for the window (default: today).
        cancel_token: Optional cancellation token.
        regression_factory: Optional builder for the regression candidate.
        debug: If True, collects model debug info into PlanForecast.debug.

    Returns:
        PlanForecast with the plan, metrics and training rows.

    Raises:
        NoHistoryError: If the aggregated history is empty.
        ForecastCancelledError: If cancelled before completion.
    """
    if config is None:
        config = ForecastConfig()
    if months_back is not None:
        config = replace(config, months_back=months_back)

    snapshot = fetch_sources(source, cancel_token)
    history = aggregate_history(
        snapshot.expenses,
        snapshot.commitments,
        snapshot.events,
        snapshot.savings_ledger,
        snapshot.categories,
        config=config,
        as_of=as_of,
    )
    if history.is_empty:
        raise NoHistoryError("No historical rows to train on.")

    period = to_period(next_period) if next_period is not None else history.last_period + 1

    _check(cancel_token, "forecasting")
    debug_info: dict[str, dict[str, ModelDebugInfo]] | None = {} if debug else None
    plan, results = assemble_plan(
        history, period, config=config, regression_factory=regression_factory, debug=debug_info
    )
    _check(cancel_token, "returning the plan")

    metrics: dict[str, Any] = {
        "note": FORECAST_NOTE,
        "next_period": str(period),
        "months_back": config.months_back,
        "last_history_period": str(history.last_period),
        "targets": {target: result.to_dict() for target, result in results.items()},
    }

    logger.info(
        f"Plan for {period}: savings={plan.savings}, commitments={plan.commitments}, "
        f"events={plan.events}, dtd={plan.dtd_amount} ({len(plan.sub_budgets)} categories)"
    )

    return PlanForecast(
        plan=plan,
        metrics=metrics,
        rows=history.rows(),
        history=history,
        results=results,
        debug=debug_info,
    )


def apply_forecast_plan(
    period: str | pd.Period,
    plan: BudgetPlan | Record,
    store: PlanStore,
    cancel_token: CancellationToken | None = None,
) -> BudgetPlan:
    """Persist a forecast plan: replace the period's plan if present, else create it.

    Cancellation is checked before any store call. Once the write has been
    issued the operation is not rolled back; store failures propagate.

    Args:
        period: Month the plan is for.
        plan: BudgetPlan or a payload in the plan store's wire format.
        store: Plan persistence collaborator.
        cancel_token: Optional cancellation token.

    Returns:
        The plan as stored.
    """
    period = to_period(period)
    payload = plan.to_payload() if isinstance(plan, BudgetPlan) else dict(plan)
    payload["period"] = str(period)

    _check(cancel_token, "reading the existing plan")
    existing = store.get_plan(period)

    _check(cancel_token, "writing the plan")
    if existing:
        logger.info(f"Replacing existing plan for {period}")
        stored = store.replace_plan(period, payload)
    else:
        logger.info(f"Creating plan for {period}")
        stored = store.create_plan(payload)

    return BudgetPlan.from_payload(stored or payload)
