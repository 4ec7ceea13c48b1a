"""Budget plan assembly.

Forecasts the three top-level modules (savings, commitments, events) and the
selected day-to-day categories, then combines them into a BudgetPlan.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

import pandas as pd

from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.data.preparation import MonthlyHistory
from budget_core.forecasting.policies import round_to_unit
from budget_core.forecasting.selection import RegressionCandidate, forecast_target
from budget_core.forecasting.types import BudgetPlan, ForecastResult, ModelDebugInfo, SubBudget

logger = logging.getLogger(__name__)

RENT_METHOD = "rent_last_value"

# Builds a regression candidate for one series: (use_log, config) -> model
RegressionFactory = Callable[[bool, ForecastConfig], RegressionCandidate]


@dataclass(frozen=True)
class SeriesTask:
    """One independent forecasting job."""

    target: str
    series: pd.Series
    use_log: bool
    fixed_last_value: bool = False


def select_categories(dtd: pd.DataFrame, fallback_count: int = 8) -> list[str]:
    """Categories to budget for: positive window totals, else the top spenders.

    Args:
        dtd: Per-category monthly amounts, one column per category id.
        fallback_count: Number of categories kept when none has positive spend.

    Returns:
        Category ids in column order (or by descending total for the fallback).
    """
    if len(dtd.columns) == 0:
        return []
    totals = dtd.sum(axis=0)
    positive = [str(cid) for cid, total in totals.items() if total > 0]
    if positive:
        return positive
    logger.warning(
        f"No category has positive spend in the window, keeping top {fallback_count} by total"
    )
    ranked = totals.sort_values(ascending=False, kind="stable")
    return [str(cid) for cid in ranked.index[:fallback_count]]


def is_fixed_rent(name: str, keyword: str) -> bool:
    return keyword.lower() in (name or "").lower()


def build_tasks(history: MonthlyHistory, config: ForecastConfig) -> list[SeriesTask]:
    """Forecasting jobs for every target, each with its own series copy."""
    tasks = [
        SeriesTask("savings", history.series("savings"), use_log=False),
        SeriesTask("commitments", history.series("commitments"), use_log=False),
        SeriesTask("events", history.series("events"), use_log=config.events_use_log),
    ]
    for category_id in select_categories(history.dtd, config.fallback_category_count):
        tasks.append(
            SeriesTask(
                category_id,
                history.dtd_series(category_id),
                use_log=config.dtd_use_log,
                fixed_last_value=is_fixed_rent(history.category_name(category_id), config.rent_keyword),
            )
        )
    return tasks


def run_task(
    task: SeriesTask,
    next_period: pd.Period,
    config: ForecastConfig,
    regression_factory: RegressionFactory | None = None,
    debug: dict[str, ModelDebugInfo] | None = None,
) -> ForecastResult:
    """Forecast one series; fixed-rent categories keep their last value."""
    if task.fixed_last_value:
        last = int(task.series.iloc[-1]) if len(task.series) else 0
        value = round_to_unit(last, config.rounding_unit)
        logger.debug(f"{task.target}: fixed rent, last value {last} -> {value}")
        return ForecastResult(
            target=task.target, period=next_period, value=value, chosen_method=RENT_METHOD
        )

    regression = regression_factory(task.use_log, config) if regression_factory else None
    return forecast_target(
        task.series,
        next_period,
        config=config,
        use_log=task.use_log,
        regression=regression,
        target=task.target,
        debug=debug,
    )


def assemble_plan(
    history: MonthlyHistory,
    next_period: pd.Period,
    config: ForecastConfig | None = None,
    regression_factory: RegressionFactory | None = None,
    debug: dict[str, dict[str, ModelDebugInfo]] | None = None,
) -> tuple[BudgetPlan, dict[str, ForecastResult]]:
    """Forecast every target and combine the results into a BudgetPlan.

    Series are independent; with ``config.max_workers > 1`` they are
    forecast on a thread pool. Results keep task order either way.

    Args:
        history: Aggregated monthly history.
        next_period: Month the plan is for.
        config: ForecastConfig. If None, uses defaults.
        regression_factory: Optional builder for the regression candidate.
        debug: If given, receives debug info as debug[target][model_name].

    Returns:
        Tuple of (plan, results keyed by target).
    """
    if config is None:
        config = ForecastConfig()

    tasks = build_tasks(history, config)
    debug_slots: list[dict[str, ModelDebugInfo] | None] = [
        {} if debug is not None else None for _ in tasks
    ]

    logger.info(
        f"Forecasting {len(tasks)} series for {next_period} "
        f"({len(tasks) - 3} categories, {config.max_workers} worker(s))"
    )

    if config.max_workers > 1 and len(tasks) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            futures = [
                pool.submit(run_task, task, next_period, config, regression_factory, slot)
                for task, slot in zip(tasks, debug_slots)
            ]
            results = [future.result() for future in futures]
    else:
        results = [
            run_task(task, next_period, config, regression_factory, slot)
            for task, slot in zip(tasks, debug_slots)
        ]

    by_target = {result.target: result for result in results}
    if debug is not None:
        for task, slot in zip(tasks, debug_slots):
            if slot:
                debug[task.target] = slot

    sub_budgets = tuple(
        SubBudget(
            category_id=task.target,
            name=history.category_name(task.target),
            amount=result.value,
        )
        for task, result in zip(tasks[3:], results[3:])
    )
    plan = BudgetPlan(
        period=next_period,
        savings=results[0].value,
        commitments=results[1].value,
        events=results[2].value,
        sub_budgets=sub_budgets,
    )

    for result in results:
        logger.info(
            f"{result.target}: {result.value} via {result.chosen_method}"
            + (" (blended)" if result.blended else "")
        )

    return plan, by_target
