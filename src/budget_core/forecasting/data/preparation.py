"""Data preparation utilities for budget forecasting.

This module turns raw, time-stamped financial records into fixed-cadence
monthly series suitable for forecasting models:

- savings: net ledger flow (fund minus withdraw)
- commitments: amounts paid (or due) per month
- events: event spend per month
- one day-to-day series per expense category

All amounts stay in integer minor units (cents) during aggregation. Missing
months are zero-filled, never skipped.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable

import pandas as pd

from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.types import CategorySeries
from budget_core.periods import effective_period, last_complete_month, month_window, parse_timestamp

logger = logging.getLogger(__name__)

TARGETS = ("savings", "commitments", "events")

AMOUNT_KEYS = ("amountMinorUnits", "amountCents")
SPENT_KEYS = ("spentMinorUnits", "spentCents")
UNKNOWN_CATEGORY = "unknown"
DEFAULT_CATEGORY_NAME = "Category"


@dataclass(frozen=True)
class MonthlyHistory:
    """Aggregated monthly history for every forecast target.

    Attributes:
        totals: DataFrame indexed by Period with columns savings, commitments, events.
        dtd: DataFrame indexed by Period with one column per category id.
        category_names: Display name for every dtd column.
        record_count: Number of records that fell inside the window.
    """

    totals: pd.DataFrame
    dtd: pd.DataFrame
    category_names: dict[str, str] = field(default_factory=dict)
    record_count: int = 0

    @property
    def periods(self) -> pd.PeriodIndex:
        return self.totals.index

    @property
    def last_period(self) -> pd.Period | None:
        return self.periods[-1] if len(self.periods) else None

    @property
    def is_empty(self) -> bool:
        """True when there is no window or no record landed inside it."""
        return len(self.periods) == 0 or self.record_count == 0

    def category_name(self, category_id: str) -> str:
        return self.category_names.get(category_id, DEFAULT_CATEGORY_NAME)

    def series(self, target: str) -> pd.Series:
        """Return a copy of one target's monthly series (minor units)."""
        if target in self.totals.columns:
            return self.totals[target].copy().rename(target)
        if target in self.dtd.columns:
            return self.dtd[target].copy().rename(target)
        raise KeyError(f"Unknown forecast target: {target!r}")

    def dtd_series(self, category_id: str) -> pd.Series:
        """Return a copy of one category's monthly series (minor units)."""
        return self.dtd[category_id].copy().rename(category_id)

    def category_series(self) -> list[CategorySeries]:
        return [
            CategorySeries(
                category_id=category_id,
                name=self.category_name(category_id),
                series=self.dtd_series(category_id),
            )
            for category_id in self.dtd.columns
        ]

    def rows(self) -> list[pd.Series]:
        """All series, top-level targets first, then categories."""
        return [self.series(target) for target in TARGETS] + [
            cs.series for cs in self.category_series()
        ]


def _lookup(record: dict[str, Any], path: str) -> Any:
    """Fetch a possibly dotted field (``"dates.end"``) from a record."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _whole_units(value: float) -> int:
    """Round to an int; NaN and infinities count as 0."""
    value = float(value)
    if not math.isfinite(value):
        return 0
    return int(round(value))


def minor_units(record: dict[str, Any], keys: Iterable[str] = AMOUNT_KEYS) -> int:
    """Amount in minor units from the first present key; non-numeric counts as 0."""
    for key in keys:
        raw = record.get(key)
        if raw is None:
            continue
        value = pd.to_numeric(raw, errors="coerce")
        if pd.isna(value):
            return 0
        return _whole_units(value)
    return 0


def event_spend(event: dict[str, Any]) -> int:
    """Spend of one event: explicit spent field, else sub-item spend, else flat amount."""
    for key in SPENT_KEYS:
        if _is_number(event.get(key)):
            return _whole_units(event[key])
    sub_items = event.get("subItems")
    if isinstance(sub_items, list):
        return sum(minor_units(item, SPENT_KEYS) for item in sub_items if isinstance(item, dict))
    return minor_units(event)


def expense_category_id(expense: dict[str, Any]) -> str:
    raw = expense.get("categoryId") or _lookup(expense, "category._id") or _lookup(
        expense, "category.id"
    )
    key = str(raw or "").strip()
    return key or UNKNOWN_CATEGORY


def commitment_period(commitment: dict[str, Any]) -> pd.Period | None:
    """Paid commitments count in the month paid, others in the month due."""
    paid = bool(commitment.get("paidAt")) or commitment.get("status") == "paid"
    primary = commitment.get("paidAt") if paid else commitment.get("dueDate")
    return effective_period(primary, commitment.get("dueDate"), commitment.get("createdAt"))


def event_period(event: dict[str, Any]) -> pd.Period | None:
    return effective_period(
        event.get("at"),
        event.get("date"),
        _lookup(event, "dates.end"),
        _lookup(event, "dates.due"),
        event.get("updatedAt"),
        event.get("createdAt"),
    )


def expense_period(expense: dict[str, Any]) -> pd.Period | None:
    return effective_period(expense.get("date"), expense.get("createdAt"), expense.get("updatedAt"))


def _monthly_sum(entries: list[tuple[pd.Period, int]], window: pd.PeriodIndex) -> pd.Series:
    """Sum (period, amount) pairs per month and zero-fill the window."""
    if not entries:
        return pd.Series(0, index=window, dtype="int64")
    frame = pd.DataFrame(entries, columns=["period", "amount"])
    totals = frame.groupby("period")["amount"].sum()
    return totals.reindex(window, fill_value=0).astype("int64")


def resolve_category_names(
    category_ids: Iterable[str],
    categories: list[dict[str, Any]],
    expenses: list[dict[str, Any]],
) -> dict[str, str]:
    """Resolve display names from the catalog, else the latest expense naming them.

    Args:
        category_ids: Category ids that need a name.
        categories: Catalog entries with ``id``/``_id`` and ``name``.
        expenses: Expense records, some carrying a ``categoryName``.

    Returns:
        Mapping of category id to display name ("Category" when unknown).
    """
    catalog: dict[str, str] = {}
    for category in categories or []:
        category_id = str(category.get("id") or category.get("_id") or "").strip()
        if category_id and category.get("name"):
            catalog[category_id] = str(category["name"])

    fallback: dict[str, tuple[pd.Timestamp, str]] = {}
    for expense in expenses or []:
        name = expense.get("categoryName")
        if not name:
            continue
        category_id = expense_category_id(expense)
        ts = parse_timestamp(expense.get("date")) or pd.Timestamp.min
        current = fallback.get(category_id)
        if current is None or ts >= current[0]:
            fallback[category_id] = (ts, str(name))

    names = {}
    for category_id in category_ids:
        if category_id in catalog:
            names[category_id] = catalog[category_id]
        elif category_id in fallback:
            names[category_id] = fallback[category_id][1]
        else:
            names[category_id] = DEFAULT_CATEGORY_NAME
    return names


def aggregate_history(
    expenses: list[dict[str, Any]],
    commitments: list[dict[str, Any]],
    events: list[dict[str, Any]],
    savings_ledger: list[dict[str, Any]],
    categories: list[dict[str, Any]],
    config: ForecastConfig | None = None,
    as_of: date | datetime | pd.Timestamp | None = None,
) -> MonthlyHistory:
    """Aggregate raw records into zero-filled monthly series.

    The window holds ``config.months_back`` months ending at the last fully
    elapsed month before ``as_of``. Records outside the window and records
    without a usable date are ignored.

    Args:
        expenses: Day-to-day expenses (``date``, amount, ``categoryId``).
        commitments: Commitments (``dueDate``, ``paidAt``, ``status``, amount).
        events: Events (``at``/``date``/``dates.end``/``dates.due``, spend).
        savings_ledger: Savings goals with ``entries`` of fund/withdraw rows.
        categories: Category catalog; listed categories always get a series.
        config: ForecastConfig. If None, uses defaults.
        as_of: Reference date (default: today).

    Returns:
        MonthlyHistory with int64 series in minor units.
    """
    if config is None:
        config = ForecastConfig()

    window = month_window(last_complete_month(as_of), config.months_back)
    in_window = set(window)
    record_count = 0
    skipped = 0

    # Savings (fund - withdraw)
    savings_entries: list[tuple[pd.Period, int]] = []
    for goal in savings_ledger or []:
        ledger = goal.get("entries")
        if ledger is None:
            ledger = goal.get("ledger")
        if not isinstance(ledger, list):
            continue
        for entry in ledger:
            period = effective_period(
                entry.get("at"), entry.get("date"), goal.get("updatedAt"), goal.get("createdAt")
            )
            if period is None:
                skipped += 1
                continue
            if period not in in_window:
                continue
            amount = minor_units(entry)
            savings_entries.append((period, -amount if entry.get("kind") == "withdraw" else amount))
    record_count += len(savings_entries)

    # Commitments
    commitment_entries: list[tuple[pd.Period, int]] = []
    for commitment in commitments or []:
        period = commitment_period(commitment)
        if period is None:
            skipped += 1
            continue
        if period in in_window:
            commitment_entries.append((period, minor_units(commitment)))
    record_count += len(commitment_entries)

    # Events
    event_entries: list[tuple[pd.Period, int]] = []
    for event in events or []:
        period = event_period(event)
        if period is None:
            skipped += 1
            continue
        if period in in_window:
            event_entries.append((period, event_spend(event)))
    record_count += len(event_entries)

    # Day-to-day
    dtd_entries: list[tuple[pd.Period, str, int]] = []
    for expense in expenses or []:
        period = expense_period(expense)
        if period is None:
            skipped += 1
            continue
        if period in in_window:
            dtd_entries.append((period, expense_category_id(expense), minor_units(expense)))
    record_count += len(dtd_entries)

    if skipped:
        logger.debug(f"Excluded {skipped} records with missing or unparseable dates")

    savings = _monthly_sum(savings_entries, window)
    if config.savings_clamp_zero:
        savings = savings.clip(lower=0)

    totals = pd.DataFrame(
        {
            "savings": savings,
            "commitments": _monthly_sum(commitment_entries, window),
            "events": _monthly_sum(event_entries, window),
        },
        index=window,
    ).astype("int64")
    totals.index.name = "period"

    catalog_ids = [
        str(c.get("id") or c.get("_id") or "").strip() for c in categories or []
    ]
    observed_ids = [category_id for _, category_id, _ in dtd_entries]
    columns = list(dict.fromkeys([*observed_ids, *(cid for cid in catalog_ids if cid)]))

    if dtd_entries:
        frame = pd.DataFrame(dtd_entries, columns=["period", "category_id", "amount"])
        dtd = (
            frame.groupby(["period", "category_id"])["amount"]
            .sum()
            .unstack(fill_value=0)
            .reindex(index=window, columns=columns, fill_value=0)
            .astype("int64")
        )
    else:
        dtd = pd.DataFrame(0, index=window, columns=columns, dtype="int64")
    dtd.index.name = "period"
    dtd.columns.name = None

    names = resolve_category_names(columns, categories, expenses)

    logger.info(
        f"Aggregated {record_count} records into {len(window)} months "
        f"({window[0] if len(window) else '-'} to {window[-1] if len(window) else '-'}), "
        f"{len(columns)} categories"
    )

    return MonthlyHistory(totals=totals, dtd=dtd, category_names=names, record_count=record_count)
