"""Tests for monthly history aggregation."""

from datetime import date

import pandas as pd

from budget_core.forecasting.config import ForecastConfig
from budget_core.forecasting.data.preparation import (
    TARGETS,
    aggregate_history,
    event_spend,
    minor_units,
)

# Window for these tests: 2025-01 .. 2025-06
AS_OF = date(2025, 7, 10)
CONFIG = ForecastConfig(months_back=6)


def P(value: str) -> pd.Period:
    return pd.Period(value, freq="M")


def _aggregate(**kwargs):
    records = {
        "expenses": [],
        "commitments": [],
        "events": [],
        "savings_ledger": [],
        "categories": [],
    }
    records.update(kwargs)
    config = records.pop("config", CONFIG)
    return aggregate_history(config=config, as_of=AS_OF, **records)


def test_window_is_zero_filled() -> None:
    """Test that the window has months_back rows ending at the last complete month."""
    history = _aggregate(commitments=[{"dueDate": "2025-03-01", "amountMinorUnits": 1000}])

    assert list(history.periods) == list(pd.period_range("2025-01", "2025-06", freq="M"))
    assert list(history.totals.columns) == list(TARGETS)
    assert history.totals["commitments"].tolist() == [0, 0, 1000, 0, 0, 0]
    assert history.totals["savings"].sum() == 0
    assert all(dtype == "int64" for dtype in history.totals.dtypes)


def test_expenses_grouped_by_category_and_month() -> None:
    """Test day-to-day totals per category id and month."""
    expenses = [
        {"date": "2025-01-10", "amountMinorUnits": 1000, "categoryId": "food"},
        {"date": "2025-01-20", "amountMinorUnits": 500, "categoryId": "food"},
        {"date": "2025-03-01", "amountMinorUnits": 700, "categoryId": "bus", "categoryName": "Transport"},
        {"date": "not a date", "amountMinorUnits": 9999, "categoryId": "food"},
        {"date": "2024-12-31", "amountMinorUnits": 9999, "categoryId": "food"},
    ]
    history = _aggregate(expenses=expenses)

    assert history.dtd.loc[P("2025-01"), "food"] == 1500
    assert history.dtd.loc[P("2025-03"), "bus"] == 700
    assert history.dtd["food"].sum() == 1500
    assert history.record_count == 3


def test_category_fallback_keys() -> None:
    """Test nested category references and the unknown bucket."""
    expenses = [
        {"date": "2025-02-01", "amountMinorUnits": 100, "category": {"_id": "c9"}},
        {"date": "2025-02-02", "amountMinorUnits": 200},
    ]
    history = _aggregate(expenses=expenses)

    assert history.dtd.loc[P("2025-02"), "c9"] == 100
    assert history.dtd.loc[P("2025-02"), "unknown"] == 200


def test_catalog_categories_included_when_inactive() -> None:
    """Test that catalog categories get a zero series to keep sub-budgets stable."""
    history = _aggregate(
        expenses=[{"date": "2025-02-01", "amountMinorUnits": 100, "categoryId": "food"}],
        categories=[{"id": "gym", "name": "Gym"}, {"_id": "food", "name": "Groceries"}],
    )

    assert list(history.dtd.columns) == ["food", "gym"]
    assert history.dtd["gym"].tolist() == [0] * 6
    assert history.category_name("gym") == "Gym"
    assert history.category_name("food") == "Groceries"


def test_category_names_fall_back_to_latest_expense() -> None:
    """Test that names come from the catalog, else the most recent expense."""
    expenses = [
        {"date": "2025-01-01", "amountMinorUnits": 1, "categoryId": "bus", "categoryName": "Bus"},
        {"date": "2025-04-01", "amountMinorUnits": 1, "categoryId": "bus", "categoryName": "Transport"},
        {"date": "2025-02-01", "amountMinorUnits": 1, "categoryId": "misc"},
    ]
    history = _aggregate(expenses=expenses)

    assert history.category_name("bus") == "Transport"
    assert history.category_name("misc") == "Category"


def test_savings_net_flow_and_clamp() -> None:
    """Test fund minus withdraw per month with and without the zero clamp."""
    goals = [
        {
            "goalId": "g1",
            "entries": [
                {"at": "2025-02-03", "kind": "fund", "amountMinorUnits": 5000},
                {"at": "2025-02-15", "kind": "withdraw", "amountMinorUnits": 2000},
                {"at": "2025-03-01", "kind": "withdraw", "amountMinorUnits": 3000},
            ],
        },
        {"goalId": "g2", "ledger": [{"date": "2025-02-20", "kind": "fund", "amountCents": 1000}]},
        {"goalId": "g3", "entries": None},
    ]

    clamped = _aggregate(savings_ledger=goals)
    assert clamped.totals.loc[P("2025-02"), "savings"] == 4000
    assert clamped.totals.loc[P("2025-03"), "savings"] == 0

    raw = _aggregate(savings_ledger=goals, config=ForecastConfig(months_back=6, savings_clamp_zero=False))
    assert raw.totals.loc[P("2025-03"), "savings"] == -3000


def test_commitments_use_paid_date_when_paid() -> None:
    """Test that paid commitments count in the month paid, others when due."""
    commitments = [
        {"dueDate": "2025-02-28", "paidAt": "2025-03-02", "amountMinorUnits": 100},
        {"dueDate": "2025-04-10", "status": "pending", "amountMinorUnits": 200},
        {"dueDate": "2025-05-10", "status": "paid", "amountMinorUnits": 400},
    ]
    history = _aggregate(commitments=commitments)

    assert history.totals["commitments"].tolist() == [0, 0, 100, 200, 400, 0]


def test_event_spend_preference_order() -> None:
    """Test explicit spend, then sub-item spend, then the flat amount."""
    assert event_spend({"spentMinorUnits": 300, "amountMinorUnits": 999}) == 300
    assert event_spend({"subItems": [{"spentMinorUnits": 100}, {"spentCents": 50}]}) == 150
    assert event_spend({"amountMinorUnits": 70}) == 70
    assert event_spend({}) == 0


def test_events_use_date_fallbacks() -> None:
    """Test that events are dated by at/date, then dates.end, then dates.due."""
    events = [
        {"date": "2025-01-05", "spentMinorUnits": 10},
        {"dates": {"end": "2025-02-05", "due": "2025-06-01"}, "amountMinorUnits": 20},
        {"dates": {"due": "2025-06-01"}, "subItems": [{"spentMinorUnits": 30}]},
        {"amountMinorUnits": 999},
    ]
    history = _aggregate(events=events)

    assert history.totals["events"].tolist() == [10, 20, 0, 0, 0, 30]


def test_minor_units_non_numeric_is_zero() -> None:
    """Test that bad amounts count as zero instead of raising."""
    assert minor_units({"amountMinorUnits": "abc"}) == 0
    assert minor_units({"amountMinorUnits": "1250"}) == 1250
    assert minor_units({"amountCents": 99.6}) == 100
    assert minor_units({}) == 0


def test_minor_units_non_finite_is_zero() -> None:
    """Test that infinite or NaN amounts count as zero instead of raising."""
    assert minor_units({"amountMinorUnits": "Infinity"}) == 0
    assert minor_units({"amountMinorUnits": float("-inf")}) == 0
    assert minor_units({"amountCents": float("nan")}) == 0


def test_event_spend_non_finite_is_zero() -> None:
    """Test that a NaN or infinite spend does not break event aggregation."""
    assert event_spend({"spentMinorUnits": float("nan")}) == 0
    assert event_spend({"spentCents": float("inf")}) == 0
    assert event_spend({"subItems": [{"spentMinorUnits": float("inf")}, {"spentMinorUnits": 40}]}) == 40


def test_non_finite_amounts_aggregate() -> None:
    """Test that a whole aggregation survives non-finite amounts."""
    history = _aggregate(
        events=[
            {"date": "2025-02-01", "spentMinorUnits": float("nan")},
            {"date": "2025-02-02", "spentMinorUnits": 70},
        ],
        commitments=[{"dueDate": "2025-03-01", "amountMinorUnits": "Infinity"}],
    )

    assert history.totals["events"].sum() == 70
    assert history.totals["commitments"].sum() == 0
    assert history.record_count == 3


def test_empty_history() -> None:
    """Test that no records in the window marks the history empty."""
    history = _aggregate(expenses=[{"date": "2020-01-01", "amountMinorUnits": 5, "categoryId": "x"}])

    assert history.is_empty
    assert len(history.periods) == 6


def test_rows_cover_every_series() -> None:
    """Test that rows() returns top-level targets then categories, all full length."""
    history = _aggregate(
        expenses=[{"date": "2025-02-01", "amountMinorUnits": 100, "categoryId": "food"}],
        categories=[{"id": "gym", "name": "Gym"}],
    )
    rows = history.rows()

    assert [row.name for row in rows] == ["savings", "commitments", "events", "food", "gym"]
    assert all(len(row) == 6 for row in rows)
    assert all(isinstance(row.index, pd.PeriodIndex) for row in rows)


def test_series_returns_copy() -> None:
    """Test that callers cannot mutate the aggregated history through series()."""
    history = _aggregate(commitments=[{"dueDate": "2025-03-01", "amountMinorUnits": 1000}])
    series = history.series("commitments")
    series.iloc[:] = 0

    assert history.totals["commitments"].sum() == 1000
