"""Example: Forecasting next month's budget plan

This example shows how to forecast a budget plan from a user's history and
how to persist it into a plan store.

The forecast compares median, moving-average and seasonal baselines with an
ARX regression per series, then clamps and rounds the winner.

Prerequisites:
- A JSON export with expenses, commitments, events, savingsGoals and
  categories (see budget_core.forecasting.data.loaders.load_export)
"""

from datetime import date
from pathlib import Path

import pandas as pd

from budget_core.forecasting import ForecastConfig, apply_forecast_plan, forecast_plan
from budget_core.forecasting.data import load_export
from budget_core.forecasting.formatters import format_plan_for_console
from budget_core.sources import JsonPlanStore, StaticDataSource

# Example 1: Forecast from an exported history
# Modify this path to point to your own export
export_file = Path("data/export.json")

print("=" * 80)
print("Example 1: Forecasting from an Export")
print("=" * 80)

if export_file.exists():
    print(f"\nLoading export from: {export_file}")
    source = load_export(export_file)
    print(f"Loaded {len(source.expenses)} expenses across {len(source.categories)} categories")

    result = forecast_plan(source, config=ForecastConfig(months_back=12))
    print("\n" + format_plan_for_console(result))

    # Persist the plan (creates it, or replaces an existing plan for the month)
    store = JsonPlanStore(Path("data/plans.json"))
    apply_forecast_plan(result.period, result.plan, store)
    print(f"\nSaved plan for {result.period} to: {store.path}")

else:
    print(f"\nExport not found: {export_file}")
    print("Using synthetic data for demonstration instead...")
    print()

# Example 2: Synthetic history with a seasonal category
print("\n" + "=" * 80)
print("Example 2: Synthetic History")
print("=" * 80)

months = pd.period_range("2024-01", "2024-12", freq="M")
expenses = []
events = []
for i, month in enumerate(months):
    expenses.append(
        {"date": f"{month}-03", "amountMinorUnits": 1_800_000, "categoryId": "rent", "categoryName": "Rent"}
    )
    expenses.append(
        {"date": f"{month}-12", "amountMinorUnits": 420_000 + 5_000 * i, "categoryId": "food", "categoryName": "Groceries"}
    )
    # Heating costs peak in winter
    heating = 250_000 if month.month in (1, 2, 12) else 60_000
    expenses.append({"date": f"{month}-20", "amountMinorUnits": heating, "categoryId": "heat", "categoryName": "Heating"})
    if month.month in (6, 12):
        events.append({"at": f"{month}-15", "spentMinorUnits": 900_000})

source = StaticDataSource(
    expenses=expenses,
    commitments=[
        {"dueDate": f"{month}-05", "status": "paid", "amountMinorUnits": 350_000} for month in months
    ],
    events=events,
    savings_goals=[
        {
            "goalId": "holiday",
            "entries": [
                {"at": f"{month}-01", "kind": "fund", "amountMinorUnits": 200_000} for month in months
            ],
        }
    ],
)

print("\nRunning forecast (debug info enabled)...")
result = forecast_plan(source, as_of=date(2025, 1, 10), debug=True)

print("\n" + format_plan_for_console(result))

print("\nSelection per series:")
for target, summary in result.metrics["targets"].items():
    errors = ", ".join(f"{c['method']}={c['backtest_error']:.3f}" for c in summary["candidates"])
    print(f"  {target:<12} {summary['method']:<16} {errors}")

print("\nPlan payload:")
print(result.plan.to_payload())
