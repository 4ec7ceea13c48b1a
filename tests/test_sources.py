"""Tests for data sources, the JSON plan store and export loading."""

import json

import pandas as pd
import pytest

from budget_core.forecasting.data.loaders import load_export
from budget_core.sources import JsonPlanStore, StaticDataSource

PERIOD = pd.Period("2025-01", freq="M")


def test_static_source_returns_copies() -> None:
    """Test that callers cannot mutate the source through returned lists."""
    source = StaticDataSource(expenses=[{"amountMinorUnits": 1}])
    source.get_expenses().clear()

    assert len(source.get_expenses()) == 1
    assert source.get_savings_ledger() == []


def test_json_plan_store_create_and_replace(tmp_path) -> None:
    """Test create, read back and replace of a plan."""
    store = JsonPlanStore(tmp_path / "plans.json")
    assert store.get_plan(PERIOD) is None

    store.create_plan({"period": "2025-01", "savings": {"amount": 10_000}})
    assert store.get_plan(PERIOD)["savings"]["amount"] == 10_000

    stored = store.replace_plan(PERIOD, {"period": "2025-01", "savings": {"amount": 20_000}})
    assert stored["savings"]["amount"] == 20_000
    assert json.loads((tmp_path / "plans.json").read_text())["2025-01"]["savings"]["amount"] == 20_000


def test_json_plan_store_conflicts(tmp_path) -> None:
    """Test duplicate creates and replacing a missing plan."""
    store = JsonPlanStore(tmp_path / "plans.json")
    store.create_plan({"period": "2025-01"})

    with pytest.raises(ValueError, match="already exists"):
        store.create_plan({"period": "2025-01"})
    with pytest.raises(KeyError):
        store.replace_plan(pd.Period("2025-02", freq="M"), {"period": "2025-02"})


def test_load_export_aliases(tmp_path) -> None:
    """Test export loading with the camelCase savings key and missing lists."""
    path = tmp_path / "export.json"
    path.write_text(
        json.dumps(
            {
                "expenses": [{"date": "2025-01-01", "amountMinorUnits": 5}, "junk"],
                "savingsGoals": [{"goalId": "g1", "entries": []}],
            }
        )
    )
    source = load_export(path)

    assert len(source.get_expenses()) == 1
    assert source.get_savings_ledger() == [{"goalId": "g1", "entries": []}]
    assert source.get_commitments() == []


def test_load_export_errors(tmp_path) -> None:
    """Test missing files and non-object exports."""
    with pytest.raises(FileNotFoundError):
        load_export(tmp_path / "missing.json")

    path = tmp_path / "list.json"
    path.write_text("[]")
    with pytest.raises(ValueError, match="JSON object"):
        load_export(path)
