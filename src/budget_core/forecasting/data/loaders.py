"""Data loading utilities for the forecasting CLI."""

from __future__ import annotations

import json
from pathlib import Path

from budget_core.sources import StaticDataSource

# Export key -> accepted aliases
EXPORT_KEYS = {
    "expenses": ("expenses",),
    "commitments": ("commitments",),
    "events": ("events",),
    "savings_goals": ("savingsGoals", "savings_goals", "savings"),
    "categories": ("categories",),
}


def load_export(json_path: Path) -> StaticDataSource:
    """Load a JSON export of the user's records into a data source.

    The export is an object with ``expenses``, ``commitments``, ``events``,
    ``savingsGoals`` and ``categories`` lists; missing keys are empty.

    Args:
        json_path: Path to the export file.

    Returns:
        StaticDataSource serving the exported records.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a JSON object.
    """
    if not json_path.exists():
        raise FileNotFoundError(f"Export not found at {json_path}")

    with json_path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {json_path}, got {type(data).__name__}")

    collections = {}
    for field_name, aliases in EXPORT_KEYS.items():
        records = next((data[key] for key in aliases if key in data), None) or []
        collections[field_name] = [r for r in records if isinstance(r, dict)]

    return StaticDataSource(**collections)
