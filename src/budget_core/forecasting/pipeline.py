"""CLI wrapper for the budget forecasting engine.

This module provides a command-line interface for running forecasts.
All core forecasting logic is in budget_core.forecasting.api.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from budget_core.forecasting.api import apply_forecast_plan, forecast_plan
from budget_core.forecasting.config import MONTHS_BACK, ForecastConfig
from budget_core.forecasting.data.loaders import load_export
from budget_core.forecasting.formatters.console import format_plan_for_console
from budget_core.sources import JsonPlanStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Forecast next month's budget plan.")
    parser.add_argument(
        "--file",
        type=str,
        required=True,
        help="Path to a JSON export with expenses, commitments, events, savingsGoals, categories.",
    )
    parser.add_argument(
        "--months-back",
        type=int,
        default=MONTHS_BACK,
        help=f"Number of fully elapsed months to train on (default: {MONTHS_BACK})",
    )
    parser.add_argument(
        "--period",
        type=str,
        help="Month to plan for as YYYY-MM (default: month after the last history month)",
    )
    parser.add_argument(
        "--as-of",
        type=str,
        help="Reference date YYYY-MM-DD for the history window (default: today)",
    )
    parser.add_argument(
        "--apply",
        type=str,
        metavar="PLAN_JSON",
        help="Write the plan into this JSON plan store (create or replace)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker threads for per-series forecasting (default: 1)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point for the forecasting pipeline.

    Parses command-line arguments, loads the export, runs the forecast and
    optionally applies the plan to a JSON plan store.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("Budget Forecasting Pipeline")
    print("=" * 60)

    try:
        print("\n[1/3] Loading export...")
        source = load_export(Path(args.file))
        print(
            f"[OK] Loaded {len(source.expenses)} expenses, {len(source.commitments)} commitments, "
            f"{len(source.events)} events, {len(source.savings_goals)} savings goals"
        )

        print(f"\n[2/3] Forecasting from {args.months_back} months of history...")
        config = ForecastConfig(months_back=args.months_back, max_workers=args.workers)
        as_of = pd.Timestamp(args.as_of) if args.as_of else None
        result = forecast_plan(source, next_period=args.period, config=config, as_of=as_of)

        print("\n" + format_plan_for_console(result))

        print("\n[3/3] Applying plan...")
        if args.apply:
            store = JsonPlanStore(Path(args.apply))
            apply_forecast_plan(result.period, result.plan, store)
            print(f"[OK] Plan for {result.period} written to {args.apply}")
        else:
            print("[INFO] --apply not given, plan not persisted")

        print("\n[OK] Pipeline completed successfully")

    except Exception as e:
        print(f"\n[ERROR] Pipeline failed: {e}")
        raise


if __name__ == "__main__":
    main()
