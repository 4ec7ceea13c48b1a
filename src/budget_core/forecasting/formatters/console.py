"""Console output formatting utilities."""

from __future__ import annotations

import re

from budget_core.forecasting.api import PlanForecast


def sanitize_for_console(text: str) -> str:
    """Remove non-ASCII characters so output is safe on cp1252 consoles.

    Args:
        text: Text that may contain emojis or accented category names.

    Returns:
        Sanitized text safe for console output
    """
    return re.sub(r"[^\x00-\x7F]+", "", text)


def format_amount(minor: int) -> str:
    """Minor units as a major-unit string with thousands separators."""
    return f"{minor / 100:,.2f}"


def format_plan_for_console(result: PlanForecast) -> str:
    """Build a human-readable summary of a forecast plan.

    Args:
        result: PlanForecast returned by forecast_plan

    Returns:
        Human-readable text string for console output
    """
    plan = result.plan
    lines = []
    lines.append(f"Budget Forecast - {plan.period}")
    lines.append("=" * 60)
    lines.append("")

    top_level = [
        ("Savings", "savings", plan.savings),
        ("Commitments", "commitments", plan.commitments),
        ("Events", "events", plan.events),
    ]
    for label, target, amount in top_level:
        forecast = result.results.get(target)
        method = f" [{forecast.chosen_method}{', blended' if forecast.blended else ''}]" if forecast else ""
        lines.append(f"{label:<14}{format_amount(amount):>18}{method}")

    lines.append(f"{'Day-to-day':<14}{format_amount(plan.dtd_amount):>18}")
    for sub in plan.sub_budgets:
        forecast = result.results.get(sub.category_id)
        method = f" [{forecast.chosen_method}]" if forecast else ""
        name = sanitize_for_console(sub.name) or sub.category_id
        lines.append(f"  {name:<22}{format_amount(sub.amount):>16}{method}")

    lines.append("-" * 60)
    lines.append(f"{'Total':<14}{format_amount(plan.total):>18}")
    lines.append("")
    lines.append(
        f"Trained on {len(result.history.periods)} months up to "
        f"{result.metrics.get('last_history_period', '-')}"
    )

    return "\n".join(lines)
