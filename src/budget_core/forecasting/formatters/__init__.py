"""Output formatting utilities."""

from budget_core.forecasting.formatters.console import format_plan_for_console, sanitize_for_console

__all__ = ["format_plan_for_console", "sanitize_for_console"]
