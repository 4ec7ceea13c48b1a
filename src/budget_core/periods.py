"""Calendar-month helpers shared by aggregation and forecasting.

Periods are ``pandas.Period`` objects with monthly frequency. They are totally
ordered and support integer arithmetic (``period + 1`` is the next month).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

import pandas as pd

from budget_core.exceptions import ConfigError

MONTHLY = "M"


def to_period(value: str | date | datetime | pd.Period | pd.Timestamp) -> pd.Period:
    """Coerce a period-like value to a monthly ``pd.Period``.

    Args:
        value: A ``"YYYY-MM"`` string, a date/datetime/Timestamp, or a Period.

    Returns:
        Monthly Period containing the value.

    Raises:
        ConfigError: If the value cannot be interpreted as a month.

    Examples:
        >>> to_period("2025-03")
        Period('2025-03', 'M')
    """
    if isinstance(value, pd.Period):
        return value.asfreq(MONTHLY)
    try:
        return pd.Period(value, freq=MONTHLY)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"Invalid period {value!r}: {e}") from e


def last_complete_month(as_of: date | datetime | pd.Timestamp | None = None) -> pd.Period:
    """Return the last fully elapsed month before ``as_of`` (default: today)."""
    if as_of is None:
        as_of = date.today()
    return pd.Period(as_of, freq=MONTHLY) - 1


def month_window(end: pd.Period, months: int) -> pd.PeriodIndex:
    """Contiguous ascending window of ``months`` periods ending at ``end``."""
    if months <= 0:
        return pd.PeriodIndex([], freq=MONTHLY)
    return pd.period_range(end=end, periods=months, freq=MONTHLY)


def parse_timestamp(value: Any) -> pd.Timestamp | None:
    """Parse a record date field, returning None when missing or unparseable.

    Timezone-aware values are converted to UTC and made naive so that all
    records share one calendar.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if ts is None or pd.isna(ts):
        return None
    return ts.tz_convert(None)


def effective_period(*candidates: Any) -> pd.Period | None:
    """Month of the first present value in a fallback chain of date fields.

    Only the first non-missing candidate is considered: a present but
    unparseable primary date excludes the record rather than silently falling
    through to a less precise field.

    Args:
        *candidates: Raw date values in priority order.

    Returns:
        Monthly Period, or None if no candidate is present or the chosen one
        cannot be parsed.
    """
    for value in candidates:
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        ts = parse_timestamp(value)
        if ts is None:
            return None
        return ts.to_period(MONTHLY)
    return None
