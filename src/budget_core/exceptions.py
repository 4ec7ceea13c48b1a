"""Domain-specific exceptions for Budget Core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from BudgetCoreError for easy catching.
"""


class BudgetCoreError(Exception):
    """Base exception for all Budget Core errors.

    Users can catch this exception to handle any error raised by the
    forecasting engine itself. Failures raised by data-source or plan-store
    collaborators are not wrapped and propagate with their original type.
    """

    pass


class ConfigError(BudgetCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided (e.g. months_back < 1)
    - A period string cannot be parsed
    """

    pass


class DataQualityError(BudgetCoreError):
    """Raised when the supplied history cannot be used for forecasting."""

    pass


class NoHistoryError(DataQualityError):
    """Raised when the aggregated history has no rows to train on."""

    pass


class ForecastCancelledError(BudgetCoreError):
    """Raised when a forecast or plan application is cancelled by the caller.

    Cancellation is honoured up to the point where a plan is handed to the
    plan store. Once a write has been issued it is not rolled back.
    """

    pass
