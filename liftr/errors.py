"""
Typed failures raised by the training load engine.

Every error subclasses ValueError so callers that already guard plan
generation with ``except ValueError`` keep working.
"""

from typing import Optional


class LoadEngineError(ValueError):
    """Base class for all engine failures."""


class InvalidInput(LoadEngineError):
    """Raised for negative/zero weights, bad week counts or bad configuration."""


class NoFeasibleConfiguration(LoadEngineError):
    """Raised when the plate optimizer cannot place a single plate."""

    def __init__(self, target_weight: float, bar_weight: float, message: Optional[str] = None):
        self.target_weight = target_weight
        self.bar_weight = bar_weight
        super().__init__(
            message
            or f"No plate configuration reaches {target_weight:g} on a {bar_weight:g} bar "
            "with the available inventory"
        )


class WeekOutOfRange(LoadEngineError):
    """Raised when an operation targets a week outside [1, total_weeks]."""

    def __init__(self, week: int, total_weeks: Optional[int] = None):
        self.week = week
        self.total_weeks = total_weeks
        if total_weeks is None:
            message = f"Week {week} is out of range (weeks start at 1)"
        else:
            message = f"Week {week} is out of range [1, {total_weeks}]"
        super().__init__(message)
