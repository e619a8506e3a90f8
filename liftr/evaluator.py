"""
Performance evaluation for completed sessions.

Turns planned vs. completed rep totals into a performance tier using the
thresholds of an AdjustmentPolicy, and checks policies for the threshold
ordering the tiers depend on.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from liftr.errors import InvalidInput
from liftr.schemas import AdjustmentPolicy


class PerformanceTier(str, Enum):
    """Outcome of a session, best first."""

    CONTINUE_AS_PLANNED = "continue_as_planned"
    REPEAT_WEIGHT = "repeat_weight"
    REDUCE_BY = "reduce_by"
    DELOAD = "deload"

    @property
    def rank(self) -> int:
        """Higher is better: continue (3) > repeat (2) > reduce (1) > deload (0)."""
        return {
            PerformanceTier.CONTINUE_AS_PLANNED: 3,
            PerformanceTier.REPEAT_WEIGHT: 2,
            PerformanceTier.REDUCE_BY: 1,
            PerformanceTier.DELOAD: 0,
        }[self]


class Adjustment(BaseModel):
    """A performance tier plus the percentage it carries, if any."""

    tier: PerformanceTier
    percent: Optional[float] = Field(
        None, ge=0.0, le=100.0, description="Reduction or deload percentage"
    )

    @property
    def is_change(self) -> bool:
        return self.tier != PerformanceTier.CONTINUE_AS_PLANNED

    @property
    def message(self) -> str:
        if self.tier == PerformanceTier.CONTINUE_AS_PLANNED:
            return "Great work! Continue with your planned progression."
        if self.tier == PerformanceTier.REPEAT_WEIGHT:
            return "You completed most reps but not all. Repeat this weight next session."
        if self.tier == PerformanceTier.REDUCE_BY:
            return f"Performance below target. Reduce future weights by {self.percent:.1f}%?"
        return f"Significant performance drop. Deload by {self.percent:.1f}% for recovery?"

    @classmethod
    def continue_as_planned(cls) -> "Adjustment":
        return cls(tier=PerformanceTier.CONTINUE_AS_PLANNED)

    @classmethod
    def repeat_weight(cls) -> "Adjustment":
        return cls(tier=PerformanceTier.REPEAT_WEIGHT)

    @classmethod
    def reduce_by(cls, percent: float) -> "Adjustment":
        return cls(tier=PerformanceTier.REDUCE_BY, percent=percent)

    @classmethod
    def deload(cls, percent: float) -> "Adjustment":
        return cls(tier=PerformanceTier.DELOAD, percent=percent)


def completion_percentage(planned_reps: int, completed_reps: int) -> Optional[float]:
    """Completed reps as a percentage of planned reps, or None when nothing was planned."""
    if planned_reps < 0 or completed_reps < 0:
        raise InvalidInput(
            f"Rep counts cannot be negative (planned={planned_reps}, completed={completed_reps})"
        )
    if planned_reps == 0:
        return None
    return completed_reps / planned_reps * 100


def tier_for_percentage(percentage: float, policy: AdjustmentPolicy) -> Adjustment:
    """
    Map a completion percentage onto a tier.

    Thresholds are checked top to bottom (excellent, good, adjustment) so a
    misordered policy still produces a deterministic answer.
    """
    if percentage >= policy.excellent_threshold:
        return Adjustment.continue_as_planned()
    if percentage >= policy.good_threshold:
        return Adjustment.repeat_weight()
    if percentage >= policy.adjustment_threshold:
        return Adjustment.reduce_by(policy.reduction_percent)
    return Adjustment.deload(policy.deload_percent)


def evaluate_performance(
    planned_reps: int, completed_reps: int, policy: AdjustmentPolicy
) -> Adjustment:
    """
    Evaluate a session's rep totals against the policy.

    Args:
        planned_reps: Total reps prescribed across the session's sets
        completed_reps: Total reps actually performed
        policy: Thresholds and percentages to apply

    Returns:
        Adjustment for the session; continue-as-planned when no reps were planned
    """
    percentage = completion_percentage(planned_reps, completed_reps)
    if percentage is None:
        return Adjustment.continue_as_planned()
    return tier_for_percentage(percentage, policy)


class PolicyValidationResult(BaseModel):
    """Outcome of checking an adjustment policy before use."""

    approved: bool
    warnings: List[str] = Field(default_factory=list)


def validate_policy(policy: AdjustmentPolicy) -> PolicyValidationResult:
    """
    Check the policy's thresholds are ordered excellent >= good >= adjustment.

    Checks every rule even if one fails so the caller sees the full picture.
    """
    warnings = []
    if policy.excellent_threshold < policy.good_threshold:
        warnings.append(
            f"Excellent threshold ({policy.excellent_threshold:g}%) is below the good "
            f"threshold ({policy.good_threshold:g}%); repeat-weight can never trigger"
        )
    if policy.good_threshold < policy.adjustment_threshold:
        warnings.append(
            f"Good threshold ({policy.good_threshold:g}%) is below the adjustment "
            f"threshold ({policy.adjustment_threshold:g}%); reductions can never trigger"
        )
    if policy.deload_percent < policy.reduction_percent:
        warnings.append(
            f"Deload percent ({policy.deload_percent:g}%) is smaller than the reduction "
            f"percent ({policy.reduction_percent:g}%)"
        )
    ordered = (
        policy.excellent_threshold >= policy.good_threshold >= policy.adjustment_threshold
    )
    return PolicyValidationResult(approved=ordered, warnings=warnings)


def ensure_valid_policy(policy: AdjustmentPolicy) -> AdjustmentPolicy:
    """Return the policy unchanged or raise InvalidInput if its thresholds are misordered."""
    result = validate_policy(policy)
    if not result.approved:
        raise InvalidInput("Invalid adjustment policy: " + "; ".join(result.warnings))
    return policy
