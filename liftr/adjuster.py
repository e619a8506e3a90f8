"""
Adaptive adjustment of future planned weights.

The propagator works in two separate steps so callers can put a user
confirmation in between:

1. ``evaluate`` turns a completed session's reps into a Decision (pure)
2. ``apply`` / ``apply_decision`` rewrites future sessions and returns the
   weight changes for the caller to persist

Week advancement runs independently of the adjustment decision whenever a
session is marked completed.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from liftr.errors import InvalidInput
from liftr.evaluator import (
    Adjustment,
    PerformanceTier,
    completion_percentage,
    evaluate_performance,
)
from liftr.plan_schemas import PlannedSession, PlanStatus, TrainingPlan
from liftr.schemas import AdjustmentMode, AdjustmentPolicy, ExerciseOverride, Methodology
from liftr.units import round_to_increment


class AdjustmentState(str, Enum):
    """Where a decision ended up."""

    NOT_NEEDED = "not_needed"  # Continue as planned
    SUPPRESSED = "suppressed"  # Mode is never
    DEFERRED = "deferred"  # Waiting for the caller to confirm
    APPLIED = "applied"
    DECLINED = "declined"  # Caller kept the original plan


class AdjustmentChoice(str, Enum):
    """Caller's answer to a prompted decision."""

    ACCEPT = "accept"
    KEEP = "keep"
    MANUAL = "manual"


class Decision(BaseModel):
    """Evaluation of one completed exercise session."""

    session_id: str
    exercise_name: str
    week_number: int = Field(..., ge=1)
    planned_reps: int = Field(..., ge=0)
    completed_reps: int = Field(..., ge=0)
    percentage: Optional[float] = Field(None, description="None when no reps were planned")
    adjustment: Adjustment
    mode: AdjustmentMode
    will_apply_automatically: bool

    @property
    def tier(self) -> PerformanceTier:
        return self.adjustment.tier

    @property
    def requires_confirmation(self) -> bool:
        return self.mode == AdjustmentMode.PROMPT and self.adjustment.is_change


class WeightChange(BaseModel):
    """A planned-weight rewrite for the caller to write back."""

    session_id: str
    week_number: int
    old_weight: float
    new_weight: float


class AdjustmentResult(BaseModel):
    """Everything that happened when a session was completed."""

    decision: Decision
    state: AdjustmentState
    changes: List[WeightChange] = Field(default_factory=list)
    week_advanced: bool = False
    current_week: int
    plan_completed: bool = False


class AdjustmentPropagator:
    """
    Decides and applies weight corrections across a plan's future sessions.

    The policy is passed in explicitly; the propagator never looks up
    settings on its own. Per-exercise overrides replace the global
    thresholds for the exercises they name.
    """

    def __init__(
        self,
        policy: AdjustmentPolicy,
        overrides: Optional[List[ExerciseOverride]] = None,
    ):
        """
        Initialize the propagator.

        Args:
            policy: Thresholds, percentages, mode and rounding increment
            overrides: Optional per-exercise policy overrides
        """
        self.policy = policy
        self.overrides = overrides or []

    def policy_for(self, exercise_name: str) -> AdjustmentPolicy:
        if not self.overrides:
            return self.policy
        return self.policy.for_exercise(exercise_name, self.overrides)

    # ------------------------------------------------------------------
    # Evaluate
    # ------------------------------------------------------------------

    def evaluate(self, plan: TrainingPlan, session_id: str) -> Decision:
        """
        Evaluate a session's logged sets.

        Args:
            plan: Plan containing the session
            session_id: Session whose sets carry actual reps

        Returns:
            Decision with the tier and whether it applies automatically
        """
        session = plan.get_session(session_id)
        plan.check_week(session.week_number)
        policy = self.policy_for(session.exercise_name)

        planned = session.total_planned_reps
        completed = session.total_completed_reps
        adjustment = evaluate_performance(planned, completed, policy)

        return Decision(
            session_id=session.id,
            exercise_name=session.exercise_name,
            week_number=session.week_number,
            planned_reps=planned,
            completed_reps=completed,
            percentage=completion_percentage(planned, completed),
            adjustment=adjustment,
            mode=policy.mode,
            will_apply_automatically=(
                policy.mode == AdjustmentMode.AUTO_ADJUST and adjustment.is_change
            ),
        )

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def apply(
        self, plan: TrainingPlan, session_id: str, adjustment: Adjustment
    ) -> List[WeightChange]:
        """
        Rewrite future sessions of the same exercise.

        - Repeat weight: next week's sessions take this session's weight
        - Reduce by: every later week is multiplied by (1 - percent/100)
        - Deload: next week's sessions take this weight x (1 - percent/100)

        Weights are rounded to the policy's increment. Completed sessions and
        weeks up to the session's own week are never touched. When there is
        no next week this is a no-op.

        Args:
            plan: Plan to mutate in place
            session_id: The just-completed session
            adjustment: Tier to apply (evaluated or manual)

        Returns:
            List of WeightChange, one per rewritten session
        """
        session = plan.get_session(session_id)
        week = plan.check_week(session.week_number)
        policy = self.policy_for(session.exercise_name)
        increment = policy.rounding_increment

        if adjustment.tier == PerformanceTier.CONTINUE_AS_PLANNED:
            return []

        if adjustment.tier in (PerformanceTier.REDUCE_BY, PerformanceTier.DELOAD):
            if adjustment.percent is None:
                raise InvalidInput(f"{adjustment.tier.value} needs a percentage")
            multiplier = 1.0 - adjustment.percent / 100.0

        changes = []
        for future in self._future_sessions(plan, session):
            if adjustment.tier == PerformanceTier.REPEAT_WEIGHT:
                if future.week_number != week + 1:
                    continue
                new_weight = round_to_increment(session.planned_weight, increment)
            elif adjustment.tier == PerformanceTier.REDUCE_BY:
                new_weight = round_to_increment(future.planned_weight * multiplier, increment)
            else:
                if future.week_number != week + 1:
                    continue
                new_weight = round_to_increment(session.planned_weight * multiplier, increment)

            changes.append(self._rewrite(future, max(new_weight, 0.0), increment))
        return changes

    def apply_decision(
        self,
        plan: TrainingPlan,
        decision: Decision,
        choice: AdjustmentChoice = AdjustmentChoice.ACCEPT,
        manual: Optional[Adjustment] = None,
    ) -> List[WeightChange]:
        """
        Apply a previously evaluated decision without re-running evaluation.

        Args:
            plan: Plan to mutate
            decision: Result of ``evaluate``
            choice: Accept the recommendation, keep the plan, or apply ``manual``
            manual: Adjustment chosen by the user when choice is MANUAL

        Returns:
            Weight changes made (empty when nothing applies)
        """
        if decision.mode == AdjustmentMode.NEVER:
            return []
        if choice == AdjustmentChoice.KEEP:
            return []
        if choice == AdjustmentChoice.MANUAL:
            if manual is None:
                raise InvalidInput("A manual adjustment is required when choosing MANUAL")
            return self.apply(plan, decision.session_id, manual)
        return self.apply(plan, decision.session_id, decision.adjustment)

    def _future_sessions(self, plan: TrainingPlan, session: PlannedSession) -> List[PlannedSession]:
        """
        Pending sessions after ``session``'s week that follow the same progression.

        In linear A/B every appearance of a lift shares one progression, so the
        match is by exercise name. In the weekly methodologies each day has its
        own weight for the lift, so the match is by exercise slot.
        """
        if plan.methodology == Methodology.LINEAR_AB:
            field, value = "exercise_name", session.exercise_name
        else:
            field, value = "slot_id", session.slot_id
        return [
            s
            for s in plan.sessions
            if s.week_number > session.week_number
            and not s.completed
            and getattr(s, field) == value
        ]

    @staticmethod
    def _rewrite(session: PlannedSession, new_weight: float, increment: float) -> WeightChange:
        change = WeightChange(
            session_id=session.id,
            week_number=session.week_number,
            old_weight=session.planned_weight,
            new_weight=new_weight,
        )
        session.planned_weight = new_weight
        for set_record in session.sets:
            if set_record.percent_of_top == 1.0:
                set_record.target_weight = new_weight
            else:
                set_record.target_weight = round_to_increment(
                    new_weight * set_record.percent_of_top, increment
                )
        return change

    # ------------------------------------------------------------------
    # Completion and week advancement
    # ------------------------------------------------------------------

    def complete_session(
        self, plan: TrainingPlan, session_id: str, completed_at: datetime
    ) -> bool:
        """
        Mark one exercise session completed and advance the week if it was the last.

        Returns:
            True if the plan's current week advanced
        """
        session = plan.get_session(session_id)
        self._mark_completed(session, completed_at)
        return advance_week_if_complete(plan)

    def complete_workout(
        self, plan: TrainingPlan, session_number: int, completed_at: datetime
    ) -> bool:
        """
        Mark every exercise session of a workout instance completed.

        Returns:
            True if the plan's current week advanced
        """
        sessions = plan.sessions_for_workout(session_number)
        if not sessions:
            raise InvalidInput(f"Unknown workout number: {session_number}")
        for session in sessions:
            self._mark_completed(session, completed_at)
        return advance_week_if_complete(plan)

    @staticmethod
    def _mark_completed(session: PlannedSession, completed_at: datetime) -> None:
        session.completed = True
        session.completed_at = completed_at
        session.paused = False

    def process_completion(
        self, plan: TrainingPlan, session_id: str, completed_at: datetime
    ) -> AdjustmentResult:
        """
        Evaluate, complete, and (in auto mode) adjust in one call.

        In prompt mode a non-continue tier is left DEFERRED; the caller later
        passes the returned decision to ``apply_decision``.

        Args:
            plan: Plan to mutate
            session_id: Session that was just logged
            completed_at: Completion timestamp supplied by the caller

        Returns:
            AdjustmentResult with the decision, changes and week status
        """
        decision = self.evaluate(plan, session_id)
        week_advanced = self.complete_session(plan, session_id, completed_at)

        changes: List[WeightChange] = []
        if not decision.adjustment.is_change:
            state = AdjustmentState.NOT_NEEDED
        elif decision.mode == AdjustmentMode.NEVER:
            state = AdjustmentState.SUPPRESSED
        elif decision.will_apply_automatically:
            changes = self.apply(plan, session_id, decision.adjustment)
            state = AdjustmentState.APPLIED
        else:
            state = AdjustmentState.DEFERRED

        return AdjustmentResult(
            decision=decision,
            state=state,
            changes=changes,
            week_advanced=week_advanced,
            current_week=plan.current_week,
            plan_completed=plan.status == PlanStatus.COMPLETED,
        )


def manual_adjustment(tier: PerformanceTier, percent: Optional[float] = None) -> Adjustment:
    """Build an adjustment the user picked instead of the recommendation."""
    tier = PerformanceTier(tier)
    if tier in (PerformanceTier.REDUCE_BY, PerformanceTier.DELOAD) and percent is None:
        raise InvalidInput(f"{tier.value} needs a percentage")
    if tier in (PerformanceTier.CONTINUE_AS_PLANNED, PerformanceTier.REPEAT_WEIGHT):
        percent = None
    return Adjustment(tier=tier, percent=percent)


def week_completion(plan: TrainingPlan, week: int) -> Dict[int, bool]:
    """Map each workout instance of ``week`` to whether all its exercises are done."""
    workouts: Dict[int, bool] = {}
    for session in plan.sessions_for_week(week):
        workouts[session.session_number] = (
            workouts.get(session.session_number, True) and session.completed
        )
    return workouts


def advance_week_if_complete(plan: TrainingPlan) -> bool:
    """
    Move the current week forward past every fully completed week.

    Only the current week gates the pointer: while it is complete and not
    the last week, the pointer steps on. Weeks finished out of order are
    skipped over once the weeks before them are done. The pointer never
    passes total_weeks; when the final week completes the plan is marked
    completed instead.

    Args:
        plan: Plan to mutate

    Returns:
        True if current_week was incremented
    """
    advanced = False
    while _week_is_complete(plan, plan.current_week):
        if plan.current_week < plan.total_weeks:
            plan.current_week += 1
            advanced = True
            continue
        plan.status = PlanStatus.COMPLETED
        break
    return advanced


def _week_is_complete(plan: TrainingPlan, week: int) -> bool:
    workouts = week_completion(plan, week)
    return bool(workouts) and all(workouts.values())


def pause_session(plan: TrainingPlan, session_id: str) -> PlannedSession:
    """
    Mark a pending session paused so it can be resumed later.

    Completing the session clears the flag.

    Raises:
        InvalidInput: If the session is already completed
    """
    session = plan.get_session(session_id)
    if session.completed:
        raise InvalidInput(f"Session {session_id} is already completed")
    session.paused = True
    return session


def pause_plan(plan: TrainingPlan) -> None:
    """Put an active plan on hold."""
    if plan.status == PlanStatus.COMPLETED:
        raise InvalidInput(f"Plan {plan.id} is completed and cannot be paused")
    plan.status = PlanStatus.PAUSED


def resume_plan(plan: TrainingPlan) -> None:
    if plan.status == PlanStatus.COMPLETED:
        raise InvalidInput(f"Plan {plan.id} is completed and cannot be resumed")
    plan.status = PlanStatus.ACTIVE
