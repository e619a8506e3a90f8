"""
Data schemas for generated training plans.

This module contains Pydantic models for representing a strength program:
training days with their exercise slots, and a flat list of planned sessions
with nested set targets. Sessions reference their day and slot by id instead
of holding back-references, so a plan serializes as a plain tree.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from liftr.errors import InvalidInput, WeekOutOfRange
from liftr.schemas import Methodology, ProgressionStyle


class DayRole(str, Enum):
    """Role a training day plays within its methodology."""

    A = "a"
    B = "b"
    VOLUME = "volume"
    RECOVERY = "recovery"
    LIGHT = "light"
    INTENSITY = "intensity"
    PROGRESSION = "progression"


class PlanStatus(str, Enum):
    """Lifecycle of a training plan."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class SetKind(str, Enum):
    """How a set relates to the session's planned (top-set) weight."""

    WORK = "work"  # Straight set at the planned weight
    RAMP = "ramp"  # Ascending warm-up ladder ending at the top set
    HEAVY = "heavy"  # Above the top set (e.g. 1x3 @ 105%)
    BACKOFF = "backoff"  # Below the top set after it (e.g. 1x8 @ 80%)


class ExerciseSlot(BaseModel):
    """
    One exercise prescribed on a training day.

    Starting weight is the week 1 weight of the exercise's progressing
    reference (intensity day / top set); day-role percentages are applied by
    the weight formulas, not baked into the slot.
    """

    id: str = Field(..., min_length=1)
    exercise_name: str = Field(..., min_length=1, description="Exercise identity")
    order_index: int = Field(..., ge=0, description="Position within the day")
    starting_weight: float = Field(..., gt=0, description="Week 1 reference weight")
    target_sets: int = Field(..., ge=1, le=20)
    target_reps: int = Field(..., ge=1, le=50)
    increment: float = Field(5.0, ge=0, description="Weight added per progression step")
    is_anchor: bool = Field(
        False, description="Lift whose light/recovery weight derives from the same week's heavier day"
    )
    progression_style: Optional[ProgressionStyle] = Field(
        None, description="Week pattern of a single-lift progression"
    )
    rounding_increment: Optional[float] = Field(
        None, gt=0, description="Rounding of generated weights in a single-lift progression"
    )
    notes: Optional[str] = None


class TrainingDay(BaseModel):
    """A workout template that repeats through the plan."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, description="Display name, e.g. 'Workout A'")
    day_number: int = Field(..., ge=1)
    role: DayRole
    slots: List[ExerciseSlot] = Field(..., min_length=1)

    @field_validator("slots")
    @classmethod
    def validate_slot_order(cls, v: List[ExerciseSlot]) -> List[ExerciseSlot]:
        """Slots are kept in ascending order_index."""
        return sorted(v, key=lambda s: s.order_index)


class SetRecord(BaseModel):
    """A single set target, filled in with actuals as the session is logged."""

    id: str = Field(..., min_length=1)
    set_number: int = Field(..., ge=1)
    kind: SetKind = SetKind.WORK
    target_reps: int = Field(..., ge=1)
    target_weight: float = Field(..., ge=0)
    percent_of_top: float = Field(
        1.0, gt=0, description="Fraction of the session's planned weight this set uses"
    )
    actual_reps: Optional[int] = Field(None, ge=0)
    actual_weight: Optional[float] = Field(None, ge=0)
    rpe: Optional[float] = Field(None, ge=1.0, le=10.0, description="Rate of perceived exertion")
    completed: bool = False


class PlannedSession(BaseModel):
    """
    One exercise performed in one workout instance.

    A workout instance (``session_number``) holds one PlannedSession per slot
    of its training day.
    """

    id: str = Field(..., min_length=1)
    plan_id: str = Field(..., min_length=1)
    day_id: str = Field(..., min_length=1)
    slot_id: str = Field(..., min_length=1)
    exercise_name: str = Field(..., min_length=1)
    week_number: int = Field(..., ge=1)
    session_number: int = Field(..., ge=1, description="Running workout counter across the plan")
    scheduled_date: date
    planned_weight: float = Field(..., ge=0, description="Working or top-set weight")
    planned_sets: int = Field(..., ge=1)
    planned_reps: int = Field(..., ge=1)
    completed: bool = False
    completed_at: Optional[datetime] = None
    paused: bool = False
    sets: List[SetRecord] = Field(default_factory=list)
    notes: Optional[str] = None

    @property
    def total_planned_reps(self) -> int:
        if self.sets:
            return sum(s.target_reps for s in self.sets)
        return self.planned_sets * self.planned_reps

    @property
    def total_completed_reps(self) -> int:
        return sum(s.actual_reps or 0 for s in self.sets)

    @property
    def performance_percentage(self) -> float:
        planned = self.total_planned_reps
        if planned == 0:
            return 0.0
        return self.total_completed_reps / planned * 100


class PlanDecision(BaseModel):
    """
    Documents a specific decision made during plan generation.

    Used to explain why the schedule looks the way it does.
    """

    decision_point: str = Field(..., min_length=5, description="The decision that was made")
    input_factors: List[str] = Field(
        ..., min_length=1, description="Factors that influenced this decision"
    )
    reasoning: str = Field(
        ..., min_length=20, description="Explanation of why this decision was made"
    )
    outcome: str = Field(
        ..., min_length=10, description="The resulting choice or action taken"
    )


class TrainingPlan(BaseModel):
    """
    Complete multi-week strength program.

    Days and sessions are stored as flat collections keyed by id; the lookup
    helpers below stand in for parent/child navigation.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    methodology: Methodology
    total_weeks: int = Field(..., ge=1, le=52, description="Total duration of the plan in weeks")
    current_week: int = Field(1, ge=1, description="1-indexed week the lifter is on")
    status: PlanStatus = PlanStatus.ACTIVE
    start_date: date
    days: List[TrainingDay] = Field(..., min_length=1)
    sessions: List[PlannedSession] = Field(default_factory=list)
    plan_decisions: List[PlanDecision] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, description="Set by the caller when the plan is stored")
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_current_week(self):
        """Current week must stay within the plan."""
        if self.current_week > self.total_weeks:
            raise ValueError(
                f"current_week ({self.current_week}) cannot exceed total_weeks ({self.total_weeks})"
            )
        return self

    @property
    def progress_percentage(self) -> float:
        return self.current_week / self.total_weeks * 100

    def check_week(self, week: int) -> int:
        """Return ``week`` unchanged or raise WeekOutOfRange."""
        if week < 1 or week > self.total_weeks:
            raise WeekOutOfRange(week, self.total_weeks)
        return week

    def get_day(self, day_id: str) -> TrainingDay:
        for day in self.days:
            if day.id == day_id:
                return day
        raise InvalidInput(f"Unknown training day id: {day_id}")

    def get_slot(self, slot_id: str) -> ExerciseSlot:
        for day in self.days:
            for slot in day.slots:
                if slot.id == slot_id:
                    return slot
        raise InvalidInput(f"Unknown exercise slot id: {slot_id}")

    def get_session(self, session_id: str) -> PlannedSession:
        for session in self.sessions:
            if session.id == session_id:
                return session
        raise InvalidInput(f"Unknown session id: {session_id}")

    def sessions_for_week(self, week: int) -> List[PlannedSession]:
        self.check_week(week)
        return [s for s in self.sessions if s.week_number == week]

    def sessions_for_workout(self, session_number: int) -> List[PlannedSession]:
        """All exercise sessions performed in one workout instance."""
        return [s for s in self.sessions if s.session_number == session_number]

    def sessions_for_exercise(self, exercise_name: str) -> List[PlannedSession]:
        return [s for s in self.sessions if s.exercise_name == exercise_name]

    def sessions_per_week(self, week: int = 1) -> int:
        """Number of workout instances scheduled in a week."""
        return len({s.session_number for s in self.sessions_for_week(week)})

    def next_workout(self) -> List[PlannedSession]:
        """Exercise sessions of the earliest workout instance not yet completed."""
        pending = sorted(
            {s.session_number for s in self.sessions if not s.completed}
        )
        if not pending:
            return []
        return self.sessions_for_workout(pending[0])
