"""
Schedule generator for strength training programs.

This module creates complete multi-week programs based on:
- Methodology templates (linear A/B, volume/recovery/intensity, volume/light/intensity)
- Single-lift progressions from a current max toward a target max
- Starting weights and per-exercise increments
- A calendar placement rule (day offsets within each week)

Generation is deterministic: identical requests always produce identical
plans, including ids, so a plan can be recalculated and compared.
"""

import uuid
from collections import defaultdict
from datetime import timedelta
from typing import Dict, List, Tuple

from liftr.errors import InvalidInput
from liftr.formulas import (
    build_set_targets,
    planned_weight,
    progression_starting_weight,
    progression_weekly_increase,
    session_day_offsets,
)
from liftr.plan_schemas import (
    DayRole,
    ExerciseSlot,
    PlanDecision,
    PlannedSession,
    SetRecord,
    TrainingDay,
    TrainingPlan,
)
from liftr.schemas import (
    Methodology,
    ProgramRequest,
    ProgressionRequest,
    ProgressionStyle,
    StartingLift,
)
from liftr.templates import TEMPLATE_BUILDERS

LIFTR_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "liftr/training-load-engine")


def _stable_id(namespace: uuid.UUID, *parts) -> str:
    return str(uuid.uuid5(namespace, ":".join(str(p) for p in parts)))


def _weight(value: float) -> float:
    # Two decimals keeps ladder percentages like 0.69 x 187.5 free of float noise
    return round(value, 2)


class ScheduleGenerator:
    """
    Generates the full session schedule for a strength program.

    The generator:
    1. Builds the methodology's training days from the starting lifts
    2. Orders workout instances through the plan (alternating or weekly)
    3. Places each instance on the calendar using the day offsets
    4. Computes planned weights with the methodology's weight formula
    5. Derives set targets (straight, ramping, heavy and back-off sets)
    6. Documents all decisions for the plan's reasoning trail
    """

    def __init__(self, request: ProgramRequest):
        """
        Initialize the generator.

        Args:
            request: Validated program request

        Raises:
            InvalidInput: If the methodology's week layout does not fit the day offsets
        """
        self.request = request
        self.plan_decisions: List[PlanDecision] = []
        self._plan_namespace = uuid.uuid5(LIFTR_NAMESPACE, request.model_dump_json())

        if request.methodology not in TEMPLATE_BUILDERS:
            raise InvalidInput(
                f"{request.methodology.display_name} plans are built from a ProgressionRequest"
            )
        day_count = len(TEMPLATE_BUILDERS[request.methodology](request))
        if request.methodology != Methodology.LINEAR_AB and len(request.day_offsets) != day_count:
            raise InvalidInput(
                f"{request.methodology.display_name} schedules {day_count} sessions per week "
                f"but {len(request.day_offsets)} day offsets were given"
            )

    @property
    def plan_id(self) -> str:
        return str(self._plan_namespace)

    @property
    def sessions_per_week(self) -> int:
        return len(self.request.day_offsets)

    def generate(self) -> TrainingPlan:
        """
        Generate a complete training plan.

        Returns:
            TrainingPlan with every day, session and set target
        """
        self.plan_decisions = []
        days = self._build_days()
        schedule = self._build_schedule(days)
        sessions = self._build_sessions(days, schedule)

        self._document_generation(days, schedule)

        return TrainingPlan(
            id=self.plan_id,
            name=self.request.name,
            methodology=self.request.methodology,
            total_weeks=self.request.total_weeks,
            current_week=1,
            start_date=self.request.start_date,
            days=days,
            sessions=sessions,
            plan_decisions=self.plan_decisions,
        )

    def _build_days(self) -> List[TrainingDay]:
        """Turn template dictionaries into TrainingDays with stable ids."""
        days = []
        for day_number, template in enumerate(
            TEMPLATE_BUILDERS[self.request.methodology](self.request), start=1
        ):
            day_id = _stable_id(self._plan_namespace, "day", day_number)
            slots = [
                ExerciseSlot(
                    id=_stable_id(self._plan_namespace, "slot", day_number, order_index),
                    order_index=order_index,
                    **slot,
                )
                for order_index, slot in enumerate(template["slots"])
            ]
            days.append(
                TrainingDay(
                    id=day_id,
                    name=template["name"],
                    day_number=day_number,
                    role=DayRole(template["role"]),
                    slots=slots,
                )
            )
        return days

    def _build_schedule(self, days: List[TrainingDay]) -> List[Tuple[int, int, int, TrainingDay]]:
        """
        Order every workout instance in the plan.

        Linear A/B alternates days strictly across week boundaries (A, B, A /
        B, A, B ...). Weekly methodologies repeat their days in order each week;
        a single-lift progression repeats its one day.

        Returns:
            List of (session_number, week, index_in_week, day)
        """
        schedule = []
        session_number = 0
        for week in range(1, self.request.total_weeks + 1):
            for index_in_week in range(self.sessions_per_week):
                session_number += 1
                if self.request.methodology == Methodology.LINEAR_AB:
                    day = days[(session_number - 1) % len(days)]
                else:
                    day = days[index_in_week % len(days)]
                schedule.append((session_number, week, index_in_week, day))
        return schedule

    def _build_sessions(
        self,
        days: List[TrainingDay],
        schedule: List[Tuple[int, int, int, TrainingDay]],
    ) -> List[PlannedSession]:
        """Create one PlannedSession per slot of every scheduled workout instance."""
        sessions = []
        appearances: Dict[str, int] = defaultdict(int)

        for session_number, week, index_in_week, day in schedule:
            scheduled_date = self.request.start_date + timedelta(
                days=7 * (week - 1) + self.request.day_offsets[index_in_week]
            )
            for slot in day.slots:
                appearances[slot.exercise_name] += 1
                session_id = _stable_id(self._plan_namespace, "session", session_number, slot.id)
                weight = _weight(
                    planned_weight(
                        methodology=self.request.methodology,
                        day_role=day.role,
                        is_anchor=slot.is_anchor,
                        week=week,
                        appearance=appearances[slot.exercise_name],
                        starting_weight=slot.starting_weight,
                        increment=slot.increment,
                        progression_style=slot.progression_style,
                        rounding_increment=slot.rounding_increment,
                    )
                )
                sessions.append(
                    PlannedSession(
                        id=session_id,
                        plan_id=self.plan_id,
                        day_id=day.id,
                        slot_id=slot.id,
                        exercise_name=slot.exercise_name,
                        week_number=week,
                        session_number=session_number,
                        scheduled_date=scheduled_date,
                        planned_weight=weight,
                        planned_sets=slot.target_sets,
                        planned_reps=slot.target_reps,
                        sets=self._build_sets(session_id, day.role, slot, weight),
                    )
                )
        return sessions

    def _build_sets(
        self, session_id: str, day_role: DayRole, slot: ExerciseSlot, weight: float
    ) -> List[SetRecord]:
        """Expand a session's set targets into SetRecords."""
        targets = build_set_targets(
            methodology=self.request.methodology,
            day_role=day_role,
            is_anchor=slot.is_anchor,
            sets=slot.target_sets,
            reps=slot.target_reps,
        )
        return [
            SetRecord(
                id=_stable_id(uuid.UUID(session_id), "set", set_number),
                set_number=set_number,
                kind=target.kind,
                target_reps=target.reps,
                target_weight=_weight(weight * target.percent),
                percent_of_top=target.percent,
            )
            for set_number, target in enumerate(targets, start=1)
        ]

    def _document_generation(
        self,
        days: List[TrainingDay],
        schedule: List[Tuple[int, int, int, TrainingDay]],
    ) -> None:
        """Record the progression, calendar and volume decisions."""
        self._document_progression(days)
        self._document_schedule(schedule)

    def _document_progression(self, days: List[TrainingDay]) -> None:
        methodology = self.request.methodology
        if methodology == Methodology.LINEAR_AB:
            progression = (
                "Weights rise by each exercise's increment on every appearance. "
                "Lifts in both workouts progress every session, lifts in one workout every other session."
            )
        elif methodology == Methodology.VOLUME_RECOVERY_INTENSITY:
            progression = (
                "Intensity day progresses weekly from its starting weight. Volume day runs at 90% of "
                "the same week's intensity weight; the anchor lift's recovery day is 80% of volume."
            )
        else:
            progression = (
                "Top sets progress weekly. The anchor lift's light day is 75% of the volume top set; "
                "sets ramp up to the top set and intensity day adds a heavy triple and a back-off set."
            )

        self.plan_decisions.append(
            PlanDecision(
                decision_point="Progression Rule",
                input_factors=[
                    f"methodology={methodology.value}",
                    *(
                        f"{lift.exercise_name}={lift.starting_weight:g}+{lift.increment:g}"
                        for lift in self.request.lifts.values()
                    ),
                ],
                reasoning=progression,
                outcome=f"{methodology.display_name} progression across {len(days)} training days",
            )
        )

    def _document_schedule(self, schedule: List[Tuple[int, int, int, TrainingDay]]) -> None:
        offsets = self.request.day_offsets
        self.plan_decisions.append(
            PlanDecision(
                decision_point="Calendar Placement",
                input_factors=[
                    f"start_date={self.request.start_date.isoformat()}",
                    f"day_offsets={offsets}",
                ],
                reasoning=(
                    f"Sessions fall {self.sessions_per_week} times per week on fixed offsets from the "
                    "start of each week, leaving rest days between sessions."
                ),
                outcome=", ".join(
                    (self.request.start_date + timedelta(days=o)).strftime("%A") for o in offsets
                )
                + " of every week",
            )
        )

        self.plan_decisions.append(
            PlanDecision(
                decision_point="Session Count",
                input_factors=[
                    f"total_weeks={self.request.total_weeks}",
                    f"sessions_per_week={self.sessions_per_week}",
                ],
                reasoning=(
                    "Every week receives the full session cadence regardless of how the day "
                    "templates divide into it."
                ),
                outcome=f"{len(schedule)} workouts over {self.request.total_weeks} weeks",
            )
        )


class ProgressionGenerator(ScheduleGenerator):
    """
    Generates a single-lift progression toward a target max.

    One training day holding the lift repeats ``sessions_per_week`` times a
    week, spaced ``7 // sessions_per_week`` days apart. Every session of a
    week shares that week's weight.
    """

    def __init__(self, request: ProgressionRequest):
        """
        Initialize the generator.

        Args:
            request: Validated progression request

        Raises:
            InvalidInput: If the starting weight rounds to zero
        """
        self.progression = request
        increment = request.rounding_increment
        self.starting_weight = progression_starting_weight(request.current_max, increment)
        self.weekly_increase = progression_weekly_increase(
            request.current_max, request.target_max, request.total_weeks, increment
        )
        self.request = ProgramRequest(
            name=request.plan_name,
            methodology=Methodology.SINGLE_LIFT,
            total_weeks=request.total_weeks,
            start_date=request.start_date,
            lifts={
                "lift": StartingLift(
                    exercise_name=request.exercise_name,
                    starting_weight=self.starting_weight,
                    increment=self.weekly_increase,
                )
            },
            day_offsets=session_day_offsets(request.sessions_per_week),
        )
        self.plan_decisions = []
        self._plan_namespace = uuid.uuid5(LIFTR_NAMESPACE, request.model_dump_json())

    def _build_days(self) -> List[TrainingDay]:
        request = self.progression
        slot = ExerciseSlot(
            id=_stable_id(self._plan_namespace, "slot", 1, 0),
            exercise_name=request.exercise_name,
            order_index=0,
            starting_weight=self.starting_weight,
            target_sets=request.sets,
            target_reps=request.reps,
            increment=self.weekly_increase,
            progression_style=request.style,
            rounding_increment=request.rounding_increment,
            notes=f"{request.sets}x{request.reps}, {request.style.description.lower()}",
        )
        return [
            TrainingDay(
                id=_stable_id(self._plan_namespace, "day", 1),
                name=request.exercise_name,
                day_number=1,
                role=DayRole.PROGRESSION,
                slots=[slot],
            )
        ]

    def _document_progression(self, days: List[TrainingDay]) -> None:
        request = self.progression
        self.plan_decisions.append(
            PlanDecision(
                decision_point="Starting Weight",
                input_factors=[
                    f"current_max={request.current_max:g}",
                    f"target_max={request.target_max:g}",
                    f"total_weeks={request.total_weeks}",
                    f"rounding_increment={request.rounding_increment:g}",
                ],
                reasoning=(
                    "The lift starts at 85% of the current max and the gap to the target is "
                    "spread evenly over the weeks, both rounded to the loading increment."
                ),
                outcome=f"Start at {self.starting_weight:g}, add {self.weekly_increase:g} per week",
            )
        )

        if request.style == ProgressionStyle.PERIODIZATION:
            reasoning = (
                "Weeks run in 3-week waves at 90%, 95% and 100% of the wave's cycle weight; "
                "each new wave starts three weekly increases heavier."
            )
        else:
            reasoning = (
                "The weekly increase is added every week; effort and percentages are tracked "
                "when the sessions are logged."
            )
        self.plan_decisions.append(
            PlanDecision(
                decision_point="Progression Rule",
                input_factors=[f"style={request.style.value}", f"exercise={request.exercise_name}"],
                reasoning=reasoning,
                outcome=f"{request.style.display_name} progression of {request.exercise_name}",
            )
        )


def generate_plan(request: ProgramRequest) -> TrainingPlan:
    """Generate a plan for a request in one call."""
    return ScheduleGenerator(request).generate()


def generate_progression(request: ProgressionRequest) -> TrainingPlan:
    """Generate a single-lift progression plan in one call."""
    return ProgressionGenerator(request).generate()


def recalculate(plan: TrainingPlan) -> TrainingPlan:
    """
    Recompute planned weights and set targets of sessions not yet completed.

    Used after editing slots (starting weight or increment). Completed
    sessions keep their history. Returns a new plan; the input is not mutated.

    Args:
        plan: Existing plan

    Returns:
        Copy of the plan with refreshed weights for pending sessions
    """
    updated = plan.model_copy(deep=True)
    appearances: Dict[str, int] = defaultdict(int)

    for session in sorted(updated.sessions, key=lambda s: (s.session_number, s.slot_id)):
        day = updated.get_day(session.day_id)
        slot = updated.get_slot(session.slot_id)
        appearances[slot.exercise_name] += 1
        if session.completed:
            continue
        weight = _weight(
            planned_weight(
                methodology=updated.methodology,
                day_role=day.role,
                is_anchor=slot.is_anchor,
                week=session.week_number,
                appearance=appearances[slot.exercise_name],
                starting_weight=slot.starting_weight,
                increment=slot.increment,
                progression_style=slot.progression_style,
                rounding_increment=slot.rounding_increment,
            )
        )
        session.planned_weight = weight
        session.planned_sets = slot.target_sets
        session.planned_reps = slot.target_reps
        for set_record in session.sets:
            set_record.target_weight = _weight(weight * set_record.percent_of_top)
    return updated
