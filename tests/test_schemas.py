"""
Tests for Pydantic schema validation.

Ensures that schemas properly validate data and enforce constraints.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from liftr.errors import InvalidInput, WeekOutOfRange
from liftr.plan_schemas import PlanDecision, PlannedSession, SetRecord, TrainingPlan
from liftr.schemas import (
    AdjustmentMode,
    AdjustmentPolicy,
    ExerciseOverride,
    InventorySnapshot,
    Methodology,
    PolicyPreset,
    ProgramRequest,
    ProgressionRequest,
    ProgressionStyle,
    StartingLift,
)


# Adjustment Policy Tests

def test_policy_defaults():
    """Test the moderate defaults."""
    policy = AdjustmentPolicy()

    assert policy.mode == AdjustmentMode.PROMPT
    assert policy.excellent_threshold == 90
    assert policy.good_threshold == 75
    assert policy.adjustment_threshold == 50
    assert policy.reduction_percent == 5
    assert policy.deload_percent == 10
    assert policy.rounding_increment == 5


@pytest.mark.parametrize(
    "preset, expected",
    [
        (PolicyPreset.CONSERVATIVE, (95, 85, 70, 3, 8)),
        (PolicyPreset.MODERATE, (90, 75, 50, 5, 10)),
        (PolicyPreset.AGGRESSIVE, (85, 70, 50, 7, 12)),
    ],
)
def test_policy_presets(preset, expected):
    policy = AdjustmentPolicy.from_preset(preset)
    assert (
        policy.excellent_threshold,
        policy.good_threshold,
        policy.adjustment_threshold,
        policy.reduction_percent,
        policy.deload_percent,
    ) == expected


def test_preset_overrides():
    policy = AdjustmentPolicy.from_preset("aggressive", mode=AdjustmentMode.NEVER, deload_percent=15)
    assert policy.mode == AdjustmentMode.NEVER
    assert policy.deload_percent == 15
    assert policy.reduction_percent == 7


def test_policy_rejects_out_of_range_values():
    with pytest.raises(ValidationError):
        AdjustmentPolicy(reduction_percent=120)
    with pytest.raises(ValidationError):
        AdjustmentPolicy(rounding_increment=0)


def test_exercise_override_merges_into_copy():
    """Test that only the fields an override sets replace the global policy."""
    policy = AdjustmentPolicy()
    overrides = [ExerciseOverride(exercise_name="Deadlift", deload_percent=20)]

    merged = policy.for_exercise("deadlift", overrides)
    untouched = policy.for_exercise("Squat", overrides)

    assert merged.deload_percent == 20
    assert merged.excellent_threshold == 90
    assert untouched == policy
    assert policy.deload_percent == 10


# Program Request Tests

def test_program_request_defaults():
    request = ProgramRequest(
        name="Test",
        methodology=Methodology.LINEAR_AB,
        start_date=date(2026, 1, 5),
        lifts={"squat": StartingLift(exercise_name="Squat", starting_weight=135)},
    )
    assert request.total_weeks == 12
    assert request.day_offsets == [0, 2, 4]


def test_starting_weight_must_be_positive():
    with pytest.raises(ValidationError):
        StartingLift(exercise_name="Squat", starting_weight=0)


def test_program_request_requires_lifts():
    with pytest.raises(ValidationError):
        ProgramRequest(
            name="Empty",
            methodology=Methodology.LINEAR_AB,
            start_date=date(2026, 1, 5),
            lifts={},
        )


def test_methodology_display_names():
    assert Methodology.LINEAR_AB.display_name == "Starting Strength"
    assert Methodology.VOLUME_RECOVERY_INTENSITY.display_name == "Texas Method"
    assert Methodology.VOLUME_LIGHT_INTENSITY.display_name == "Madcow 5x5"


# Inventory Tests

def test_inventory_pairs_plates():
    inventory = InventorySnapshot(plates={45: 5, 25: 2, 10: 1}, collar_weight=2.5)
    assert inventory.per_side(45) == 2
    assert inventory.per_side(25) == 1
    assert inventory.per_side(10) == 0
    assert inventory.per_side(35) == 0
    assert inventory.total_collar_weight == 5


# Plan Tests

def test_plan_current_week_cannot_exceed_total(linear_plan):
    data = linear_plan.model_dump()
    data["current_week"] = 5
    with pytest.raises(ValidationError, match="cannot exceed total_weeks"):
        TrainingPlan(**data)


def test_plan_lookups(linear_plan):
    session = linear_plan.sessions[0]

    assert linear_plan.get_session(session.id) is session
    assert linear_plan.get_day(session.day_id).name == "Workout A"
    assert linear_plan.get_slot(session.slot_id).exercise_name == "Squat"
    with pytest.raises(InvalidInput, match="Unknown session id"):
        linear_plan.get_session("missing")
    with pytest.raises(InvalidInput, match="Unknown training day id"):
        linear_plan.get_day("missing")


@pytest.mark.parametrize("week", [0, 5])
def test_plan_week_out_of_range(linear_plan, week):
    with pytest.raises(WeekOutOfRange, match=f"Week {week} is out of range"):
        linear_plan.sessions_for_week(week)


def test_plan_progress(linear_plan):
    assert linear_plan.progress_percentage == pytest.approx(25.0)
    assert [s.session_number for s in linear_plan.next_workout()] == [1, 1, 1]


def test_session_rep_totals():
    session = PlannedSession(
        id="s1",
        plan_id="p1",
        day_id="d1",
        slot_id="sl1",
        exercise_name="Squat",
        week_number=1,
        session_number=1,
        scheduled_date=date(2026, 1, 5),
        planned_weight=225,
        planned_sets=3,
        planned_reps=5,
        sets=[
            SetRecord(id=f"set{n}", set_number=n, target_reps=5, target_weight=225, actual_reps=reps)
            for n, reps in [(1, 5), (2, 5), (3, 2)]
        ],
    )
    assert session.total_planned_reps == 15
    assert session.total_completed_reps == 12
    assert session.performance_percentage == pytest.approx(80.0)


def test_session_without_sets_uses_sets_times_reps():
    session = PlannedSession(
        id="s1",
        plan_id="p1",
        day_id="d1",
        slot_id="sl1",
        exercise_name="Squat",
        week_number=1,
        session_number=1,
        scheduled_date=date(2026, 1, 5),
        planned_weight=225,
        planned_sets=5,
        planned_reps=5,
    )
    assert session.total_planned_reps == 25
    assert session.total_completed_reps == 0


def test_set_rpe_bounds():
    with pytest.raises(ValidationError):
        SetRecord(id="x", set_number=1, target_reps=5, target_weight=100, rpe=11)


def test_plan_decision_requires_reasoning():
    with pytest.raises(ValidationError):
        PlanDecision(
            decision_point="Progression Rule",
            input_factors=["methodology=linear_ab"],
            reasoning="Too short",
            outcome="Linear progression",
        )


# Progression Request Tests

def test_progression_request_defaults():
    """Test the defaults for a new single-lift progression."""
    request = ProgressionRequest(
        exercise_name="  Deadlift ",
        current_max=315,
        target_max=405,
        start_date=date(2026, 1, 5),
    )

    assert request.exercise_name == "Deadlift"
    assert request.style == ProgressionStyle.LINEAR
    assert request.total_weeks == 12
    assert (request.sessions_per_week, request.sets, request.reps) == (1, 3, 5)
    assert request.plan_name == "Deadlift Linear Progression"


@pytest.mark.parametrize("target_max", [300, 315])
def test_progression_target_not_above_current_rejected(target_max):
    with pytest.raises(ValidationError, match="Target max must be higher"):
        ProgressionRequest(
            exercise_name="Deadlift",
            current_max=315,
            target_max=target_max,
            start_date=date(2026, 1, 5),
        )


def test_progression_sessions_per_week_bounds():
    with pytest.raises(ValidationError):
        ProgressionRequest(
            exercise_name="Squat",
            current_max=200,
            target_max=250,
            sessions_per_week=8,
            start_date=date(2026, 1, 5),
        )


def test_progression_blank_exercise_rejected():
    with pytest.raises(ValidationError, match="cannot be blank"):
        ProgressionRequest(
            exercise_name="   ",
            current_max=200,
            target_max=250,
            start_date=date(2026, 1, 5),
        )
