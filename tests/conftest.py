"""Shared fixtures for plan generation and adjustment tests."""

from datetime import date

import pytest

from liftr.planner import generate_plan, generate_progression
from liftr.schemas import Methodology, ProgressionRequest, ProgressionStyle
from liftr.templates import build_request

START = date(2026, 1, 5)  # a Monday


@pytest.fixture
def linear_request():
    """Four weeks of linear A/B progression."""
    return build_request(
        name="Novice Linear",
        methodology=Methodology.LINEAR_AB,
        starting_weights={"squat": 135, "bench": 95, "press": 65, "deadlift": 185},
        total_weeks=4,
        start_date=START,
    )


@pytest.fixture
def texas_request():
    """Four weeks of volume/recovery/intensity with a 195 intensity squat."""
    return build_request(
        name="Intermediate Weekly",
        methodology=Methodology.VOLUME_RECOVERY_INTENSITY,
        starting_weights={"squat": 195, "bench": 225, "press": 135, "deadlift": 365},
        total_weeks=4,
        start_date=START,
    )


@pytest.fixture
def madcow_request():
    """Three weeks of ramping volume/light/intensity with a 200 top-set squat."""
    return build_request(
        name="Ramping Weekly",
        methodology=Methodology.VOLUME_LIGHT_INTENSITY,
        starting_weights={"squat": 200, "bench": 150, "row": 135, "press": 95, "deadlift": 250},
        total_weeks=3,
        start_date=START,
    )


@pytest.fixture
def progression_request():
    """Six weeks of periodized squat waves, three sessions a week, 200 toward 260."""
    return ProgressionRequest(
        exercise_name="Squat",
        style=ProgressionStyle.PERIODIZATION,
        current_max=200,
        target_max=260,
        total_weeks=6,
        sessions_per_week=3,
        sets=3,
        reps=5,
        start_date=START,
    )


@pytest.fixture
def linear_plan(linear_request):
    return generate_plan(linear_request)


@pytest.fixture
def texas_plan(texas_request):
    return generate_plan(texas_request)


@pytest.fixture
def madcow_plan(madcow_request):
    return generate_plan(madcow_request)


@pytest.fixture
def progression_plan(progression_request):
    return generate_progression(progression_request)


def log_reps(session, reps):
    """Fill in actual reps for a session's sets, one value per set."""
    for set_record, count in zip(session.sets, reps):
        set_record.actual_reps = count
        set_record.completed = True
    return session


def find_session(plan, week, exercise_name, role=None):
    """First pending or completed session of an exercise in a week, optionally on a day role."""
    for session in plan.sessions_for_week(week):
        if session.exercise_name != exercise_name:
            continue
        if role is not None and plan.get_day(session.day_id).role.value != role:
            continue
        return session
    raise LookupError(f"No {exercise_name} session in week {week}")
