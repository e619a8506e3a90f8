"""
Day templates for the built-in programs.

Each builder turns a ProgramRequest's starting lifts into the TrainingDays of
one methodology. Slot ids are left for the schedule generator to assign.
"""

from typing import Callable, Dict, List, Optional

from liftr.errors import InvalidInput
from liftr.schemas import Methodology, ProgramRequest, StartingLift

LOWER_BODY_INCREMENT = 5.0
UPPER_BODY_INCREMENT = 2.5

DEFAULT_EXERCISE_NAMES = {
    "squat": "Squat",
    "bench": "Bench Press",
    "press": "Overhead Press",
    "deadlift": "Deadlift",
    "row": "Barbell Row",
}


def _require(request: ProgramRequest, *keys: str) -> Dict[str, StartingLift]:
    missing = [key for key in keys if key not in request.lifts]
    if missing:
        raise InvalidInput(
            f"{request.methodology.display_name} needs starting lifts for: {', '.join(missing)}"
        )
    return {key: request.lifts[key] for key in keys}


def _slot(lift: StartingLift, sets: int, reps: int, is_anchor: bool = False, notes: Optional[str] = None) -> dict:
    return {
        "exercise_name": lift.exercise_name,
        "starting_weight": lift.starting_weight,
        "target_sets": sets,
        "target_reps": reps,
        "increment": lift.increment,
        "is_anchor": is_anchor,
        "notes": notes,
    }


def starting_strength_days(request: ProgramRequest) -> List[dict]:
    """Workout A (squat, bench, deadlift) and Workout B (squat, press, deadlift)."""
    lifts = _require(request, "squat", "bench", "press", "deadlift")
    return [
        {
            "name": "Workout A",
            "role": "a",
            "slots": [
                _slot(lifts["squat"], 3, 5),
                _slot(lifts["bench"], 3, 5),
                _slot(lifts["deadlift"], 1, 5),
            ],
        },
        {
            "name": "Workout B",
            "role": "b",
            "slots": [
                _slot(lifts["squat"], 3, 5),
                _slot(lifts["press"], 3, 5),
                _slot(lifts["deadlift"], 1, 5),
            ],
        },
    ]


def texas_method_days(request: ProgramRequest) -> List[dict]:
    """Volume (5x5), Recovery (light squat, press) and Intensity (1x5 PR) days."""
    lifts = _require(request, "squat", "bench", "press", "deadlift")
    return [
        {
            "name": "Volume Day",
            "role": "volume",
            "slots": [
                _slot(lifts["squat"], 5, 5, is_anchor=True, notes="5x5 @ 90% of Friday's weight"),
                _slot(lifts["bench"], 5, 5, notes="5x5 @ 90% of 5RM"),
                _slot(lifts["deadlift"], 1, 5, notes="1x5 @ 90% of 5RM"),
            ],
        },
        {
            "name": "Recovery Day",
            "role": "recovery",
            "slots": [
                _slot(lifts["squat"], 2, 5, is_anchor=True, notes="2x5 @ 80% of Monday's weight"),
                _slot(lifts["press"], 3, 5, notes="3x5 progressing weekly"),
            ],
        },
        {
            "name": "Intensity Day",
            "role": "intensity",
            "slots": [
                _slot(lifts["squat"], 1, 5, is_anchor=True, notes="1x5 PR attempt"),
                _slot(lifts["bench"], 1, 5, notes="1x5 PR attempt"),
                _slot(lifts["deadlift"], 1, 5, notes="1x5 PR attempt"),
            ],
        },
    ]


def madcow_days(request: ProgramRequest) -> List[dict]:
    """Volume (ramping 5x5), Light (light squat, ramping press/deadlift) and Intensity days."""
    lifts = _require(request, "squat", "bench", "row", "press", "deadlift")
    intensity_note = "4x5 ramping, 1x3 @ 105%, 1x8 @ 80%"
    return [
        {
            "name": "Volume Day",
            "role": "volume",
            "slots": [
                _slot(lifts["squat"], 5, 5, is_anchor=True, notes="5x5 ramping to top set"),
                _slot(lifts["bench"], 5, 5, notes="5x5 ramping to top set"),
                _slot(lifts["row"], 5, 5, notes="5x5 ramping to top set"),
            ],
        },
        {
            "name": "Light Day",
            "role": "light",
            "slots": [
                _slot(lifts["squat"], 4, 5, is_anchor=True, notes="4x5 @ 75% of Monday's top set"),
                _slot(lifts["press"], 4, 5, notes="4x5 ramping to top set"),
                _slot(lifts["deadlift"], 4, 5, notes="4x5 ramping to top set"),
            ],
        },
        {
            "name": "Intensity Day",
            "role": "intensity",
            "slots": [
                _slot(lifts["squat"], 6, 5, is_anchor=True, notes=intensity_note),
                _slot(lifts["bench"], 6, 5, notes=intensity_note),
                _slot(lifts["row"], 6, 5, notes=intensity_note),
            ],
        },
    ]


TEMPLATE_BUILDERS: Dict[Methodology, Callable[[ProgramRequest], List[dict]]] = {
    Methodology.LINEAR_AB: starting_strength_days,
    Methodology.VOLUME_RECOVERY_INTENSITY: texas_method_days,
    Methodology.VOLUME_LIGHT_INTENSITY: madcow_days,
}


def default_increment(methodology: Methodology, lift_key: str) -> float:
    """
    Progression step used when the caller gives none.

    Linear A/B adds 5 per appearance (10 for the deadlift); the weekly
    programs add 5 to lower body lifts and 2.5 to upper body lifts.
    """
    if methodology == Methodology.LINEAR_AB:
        return 10.0 if lift_key == "deadlift" else LOWER_BODY_INCREMENT
    if lift_key in ("bench", "press"):
        return UPPER_BODY_INCREMENT
    return LOWER_BODY_INCREMENT


def build_request(
    name: str,
    methodology: Methodology,
    starting_weights: Dict[str, float],
    total_weeks: int = 12,
    start_date=None,
    increments: Optional[Dict[str, float]] = None,
    day_offsets: Optional[List[int]] = None,
) -> ProgramRequest:
    """
    Convenience constructor for a ProgramRequest from plain weights.

    Args:
        name: Program name
        methodology: Periodization methodology
        starting_weights: Lift key -> week 1 weight
        total_weeks: Program duration
        start_date: First session date (required)
        increments: Optional lift key -> increment overrides
        day_offsets: Optional session day offsets within a week

    Returns:
        Validated ProgramRequest
    """
    if start_date is None:
        raise InvalidInput("start_date is required to place sessions on the calendar")
    increments = increments or {}
    lifts = {}
    for key, weight in starting_weights.items():
        increment = increments.get(key, default_increment(methodology, key))
        lifts[key] = StartingLift(
            exercise_name=DEFAULT_EXERCISE_NAMES.get(key, key.replace("_", " ").title()),
            starting_weight=weight,
            increment=increment,
        )
    values = {
        "name": name,
        "methodology": methodology,
        "total_weeks": total_weeks,
        "start_date": start_date,
        "lifts": lifts,
    }
    if day_offsets is not None:
        values["day_offsets"] = day_offsets
    return ProgramRequest(**values)
