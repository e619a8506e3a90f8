"""
Weight formulas for each supported periodization methodology.

Every function here is a pure function of (week, day role, exercise role,
starting parameters). Nothing reads plan state or configuration, so the
schedule generator can call them in any order and get the same numbers.

Methodologies:
- Linear A/B: +increment per appearance of the exercise
- Volume/Recovery/Intensity: intensity progresses weekly, volume is 90% of
  intensity, anchor-lift recovery is 80% of volume
- Volume/Light/Intensity: weekly top set, anchor-lift light day is 75% of
  volume, sets ramp up to the top set
- Single-lift progression: 85% of the current max plus an even weekly step,
  either straight or in light/medium/heavy waves
"""

from typing import List, NamedTuple, Optional, Tuple

from liftr.errors import InvalidInput, WeekOutOfRange
from liftr.plan_schemas import DayRole, SetKind
from liftr.schemas import Methodology, ProgressionStyle
from liftr.units import round_to_increment

VOLUME_OF_INTENSITY = 0.90
RECOVERY_OF_VOLUME = 0.80
LIGHT_OF_VOLUME = 0.75

PROGRESSION_START_OF_MAX = 0.85
# Light, medium and heavy weeks of a periodization wave
WAVE_PERCENTAGES: Tuple[float, ...] = (0.90, 0.95, 1.00)

# Ascending ramp rungs; an n-set ramp uses the heaviest n.
RAMP_LADDER: Tuple[float, ...] = (0.60, 0.69, 0.82, 0.91, 1.00)
INTENSITY_RAMP_SETS = 4
RAMP_REPS = 5


class SetTarget(NamedTuple):
    """Target for one set before it is turned into a SetRecord."""

    kind: SetKind
    percent: float
    reps: int


HEAVY_SET = SetTarget(SetKind.HEAVY, 1.05, 3)
BACKOFF_SET = SetTarget(SetKind.BACKOFF, 0.80, 8)


def _check_inputs(week: int, starting_weight: float, increment: float) -> None:
    if week < 1:
        raise WeekOutOfRange(week)
    if starting_weight <= 0:
        raise InvalidInput(f"Starting weight must be positive, got {starting_weight}")
    if increment < 0:
        raise InvalidInput(f"Increment cannot be negative, got {increment}")


def weekly_progression(starting_weight: float, increment: float, week: int) -> float:
    """Weight after ``week - 1`` weekly increments."""
    _check_inputs(week, starting_weight, increment)
    return starting_weight + increment * (week - 1)


def linear_weight(starting_weight: float, increment: float, appearance: int) -> float:
    """
    Linear A/B weight at the k-th appearance of an exercise.

    An exercise in both day templates appears every session; one in a single
    template appears every other session.

    Args:
        starting_weight: Weight at the first appearance
        increment: Weight added per appearance
        appearance: 1-based appearance count of this exercise

    Returns:
        Planned weight
    """
    if appearance < 1:
        raise InvalidInput(f"Appearance count must be at least 1, got {appearance}")
    if starting_weight <= 0:
        raise InvalidInput(f"Starting weight must be positive, got {starting_weight}")
    if increment < 0:
        raise InvalidInput(f"Increment cannot be negative, got {increment}")
    return starting_weight + increment * (appearance - 1)


def texas_weight(
    day_role: DayRole,
    is_anchor: bool,
    week: int,
    starting_weight: float,
    increment: float,
) -> float:
    """
    Volume/Recovery/Intensity weight for one exercise in one week.

    Args:
        day_role: VOLUME, RECOVERY or INTENSITY
        is_anchor: Whether the exercise is the anchor lift
        week: 1-based week number
        starting_weight: Week 1 intensity-day weight
        increment: Weekly increase of the intensity-day weight

    Returns:
        Planned weight
    """
    intensity = weekly_progression(starting_weight, increment, week)
    if day_role == DayRole.INTENSITY:
        return intensity
    if day_role == DayRole.VOLUME:
        return intensity * VOLUME_OF_INTENSITY
    if day_role == DayRole.RECOVERY:
        if is_anchor:
            return intensity * VOLUME_OF_INTENSITY * RECOVERY_OF_VOLUME
        return intensity
    raise InvalidInput(f"Day role {day_role.value} is not part of a volume/recovery/intensity week")


def madcow_top_set(
    day_role: DayRole,
    is_anchor: bool,
    week: int,
    starting_weight: float,
    increment: float,
) -> float:
    """
    Volume/Light/Intensity top-set weight for one exercise in one week.

    Args:
        day_role: VOLUME, LIGHT or INTENSITY
        is_anchor: Whether the exercise is the anchor lift
        week: 1-based week number
        starting_weight: Week 1 top-set weight
        increment: Weekly increase of the top set

    Returns:
        Top-set weight
    """
    top_set = weekly_progression(starting_weight, increment, week)
    if day_role in (DayRole.VOLUME, DayRole.INTENSITY):
        return top_set
    if day_role == DayRole.LIGHT:
        return top_set * LIGHT_OF_VOLUME if is_anchor else top_set
    raise InvalidInput(f"Day role {day_role.value} is not part of a volume/light/intensity week")


def progression_starting_weight(current_max: float, rounding_increment: float) -> float:
    """Week 1 weight of a single-lift progression: 85% of the current max, rounded."""
    if current_max <= 0:
        raise InvalidInput(f"Current max must be positive, got {current_max}")
    starting = round_to_increment(current_max * PROGRESSION_START_OF_MAX, rounding_increment)
    if starting <= 0:
        raise InvalidInput(
            f"Current max {current_max:g} is too light to start a progression "
            f"rounded to {rounding_increment:g}"
        )
    return starting


def progression_weekly_increase(
    current_max: float, target_max: float, total_weeks: int, rounding_increment: float
) -> float:
    """Even weekly step from the current max to the target max, rounded."""
    if total_weeks < 1:
        raise InvalidInput(f"A progression needs at least one week, got {total_weeks}")
    if target_max <= current_max:
        raise InvalidInput("Target max must be higher than current max")
    return round_to_increment((target_max - current_max) / total_weeks, rounding_increment)


def progression_week_weight(
    style: ProgressionStyle,
    week: int,
    starting_weight: float,
    weekly_increase: float,
    rounding_increment: float,
) -> float:
    """
    Planned weight of a single-lift progression in one week.

    Linear, RPE and percentage styles add the weekly increase every week.
    Periodization runs 3-week waves: each wave's cycle weight is the starting
    weight plus three weekly increases per completed wave, and its weeks use
    90%, 95% and 100% of that cycle weight.

    Args:
        style: Progression style
        week: 1-based week number
        starting_weight: Week 1 weight (85% of the current max)
        weekly_increase: Weight added per week
        rounding_increment: Weights are rounded to this value

    Returns:
        Planned weight, rounded
    """
    _check_inputs(week, starting_weight, weekly_increase)
    if ProgressionStyle(style) == ProgressionStyle.PERIODIZATION:
        wave, position = divmod(week - 1, len(WAVE_PERCENTAGES))
        cycle_weight = starting_weight + weekly_increase * len(WAVE_PERCENTAGES) * wave
        weight = cycle_weight * WAVE_PERCENTAGES[position]
    else:
        weight = weekly_progression(starting_weight, weekly_increase, week)
    return round_to_increment(weight, rounding_increment)


def session_day_offsets(sessions_per_week: int) -> List[int]:
    """
    Day offsets of evenly spaced sessions within a week.

    Sessions sit ``7 // sessions_per_week`` days apart: one a week lands on
    day 0, two on days 0 and 3, three on days 0, 2 and 4.
    """
    if sessions_per_week < 1 or sessions_per_week > 7:
        raise InvalidInput(f"Sessions per week must be between 1 and 7, got {sessions_per_week}")
    spacing = 7 // sessions_per_week
    return [index * spacing for index in range(sessions_per_week)]



def planned_weight(
    methodology: Methodology,
    day_role: DayRole,
    is_anchor: bool,
    week: int,
    appearance: int,
    starting_weight: float,
    increment: float,
    progression_style: Optional[ProgressionStyle] = None,
    rounding_increment: Optional[float] = None,
) -> float:
    """
    Dispatch to the methodology's weight formula.

    ``appearance`` is only used by linear A/B; ``week`` by the weekly ones.
    Single-lift progressions also take their style and rounding increment.
    """
    if methodology == Methodology.LINEAR_AB:
        if week < 1:
            raise WeekOutOfRange(week)
        return linear_weight(starting_weight, increment, appearance)
    if methodology == Methodology.VOLUME_RECOVERY_INTENSITY:
        return texas_weight(day_role, is_anchor, week, starting_weight, increment)
    if methodology == Methodology.VOLUME_LIGHT_INTENSITY:
        return madcow_top_set(day_role, is_anchor, week, starting_weight, increment)
    if methodology == Methodology.SINGLE_LIFT:
        if rounding_increment is None:
            raise InvalidInput("A single-lift progression needs a rounding increment")
        return progression_week_weight(
            progression_style or ProgressionStyle.LINEAR,
            week,
            starting_weight,
            increment,
            rounding_increment,
        )
    raise InvalidInput(f"Unsupported methodology: {methodology}")


def ramp_percentages(sets: int) -> List[float]:
    """Heaviest ``sets`` rungs of the ramp ladder, ascending."""
    if sets < 1:
        raise InvalidInput(f"A ramp needs at least one set, got {sets}")
    if sets > len(RAMP_LADDER):
        raise InvalidInput(f"A ramp has at most {len(RAMP_LADDER)} sets, got {sets}")
    return list(RAMP_LADDER[-sets:])


def build_set_targets(
    methodology: Methodology,
    day_role: DayRole,
    is_anchor: bool,
    sets: int,
    reps: int,
) -> List[SetTarget]:
    """
    Ordered set targets for one session.

    Linear and Texas sessions are straight sets. Madcow sessions ramp to the
    top set, except the anchor lift on light day (straight sets); intensity
    days ramp over four rungs and then add the heavy triple and back-off set.

    Args:
        methodology: Plan methodology
        day_role: Role of the day the session falls on
        is_anchor: Whether the exercise is the anchor lift
        sets: Slot's target set count
        reps: Slot's target reps

    Returns:
        List of SetTarget in set order
    """
    if methodology != Methodology.VOLUME_LIGHT_INTENSITY:
        return [SetTarget(SetKind.WORK, 1.0, reps) for _ in range(sets)]

    if day_role == DayRole.INTENSITY:
        ramp = [
            SetTarget(SetKind.RAMP, pct, RAMP_REPS)
            for pct in ramp_percentages(INTENSITY_RAMP_SETS)
        ]
        return ramp + [HEAVY_SET, BACKOFF_SET]

    if day_role == DayRole.LIGHT and is_anchor:
        return [SetTarget(SetKind.WORK, 1.0, reps) for _ in range(sets)]

    return [SetTarget(SetKind.RAMP, pct, reps) for pct in ramp_percentages(sets)]
