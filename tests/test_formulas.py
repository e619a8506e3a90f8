"""
Tests for the per-methodology weight formulas.

Covers:
- Linear appearance-based progression
- Volume/recovery/intensity percentages
- Volume/light/intensity top sets and ramping set targets
- Single-lift progressions: starting weight, weekly step, waves and spacing
- Input errors
"""

import pytest

from liftr.errors import InvalidInput, WeekOutOfRange
from liftr.formulas import (
    BACKOFF_SET,
    HEAVY_SET,
    build_set_targets,
    linear_weight,
    madcow_top_set,
    planned_weight,
    progression_starting_weight,
    progression_week_weight,
    progression_weekly_increase,
    ramp_percentages,
    session_day_offsets,
    texas_weight,
    weekly_progression,
)
from liftr.plan_schemas import DayRole, SetKind
from liftr.schemas import Methodology, ProgressionStyle


def test_linear_weight_adds_increment_per_appearance():
    """Test that each appearance adds one increment."""
    assert linear_weight(135, 5, 1) == 135
    assert linear_weight(135, 5, 3) == 145
    assert linear_weight(185, 10, 4) == 215


def test_linear_weight_rejects_zero_appearance():
    with pytest.raises(InvalidInput, match="Appearance count"):
        linear_weight(135, 5, 0)


def test_texas_day_percentages():
    """Test volume at 90% of intensity and anchor recovery at 80% of volume."""
    assert texas_weight(DayRole.INTENSITY, True, 3, 300, 5) == pytest.approx(310)
    assert texas_weight(DayRole.VOLUME, True, 3, 300, 5) == pytest.approx(279)
    assert texas_weight(DayRole.RECOVERY, True, 3, 300, 5) == pytest.approx(223.2)


def test_texas_recovery_non_anchor_progresses_weekly():
    """Test that a non-anchor lift on recovery day uses its own weekly weight."""
    assert texas_weight(DayRole.RECOVERY, False, 2, 135, 2.5) == pytest.approx(137.5)


def test_texas_rejects_foreign_day_role():
    with pytest.raises(InvalidInput, match="not part of a volume/recovery/intensity week"):
        texas_weight(DayRole.LIGHT, True, 1, 300, 5)


def test_madcow_light_day_anchor_is_75_percent():
    """Test that the anchor lift's light day is 75% of the week's top set."""
    assert madcow_top_set(DayRole.VOLUME, True, 2, 200, 5) == pytest.approx(205)
    assert madcow_top_set(DayRole.LIGHT, True, 2, 200, 5) == pytest.approx(153.75)
    assert madcow_top_set(DayRole.LIGHT, False, 2, 95, 2.5) == pytest.approx(97.5)


def test_planned_weight_dispatches_by_methodology():
    """Test that linear uses appearances while weekly methods use weeks."""
    linear = planned_weight(Methodology.LINEAR_AB, DayRole.A, False, 1, 3, 135, 5)
    weekly = planned_weight(
        Methodology.VOLUME_RECOVERY_INTENSITY, DayRole.INTENSITY, True, 3, 1, 135, 5
    )
    assert linear == 145
    assert weekly == 145


@pytest.mark.parametrize("week", [0, -1])
def test_week_below_one_raises(week):
    with pytest.raises(WeekOutOfRange):
        planned_weight(Methodology.VOLUME_LIGHT_INTENSITY, DayRole.VOLUME, True, week, 1, 200, 5)
    with pytest.raises(WeekOutOfRange):
        planned_weight(Methodology.LINEAR_AB, DayRole.A, False, week, 1, 200, 5)


@pytest.mark.parametrize("starting_weight, increment", [(0, 5), (-45, 5), (135, -5)])
def test_bad_starting_parameters_raise(starting_weight, increment):
    with pytest.raises(InvalidInput):
        weekly_progression(starting_weight, increment, 1)


@pytest.mark.parametrize(
    "methodology, role",
    [
        (Methodology.VOLUME_RECOVERY_INTENSITY, DayRole.VOLUME),
        (Methodology.VOLUME_RECOVERY_INTENSITY, DayRole.RECOVERY),
        (Methodology.VOLUME_RECOVERY_INTENSITY, DayRole.INTENSITY),
        (Methodology.VOLUME_LIGHT_INTENSITY, DayRole.LIGHT),
    ],
)
def test_weekly_weights_never_decrease(methodology, role):
    """Test that planned weight is non-decreasing in week for every day role."""
    weights = [planned_weight(methodology, role, True, week, 1, 225, 5) for week in range(1, 13)]
    assert weights == sorted(weights)


def test_ramp_percentages_use_heaviest_rungs():
    assert ramp_percentages(5) == [0.60, 0.69, 0.82, 0.91, 1.00]
    assert ramp_percentages(3) == [0.82, 0.91, 1.00]
    assert ramp_percentages(1) == [1.00]


@pytest.mark.parametrize("sets", [0, 6])
def test_ramp_percentages_out_of_range(sets):
    with pytest.raises(InvalidInput, match="ramp"):
        ramp_percentages(sets)


def test_straight_sets_for_linear_and_texas():
    """Test that non-ramping methodologies produce straight work sets."""
    for methodology, role in [
        (Methodology.LINEAR_AB, DayRole.A),
        (Methodology.VOLUME_RECOVERY_INTENSITY, DayRole.VOLUME),
    ]:
        targets = build_set_targets(methodology, role, True, 5, 5)
        assert len(targets) == 5
        assert all(t.kind == SetKind.WORK and t.percent == 1.0 and t.reps == 5 for t in targets)


def test_madcow_intensity_sets():
    """Test four ramp sets followed by a heavy triple and a back-off eight."""
    targets = build_set_targets(Methodology.VOLUME_LIGHT_INTENSITY, DayRole.INTENSITY, True, 6, 5)

    assert [t.percent for t in targets[:4]] == [0.69, 0.82, 0.91, 1.00]
    assert all(t.kind == SetKind.RAMP and t.reps == 5 for t in targets[:4])
    assert targets[4] == HEAVY_SET
    assert targets[5] == BACKOFF_SET
    assert HEAVY_SET.percent == 1.05 and HEAVY_SET.reps == 3
    assert BACKOFF_SET.percent == 0.80 and BACKOFF_SET.reps == 8


def test_madcow_light_day_anchor_uses_straight_sets():
    anchor = build_set_targets(Methodology.VOLUME_LIGHT_INTENSITY, DayRole.LIGHT, True, 4, 5)
    other = build_set_targets(Methodology.VOLUME_LIGHT_INTENSITY, DayRole.LIGHT, False, 4, 5)

    assert all(t.kind == SetKind.WORK for t in anchor)
    assert [t.percent for t in other] == [0.69, 0.82, 0.91, 1.00]


# Single-lift progressions


@pytest.mark.parametrize(
    "current_max, increment, expected",
    [(200, 5, 170), (315, 5, 270), (100, 2.5, 85)],
)
def test_progression_starts_at_85_percent_of_max(current_max, increment, expected):
    assert progression_starting_weight(current_max, increment) == expected


def test_progression_start_that_rounds_to_zero_rejected():
    with pytest.raises(InvalidInput, match="too light"):
        progression_starting_weight(2, 5)


@pytest.mark.parametrize(
    "current_max, target_max, weeks, expected",
    [(200, 260, 6, 10), (315, 405, 12, 10), (200, 250, 12, 5)],
)
def test_progression_weekly_increase(current_max, target_max, weeks, expected):
    """Test that the gap to the target is spread evenly and rounded."""
    assert progression_weekly_increase(current_max, target_max, weeks, 5) == expected


def test_progression_target_must_exceed_current():
    with pytest.raises(InvalidInput, match="Target max must be higher"):
        progression_weekly_increase(200, 200, 6, 5)


@pytest.mark.parametrize(
    "style",
    [ProgressionStyle.LINEAR, ProgressionStyle.RPE, ProgressionStyle.PERCENTAGE],
)
def test_straight_styles_add_weekly_increase(style):
    weights = [progression_week_weight(style, week, 170, 10, 5) for week in range(1, 7)]
    assert weights == [170, 180, 190, 200, 210, 220]


def test_periodization_waves():
    """Test 90/95/100% weeks of each wave, with each wave three increases heavier."""
    weights = [
        progression_week_weight(ProgressionStyle.PERIODIZATION, week, 170, 10, 5)
        for week in range(1, 8)
    ]

    # 153 -> 155, 161.5 -> 160, 170; then 180, 190, 200 off a 200 cycle weight
    assert weights == [155, 160, 170, 180, 190, 200, 205]


def test_periodization_rounds_to_metric_increment():
    weights = [
        progression_week_weight(ProgressionStyle.PERIODIZATION, week, 100, 2.5, 2.5)
        for week in range(1, 4)
    ]
    assert weights == [90, 95, 100]


@pytest.mark.parametrize(
    "sessions, expected",
    [
        (1, [0]),
        (2, [0, 3]),
        (3, [0, 2, 4]),
        (4, [0, 1, 2, 3]),
        (7, [0, 1, 2, 3, 4, 5, 6]),
    ],
)
def test_session_day_offsets(sessions, expected):
    assert session_day_offsets(sessions) == expected


@pytest.mark.parametrize("sessions", [0, 8])
def test_session_day_offsets_out_of_range(sessions):
    with pytest.raises(InvalidInput, match="between 1 and 7"):
        session_day_offsets(sessions)


def test_planned_weight_dispatches_single_lift():
    weight = planned_weight(
        Methodology.SINGLE_LIFT,
        DayRole.PROGRESSION,
        False,
        2,
        1,
        170,
        10,
        progression_style=ProgressionStyle.PERIODIZATION,
        rounding_increment=5,
    )
    assert weight == 160


def test_planned_weight_single_lift_needs_rounding():
    with pytest.raises(InvalidInput, match="rounding increment"):
        planned_weight(Methodology.SINGLE_LIFT, DayRole.PROGRESSION, False, 1, 1, 170, 10)
