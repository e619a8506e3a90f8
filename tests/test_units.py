"""Tests for weight rounding and unit helpers."""

import pytest

from liftr.errors import InvalidInput
from liftr.schemas import UnitSystem
from liftr.units import (
    LBS_PER_KG,
    default_rounding_increment,
    format_weight,
    round_to_increment,
    to_kg,
    to_lbs,
)


@pytest.mark.parametrize(
    "value, increment, expected",
    [
        (202.5, 5, 205),
        (182.25, 5, 180),
        (99.75, 5, 100),
        (104.5, 5, 105),
        (180, 5, 180),
        (101.2, 2.5, 100),
        (101.3, 2.5, 102.5),
        (63.75, 2.5, 65),
    ],
)
def test_round_to_increment(value, increment, expected):
    """Test nearest-multiple rounding with halves going up."""
    assert round_to_increment(value, increment) == expected


@pytest.mark.parametrize("increment", [0, -5])
def test_round_to_increment_rejects_bad_increment(increment):
    with pytest.raises(InvalidInput, match="must be positive"):
        round_to_increment(100, increment)


def test_default_rounding_increments():
    assert default_rounding_increment(UnitSystem.IMPERIAL) == 5.0
    assert default_rounding_increment("metric") == 2.5


def test_conversions():
    assert LBS_PER_KG == 2.20462
    assert to_kg(220.462) == pytest.approx(100)
    assert to_lbs(100) == pytest.approx(220.462)


def test_format_weight():
    assert format_weight(225) == "225.0 lbs"
    assert format_weight(220.462, UnitSystem.METRIC) == "100.0 kg"
