"""
Tests for performance evaluation.

Covers:
- Tier boundaries for the default policy
- Preset thresholds
- Monotonicity of tiers in completed reps
- Policy validation
"""

import pytest

from liftr.errors import InvalidInput
from liftr.evaluator import (
    Adjustment,
    PerformanceTier,
    completion_percentage,
    ensure_valid_policy,
    evaluate_performance,
    tier_for_percentage,
    validate_policy,
)
from liftr.schemas import AdjustmentPolicy, PolicyPreset


@pytest.fixture
def policy():
    """Default 90/75/50 policy with 5% reduction and 10% deload."""
    return AdjustmentPolicy()


def test_twelve_of_fifteen_repeats_weight(policy):
    """Test that 80% completion falls between good and excellent."""
    result = evaluate_performance(15, 12, policy)
    assert result.tier == PerformanceTier.REPEAT_WEIGHT
    assert result.percent is None


@pytest.mark.parametrize(
    "percentage, tier, percent",
    [
        (100.0, PerformanceTier.CONTINUE_AS_PLANNED, None),
        (90.0, PerformanceTier.CONTINUE_AS_PLANNED, None),
        (89.9, PerformanceTier.REPEAT_WEIGHT, None),
        (75.0, PerformanceTier.REPEAT_WEIGHT, None),
        (74.9, PerformanceTier.REDUCE_BY, 5.0),
        (50.0, PerformanceTier.REDUCE_BY, 5.0),
        (49.9, PerformanceTier.DELOAD, 10.0),
        (0.0, PerformanceTier.DELOAD, 10.0),
    ],
)
def test_tier_boundaries(policy, percentage, tier, percent):
    """Test that each threshold is inclusive."""
    result = tier_for_percentage(percentage, policy)
    assert result.tier == tier
    assert result.percent == percent


def test_nothing_planned_continues(policy):
    assert completion_percentage(0, 0) is None
    assert evaluate_performance(0, 0, policy) == Adjustment.continue_as_planned()


def test_extra_reps_continue(policy):
    assert completion_percentage(15, 18) == pytest.approx(120.0)
    assert evaluate_performance(15, 18, policy).tier == PerformanceTier.CONTINUE_AS_PLANNED


def test_negative_reps_rejected(policy):
    with pytest.raises(InvalidInput, match="cannot be negative"):
        evaluate_performance(15, -1, policy)


@pytest.mark.parametrize("preset", list(PolicyPreset))
@pytest.mark.parametrize("planned", [5, 15, 25])
def test_tier_monotonic_in_completed_reps(preset, planned):
    """Test that completing more reps never yields a worse tier."""
    policy = AdjustmentPolicy.from_preset(preset)
    ranks = [
        evaluate_performance(planned, completed, policy).tier.rank
        for completed in range(planned + 1)
    ]
    assert ranks == sorted(ranks)


def test_presets_shift_thresholds():
    """Test that the same 80% session is judged differently by each preset."""
    conservative = AdjustmentPolicy.from_preset(PolicyPreset.CONSERVATIVE)
    aggressive = AdjustmentPolicy.from_preset(PolicyPreset.AGGRESSIVE)

    reduce = evaluate_performance(15, 12, conservative)
    assert reduce.tier == PerformanceTier.REDUCE_BY
    assert reduce.percent == 3.0
    assert evaluate_performance(15, 12, aggressive).tier == PerformanceTier.REPEAT_WEIGHT
    assert evaluate_performance(15, 7, aggressive).percent == 12.0


def test_adjustment_messages():
    assert "Continue" in Adjustment.continue_as_planned().message
    assert "5.0%" in Adjustment.reduce_by(5).message
    assert "10.0%" in Adjustment.deload(10).message
    assert not Adjustment.continue_as_planned().is_change
    assert Adjustment.repeat_weight().is_change


def test_default_policy_is_valid(policy):
    result = validate_policy(policy)
    assert result.approved
    assert result.warnings == []
    assert ensure_valid_policy(policy) is policy


def test_misordered_policy_reports_every_problem():
    """Test that all threshold problems are reported together."""
    policy = AdjustmentPolicy(excellent_threshold=70, good_threshold=80, adjustment_threshold=85)
    result = validate_policy(policy)

    assert not result.approved
    assert len(result.warnings) == 2
    with pytest.raises(InvalidInput, match="Invalid adjustment policy"):
        ensure_valid_policy(policy)


def test_misordered_policy_still_evaluates_top_down():
    """Test that evaluation checks excellent first even when thresholds are misordered."""
    policy = AdjustmentPolicy(excellent_threshold=70, good_threshold=80)
    assert tier_for_percentage(75, policy).tier == PerformanceTier.CONTINUE_AS_PLANNED


def test_small_deload_warns_but_approves():
    result = validate_policy(AdjustmentPolicy(reduction_percent=10, deload_percent=5))
    assert result.approved
    assert len(result.warnings) == 1
