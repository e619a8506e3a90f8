"""
Tests for plan storage.

Covers:
- Saving and loading plans without loss
- Writing back logged sessions, weight changes, pauses and week advancement
- Plate inventory storage
"""

from datetime import datetime

import pytest

from liftr.adjuster import AdjustmentPropagator, pause_plan, pause_session
from liftr.database import PlanRecord, PlanRepository, init_database
from liftr.errors import InvalidInput
from liftr.evaluator import Adjustment
from liftr.plan_schemas import PlanStatus
from liftr.schemas import AdjustmentMode, AdjustmentPolicy, InventorySnapshot

from conftest import find_session, log_reps

DONE_AT = datetime(2026, 1, 9, 18, 0)


@pytest.fixture
def repository():
    """Repository over a fresh in-memory SQLite database."""
    session = init_database("sqlite:///:memory:")
    yield PlanRepository(session)
    session.close()


def test_save_and_load_round_trip(repository, madcow_plan):
    """Test that a stored plan loads back identical, sets and decisions included."""
    saved = repository.save_plan(madcow_plan)
    loaded = repository.load_plan(madcow_plan.id)

    assert saved.created_at is not None
    assert loaded.model_dump_json(exclude={"created_at"}) == madcow_plan.model_dump_json(
        exclude={"created_at"}
    )


def test_save_plan_replaces_existing(repository, linear_plan):
    repository.save_plan(linear_plan)
    renamed = linear_plan.model_copy(update={"notes": "second save"})
    repository.save_plan(renamed)

    assert repository.session.query(PlanRecord).count() == 1
    assert repository.load_plan(linear_plan.id).notes == "second save"


def test_list_plans(repository, linear_plan, texas_plan):
    repository.save_plan(linear_plan)
    repository.save_plan(texas_plan)

    ids = {record.id for record in repository.list_plans()}
    assert ids == {linear_plan.id, texas_plan.id}


def test_unknown_plan(repository):
    with pytest.raises(InvalidInput, match="No stored plan"):
        repository.load_plan("missing")


def test_logged_session_and_changes_persist(repository, linear_plan):
    """Test the full write-back after an auto-adjusted session."""
    repository.save_plan(linear_plan)
    propagator = AdjustmentPropagator(AdjustmentPolicy(mode=AdjustmentMode.AUTO_ADJUST))
    session = log_reps(find_session(linear_plan, 1, "Squat"), [5, 4, 3])

    result = propagator.process_completion(linear_plan, session.id, DONE_AT)
    repository.update_session(linear_plan.get_session(session.id))
    assert repository.apply_changes(linear_plan, result.changes) == 3

    loaded = repository.load_plan(linear_plan.id)
    stored = loaded.get_session(session.id)
    assert stored.completed
    assert stored.completed_at == DONE_AT
    assert [s.actual_reps for s in stored.sets] == [5, 4, 3]
    for change in result.changes:
        restored = loaded.get_session(change.session_id)
        assert restored.planned_weight == 135
        assert all(s.target_weight == 135 for s in restored.sets)


def test_apply_changes_stores_engine_set_targets(repository, madcow_plan):
    """Test that ramp and back-off targets are stored exactly as the engine rewrote them."""
    repository.save_plan(madcow_plan)
    propagator = AdjustmentPropagator(AdjustmentPolicy(rounding_increment=2.5))
    session = find_session(madcow_plan, 1, "Squat", "intensity")

    changes = propagator.apply(madcow_plan, session.id, Adjustment.deload(10))
    assert repository.apply_changes(madcow_plan, changes) == len(changes)

    stored = repository.load_plan(madcow_plan.id).get_session(changes[0].session_id)
    in_memory = madcow_plan.get_session(changes[0].session_id)
    assert stored.planned_weight == changes[0].new_weight
    assert [s.target_weight for s in stored.sets] == [s.target_weight for s in in_memory.sets]


def test_apply_changes_rejects_foreign_session(repository, linear_plan, texas_plan):
    repository.save_plan(linear_plan)
    repository.save_plan(texas_plan)
    propagator = AdjustmentPropagator(AdjustmentPolicy())
    session = find_session(texas_plan, 1, "Squat", "intensity")
    changes = propagator.apply(texas_plan, session.id, Adjustment.deload(10))

    with pytest.raises(InvalidInput, match="does not belong to plan"):
        repository.apply_changes(linear_plan, changes)


def test_paused_state_persists(repository, linear_plan):
    repository.save_plan(linear_plan)
    session = find_session(linear_plan, 1, "Squat")
    pause_session(linear_plan, session.id)
    pause_plan(linear_plan)

    repository.update_session(linear_plan.get_session(session.id))
    repository.update_week(linear_plan)
    loaded = repository.load_plan(linear_plan.id)

    assert loaded.get_session(session.id).paused
    assert loaded.status == PlanStatus.PAUSED


def test_update_week(repository, linear_plan):
    repository.save_plan(linear_plan)
    propagator = AdjustmentPropagator(AdjustmentPolicy())
    for number in range(1, 13):
        propagator.complete_workout(linear_plan, number, DONE_AT)

    repository.update_week(linear_plan)
    loaded = repository.load_plan(linear_plan.id)

    assert loaded.current_week == 4
    assert loaded.status == PlanStatus.COMPLETED


def test_inventory_round_trip(repository):
    repository.save_inventory(InventorySnapshot(plates={45: 6, 25: 2, 2.5: 2}))
    repository.save_inventory(InventorySnapshot(plates={45: 4, 10: 2}))

    inventory = repository.load_inventory(bar_weight=35, collar_weight=2.5)

    assert inventory.plates == {45: 4, 10: 2}
    assert inventory.bar_weight == 35
    assert inventory.total_collar_weight == 5
