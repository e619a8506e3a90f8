"""
SQLAlchemy Database Models for LIFTR

Provides persistent storage for:
- Training plans with their day templates and reasoning trail
- Planned exercise sessions and their set targets / logged actuals
- The lifter's plate inventory

The engine works on in-memory TrainingPlan values; PlanRepository converts
between those values and rows and writes back the changes the engine
reports.
"""

from datetime import datetime
from typing import Dict, List

from loguru import logger
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    create_engine,
    delete,
    select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from liftr.adjuster import WeightChange
from liftr.errors import InvalidInput
from liftr.plan_schemas import (
    PlanDecision,
    PlannedSession,
    PlanStatus,
    SetRecord,
    TrainingDay,
    TrainingPlan,
)
from liftr.schemas import InventorySnapshot, Methodology

Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///liftr.db"


class PlanRecord(Base):
    """
    Saved training plan.

    Attributes:
        id: Plan id (deterministic uuid from generation)
        name: Program name
        methodology: Methodology value
        total_weeks: Plan length
        current_week: Week the lifter is on
        status: active / paused / completed
        start_date: Date of the first session
        days_data: Training days and exercise slots as JSON
        decisions_data: Generation reasoning trail as JSON
        created_at: When the plan was first saved
    """

    __tablename__ = "plans"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    methodology = Column(String, nullable=False)
    total_weeks = Column(Integer, nullable=False)
    current_week = Column(Integer, default=1, nullable=False)
    status = Column(String, default=PlanStatus.ACTIVE.value, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    days_data = Column(JSON, nullable=False)
    decisions_data = Column(JSON, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    sessions = relationship(
        "PlannedSessionRecord",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlannedSessionRecord.position",
    )

    def __repr__(self):
        return f"<PlanRecord(id='{self.id}', methodology='{self.methodology}', week={self.current_week}/{self.total_weeks})>"


class PlannedSessionRecord(Base):
    """
    One exercise in one workout instance.

    Attributes:
        id: Session id
        plan_id: Foreign key to plans table
        position: Order of the session within the plan
        week_number: Week number within the plan (1-indexed)
        session_number: Running workout counter
        planned_weight: Working or top-set weight
    """

    __tablename__ = "planned_sessions"

    id = Column(String, primary_key=True)
    plan_id = Column(String, ForeignKey("plans.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    day_id = Column(String, nullable=False)
    slot_id = Column(String, nullable=False, index=True)
    exercise_name = Column(String, nullable=False, index=True)
    week_number = Column(Integer, nullable=False, index=True)
    session_number = Column(Integer, nullable=False)
    scheduled_date = Column(Date, nullable=False)
    planned_weight = Column(Float, nullable=False)
    planned_sets = Column(Integer, nullable=False)
    planned_reps = Column(Integer, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    paused = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)

    # Relationships
    plan = relationship("PlanRecord", back_populates="sessions")
    sets = relationship(
        "SetRecordRow",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SetRecordRow.set_number",
    )

    def __repr__(self):
        return f"<PlannedSessionRecord(week={self.week_number}, exercise='{self.exercise_name}', weight={self.planned_weight})>"


class SetRecordRow(Base):
    """Set target plus the actuals logged for it."""

    __tablename__ = "set_records"

    id = Column(String, primary_key=True)
    session_id = Column(String, ForeignKey("planned_sessions.id"), nullable=False, index=True)
    set_number = Column(Integer, nullable=False)
    kind = Column(String, nullable=False)
    target_reps = Column(Integer, nullable=False)
    target_weight = Column(Float, nullable=False)
    percent_of_top = Column(Float, default=1.0, nullable=False)
    actual_reps = Column(Integer, nullable=True)
    actual_weight = Column(Float, nullable=True)
    rpe = Column(Float, nullable=True)
    completed = Column(Boolean, default=False, nullable=False)

    session = relationship("PlannedSessionRecord", back_populates="sets")

    def __repr__(self):
        return f"<SetRecordRow(set={self.set_number}, reps={self.target_reps}, weight={self.target_weight})>"


class PlateRecord(Base):
    """Number of plates of one weight the lifter owns."""

    __tablename__ = "plates"

    id = Column(Integer, primary_key=True)
    weight = Column(Float, nullable=False, unique=True)
    count = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<PlateRecord(weight={self.weight}, count={self.count})>"


# Database connection and session management

def get_engine(database_url: str = DEFAULT_DATABASE_URL):
    """
    Create SQLAlchemy engine.

    Args:
        database_url: Database connection string (default: SQLite file)

    Returns:
        SQLAlchemy Engine instance
    """
    return create_engine(database_url, echo=False)


def get_session_factory(engine):
    """Create a session factory bound to ``engine``."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_database(database_url: str = DEFAULT_DATABASE_URL) -> Session:
    """
    Initialize database and create all tables.

    Args:
        database_url: Database connection string

    Returns:
        SQLAlchemy Session instance
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    logger.debug(f"Initialized database at {database_url}")
    return get_session_factory(engine)()


# Conversion between engine values and rows

def _session_to_row(session: PlannedSession, position: int) -> PlannedSessionRecord:
    row = PlannedSessionRecord(
        position=position,
        **session.model_dump(exclude={"sets", "plan_id"}),
    )
    row.sets = [SetRecordRow(**s.model_dump(mode="json")) for s in session.sets]
    return row


def _row_to_session(row: PlannedSessionRecord) -> PlannedSession:
    return PlannedSession(
        id=row.id,
        plan_id=row.plan_id,
        day_id=row.day_id,
        slot_id=row.slot_id,
        exercise_name=row.exercise_name,
        week_number=row.week_number,
        session_number=row.session_number,
        scheduled_date=row.scheduled_date,
        planned_weight=row.planned_weight,
        planned_sets=row.planned_sets,
        planned_reps=row.planned_reps,
        completed=row.completed,
        completed_at=row.completed_at,
        paused=row.paused,
        notes=row.notes,
        sets=[
            SetRecord(
                id=s.id,
                set_number=s.set_number,
                kind=s.kind,
                target_reps=s.target_reps,
                target_weight=s.target_weight,
                percent_of_top=s.percent_of_top,
                actual_reps=s.actual_reps,
                actual_weight=s.actual_weight,
                rpe=s.rpe,
                completed=s.completed,
            )
            for s in row.sets
        ],
    )


class PlanRepository:
    """
    Stores and restores training plans.

    Every write commits; on a database error the transaction is rolled back
    and the error re-raised to the caller.
    """

    def __init__(self, session: Session):
        self.session = session

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise

    def save_plan(self, plan: TrainingPlan) -> TrainingPlan:
        """
        Insert a plan, replacing any stored plan with the same id.

        Args:
            plan: Plan to store

        Returns:
            The plan with ``created_at`` filled in
        """
        existing = self.session.get(PlanRecord, plan.id)
        if existing is not None:
            logger.debug(f"Replacing stored plan {plan.id}")
            self.session.delete(existing)
            self.session.flush()

        created_at = plan.created_at or datetime.now()
        record = PlanRecord(
            id=plan.id,
            name=plan.name,
            methodology=plan.methodology.value,
            total_weeks=plan.total_weeks,
            current_week=plan.current_week,
            status=plan.status.value,
            start_date=plan.start_date,
            days_data=[day.model_dump(mode="json") for day in plan.days],
            decisions_data=[d.model_dump(mode="json") for d in plan.plan_decisions],
            notes=plan.notes,
            created_at=created_at,
        )
        record.sessions = [_session_to_row(s, i) for i, s in enumerate(plan.sessions)]
        self.session.add(record)
        self._commit(f"save plan {plan.id}")

        logger.info(f"Saved plan '{plan.name}' ({plan.id}) with {len(plan.sessions)} sessions")
        return plan.model_copy(update={"created_at": created_at})

    def _get_record(self, plan_id: str) -> PlanRecord:
        record = self.session.get(PlanRecord, plan_id)
        if record is None:
            raise InvalidInput(f"No stored plan with id {plan_id}")
        return record

    def load_plan(self, plan_id: str) -> TrainingPlan:
        """
        Rebuild a TrainingPlan from its rows.

        Raises:
            InvalidInput: If no plan with this id is stored
        """
        record = self._get_record(plan_id)
        plan = TrainingPlan(
            id=record.id,
            name=record.name,
            methodology=Methodology(record.methodology),
            total_weeks=record.total_weeks,
            current_week=record.current_week,
            status=PlanStatus(record.status),
            start_date=record.start_date,
            days=[TrainingDay.model_validate(d) for d in record.days_data],
            sessions=[_row_to_session(row) for row in record.sessions],
            plan_decisions=[PlanDecision.model_validate(d) for d in record.decisions_data],
            created_at=record.created_at,
            notes=record.notes,
        )
        logger.debug(f"Loaded plan {plan_id} at week {plan.current_week}")
        return plan

    def list_plans(self) -> List[PlanRecord]:
        """All stored plans, newest first."""
        return list(
            self.session.scalars(select(PlanRecord).order_by(PlanRecord.created_at.desc()))
        )

    def _write_session(self, session: PlannedSession) -> None:
        row = self.session.get(PlannedSessionRecord, session.id)
        if row is None:
            raise InvalidInput(f"No stored session with id {session.id}")

        row.planned_weight = session.planned_weight
        row.completed = session.completed
        row.completed_at = session.completed_at
        row.paused = session.paused
        row.notes = session.notes
        by_id = {s.id: s for s in session.sets}
        for set_row in row.sets:
            logged = by_id.get(set_row.id)
            if logged is None:
                continue
            set_row.target_weight = logged.target_weight
            set_row.actual_reps = logged.actual_reps
            set_row.actual_weight = logged.actual_weight
            set_row.rpe = logged.rpe
            set_row.completed = logged.completed

    def update_session(self, session: PlannedSession) -> None:
        """Write a session's completion state, weights and logged set actuals."""
        self._write_session(session)
        self._commit(f"update session {session.id}")
        logger.debug(f"Updated session {session.id} (completed={session.completed})")

    def apply_changes(self, plan: TrainingPlan, changes: List[WeightChange]) -> int:
        """
        Write the sessions rewritten by the adjustment engine.

        Planned weights and set targets are copied from the plan as the
        engine left them, in a single transaction.

        Args:
            plan: Plan the engine mutated
            changes: WeightChange values from the propagator

        Returns:
            Number of sessions updated

        Raises:
            InvalidInput: If a change names a session outside the plan
        """
        self._get_record(plan.id)
        by_id = {s.id: s for s in plan.sessions}
        for change in changes:
            if change.session_id not in by_id:
                raise InvalidInput(f"Session {change.session_id} does not belong to plan {plan.id}")

        try:
            for change in changes:
                self._write_session(by_id[change.session_id])
        except InvalidInput:
            self.session.rollback()
            raise
        self._commit(f"apply {len(changes)} weight changes to plan {plan.id}")

        if changes:
            logger.info(f"Applied {len(changes)} weight changes to plan {plan.id}")
        return len(changes)

    def update_week(self, plan: TrainingPlan) -> None:
        """Write the plan's current week and status."""
        record = self._get_record(plan.id)
        previous = record.current_week
        record.current_week = plan.current_week
        record.status = plan.status.value
        self._commit(f"update week of plan {plan.id}")
        if previous != plan.current_week:
            logger.info(f"Plan {plan.id} advanced from week {previous} to week {plan.current_week}")

    def save_inventory(self, inventory: InventorySnapshot) -> None:
        """Replace the stored plate counts with the snapshot's."""
        self.session.execute(delete(PlateRecord))
        for weight, count in sorted(inventory.plates.items(), reverse=True):
            self.session.add(PlateRecord(weight=weight, count=count))
        self._commit("save plate inventory")
        logger.info(f"Saved plate inventory with {len(inventory.plates)} plate sizes")

    def load_inventory(
        self,
        bar_weight: float = 45.0,
        collar_weight: float = 0.0,
        use_large_plates: bool = False,
    ) -> InventorySnapshot:
        """
        Snapshot of the stored plates for the plate optimizer.

        The bar and collars are chosen per calculation, so they are passed in
        rather than stored.
        """
        plates: Dict[float, int] = {
            row.weight: row.count for row in self.session.scalars(select(PlateRecord))
        }
        return InventorySnapshot(
            plates=plates,
            bar_weight=bar_weight,
            collar_weight=collar_weight,
            use_large_plates=use_large_plates,
        )
