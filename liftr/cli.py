"""
Command-line interface for the LIFTR training load engine.

Provides commands for:
- Generating and storing strength programs and single-lift progressions
- Viewing a plan week by week
- Logging a workout and applying performance adjustments
- Pausing workouts and plans
- Calculating plate loads
"""

import sys
from datetime import date, datetime
from typing import List, Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import FloatPrompt, IntPrompt, Prompt
from rich.table import Table

from liftr.adjuster import (
    AdjustmentChoice,
    AdjustmentPropagator,
    AdjustmentState,
    manual_adjustment,
    pause_plan,
    pause_session,
    resume_plan,
)
from liftr.database import PlanRepository, init_database
from liftr.errors import LoadEngineError
from liftr.evaluator import PerformanceTier, ensure_valid_policy
from liftr.plan_schemas import PlannedSession, PlanStatus, TrainingPlan
from liftr.planner import generate_plan, generate_progression
from liftr.plates import PlateLoadOptimizer
from liftr.schemas import (
    AdjustmentPolicy,
    InventorySnapshot,
    LoadConfiguration,
    Methodology,
    PolicyPreset,
    ProgressionRequest,
    ProgressionStyle,
)
from liftr.settings import Settings, get_settings
from liftr.templates import build_request
from liftr.units import format_weight

# Initialize Typer app and Rich console
app = typer.Typer(help="LIFTR - Strength program generation, adaptive adjustment and plate loading")
console = Console()


def _repository(settings: Settings) -> PlanRepository:
    return PlanRepository(init_database(settings.database_url))


def _fail(message: str):
    console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(1)


def _parse_offsets(raw: str) -> List[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        _fail(f"Day offsets must be comma separated integers, got '{raw}'")


def _parse_plates(raw: List[str]) -> dict:
    plates = {}
    for item in raw:
        weight, _, count = item.partition(":")
        try:
            plates[float(weight)] = int(count)
        except ValueError:
            _fail(f"Plates are given as WEIGHT:COUNT, got '{item}'")
    return plates


# ===== DISPLAY HELPER FUNCTIONS =====


def _display_plan_summary(plan: TrainingPlan, settings: Settings):
    """
    Display plan header, training days and the generation reasoning.

    Args:
        plan: TrainingPlan to summarize
        settings: Settings providing the display unit
    """
    console.print(
        Panel(
            f"[bold]{plan.name}[/bold]\n"
            f"{plan.methodology.display_name} · {plan.total_weeks} weeks · "
            f"week {plan.current_week} ({plan.status.value})\n"
            f"Plan id: [cyan]{plan.id}[/cyan]",
            border_style="cyan",
        )
    )

    for day in plan.days:
        table = Table(title=day.name, box=box.ROUNDED)
        table.add_column("Exercise", style="cyan")
        table.add_column("Sets x Reps", justify="center")
        table.add_column("Week 1", justify="right", style="yellow")
        table.add_column("Increment", justify="right")
        table.add_column("Notes")
        for slot in day.slots:
            table.add_row(
                slot.exercise_name,
                f"{slot.target_sets}x{slot.target_reps}",
                format_weight(slot.starting_weight, settings.unit_system),
                f"+{slot.increment:g}",
                slot.notes or "",
            )
        console.print(table)

    if plan.plan_decisions:
        console.print("\n[bold]Plan Decisions:[/bold]")
        for decision in plan.plan_decisions:
            console.print(f"  • [cyan]{decision.decision_point}[/cyan]: {decision.outcome}")
            console.print(f"    [dim]{decision.reasoning}[/dim]")


def _display_week(plan: TrainingPlan, week: int, settings: Settings):
    """Table of every exercise session in one week."""
    table = Table(title=f"Week {week} of {plan.total_weeks}", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Day")
    table.add_column("Exercise", style="cyan")
    table.add_column("Sets", justify="center")
    table.add_column("Weight", justify="right", style="yellow")
    table.add_column("Done", justify="center")

    for session in plan.sessions_for_week(week):
        sets = ", ".join(f"{s.target_reps}@{s.target_weight:g}" for s in session.sets)
        table.add_row(
            str(session.session_number),
            session.scheduled_date.isoformat(),
            plan.get_day(session.day_id).name,
            session.exercise_name,
            sets,
            format_weight(session.planned_weight, settings.unit_system),
            "✅" if session.completed else ("⏸" if session.paused else ""),
        )
    console.print(table)


def _display_load(load: LoadConfiguration, label: Optional[str] = None):
    """Plates per side for one calculated load."""
    status = "[green]exact[/green]" if load.is_exact_match else "[yellow]rounded down[/yellow]"
    plates = " + ".join(
        f"{p.quantity}x{p.plate_weight:g}" for p in load.plates
    ) or "empty bar"
    prefix = f"{label}: " if label else ""
    console.print(
        f"  {prefix}[bold]{load.achieved_weight:g}[/bold] ({status}) "
        f"→ per side: {plates}"
    )


# ===== CLI COMMANDS =====


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for every command."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.command("create-plan")
def create_plan(
    name: str = typer.Option(..., "--name", "-n", help="Program name"),
    methodology: Methodology = typer.Option(
        Methodology.LINEAR_AB, "--methodology", "-m", help="Periodization methodology"
    ),
    weeks: int = typer.Option(12, "--weeks", "-w", help="Program duration in weeks"),
    start: Optional[str] = typer.Option(
        None, "--start", help="First session date (YYYY-MM-DD), defaults to today"
    ),
    squat: Optional[float] = typer.Option(None, help="Starting squat weight"),
    bench: Optional[float] = typer.Option(None, help="Starting bench press weight"),
    press: Optional[float] = typer.Option(None, help="Starting overhead press weight"),
    deadlift: Optional[float] = typer.Option(None, help="Starting deadlift weight"),
    row: Optional[float] = typer.Option(None, help="Starting barbell row weight"),
    offsets: Optional[str] = typer.Option(
        None, "--offsets", help="Comma separated session day offsets, e.g. 0,2,4"
    ),
):
    """
    Generate a program and store it.
    """
    settings = get_settings()
    starting_weights = {
        key: value
        for key, value in {
            "squat": squat,
            "bench": bench,
            "press": press,
            "deadlift": deadlift,
            "row": row,
        }.items()
        if value is not None
    }
    if not starting_weights:
        _fail("Give at least one starting weight (--squat, --bench, ...)")

    try:
        start_date = date.fromisoformat(start) if start else date.today()
    except ValueError:
        _fail(f"Invalid start date: {start}")

    day_offsets = _parse_offsets(offsets) if offsets else settings.default_day_offsets

    try:
        request = build_request(
            name=name,
            methodology=methodology,
            starting_weights=starting_weights,
            total_weeks=weeks,
            start_date=start_date,
            day_offsets=day_offsets,
        )
        plan = generate_plan(request)
    except (LoadEngineError, ValidationError) as e:
        _fail(f"Failed to generate plan: {e}")

    logger.debug(f"Generated {len(plan.sessions)} sessions for plan {plan.id}")
    plan = _repository(settings).save_plan(plan)

    console.print(f"\n✓ Generated [green]{plan.total_weeks}-week {methodology.display_name}[/green] plan\n")
    _display_plan_summary(plan, settings)


@app.command("create-progression")
def create_progression(
    exercise: str = typer.Option(..., "--exercise", "-e", help="Exercise to progress"),
    current_max: float = typer.Option(..., "--current-max", help="Current one-rep max"),
    target_max: float = typer.Option(..., "--target-max", help="Max to reach by the end"),
    style: ProgressionStyle = typer.Option(
        ProgressionStyle.LINEAR, "--style", help="Week-to-week weight pattern"
    ),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Program name"),
    weeks: int = typer.Option(12, "--weeks", "-w", help="Program duration in weeks"),
    sessions: int = typer.Option(1, "--sessions", help="Sessions per week"),
    sets: int = typer.Option(3, "--sets", help="Sets per session"),
    reps: int = typer.Option(5, "--reps", help="Reps per set"),
    start: Optional[str] = typer.Option(
        None, "--start", help="First session date (YYYY-MM-DD), defaults to today"
    ),
):
    """
    Generate a single-lift progression toward a target max and store it.
    """
    settings = get_settings()
    try:
        start_date = date.fromisoformat(start) if start else date.today()
    except ValueError:
        _fail(f"Invalid start date: {start}")

    try:
        request = ProgressionRequest(
            exercise_name=exercise,
            name=name,
            style=style,
            current_max=current_max,
            target_max=target_max,
            total_weeks=weeks,
            sessions_per_week=sessions,
            sets=sets,
            reps=reps,
            start_date=start_date,
            rounding_increment=settings.effective_rounding_increment,
        )
        plan = generate_progression(request)
    except (LoadEngineError, ValidationError) as e:
        _fail(f"Failed to generate progression: {e}")

    logger.debug(f"Generated {len(plan.sessions)} sessions for progression {plan.id}")
    plan = _repository(settings).save_plan(plan)

    console.print(f"\n✓ Generated [green]{plan.total_weeks}-week {style.display_name}[/green] progression\n")
    _display_plan_summary(plan, settings)


@app.command("plans")
def list_plans():
    """
    List stored plans.
    """
    settings = get_settings()
    records = _repository(settings).list_plans()
    if not records:
        console.print("[yellow]No plans stored yet. Use create-plan to generate one.[/yellow]")
        return

    table = Table(box=box.ROUNDED)
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Methodology")
    table.add_column("Week", justify="right")
    table.add_column("Status")
    for record in records:
        table.add_row(
            record.id,
            record.name,
            Methodology(record.methodology).display_name,
            f"{record.current_week}/{record.total_weeks}",
            record.status,
        )
    console.print(table)


@app.command("show-plan")
def show_plan(
    plan_id: str = typer.Argument(..., help="Id of a stored plan"),
    week: Optional[int] = typer.Option(None, "--week", "-w", help="Week to show, defaults to the current week"),
    summary: bool = typer.Option(False, "--summary", "-s", help="Show days and plan decisions"),
):
    """
    Show a plan's sessions for one week.
    """
    settings = get_settings()
    try:
        plan = _repository(settings).load_plan(plan_id)
        if summary:
            _display_plan_summary(plan, settings)
        _display_week(plan, week or plan.current_week, settings)
    except LoadEngineError as e:
        _fail(str(e))


def _log_sets(session: PlannedSession):
    """Prompt for the reps completed in each set of a session."""
    console.print(
        f"\n[bold cyan]{session.exercise_name}[/bold cyan] "
        f"{session.planned_sets}x{session.planned_reps} @ {session.planned_weight:g}"
    )
    for set_record in session.sets:
        reps = IntPrompt.ask(
            f"  Set {set_record.set_number} ({set_record.target_reps} @ {set_record.target_weight:g}) reps",
            default=set_record.target_reps,
        )
        set_record.actual_reps = max(reps, 0)
        set_record.actual_weight = set_record.target_weight
        set_record.completed = True


def _ask_manual():
    tier = PerformanceTier(
        Prompt.ask(
            "  Adjustment",
            choices=[t.value for t in PerformanceTier],
            default=PerformanceTier.REPEAT_WEIGHT.value,
        )
    )
    percent = None
    if tier in (PerformanceTier.REDUCE_BY, PerformanceTier.DELOAD):
        percent = FloatPrompt.ask("  Percent", default=10.0)
    return manual_adjustment(tier, percent)


@app.command("log-session")
def log_session(
    plan_id: str = typer.Argument(..., help="Id of a stored plan"),
    workout: Optional[int] = typer.Option(
        None, "--workout", help="Workout number to log, defaults to the next pending one"
    ),
):
    """
    Log a workout, evaluate each exercise and adjust future weights.
    """
    settings = get_settings()
    repository = _repository(settings)

    try:
        policy = ensure_valid_policy(settings.adjustment_policy())
        plan = repository.load_plan(plan_id)
        sessions = plan.sessions_for_workout(workout) if workout else plan.next_workout()
    except (LoadEngineError, ValidationError) as e:
        _fail(str(e))

    if not sessions:
        console.print("[green]✓ Every workout in this plan is complete.[/green]")
        return

    console.print(
        f"\n[bold]Workout {sessions[0].session_number}[/bold] · "
        f"{plan.get_day(sessions[0].day_id).name} · week {sessions[0].week_number}"
    )

    propagator = AdjustmentPropagator(policy)
    completed_at = datetime.now()

    for session in sessions:
        _log_sets(session)
        try:
            result = propagator.process_completion(plan, session.id, completed_at)
        except LoadEngineError as e:
            _fail(str(e))

        decision = result.decision
        if decision.percentage is not None:
            console.print(
                f"  Completed {decision.completed_reps}/{decision.planned_reps} reps "
                f"({decision.percentage:.0f}%)"
            )
        console.print(f"  {decision.adjustment.message}")

        changes = result.changes
        state = result.state
        if state == AdjustmentState.DEFERRED:
            choice = AdjustmentChoice(
                Prompt.ask(
                    "  Apply this adjustment?",
                    choices=[c.value for c in AdjustmentChoice],
                    default=AdjustmentChoice.ACCEPT.value,
                )
            )
            manual = _ask_manual() if choice == AdjustmentChoice.MANUAL else None
            changes = propagator.apply_decision(plan, decision, choice, manual)
            state = AdjustmentState.DECLINED if choice == AdjustmentChoice.KEEP else AdjustmentState.APPLIED

        repository.update_session(plan.get_session(session.id))
        if changes:
            repository.apply_changes(plan, changes)
            for change in changes:
                console.print(
                    f"  [yellow]Week {change.week_number}: {change.old_weight:g} → {change.new_weight:g}[/yellow]"
                )
        logger.debug(f"{session.exercise_name}: {decision.tier.value} ({state.value})")

    repository.update_week(plan)
    if plan.status == PlanStatus.COMPLETED:
        console.print("\n[bold green]✓ Program complete![/bold green]")
    elif result.week_advanced:
        console.print(f"\n[green]✓ Week complete. On to week {plan.current_week}.[/green]")


@app.command("pause")
def pause(
    plan_id: str = typer.Argument(..., help="Id of a stored plan"),
    workout: Optional[int] = typer.Option(
        None, "--workout", help="Workout number to pause, defaults to the next pending one"
    ),
):
    """
    Pause a workout to finish it later.
    """
    settings = get_settings()
    repository = _repository(settings)

    try:
        plan = repository.load_plan(plan_id)
        sessions = plan.sessions_for_workout(workout) if workout else plan.next_workout()
        pending = [s for s in sessions if not s.completed]
        if not pending:
            _fail("No pending workout to pause")
        for session in pending:
            repository.update_session(pause_session(plan, session.id))
    except LoadEngineError as e:
        _fail(str(e))

    console.print(f"[yellow]⏸ Workout {pending[0].session_number} paused.[/yellow]")


@app.command("pause-plan")
def pause_plan_command(
    plan_id: str = typer.Argument(..., help="Id of a stored plan"),
    resume: bool = typer.Option(False, "--resume", help="Resume a paused plan"),
):
    """
    Put a plan on hold, or resume it.
    """
    settings = get_settings()
    repository = _repository(settings)

    try:
        plan = repository.load_plan(plan_id)
        if resume:
            resume_plan(plan)
        else:
            pause_plan(plan)
        repository.update_week(plan)
    except LoadEngineError as e:
        _fail(str(e))

    console.print(f"✓ Plan [cyan]{plan.name}[/cyan] is now {plan.status.value}")


@app.command()
def plates(
    target: float = typer.Argument(..., help="Target weight including the bar"),
    plate: Optional[List[str]] = typer.Option(
        None, "--plate", "-p", help="Plates owned as WEIGHT:COUNT (repeatable); stored inventory if omitted"
    ),
    bar: Optional[float] = typer.Option(None, "--bar", "-b", help="Bar weight"),
    collar: float = typer.Option(0.0, "--collar", help="Weight of one collar"),
    large: bool = typer.Option(False, "--large", help="Allow plates heavier than 45"),
    warmup: bool = typer.Option(False, "--warmup", help="Also show warm-up loads"),
    save: bool = typer.Option(False, "--save", help="Store the given plates as the inventory"),
):
    """
    Calculate the plates to load for a target weight.
    """
    settings = get_settings()
    repository = _repository(settings)
    bar_weight = bar if bar is not None else settings.default_bar_weight

    try:
        if plate:
            inventory = InventorySnapshot(
                plates=_parse_plates(plate),
                bar_weight=bar_weight,
                collar_weight=collar,
                use_large_plates=large,
            )
            if save:
                repository.save_inventory(inventory)
        else:
            inventory = repository.load_inventory(bar_weight, collar, large)
            if not inventory.plates:
                _fail("No plate inventory stored. Pass --plate WEIGHT:COUNT (and --save to keep it).")

        optimizer = PlateLoadOptimizer()
        console.print(f"\n[bold]Target {target:g}[/bold] on a {bar_weight:g} bar\n")
        if warmup:
            loads = optimizer.warmup_loads(target, inventory)
            for index, load in enumerate(loads[:-1], start=1):
                _display_load(load, f"Warm-up {index}")
            _display_load(loads[-1], "Work set")
        else:
            _display_load(optimizer.calculate(target, inventory))
    except (LoadEngineError, ValidationError) as e:
        _fail(str(e))


@app.command()
def presets():
    """
    List adjustment policy presets.
    """
    settings = get_settings()
    table = Table(title="Adjustment Presets", box=box.ROUNDED)
    table.add_column("Preset", style="cyan")
    table.add_column("Continue ≥", justify="right")
    table.add_column("Repeat ≥", justify="right")
    table.add_column("Reduce ≥", justify="right")
    table.add_column("Reduction", justify="right")
    table.add_column("Deload", justify="right")
    table.add_column("Description")

    for preset in PolicyPreset:
        policy = AdjustmentPolicy.from_preset(preset)
        name = preset.value
        if preset == settings.policy_preset:
            name += " *"
        table.add_row(
            name,
            f"{policy.excellent_threshold:g}%",
            f"{policy.good_threshold:g}%",
            f"{policy.adjustment_threshold:g}%",
            f"{policy.reduction_percent:g}%",
            f"{policy.deload_percent:g}%",
            preset.description,
        )
    console.print(table)
    console.print(
        f"\nMode: [bold]{settings.adjustment_mode.display_name}[/bold] · "
        f"rounding to {settings.effective_rounding_increment:g} "
        f"({settings.unit_system.value})"
    )


if __name__ == "__main__":
    app()
