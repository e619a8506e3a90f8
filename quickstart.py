#!/usr/bin/env python3
"""
Quick start script to demonstrate the LIFTR training load engine.

This script shows the complete workflow:
1. Build a program request from starting weights
2. Generate the plan
3. Log a short week and evaluate performance
4. Apply an adjustment to future weeks
5. Calculate plate loads for the next top set
"""

import json
from datetime import date, datetime
from pathlib import Path

from liftr.adjuster import AdjustmentPropagator
from liftr.planner import generate_plan
from liftr.plates import PlateLoadOptimizer
from liftr.schemas import AdjustmentMode, AdjustmentPolicy, InventorySnapshot, Methodology, PolicyPreset
from liftr.templates import build_request

# Rich console for pretty output
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def print_header(title: str):
    """Print a formatted header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))


def main():
    """Run the complete demonstration workflow."""
    console.print("\n[bold magenta]🏋 LIFTR Training Load Engine[/bold magenta]")
    console.print("[dim]Demonstration of complete workflow[/dim]\n")

    # ===== STEP 1: Program Request =====
    print_header("Step 1: Program Request")

    request = build_request(
        name="Texas Method Demo",
        methodology=Methodology.VOLUME_RECOVERY_INTENSITY,
        starting_weights={"squat": 275, "bench": 205, "press": 125, "deadlift": 315},
        total_weeks=8,
        start_date=date(2026, 1, 5),
    )

    console.print(f"✓ Methodology: [green]{request.methodology.display_name}[/green]")
    console.print(f"  Weeks: {request.total_weeks}")
    for lift in request.lifts.values():
        console.print(f"  {lift.exercise_name}: {lift.starting_weight:g} (+{lift.increment:g}/week)")

    # ===== STEP 2: Generate Plan =====
    print_header("Step 2: Generate Plan")

    plan = generate_plan(request)
    console.print(f"✓ Generated [green]{plan.total_weeks}-week plan[/green] with {len(plan.sessions)} sessions")

    table = Table(title="Week 1", box=box.ROUNDED)
    table.add_column("Date")
    table.add_column("Day")
    table.add_column("Exercise", style="cyan")
    table.add_column("Sets x Reps", justify="center")
    table.add_column("Weight", justify="right", style="yellow")
    for session in plan.sessions_for_week(1):
        table.add_row(
            session.scheduled_date.strftime("%a %d %b"),
            plan.get_day(session.day_id).name,
            session.exercise_name,
            f"{session.planned_sets}x{session.planned_reps}",
            f"{session.planned_weight:g}",
        )
    console.print(table)

    console.print("\n[bold]Plan Decisions:[/bold]")
    for decision in plan.plan_decisions:
        console.print(f"  • {decision.decision_point}: {decision.outcome}")

    # ===== STEP 3: Log Week 1 =====
    print_header("Step 3: Log Week 1")

    policy = AdjustmentPolicy.from_preset(PolicyPreset.MODERATE, mode=AdjustmentMode.AUTO_ADJUST)
    propagator = AdjustmentPropagator(policy)

    # Every set hit except the intensity squat, which stalls at 3 of 5 reps
    intensity_squat = None
    for session in plan.sessions_for_week(1):
        day = plan.get_day(session.day_id)
        for set_record in session.sets:
            set_record.actual_reps = set_record.target_reps
        if day.role.value == "intensity" and session.exercise_name == "Squat":
            session.sets[0].actual_reps = 3
            intensity_squat = session

        result = propagator.process_completion(plan, session.id, datetime(2026, 1, 9, 18, 0))
        if result.decision.adjustment.is_change:
            console.print(
                f"  [yellow]{session.exercise_name} ({day.name}): "
                f"{result.decision.percentage:.0f}% → {result.decision.tier.value}[/yellow]"
            )

    console.print(f"\n✓ Week complete, now on week [green]{plan.current_week}[/green]")

    # ===== STEP 4: Adjustments =====
    print_header("Step 4: Adjustments")

    next_squat = [
        s for s in plan.sessions_for_week(2) if s.slot_id == intensity_squat.slot_id
    ][0]
    console.print(f"  Intensity squat week 1: {intensity_squat.planned_weight:g}")
    console.print(f"  Intensity squat week 2: {next_squat.planned_weight:g} (reduced)")

    # ===== STEP 5: Plate Loads =====
    print_header("Step 5: Plate Loads")

    inventory = InventorySnapshot(plates={45: 8, 25: 2, 10: 2, 5: 2, 2.5: 2})
    optimizer = PlateLoadOptimizer()
    for load in optimizer.warmup_loads(next_squat.planned_weight, inventory):
        plates = " + ".join(f"{p.quantity}x{p.plate_weight:g}" for p in load.plates) or "empty bar"
        exact = "exact" if load.is_exact_match else "rounded down"
        console.print(f"  {load.achieved_weight:g} ({exact}): {plates} per side")

    # Save plan
    plan_dir = Path("plans")
    plan_dir.mkdir(exist_ok=True)
    plan_path = plan_dir / f"demo_plan_{date.today().strftime('%Y%m%d')}.json"

    with open(plan_path, "w") as f:
        json.dump(plan.model_dump(mode="json"), f, indent=2)

    console.print(f"\n✓ Plan saved to: [cyan]{plan_path}[/cyan]")

    # ===== COMPLETION =====
    console.print("\n")
    panel = Panel(
        "[green]✓[/green] Demonstration complete!\n\n"
        "The engine successfully:\n"
        "  1. Generated a weekly periodized program\n"
        "  2. Evaluated every logged session\n"
        "  3. Adjusted future weights after a missed set\n"
        "  4. Calculated warm-up and work set plate loads",
        title="[bold green]Success[/bold green]",
        border_style="green"
    )
    console.print(panel)

    console.print("\n[bold cyan]Next Steps:[/bold cyan]")
    console.print("  • Run CLI: liftr create-plan --name 'My Program' --squat 225 --bench 155 --press 95 --deadlift 275")
    console.print("  • Log workouts: liftr log-session <plan-id>")
    console.print("  • Run tests: python3 -m pytest\n")


if __name__ == "__main__":
    main()
