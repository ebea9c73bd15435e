"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workouts, history and summaries.
"""

from typing import Sequence

from rich.console import Console
from rich.table import Table

from ..core.catalog.base import Catalog
from ..core.config import SETS_PER_SLOT
from ..core.controller import (
    ProgressionUnlocked,
    RestFinished,
    RestStarted,
    TargetUpdated,
    WorkoutCompleted,
    WorkoutController,
    WorkoutEvent,
    WorkoutState,
)
from ..core.metrics import (
    SlotComparison,
    group_by_week,
    last_workout_dates,
    session_total_reps,
    session_volume_kg,
)
from ..core.models import WorkoutSession, parse_timestamp

console = Console()

_TREND_STYLE = {
    "up": "green",
    "down": "red",
    "same": "white",
    "new": "dim",
}


def format_clock(seconds: int) -> str:
    """Seconds → MM:SS."""
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_date(timestamp: str) -> str:
    """ISO timestamp → YYYY-MM-DD in local time."""
    return parse_timestamp(timestamp).astimezone().strftime("%Y-%m-%d")


def format_weight(weight_kg: float) -> str:
    return f"{weight_kg:g} kg"


def format_reps(repetitions: int) -> str:
    return "12+" if repetitions > 12 else str(repetitions)


def format_templates_table(catalog: Catalog, history: Sequence[WorkoutSession]) -> Table:
    """
    Create a Rich table listing templates and when each was last trained.

    Args:
        catalog: Catalog with the templates
        history: Completed sessions

    Returns:
        Rich Table object
    """
    last_dates = last_workout_dates(history)
    table = Table(title="Select Your Workout")

    table.add_column("ID", style="cyan")
    table.add_column("Workout", style="bold")
    table.add_column("Exercises", justify="right")
    table.add_column("Last workout", justify="right")

    for template in catalog.templates:
        last = last_dates.get(template.id)
        table.add_row(
            template.id,
            template.name,
            str(len(template.slots)),
            format_date(last) if last else "Never",
        )

    return table


def print_status(controller: WorkoutController) -> None:
    """Print where the active workout stands and what the user should do next."""
    active = controller.active
    if active is None:
        console.print("[yellow]No workout in progress.[/yellow]")
        return

    state = controller.state
    slot_count = len(active.template.slots)
    console.print(
        f"[bold cyan]{active.template.name}[/bold cyan]  "
        f"[dim]{format_clock(controller.elapsed_seconds())} elapsed · "
        f"exercise {min(active.current_exercise_index + 1, slot_count)}/{slot_count} · "
        f"{active.progress:.0%} done[/dim]"
    )

    if state == WorkoutState.RESTING:
        remaining = controller.remaining_rest() or 0
        console.print(f"[bold]Rest Time:[/bold] {remaining}s")
        console.print(f"Next up: [bold]{controller.next_up()}[/bold]")
        return

    exercise = controller.current_exercise()
    if exercise is None:
        return
    console.print(
        f"[bold]{exercise.name}[/bold]  Set {active.current_set_index + 1} of {SETS_PER_SLOT}"
    )

    if state == WorkoutState.AWAITING_WEIGHT:
        suggestion = controller.suggested_weight()
        if suggestion is not None:
            console.print(f"Weight: [dim]not set (same as last time: {format_weight(suggestion)})[/dim]")
        else:
            console.print("Weight: [dim]not set[/dim]")
        return

    assert controller.weight is not None
    console.print(f"Weight: {format_weight(controller.weight)}")
    console.print(f"Your Target: [bold blue]{controller.target_reps()}+ Reps[/bold blue]")


def print_event(event: WorkoutEvent) -> None:
    """Render a controller event."""
    if isinstance(event, ProgressionUnlocked):
        console.print()
        console.print("[bold green]Progression Unlocked![/bold green]")
        console.print(
            f"You've hit the 12/8/8 target on {event.exercise_name} "
            f"({'/'.join(format_reps(r) for r in event.repetitions)}). "
            "Increase the weight next week!"
        )
    elif isinstance(event, RestStarted):
        print_info(f"Rest {event.duration}s — next up: {event.next_up}")
    elif isinstance(event, RestFinished):
        if not event.skipped:
            print_info("Rest is over.")
    elif isinstance(event, TargetUpdated):
        print_info(f"Target updated: {event.target_reps}+ reps")
    elif isinstance(event, WorkoutCompleted):
        console.print()
        print_success("Workout Complete!")


def print_rest_tick(remaining: int, next_up: str) -> None:
    console.print(
        f"  Rest [bold]{format_clock(remaining)}[/bold]  next up: {next_up}   ",
        end="\r",
    )


def format_session_table(session: WorkoutSession, catalog: Catalog, title: str) -> Table:
    """Rich table of one session: exercise, weight, reps per set."""
    table = Table(title=title, title_justify="left")

    table.add_column("Exercise", style="bold")
    table.add_column("Slot", style="dim")
    table.add_column("Weight", justify="right")
    table.add_column("Reps (S1/S2/S3)", justify="right")

    for slot_id, logs in session.logs.items():
        if not logs:
            continue
        table.add_row(
            catalog.exercise_name_for_slot_id(slot_id) or slot_id,
            slot_id,
            format_weight(logs[0].weight_kg),
            " / ".join(format_reps(log.repetitions) for log in logs),
        )

    return table


def template_name(catalog: Catalog, template_id: str) -> str:
    for template in catalog.templates:
        if template.id == template_id:
            return template.name
    return "Unknown Workout"


def print_history(sessions: Sequence[WorkoutSession], catalog: Catalog) -> None:
    """
    Print session history grouped by week, newest first.

    The # shown for each session is its 1-based position in newest-first
    order, the id used by edit-record, delete-record and summary.
    """
    if not sessions:
        console.print("[yellow]No sessions recorded yet.[/yellow]")
        return

    record_ids = {s.id: i for i, s in enumerate(sessions, 1)}

    for week, week_sessions in group_by_week(sessions):
        console.print()
        console.rule(f"[bold]Week of {week.isoformat()}[/bold]")
        for session in week_sessions:
            title = (
                f"#{record_ids[session.id]}  {template_name(catalog, session.template_id)}"
                f" — {format_date(session.date)}  [dim]({session_total_reps(session)} reps, {session_volume_kg(session):g} kg moved)[/dim]"
            )
            console.print(format_session_table(session, catalog, title))


def print_summary(session: WorkoutSession, rows: Sequence[SlotComparison], catalog: Catalog) -> None:
    """Print the post-workout comparison against the previous session."""
    table = Table(
        title=f"{template_name(catalog, session.template_id)} — {format_date(session.date)}",
    )

    table.add_column("Exercise", style="bold")
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("S1 vs. last", justify="right")

    for row in rows:
        style = _TREND_STYLE[row.trend]
        previous = (
            format_reps(row.previous_first_set_reps)
            if row.previous_first_set_reps is not None
            else "N/A"
        )
        table.add_row(
            row.exercise_name,
            format_weight(row.weight_kg),
            " / ".join(format_reps(r) for r in row.repetitions),
            f"[{style}]{format_reps(row.first_set_reps)} vs. {previous}[/{style}]",
        )

    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
