"""History commands: show-history, summary, edit-record, delete-record."""

import json
from typing import Annotated, Optional

import typer

from ...core.catalog import get_catalog
from ...core.metrics import compare_first_sets
from ...core.models import WorkoutSession
from ...io.history_store import HistoryStore
from ...io.serializers import ValidationError, workout_session_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_history_store

RecordIdArgument = Annotated[
    int,
    typer.Argument(help="Session # (see the # column in show-history, 1 = newest)"),
]


def load_sessions(store: HistoryStore) -> list[WorkoutSession]:
    """Stored sessions, newest first; an unreadable history ends the command with an error."""
    try:
        return store.list_sessions()
    except (OSError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _pick_session(sessions: list[WorkoutSession], record_id: int) -> WorkoutSession:
    if not sessions:
        views.print_error("No sessions in history.")
        raise typer.Exit(1)
    if record_id < 1 or record_id > len(sessions):
        views.print_error(f"Record ID must be between 1 and {len(sessions)}")
        raise typer.Exit(1)
    return sessions[record_id - 1]


@app.command("show-history")
def show_history(
    data_dir: DataDirOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of sessions to show"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Display workout history grouped by week, newest first.
    """
    sessions = load_sessions(get_history_store(data_dir))

    if limit is not None:
        sessions = sessions[:limit]

    if json_out:
        print(json.dumps(
            [workout_session_to_dict(s) for s in sessions],
            indent=2,
            ensure_ascii=False,
        ))
        return

    views.print_history(sessions, get_catalog())


@app.command("summary")
def summary(
    record_id: Annotated[
        int,
        typer.Argument(help="Session # to summarise (default: newest)"),
    ] = 1,
    data_dir: DataDirOption = None,
) -> None:
    """
    Compare a session's first-set reps with the previous session of the same workout.
    """
    sessions = load_sessions(get_history_store(data_dir))
    session = _pick_session(sessions, record_id)
    catalog = get_catalog()
    views.print_summary(session, compare_first_sets(session, sessions, catalog), catalog)


@app.command("edit-record")
def edit_record(
    record_id: RecordIdArgument,
    slot_id: Annotated[
        str,
        typer.Option("--slot", help="Slot ID of the exercise to edit (see show-history)"),
    ],
    set_number: Annotated[
        Optional[int],
        typer.Option("--set", help="Set number 1–3 whose reps change"),
    ] = None,
    reps: Annotated[
        Optional[int],
        typer.Option("--reps", "-r", help="Corrected reps for --set"),
    ] = None,
    weight_kg: Annotated[
        Optional[float],
        typer.Option("--weight", "-w", help="Corrected weight, applied to every set of the slot"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Correct reps or weight in a stored session.

      aesthetic-progression edit-record 1 --slot d1_e2 --set 2 --reps 9
      aesthetic-progression edit-record 1 --slot d1_e2 --weight 45
    """
    store = get_history_store(data_dir)
    session = _pick_session(load_sessions(store), record_id)

    if reps is None and weight_kg is None:
        views.print_error("Nothing to change: pass --set/--reps and/or --weight.")
        raise typer.Exit(1)
    if reps is not None and set_number is None:
        views.print_error("--reps needs --set.")
        raise typer.Exit(1)

    try:
        updated = session
        if reps is not None:
            assert set_number is not None
            updated = updated.with_repetitions(slot_id, set_number - 1, reps)
        if weight_kg is not None:
            updated = updated.with_weight(slot_id, weight_kg)
    except (KeyError, IndexError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        store.update(updated)
    except (OSError, KeyError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Updated session #{record_id}")
    views.console.print(views.format_session_table(updated, get_catalog(), views.format_date(updated.date)))


@app.command("delete-record")
def delete_record(
    record_id: RecordIdArgument,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove a session permanently.

    Use 'show-history' to see session IDs in the # column.
    """
    store = get_history_store(data_dir)
    target = _pick_session(load_sessions(store), record_id)
    name = views.template_name(get_catalog(), target.template_id)
    views.console.print(
        f"Session to delete: [bold]{views.format_date(target.date)}[/bold] ({name})"
    )

    if not force and not views.confirm_action(
        "Are you sure you want to delete this session permanently?"
    ):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete(target.id)
    except (OSError, KeyError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted session #{record_id}: {views.format_date(target.date)} ({name})")
