"""Workout commands: templates, start, resume, status, log-set, skip-rest, discard."""

import json
from typing import Annotated, Optional

import typer

from ...core.catalog import get_catalog
from ...core.config import MAX_REPS_INPUT
from ...core.controller import WorkoutController, WorkoutState
from ...core.metrics import compare_first_sets, last_workout_dates
from ...io.notifier import DetachedNotifier, ThreadNotifier
from ...io.serializers import active_state_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, build_controller, get_history_store
from .history import load_sessions

NotifyOption = Annotated[
    bool,
    typer.Option("--notify/--no-notify", help="Send a background alert when the rest is over"),
]


def parse_reps(raw: str) -> int:
    """
    Parse a reps entry: 1–12, or "12+" / "13" for the overflow button.

    Raises:
        ValueError: If the entry is not a valid rep count
    """
    text = raw.strip()
    if text == "12+":
        return MAX_REPS_INPUT
    reps = int(text)
    if not 1 <= reps <= MAX_REPS_INPUT:
        raise ValueError(f"Reps must be between 1 and 12 (or 12+), got {reps}")
    return reps


def _open_controller(data_dir, notify: bool = False, quiet: bool = False) -> WorkoutController:
    """Controller with the persisted workout (if any) already resumed; quiet drops event output."""
    controller = build_controller(
        data_dir,
        notifier=DetachedNotifier() if notify else None,
        on_event=None if quiet else views.print_event,
    )
    controller.resume()
    return controller


def _require_active(controller: WorkoutController) -> None:
    if controller.active is None:
        views.print_error("No workout in progress.")
        views.print_info("Run 'start <template-id>' to begin one.")
        raise typer.Exit(1)


def _print_finished(controller: WorkoutController) -> None:
    session = controller.last_completed
    if session is None:
        return
    rows = compare_first_sets(session, controller.history, controller.catalog)
    views.print_summary(session, rows, controller.catalog)


def _prompt_weight(controller: WorkoutController) -> bool:
    """Ask for the slot weight; returns False if the user paused."""
    suggestion = controller.suggested_weight()
    hint = f" [{suggestion:g}]" if suggestion is not None else ""
    while True:
        raw = views.console.input(f"Weight kg{hint} (q to pause): ").strip().lower()
        if raw == "q":
            return False
        if not raw and suggestion is not None:
            controller.accept_suggested_weight()
            return True
        try:
            controller.set_weight(float(raw))
            return True
        except ValueError:
            views.print_error("Enter a non-negative number, e.g. 42.5")


def _prompt_reps(controller: WorkoutController) -> bool:
    """Ask for the reps of the current set; returns False if the user paused."""
    while True:
        raw = views.console.input("Reps (1–12, 12+; q to pause): ").strip().lower()
        if raw == "q":
            return False
        try:
            reps = parse_reps(raw)
        except ValueError:
            views.print_error("Enter a number from 1 to 12, or 12+")
            continue
        controller.log_set(reps)
        return True


def _wait_rest(controller: WorkoutController) -> None:
    """Count the rest down in place; Ctrl+C skips it."""
    next_up = controller.next_up()
    try:
        controller.wait_rest(lambda left: views.print_rest_tick(left, next_up))
    except KeyboardInterrupt:
        controller.skip_rest()
    views.console.print()


def run_guided(controller: WorkoutController) -> None:
    """
    Drive the active workout interactively until it completes or the user pauses.

    Progress is persisted after every set, so a paused workout can be picked
    up again with 'resume'.
    """
    while True:
        state = controller.state
        if state in (WorkoutState.IDLE, WorkoutState.COMPLETE):
            break

        if state == WorkoutState.RESTING:
            _wait_rest(controller)
            continue

        views.console.print()
        views.print_status(controller)

        if state == WorkoutState.AWAITING_WEIGHT:
            if not _prompt_weight(controller):
                views.print_info("Workout paused. Run 'resume' to continue.")
                return
            views.console.print(
                f"Your Target: [bold blue]{controller.target_reps()}+ Reps[/bold blue]"
            )

        if not _prompt_reps(controller):
            views.print_info("Workout paused. Run 'resume' to continue.")
            return

    _print_finished(controller)


@app.command("templates")
def templates(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List workout templates and when each was last done.
    """
    catalog = get_catalog()
    history = load_sessions(get_history_store(data_dir))

    if json_out:
        last = last_workout_dates(history)
        print(json.dumps([
            {
                "id": t.id,
                "name": t.name,
                "exercises": len(t.slots),
                "last_workout": last.get(t.id),
            }
            for t in catalog.templates
        ], indent=2, ensure_ascii=False))
        return

    views.console.print(views.format_templates_table(catalog, history))


@app.command("start")
def start(
    template_id: Annotated[str, typer.Argument(help="Template ID (see 'templates')")],
    guided: Annotated[
        bool,
        typer.Option("--guided", "-g", help="Walk through the workout interactively"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Start a workout from a template.

    Any workout already in progress is discarded.
    """
    controller = _open_controller(data_dir)
    try:
        if controller.active is not None:
            views.print_warning(
                f"Discarding unfinished workout '{controller.active.template.name}'."
            )
        try:
            controller.start(template_id)
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)

        views.print_success(f"Started {controller.active.template.name}")
        if guided:
            controller.notifier = ThreadNotifier()
            run_guided(controller)
        else:
            views.print_status(controller)
    finally:
        controller.close()


@app.command("resume")
def resume(data_dir: DataDirOption = None) -> None:
    """
    Continue the unfinished workout interactively.
    """
    controller = _open_controller(data_dir)
    try:
        _require_active(controller)
        controller.notifier = ThreadNotifier()
        run_guided(controller)
    finally:
        controller.close()


@app.command("status")
def status(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the workout in progress.
    """
    controller = _open_controller(data_dir, quiet=json_out)
    try:
        if json_out:
            active = controller.active
            slot = controller.current_slot()
            print(json.dumps({
                "state": controller.state.value,
                "workout": active_state_to_dict(active) if active is not None else None,
                "slot_id": slot.id if slot is not None else None,
                "weight_kg": controller.weight,
                "suggested_weight_kg": controller.suggested_weight(),
                "target_reps": controller.target_reps(),
                "rest_remaining_s": controller.remaining_rest(),
                "next_up": controller.next_up() if active is not None else None,
            }, indent=2, ensure_ascii=False))
            return
        views.print_status(controller)
    finally:
        controller.close()


@app.command("log-set")
def log_set(
    reps: Annotated[str, typer.Argument(help="Reps performed: 1–12 or 12+")],
    weight_kg: Annotated[
        Optional[float],
        typer.Option("--weight", "-w", help="Weight in kg for the first set of an exercise"),
    ] = None,
    same: Annotated[
        bool,
        typer.Option("--same", "-s", help="First set of an exercise: reuse the weight from last time"),
    ] = False,
    notify: NotifyOption = True,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log the current set and start the rest timer.

      aesthetic-progression log-set 12 --weight 40
      aesthetic-progression log-set 11 --same
      aesthetic-progression log-set 12+

    Later sets of an exercise keep the weight chosen for its first set.
    """
    try:
        repetitions = parse_reps(reps)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    controller = _open_controller(data_dir, notify=notify, quiet=json_out)
    try:
        _require_active(controller)
        if controller.state == WorkoutState.RESTING:
            controller.skip_rest()

        try:
            if weight_kg is not None:
                controller.set_weight(weight_kg)
            elif same and controller.weight is None:
                controller.accept_suggested_weight()
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)

        if controller.weight is None:
            views.print_error(
                "No weight chosen for this exercise. Pass --weight KG or --same."
            )
            raise typer.Exit(1)

        slot = controller.current_slot()
        set_number = controller.active.current_set_index + 1
        logged_weight = controller.weight
        session = controller.log_set(repetitions)

        if json_out:
            print(json.dumps({
                "slot_id": slot.id if slot is not None else None,
                "set_number": set_number,
                "weight_kg": logged_weight,
                "repetitions": repetitions,
                "state": controller.state.value,
                "session_id": session.id if session is not None else None,
                "rest_remaining_s": controller.remaining_rest(),
            }, indent=2))
            return

        views.print_success(f"Logged set {set_number}: {views.format_reps(repetitions)} reps")
        if session is not None:
            _print_finished(controller)
    finally:
        controller.close()


@app.command("skip-rest")
def skip_rest(data_dir: DataDirOption = None) -> None:
    """
    End the current rest period early.
    """
    controller = _open_controller(data_dir)
    try:
        _require_active(controller)
        if controller.state != WorkoutState.RESTING:
            views.print_info("Not resting.")
            return
        controller.skip_rest()
        views.print_status(controller)
    finally:
        controller.close()


@app.command("discard")
def discard(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Throw away the workout in progress.
    """
    controller = _open_controller(data_dir)
    try:
        _require_active(controller)
        if not force and not views.confirm_action(
            "Are you sure you want to discard this workout progress?"
        ):
            views.print_info("Cancelled.")
            raise typer.Exit(0)
        controller.discard()
        views.print_success("Workout discarded.")
    finally:
        controller.close()
