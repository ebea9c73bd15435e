"""
CLI entry point using Typer.

Provides commands for guided gym workouts:
- templates: List workout templates
- start / resume: Run a workout interactively
- status / log-set / skip-rest / discard: Step through a workout one command at a time
- show-history / summary: Review completed sessions
- edit-record / delete-record: Correct stored sessions
"""

from typing import Annotated

import typer

from ..io.notifier import ThreadNotifier
from . import views
from .app import DataDirOption, app, build_controller, configure_logging
from .commands import history, workout  # noqa: F401  (registers commands)
from .commands.history import show_history
from .commands.workout import run_guided, templates


def _menu_start(ctx: typer.Context, data_dir) -> None:
    """Pick a template by number and run it guided."""
    ctx.invoke(templates, data_dir=data_dir)

    controller = build_controller(data_dir, on_event=views.print_event)
    try:
        options = controller.catalog.templates
        while True:
            raw = views.console.input("Workout # or ID (Enter to cancel): ").strip()
            if not raw:
                views.print_info("Cancelled.")
                return
            if raw.isdigit() and 1 <= int(raw) <= len(options):
                template = options[int(raw) - 1]
                break
            try:
                template = controller.catalog.get_template(raw)
                break
            except ValueError as e:
                views.print_error(str(e))

        controller.notifier = ThreadNotifier()
        controller.start(template)
        views.print_success(f"Started {template.name}")
        run_guided(controller)
    finally:
        controller.close()


def _offer_resume(data_dir) -> bool:
    """
    Ask what to do with a persisted unfinished workout.

    Returns True if the menu should still be shown afterwards.
    """
    controller = build_controller(data_dir, notifier=ThreadNotifier(), on_event=views.print_event)
    try:
        controller.resume()
        active = controller.active
        if active is None:
            return True

        views.print_warning(
            f"Unfinished workout: {active.template.name} "
            f"({active.progress:.0%} done, started {views.format_date(active.start_time)})"
        )
        choice = views.console.input("\\[r]esume, \\[d]iscard or \\[k]eep for later [r]: ").strip().lower() or "r"
        if choice.startswith("r"):
            run_guided(controller)
            return False
        if choice.startswith("d"):
            if views.confirm_action("Are you sure you want to discard this workout progress?"):
                controller.discard()
                views.print_success("Workout discarded.")
        return True
    finally:
        controller.close()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Guided gym workout tracker. Run without a command for interactive mode
    (--data-dir selects the data directory it works on).
    """
    configure_logging(verbose)

    if ctx.invoked_subcommand is not None:
        return

    # ── Interactive main menu ───────────────────────────────────────────────
    views.console.print()
    views.console.print("[bold cyan]aesthetic-progression[/bold cyan] — guided workout tracker")

    if not _offer_resume(data_dir):
        return

    views.console.print()

    menu = {
        "1": ("start",         "Start a workout"),
        "2": ("show-history",  "Show history"),
        "0": ("quit",          "Quit"),
    }

    for key, (_, desc) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [1]: ").strip() or "1"

    if choice == "0":
        raise typer.Exit(0)

    chosen = {k: v[0] for k, v in menu.items()}.get(choice)
    if chosen is None:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    if chosen == "start":
        _menu_start(ctx, data_dir)
    elif chosen == "show-history":
        ctx.invoke(show_history, data_dir=data_dir)


if __name__ == "__main__":
    app()
