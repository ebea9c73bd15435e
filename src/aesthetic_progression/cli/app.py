"""Shared Typer app object, shared option types, and store/controller factories."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..core.catalog import get_catalog
from ..core.controller import EventSink, WorkoutController
from ..core.rest_timer import RestNotifier
from ..io.active_workout_store import ActiveWorkoutStore
from ..io.history_store import HistoryStore, get_default_data_dir, get_default_history_path

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Data directory (default: ~/.aesthetic-progression)"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="aesthetic-progression",
    help="Guided 12/8/8 gym workout tracker with rest timer and rep targets.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def configure_logging(verbose: bool = False) -> None:
    """Route log records through Rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


def get_data_dir(data_dir: Path | None) -> Path:
    return data_dir if data_dir is not None else get_default_data_dir()


def get_history_store(data_dir: Path | None) -> HistoryStore:
    """Get history store for the data directory or the default location."""
    return HistoryStore(get_default_history_path(data_dir=get_data_dir(data_dir)))


def get_active_store(data_dir: Path | None) -> ActiveWorkoutStore:
    return ActiveWorkoutStore(get_data_dir(data_dir))


def build_controller(
    data_dir: Path | None,
    notifier: RestNotifier | None = None,
    on_event: EventSink | None = None,
) -> WorkoutController:
    """Wire a controller to the stores under data_dir and the bundled catalog."""
    return WorkoutController(
        catalog=get_catalog(),
        history_store=get_history_store(data_dir),
        active_store=get_active_store(data_dir),
        notifier=notifier,
        on_event=on_event,
    )
