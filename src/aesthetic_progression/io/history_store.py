"""
JSONL-based history storage for finished workouts.

Handles reading, writing, and managing the workout history file, and pushes
fresh snapshots to subscribers after every change.
"""

import json
import logging
from pathlib import Path
from typing import Callable

from ..core.config import DATA_DIR_NAME, DEFAULT_USER_ID
from ..core.estimator import sessions_newest_first
from ..core.models import WorkoutSession
from .serializers import ValidationError, dict_to_workout_session, session_to_json_line

logger = logging.getLogger(__name__)

HistoryListener = Callable[[list[WorkoutSession]], None]


class HistoryStore:
    """
    Manages workout history stored in JSONL format.

    The history file contains one JSON object per line, one line per
    finished session. Sessions are returned newest first.
    """

    def __init__(self, history_path: str | Path):
        """
        Initialize the history store.

        Args:
            history_path: Path to the JSONL history file
        """
        self.history_path = Path(history_path)
        self._listeners: list[HistoryListener] = []

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def init(self) -> None:
        """
        Initialize empty history file if it doesn't exist.

        Creates parent directories if needed.
        """
        self.history_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.history_path.exists():
            self.history_path.touch()

    def list_sessions(self) -> list[WorkoutSession]:
        """
        Load all sessions from the history file.

        A missing file is an empty history.

        Returns:
            List of WorkoutSession, newest first

        Raises:
            ValidationError: If a line cannot be parsed
        """
        if not self.exists():
            return []

        sessions: list[WorkoutSession] = []

        # Binary read so a bad byte is reported against its line
        with open(self.history_path, "rb") as f:
            for line_num, raw in enumerate(f, 1):
                try:
                    line = raw.decode("utf-8").strip()
                    if not line:
                        continue
                    sessions.append(dict_to_workout_session(json.loads(line)))
                except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e

        return sessions_newest_first(sessions)

    def get_session(self, session_id: str) -> WorkoutSession | None:
        for session in self.list_sessions():
            if session.id == session_id:
                return session
        return None

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        """
        Register a listener for history snapshots.

        The listener is called immediately with the current snapshot and
        again after every add / update / delete. An unreadable history file
        is logged and delivered as an empty snapshot.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)
        listener(self._snapshot())

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add(self, session: WorkoutSession) -> None:
        """
        Append a finished session.

        Raises:
            ValidationError: If a session with the same id already exists
        """
        sessions = self.list_sessions()
        if any(s.id == session.id for s in sessions):
            raise ValidationError(f"Session {session.id} already exists")
        self.init()
        with open(self.history_path, "a", encoding="utf-8") as f:
            f.write(session_to_json_line(session) + "\n")
        logger.debug("Added session %s", session.id)
        self._notify()

    def update(self, session: WorkoutSession) -> None:
        """
        Replace the stored session that has the same id.

        Raises:
            KeyError: If no session has that id
        """
        sessions = self.list_sessions()
        for i, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[i] = session
                break
        else:
            raise KeyError(f"Session {session.id} not found")
        self._write_sessions(sessions)
        logger.debug("Updated session %s", session.id)
        self._notify()

    def delete(self, session_id: str) -> None:
        """
        Remove a session by id.

        Raises:
            KeyError: If no session has that id
        """
        sessions = self.list_sessions()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            raise KeyError(f"Session {session_id} not found")
        self._write_sessions(remaining)
        logger.debug("Deleted session %s", session_id)
        self._notify()

    def _write_sessions(self, sessions: list[WorkoutSession]) -> None:
        """
        Rewrite the history file, oldest session first.

        Args:
            sessions: Sessions to write
        """
        self.init()
        with open(self.history_path, "w", encoding="utf-8") as f:
            for session in reversed(sessions_newest_first(sessions)):
                f.write(session_to_json_line(session) + "\n")

    def _snapshot(self) -> list[WorkoutSession]:
        try:
            return self.list_sessions()
        except (OSError, ValidationError):
            logger.exception("Could not read workout history from %s", self.history_path)
            return []

    def _notify(self) -> None:
        snapshot = self._snapshot()
        for listener in list(self._listeners):
            listener(snapshot)


def get_default_data_dir() -> Path:
    """Return ~/.aesthetic-progression, the default home of all data files."""
    return Path.home() / DATA_DIR_NAME


def get_default_history_path(user_id: str = DEFAULT_USER_ID, data_dir: Path | None = None) -> Path:
    """
    Get the history file path for a user.

    Args:
        user_id: Local user identifier (default: "local")
        data_dir: Base directory (default: ~/.aesthetic-progression)

    Returns:
        ``<data_dir>/<user_id>_history.jsonl``
    """
    base = data_dir if data_dir is not None else get_default_data_dir()
    return base / f"{user_id}_history.jsonl"
