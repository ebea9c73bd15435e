"""
Single-slot persistence for the in-progress workout.

One JSON file holds the whole ActiveWorkoutState snapshot. Saving None
removes the file. Anything unreadable on load is treated as "nothing to
resume" and logged; it never raises to the caller.
"""

import json
import logging
from pathlib import Path

from ..core.config import ACTIVE_WORKOUT_FILENAME
from ..core.models import ActiveWorkoutState
from .serializers import active_state_to_dict, dict_to_active_state

logger = logging.getLogger(__name__)


class ActiveWorkoutStore:
    """Persists the one active workout under a fixed file name."""

    def __init__(self, data_dir: str | Path):
        self.path = Path(data_dir) / ACTIVE_WORKOUT_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, state: ActiveWorkoutState | None) -> None:
        """
        Persist the full snapshot, or clear it when state is None.

        Write failures are logged; the caller's in-memory state stays as is.
        """
        try:
            if state is None:
                self.path.unlink(missing_ok=True)
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(active_state_to_dict(state), f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.path)
        except OSError:
            logger.exception("Could not save active workout state to %s", self.path)

    def load(self) -> ActiveWorkoutState | None:
        """
        Return the last saved snapshot.

        Returns:
            ActiveWorkoutState, or None if nothing is saved or the data is unreadable
        """
        if not self.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return dict_to_active_state(data)
        except (OSError, ValueError) as e:  # JSONDecodeError and ValidationError are ValueErrors
            logger.warning("Ignoring unreadable active workout state in %s: %s", self.path, e)
            return None
