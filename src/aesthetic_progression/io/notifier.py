"""
Background "rest is over" notifications.

Two delivery modes:

  ThreadNotifier: in-process timer thread, used by the interactive workout
    loop where the process stays alive through the rest period.

  DetachedNotifier: spawns ``python -m aesthetic_progression.io.notifier``
    in its own session so the alert still fires after a one-shot CLI
    command has exited.

Both are fire-and-forget: posting never waits for the rest to end.
ThreadNotifier replaces an alert still pending from its previous post;
detached alerts run independently and are never replaced.
"""

import logging
import shutil
import subprocess
import sys
import threading
import time
from typing import Callable

from rich.console import Console

from ..core.config import REST_OVER_TITLE
from ..core.rest_timer import RestMessage

logger = logging.getLogger(__name__)


def notification_body(message: RestMessage) -> str:
    return f"Time for your next set: {message.next_up}"


def show_notification(message: RestMessage, console: Console | None = None) -> None:
    """
    Display the alert: desktop notification if available, else the terminal bell.
    """
    notify_send = shutil.which("notify-send")
    if notify_send is not None:
        subprocess.run(
            [notify_send, REST_OVER_TITLE, notification_body(message)],
            check=False,
        )
        return
    out = console if console is not None else Console(stderr=True)
    out.bell()
    out.print(f"[bold green]{REST_OVER_TITLE}[/bold green] {notification_body(message)}")


class ThreadNotifier:
    """Fires ``display`` on a daemon timer thread after the rest duration."""

    def __init__(self, display: Callable[[RestMessage], None] = show_notification):
        self.display = display
        self._pending: threading.Timer | None = None

    def post(self, message: RestMessage) -> None:
        self.cancel()
        timer = threading.Timer(message.duration, self.display, args=(message,))
        timer.daemon = True
        timer.start()
        self._pending = timer

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None


class DetachedNotifier:
    """Hands the alert to a separate process that outlives the caller."""

    def post(self, message: RestMessage) -> None:
        subprocess.Popen(
            [
                sys.executable,
                "-m",
                "aesthetic_progression.io.notifier",
                str(message.duration),
                message.next_up,
            ],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        logger.debug("Scheduled detached rest alert in %ds", message.duration)


def main(argv: list[str] | None = None) -> int:
    """Entry point of the detached process: ``<duration> <next_up>``."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2:
        print("usage: python -m aesthetic_progression.io.notifier SECONDS NEXT_UP", file=sys.stderr)
        return 2
    message = RestMessage(duration=int(args[0]), next_up=args[1])
    time.sleep(message.duration)
    show_notification(message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
