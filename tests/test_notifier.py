"""Tests for the background rest notifiers."""

import threading

from aesthetic_progression.core.rest_timer import RestMessage
from aesthetic_progression.io import notifier
from aesthetic_progression.io.notifier import DetachedNotifier, ThreadNotifier, notification_body


class TestThreadNotifier:
    def test_new_post_replaces_pending_alert(self):
        shown = []
        fired = threading.Event()

        def display(message):
            shown.append(message.next_up)
            fired.set()

        n = ThreadNotifier(display=display)
        n.post(RestMessage(duration=60, next_up="Press - Set 2"))
        first = n._pending
        n.post(RestMessage(duration=0, next_up="Press - Set 3"))

        assert fired.wait(5)
        first.join(5)
        assert shown == ["Press - Set 3"]

    def test_cancel_drops_pending_alert(self):
        shown = []
        n = ThreadNotifier(display=shown.append)
        n.post(RestMessage(duration=60, next_up="Fly - Set 1"))
        pending = n._pending
        n.cancel()

        pending.join(5)
        assert shown == []


class TestDetachedNotifier:
    def test_every_post_spawns_its_own_process(self, monkeypatch):
        spawned = []
        monkeypatch.setattr(notifier.subprocess, "Popen", lambda args, **kwargs: spawned.append(args))

        n = DetachedNotifier()
        n.post(RestMessage(duration=90, next_up="Press - Set 2"))
        n.post(RestMessage(duration=60, next_up="Fly - Set 1"))

        assert [args[-2:] for args in spawned] == [["90", "Press - Set 2"], ["60", "Fly - Set 1"]]
        assert all(args[1:3] == ["-m", "aesthetic_progression.io.notifier"] for args in spawned)


def test_notification_body():
    assert notification_body(RestMessage(duration=90, next_up="Last Set!")) == (
        "Time for your next set: Last Set!"
    )


def test_detached_entry_point_usage():
    assert notifier.main([]) == 2
