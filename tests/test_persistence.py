"""Tests for JSON serializers, the JSONL history store and the active-workout store."""

import json

import pytest

from aesthetic_progression.core.models import ActiveWorkoutState, SetLog
from aesthetic_progression.io.active_workout_store import ActiveWorkoutStore
from aesthetic_progression.io.history_store import HistoryStore, get_default_history_path
from aesthetic_progression.io.serializers import (
    ValidationError,
    active_state_to_dict,
    dict_to_active_state,
    dict_to_workout_session,
    workout_session_to_dict,
)

from conftest import T0, make_session

DAY = 86_400


def _active_state(catalog) -> ActiveWorkoutState:
    return ActiveWorkoutState(
        template=catalog.get_template("t2"),
        session_logs={"b1": [SetLog(1, 50.0, 11), SetLog(2, 50.0, 8)]},
        current_exercise_index=0,
        current_set_index=2,
        start_time="2025-10-09T08:53:20.000+00:00",
        timer_end_time=1_760_000_090_000,
    )


class TestSerializers:
    def test_session_uses_camel_case_keys(self):
        session = make_session("s1", "t1", T0, {"a1": [(40, 12)]})
        data = workout_session_to_dict(session)

        assert data == {
            "id": "s1",
            "templateId": "t1",
            "date": "2025-10-09T08:53:20.000+00:00",
            "logs": {"a1": [{"setNumber": 1, "weight_kg": 40, "repetitions": 12}]},
        }
        assert dict_to_workout_session(data) == session

    def test_session_accepts_z_suffix(self):
        session = dict_to_workout_session(
            {"id": "s1", "templateId": "t1", "date": "2025-10-09T08:53:20.000Z", "logs": {}}
        )
        assert session.completed_at.timestamp() == T0

    @pytest.mark.parametrize(
        "data",
        [
            {"templateId": "t1", "date": "2025-10-09T08:53:20Z", "logs": {}},
            {"id": "s1", "templateId": "t1", "date": "yesterday", "logs": {}},
            {"id": "s1", "templateId": "t1", "date": "2025-10-09T08:53:20Z",
             "logs": {"a1": [{"setNumber": 1, "weight_kg": 40, "repetitions": 0}]}},
            {"id": "s1", "templateId": "t1", "date": "2025-10-09T08:53:20Z",
             "logs": {"a1": [{"setNumber": 2, "weight_kg": 40, "repetitions": 8},
                             {"setNumber": 1, "weight_kg": 40, "repetitions": 8}]}},
            {"id": "s1", "templateId": "t1", "date": "2025-10-09T08:53:20Z", "logs": []},
        ],
    )
    def test_invalid_session_rejected(self, data):
        with pytest.raises(ValidationError):
            dict_to_workout_session(data)

    def test_active_state_round_trip(self, catalog):
        state = _active_state(catalog)
        data = active_state_to_dict(state)

        assert data["currentSetIndex"] == 2
        assert data["timerEndTime"] == 1_760_000_090_000
        assert data["template"]["exercises"][1] == {
            "id": "b2_r",
            "exerciseDefinitionId": "curl_r",
            "order": 2,
        }
        assert dict_to_active_state(json.loads(json.dumps(data))) == state

    def test_active_state_null_timer(self, catalog):
        state = _active_state(catalog)
        state.timer_end_time = None
        assert dict_to_active_state(active_state_to_dict(state)).timer_end_time is None


class TestActiveWorkoutStore:
    def test_save_then_load(self, tmp_path, catalog):
        store = ActiveWorkoutStore(tmp_path)
        state = _active_state(catalog)

        store.save(state)

        assert store.exists()
        assert store.load() == state

    def test_save_none_clears(self, tmp_path, catalog):
        store = ActiveWorkoutStore(tmp_path)
        store.save(_active_state(catalog))
        store.save(None)

        assert not store.exists()
        assert store.load() is None

    def test_missing_file(self, tmp_path):
        assert ActiveWorkoutStore(tmp_path / "nowhere").load() is None

    @pytest.mark.parametrize(
        "content",
        ["{not json", "[]", '{"template": {"id": "t1"}}', b"\xff\xfe\x00garbage"],
    )
    def test_corrupt_file_loads_as_none(self, tmp_path, content):
        store = ActiveWorkoutStore(tmp_path)
        if isinstance(content, bytes):
            store.path.write_bytes(content)
        else:
            store.path.write_text(content, encoding="utf-8")

        assert store.load() is None


class TestHistoryStore:
    def test_missing_file_is_empty(self, history_store):
        assert not history_store.exists()
        assert history_store.list_sessions() == []

    def test_add_lists_newest_first(self, history_store):
        old = make_session("old", "t1", T0 - DAY, {"a1": [(40, 10)]})
        new = make_session("new", "t2", T0, {"b1": [(50, 9)]})
        history_store.add(new)
        history_store.add(old)

        assert [s.id for s in history_store.list_sessions()] == ["new", "old"]
        assert history_store.get_session("old") == old
        assert history_store.get_session("missing") is None

    def test_one_line_per_session(self, history_store):
        history_store.add(make_session("s1", "t1", T0, {"a1": [(40, 10)]}))
        history_store.add(make_session("s2", "t1", T0 + DAY, {"a1": [(40, 11)]}))

        lines = history_store.history_path.read_text(encoding="utf-8").splitlines()
        assert [json.loads(line)["id"] for line in lines] == ["s1", "s2"]

    def test_duplicate_id_rejected(self, history_store):
        session = make_session("s1", "t1", T0, {})
        history_store.add(session)
        with pytest.raises(ValidationError):
            history_store.add(session)

    def test_update_and_delete(self, history_store):
        session = make_session("s1", "t1", T0, {"a1": [(40, 10), (40, 8), (40, 8)]})
        history_store.add(session)
        history_store.add(make_session("s2", "t1", T0 + DAY, {}))

        history_store.update(session.with_repetitions("a1", 1, 9).with_weight("a1", 42.5))
        stored = history_store.get_session("s1")
        assert [log.repetitions for log in stored.logs["a1"]] == [10, 9, 8]
        assert {log.weight_kg for log in stored.logs["a1"]} == {42.5}

        history_store.delete("s1")
        assert [s.id for s in history_store.list_sessions()] == ["s2"]

    def test_update_or_delete_unknown(self, history_store):
        with pytest.raises(KeyError):
            history_store.update(make_session("ghost", "t1", T0, {}))
        with pytest.raises(KeyError):
            history_store.delete("ghost")

    def test_bad_line_reports_line_number(self, history_store):
        history_store.history_path.write_text('{"id": "s1"}\n', encoding="utf-8")
        with pytest.raises(ValidationError, match="line 1"):
            history_store.list_sessions()

    def test_subscribe_receives_snapshots(self, history_store):
        snapshots = []
        unsubscribe = history_store.subscribe(lambda sessions: snapshots.append([s.id for s in sessions]))
        history_store.add(make_session("s1", "t1", T0, {}))
        unsubscribe()
        history_store.add(make_session("s2", "t1", T0 + DAY, {}))

        assert snapshots == [[], ["s1"]]

    def test_subscribe_to_unreadable_history(self, history_store):
        history_store.history_path.write_text("garbage\n", encoding="utf-8")
        snapshots = []
        history_store.subscribe(snapshots.append)
        assert snapshots == [[]]

    def test_invalid_utf8_reports_line_number(self, history_store):
        good = make_session("s1", "t1", T0, {})
        history_store.add(good)
        with open(history_store.history_path, "ab") as f:
            f.write(b'\xff\xfe{"id": 1}\n')

        with pytest.raises(ValidationError, match="line 2"):
            history_store.list_sessions()

    def test_subscribe_to_history_with_invalid_utf8(self, history_store):
        history_store.history_path.write_bytes(b'\xff\xfe{"id": 1}\n')
        snapshots = []
        history_store.subscribe(snapshots.append)
        assert snapshots == [[]]

    def test_default_history_path(self, tmp_path):
        assert get_default_history_path(data_dir=tmp_path) == tmp_path / "local_history.jsonl"
        assert get_default_history_path("alice", tmp_path).name == "alice_history.jsonl"


def test_history_store_accepts_str_path(tmp_path):
    store = HistoryStore(str(tmp_path / "h.jsonl"))
    store.init()
    assert store.exists()
    assert store.list_sessions() == []
