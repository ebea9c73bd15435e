"""Tests for history metrics used by the dashboard, history and summary views."""

from datetime import date

from aesthetic_progression.core.metrics import (
    compare_first_sets,
    group_by_week,
    last_workout_dates,
    session_total_reps,
    session_volume_kg,
    week_start,
)

from conftest import T0, make_session

DAY = 86_400


class TestLastWorkoutDates:
    def test_latest_per_template(self):
        history = [
            make_session("a", "t1", T0 - 3 * DAY, {}),
            make_session("b", "t1", T0, {}),
            make_session("c", "t2", T0 - DAY, {}),
        ]
        dates = last_workout_dates(history)
        assert dates == {"t1": history[1].date, "t2": history[2].date}

    def test_empty(self):
        assert last_workout_dates([]) == {}


class TestWeeks:
    def test_week_starts_monday(self):
        assert week_start(date(2025, 10, 9)) == date(2025, 10, 6)  # Thursday
        assert week_start(date(2025, 10, 6)) == date(2025, 10, 6)
        assert week_start(date(2025, 10, 12)) == date(2025, 10, 6)  # Sunday

    def test_group_by_week_newest_first(self):
        thu = make_session("thu", "t1", T0, {})
        mon = make_session("mon", "t2", T0 - 3 * DAY, {})
        prev_fri = make_session("prev_fri", "t1", T0 - 6 * DAY, {})

        weeks = group_by_week([prev_fri, thu, mon])

        assert [w for w, _ in weeks] == [date(2025, 10, 6), date(2025, 9, 29)]
        assert [s.id for s in weeks[0][1]] == ["thu", "mon"]
        assert [s.id for s in weeks[1][1]] == ["prev_fri"]


class TestCompareFirstSets:
    def test_trends_against_previous_session(self, catalog):
        previous = make_session("p", "t1", T0 - 7 * DAY, {"a1": [(40, 10), (40, 8), (40, 8)]})
        current = make_session(
            "c", "t1", T0,
            {"a1": [(40, 11), (40, 8), (40, 8)], "a2": [(20, 12), (20, 8), (20, 8)]},
        )

        rows = compare_first_sets(current, [current, previous], catalog)

        assert [(r.slot_id, r.trend) for r in rows] == [("a1", "up"), ("a2", "new")]
        assert rows[0].exercise_name == "Chest Press"
        assert rows[0].previous_first_set_reps == 10
        assert rows[0].repetitions == [11, 8, 8]
        assert rows[1].previous_first_set_reps is None

    def test_down_and_same(self, catalog):
        previous = make_session("p", "t1", T0 - DAY, {"a1": [(40, 10)], "a2": [(20, 9)]})
        current = make_session("c", "t1", T0, {"a1": [(40, 9)], "a2": [(20, 9)]})
        rows = compare_first_sets(current, [previous], catalog)
        assert [r.trend for r in rows] == ["down", "same"]

    def test_later_sessions_are_not_previous(self, catalog):
        earlier = make_session("e", "t1", T0 - DAY, {"a1": [(40, 8)]})
        target = make_session("t", "t1", T0, {"a1": [(40, 9)]})
        later = make_session("l", "t1", T0 + DAY, {"a1": [(40, 12)]})

        rows = compare_first_sets(target, [later, target, earlier], catalog)

        assert rows[0].previous_first_set_reps == 8

    def test_other_templates_ignored(self, catalog):
        other = make_session("o", "t2", T0 - DAY, {"b1": [(40, 8)]})
        current = make_session("c", "t1", T0, {"a1": [(40, 9)]})
        assert compare_first_sets(current, [other], catalog)[0].trend == "new"


class TestTotals:
    def test_total_reps_and_volume(self):
        session = make_session("s", "t1", T0, {"a1": [(40, 10), (40, 8)], "a2": [(20, 12)]})
        assert session_total_reps(session) == 30
        assert session_volume_kg(session) == 40 * 18 + 20 * 12
