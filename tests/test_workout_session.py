from datetime import datetime, timedelta, timezone
import itertools
import pytest

from liftlog.client import (
    ApiError,
    SessionState,
    SessionStateError,
    SlotState,
    WorkoutSession,
)

T0 = datetime(2026, 5, 1, 7, 30, tzinfo=timezone.utc)

ROUTINE = {
    "id": 7,
    "name": "Full Body",
    "exercises": [
        {"id": 2, "name": "B", "planned_sets": 1, "order_index": 1},
        {"id": 1, "name": "A", "planned_sets": 2, "order_index": 0},
    ],
}


class FakeStore:
    """In-memory stand-in for ApiClient; flip ``fail`` to make writes raise."""

    def __init__(self):
        self.ids = itertools.count(1)
        self.workouts = {}
        self.sets = {}
        self.fail = set()

    def _maybe_fail(self, op):
        if op in self.fail:
            raise ApiError(500, f"{op} exploded")

    def create_workout(self, *, routine_id, routine_name, start_time):
        self._maybe_fail("create_workout")
        w = {"id": next(self.ids), "routine_id": routine_id, "routine_name": routine_name,
             "start_time": start_time, "end_time": None}
        self.workouts[w["id"]] = w
        return dict(w)

    def create_set(self, workout_id, *, exercise_name, weight, reps, rpe, set_number):
        self._maybe_fail("create_set")
        s = {"id": next(self.ids), "workout_id": workout_id, "exercise_name": exercise_name,
             "weight": weight, "reps": reps, "rpe": rpe, "set_number": set_number}
        self.sets[s["id"]] = s
        return dict(s)

    def update_set(self, set_id, **fields):
        self._maybe_fail("update_set")
        if set_id not in self.sets:
            raise ApiError(404, "Set not found")
        self.sets[set_id].update(fields)
        return dict(self.sets[set_id])

    def delete_set(self, set_id):
        self._maybe_fail("delete_set")
        if self.sets.pop(set_id, None) is None:
            raise ApiError(404, "Set not found")

    def finish_workout(self, workout_id, end_time):
        self._maybe_fail("finish_workout")
        self.workouts[workout_id]["end_time"] = end_time
        return dict(self.workouts[workout_id])


class Clock:
    def __init__(self):
        self.now = T0

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def session(store):
    s = WorkoutSession(store, clock=Clock())
    s.start(ROUTINE)
    return s


def test_start_initialises_cursor_and_draft_slots(store, session):
    assert session.state is SessionState.IN_PROGRESS
    assert session.cursor == 0
    assert session.current_exercise.name == "A"
    assert [(d.weight, d.reps, d.rpe, d.state) for d in session.slots] == [
        (0, 0, 5, SlotState.EMPTY), (0, 0, 5, SlotState.EMPTY),
    ]
    w = store.workouts[session.workout_id]
    assert w["end_time"] is None
    assert w["routine_id"] == 7 and w["routine_name"] == "Full Body"
    assert session.workout["routine_name"] == "Full Body"


def test_advancing_persists_only_populated_slots(store, session):
    session.update_slot(0, weight=135, reps=5)
    assert session.slots[0].state is SlotState.DRAFTED

    result = session.next()
    assert result.ok and result.discarded == 1
    saved = list(store.sets.values())
    assert len(saved) == 1
    assert (saved[0]["exercise_name"], saved[0]["set_number"], saved[0]["weight"], saved[0]["reps"]) == \
           ("A", 1, 135, 5)
    assert session.current_exercise.name == "B"
    assert [d.state for d in session.slots] == [SlotState.EMPTY]


def test_landing_resets_drafts(session):
    session.update_slot(0, reps=8)
    session.next()
    session.previous()
    assert session.current_exercise.name == "A"
    assert [(d.weight, d.reps, d.rpe) for d in session.slots] == [(0, 0, 5), (0, 0, 5)]
    assert [s["reps"] for s in session.current_exercise_sets()] == [8]


def test_navigation_bounds_are_noops(store, session):
    session.update_slot(0, weight=20)
    assert session.previous() is None
    assert session.select(0) is None
    assert session.select(5) is None
    assert store.sets == {}
    assert session.slots[0].state is SlotState.DRAFTED


def test_flush_is_idempotent_and_reedits_update_in_place(store, session):
    session.update_slot(1, weight=100, reps=3, rpe=8)
    session.flush()
    session.flush()
    assert len(store.sets) == 1
    set_id = session.slots[1].set_id

    session.update_slot(1, reps=4)
    assert session.slots[1].state is SlotState.DRAFTED
    session.flush()
    assert len(store.sets) == 1
    assert store.sets[set_id]["reps"] == 4
    assert session.slots[1].state is SlotState.PERSISTED


def test_failed_write_keeps_draft_and_blocks_navigation(store, session):
    store.fail.add("create_set")
    session.update_slot(0, weight=60, reps=10)

    result = session.next()
    assert not result.ok and result.failed == [1]
    assert session.current_exercise.name == "A"
    assert session.slots[0].state is SlotState.DRAFTED
    assert session.errors and "create_set exploded" in session.errors[0]

    store.fail.clear()
    assert session.next().ok
    assert session.current_exercise.name == "B"
    assert len(store.sets) == 1


def test_finish_flushes_then_closes(store, session):
    session.next()
    session.update_slot(0, weight=50, reps=12)
    assert session.finish() is True
    assert session.state is SessionState.FINISHED
    w = store.workouts[session.workout_id]
    assert w["end_time"] >= w["start_time"]
    assert [s["exercise_name"] for s in store.sets.values()] == ["B"]


def test_finish_is_terminal(session):
    session.finish()
    with pytest.raises(SessionStateError):
        session.finish()
    with pytest.raises(SessionStateError):
        session.next()
    with pytest.raises(SessionStateError):
        session.start(ROUTINE)


def test_finish_failure_stays_in_progress(store, session):
    store.fail.add("finish_workout")
    assert session.finish() is False
    assert session.state is SessionState.IN_PROGRESS
    store.fail.clear()
    assert session.finish() is True


def test_start_failure_propagates_and_stays_not_started(store):
    store.fail.add("create_workout")
    s = WorkoutSession(store)
    with pytest.raises(ApiError):
        s.start(ROUTINE)
    assert s.state is SessionState.NOT_STARTED
    assert s.errors


def test_empty_routine_can_start_and_finish(store):
    s = WorkoutSession(store)
    s.start({"id": None, "name": "Rest day", "exercises": []})
    assert s.current_exercise is None
    assert s.slots == []
    assert s.next() is None
    assert s.flush().saved == []
    assert s.finish() is True


def test_edit_and_delete_persisted_sets(store, session):
    session.update_slot(0, weight=80, reps=6)
    session.flush()
    set_id = session.slots[0].set_id

    assert session.edit_set(set_id, rpe=9)["rpe"] == 9
    assert store.sets[set_id]["rpe"] == 9

    assert session.delete_set(set_id) is True
    assert set_id not in store.sets
    assert session.current_exercise_sets() == []
    slot = session.slots[0]
    assert (slot.weight, slot.reps, slot.rpe, slot.state, slot.set_id) == (0, 0, 5, SlotState.EMPTY, None)

    assert session.delete_set(set_id) is False
    assert "Set not found" in session.errors[-1]


def test_deleted_set_stays_deleted_after_navigation(store, session):
    session.update_slot(0, weight=135, reps=5)
    session.flush()
    assert session.delete_set(session.slots[0].set_id) is True

    assert session.next().ok
    assert store.sets == {}
    session.previous()
    assert session.current_exercise_sets() == []


def test_clearing_persisted_slot_deletes_stored_set(store, session):
    session.update_slot(0, weight=135, reps=5)
    session.flush()
    set_id = session.slots[0].set_id

    session.update_slot(0, weight=0, reps=0)
    assert session.slots[0].state is SlotState.EMPTY
    result = session.flush()
    assert result.ok and result.discarded == 2
    assert set_id not in store.sets
    assert session.slots[0].set_id is None
    assert session.current_exercise_sets() == []


def test_clearing_persisted_slot_failure_blocks_navigation(store, session):
    session.update_slot(0, weight=135, reps=5)
    session.flush()
    set_id = session.slots[0].set_id

    store.fail.add("delete_set")
    session.update_slot(0, weight=0, reps=0)
    result = session.next()
    assert not result.ok and result.failed == [1]
    assert session.current_exercise.name == "A"
    assert set_id in store.sets
    assert "delete_set exploded" in session.errors[-1]

    store.fail.clear()
    assert session.next().ok
    assert store.sets == {}


def test_direct_edit_is_not_reverted_by_later_flush(store, session):
    session.update_slot(0, weight=100, reps=5)
    session.flush()
    set_id = session.slots[0].set_id

    session.edit_set(set_id, weight=110, reps=6)
    assert (session.slots[0].weight, session.slots[0].reps) == (110, 6)

    session.update_slot(0, rpe=7)
    session.flush()
    assert (store.sets[set_id]["weight"], store.sets[set_id]["reps"], store.sets[set_id]["rpe"]) == (110, 6, 7)


def test_exercise_without_order_index_sorts_first(store):
    s = WorkoutSession(store)
    s.start({"id": 1, "name": "R", "exercises": [
        {"name": "Late", "planned_sets": 1, "order_index": 2},
        {"name": "Loose", "planned_sets": 1, "order_index": None},
    ]})
    assert [e.name for e in s.exercises] == ["Loose", "Late"]
    assert s.exercises[0].order_index == 0


def test_update_slot_validates(session):
    with pytest.raises(ValueError):
        session.update_slot(0, weight=-5)
    with pytest.raises(ValueError):
        session.update_slot(0, rpe=11)
    with pytest.raises(IndexError):
        session.update_slot(-1, weight=10)
    with pytest.raises(IndexError):
        session.update_slot(2, weight=10)
    assert [d.state for d in session.slots] == [SlotState.EMPTY, SlotState.EMPTY]
    session.update_slot(0, weight=10)
    session.update_slot(0, weight=0)
    assert session.slots[0].state is SlotState.EMPTY
