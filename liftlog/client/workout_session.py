# liftlog/client/workout_session.py
"""In-progress workout bookkeeping.

A ``WorkoutSession`` walks the exercise list of one routine:

    NOT_STARTED --start()--> IN_PROGRESS --finish()--> FINISHED

While in progress it keeps one ``DraftSlot`` per planned set of the current
exercise. Each slot runs its own small machine:

    EMPTY --update (weight>0 or reps>0)--> DRAFTED --flush()--> PERSISTED

Editing a persisted slot makes it a pending update. Clearing it back to zero
deletes the stored set on the next flush.

``flush()`` is the only thing that writes drafts to the store. Navigation and
``finish()`` call it first and stay put if it could not persist everything, so
drafts are never dropped on a failed write.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

import httpx

from liftlog.client.api import ApiError
from liftlog.timeutil import utcnow

log = logging.getLogger(__name__)

DEFAULT_RPE = 5

# What a store call may raise and still leave the session usable
PERSISTENCE_ERRORS = (ApiError, httpx.HTTPError)


class WorkoutStore(Protocol):
    def create_workout(
        self, *, routine_id: Optional[int], routine_name: Optional[str], start_time: Optional[datetime]
    ) -> dict: ...

    def create_set(
        self,
        workout_id: int,
        *,
        exercise_name: str,
        weight: float,
        reps: int,
        rpe: int,
        set_number: Optional[int],
    ) -> dict: ...

    def update_set(self, set_id: int, **fields) -> dict: ...

    def delete_set(self, set_id: int) -> None: ...

    def finish_workout(self, workout_id: int, end_time: datetime) -> dict: ...


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class SlotState(str, Enum):
    EMPTY = "empty"
    DRAFTED = "drafted"
    PERSISTED = "persisted"


class SessionStateError(RuntimeError):
    """Operation not allowed in the session's current state."""


@dataclass
class DraftSlot:
    set_number: int
    weight: float = 0.0
    reps: int = 0
    rpe: int = DEFAULT_RPE
    state: SlotState = SlotState.EMPTY
    # id of the stored set once this slot has been persisted
    set_id: Optional[int] = None

    @property
    def populated(self) -> bool:
        return self.weight > 0 or self.reps > 0


@dataclass
class FlushResult:
    saved: list[dict] = field(default_factory=list)
    discarded: int = 0
    failed: list[int] = field(default_factory=list)  # set numbers

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class Exercise:
    name: str
    planned_sets: int
    order_index: int = 0
    id: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Exercise":
        return cls(
            name=data["name"],
            planned_sets=int(data.get("planned_sets", 1)),
            order_index=int(data.get("order_index") or 0),
            id=data.get("id"),
        )


class WorkoutSession:
    def __init__(self, store: WorkoutStore, *, clock: Callable[[], datetime] = utcnow) -> None:
        self.store = store
        self.clock = clock
        self.state = SessionState.NOT_STARTED
        self.workout: Optional[dict] = None
        self.exercises: list[Exercise] = []
        self.cursor = 0
        self.slots: list[DraftSlot] = []
        self.sets: list[dict] = []
        self.errors: list[str] = []

    # -- views ---------------------------------------------------------------

    @property
    def workout_id(self) -> Optional[int]:
        return self.workout["id"] if self.workout else None

    @property
    def current_exercise(self) -> Optional[Exercise]:
        if not self.exercises:
            return None
        return self.exercises[self.cursor]

    def current_exercise_sets(self) -> list[dict]:
        ex = self.current_exercise
        if ex is None:
            return []
        return sorted(
            (s for s in self.sets if s["exercise_name"] == ex.name),
            key=lambda s: (s["set_number"], s["id"]),
        )

    # -- transitions ---------------------------------------------------------

    def start(self, routine: Mapping[str, Any]) -> dict:
        """Open a workout for ``routine`` (a dict shaped like the API's routine)."""
        if self.state is not SessionState.NOT_STARTED:
            raise SessionStateError(f"cannot start a session that is {self.state.value}")

        exercises = [Exercise.from_mapping(e) for e in routine.get("exercises") or []]
        exercises.sort(key=lambda e: e.order_index)
        try:
            workout = self.store.create_workout(
                routine_id=routine.get("id"),
                routine_name=routine["name"],
                start_time=self.clock(),
            )
        except PERSISTENCE_ERRORS as e:
            self._record("starting workout", e)
            raise

        self.workout = workout
        self.exercises = exercises
        self.sets = []
        self.state = SessionState.IN_PROGRESS
        self._land_on(0)
        log.info("workout %s started with %d exercises", self.workout_id, len(exercises))
        return workout

    def update_slot(
        self,
        index: int,
        *,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        rpe: Optional[int] = None,
    ) -> DraftSlot:
        self._require(SessionState.IN_PROGRESS)
        if not 0 <= index < len(self.slots):
            raise IndexError(f"no draft slot {index}")
        slot = self.slots[index]
        if weight is not None:
            if weight < 0:
                raise ValueError("weight must be >= 0")
            slot.weight = weight
        if reps is not None:
            if reps < 0:
                raise ValueError("reps must be >= 0")
            slot.reps = reps
        if rpe is not None:
            if not 1 <= rpe <= 10:
                raise ValueError("rpe must be between 1 and 10")
            slot.rpe = rpe
        # a persisted slot that is edited again becomes a pending update
        slot.state = SlotState.DRAFTED if slot.populated else SlotState.EMPTY
        return slot

    def flush(self) -> FlushResult:
        """Persist every drafted slot of the current exercise."""
        self._require(SessionState.IN_PROGRESS)
        result = FlushResult()
        ex = self.current_exercise
        if ex is None:
            return result

        for slot in self.slots:
            if slot.state is SlotState.EMPTY:
                # a persisted slot cleared back to nothing drops its stored set
                if slot.set_id is not None and not self._drop_stored(slot, ex.name):
                    result.failed.append(slot.set_number)
                    continue
                result.discarded += 1
                continue
            if slot.state is SlotState.PERSISTED:
                continue
            try:
                if slot.set_id is None:
                    saved = self.store.create_set(
                        self.workout_id,
                        exercise_name=ex.name,
                        weight=slot.weight,
                        reps=slot.reps,
                        rpe=slot.rpe,
                        set_number=slot.set_number,
                    )
                else:
                    saved = self.store.update_set(
                        slot.set_id, weight=slot.weight, reps=slot.reps, rpe=slot.rpe
                    )
            except PERSISTENCE_ERRORS as e:
                self._record(f"saving {ex.name} set {slot.set_number}", e)
                result.failed.append(slot.set_number)
                continue
            slot.set_id = saved["id"]
            slot.state = SlotState.PERSISTED
            self._remember_set(saved)
            result.saved.append(saved)
        return result

    def next(self) -> Optional[FlushResult]:
        return self.select(self.cursor + 1)

    def previous(self) -> Optional[FlushResult]:
        return self.select(self.cursor - 1)

    def select(self, index: int) -> Optional[FlushResult]:
        """Flush, then move the cursor. Out-of-range or same index is a no-op (None)."""
        self._require(SessionState.IN_PROGRESS)
        if index == self.cursor or not 0 <= index < len(self.exercises):
            return None
        result = self.flush()
        if result.ok:
            self._land_on(index)
        return result

    def finish(self) -> bool:
        """Flush remaining drafts and close the workout. False if anything failed."""
        self._require(SessionState.IN_PROGRESS)
        if not self.flush().ok:
            log.warning("workout %s not finished: unsaved drafts", self.workout_id)
            return False
        try:
            self.workout = self.store.finish_workout(self.workout_id, self.clock())
        except PERSISTENCE_ERRORS as e:
            self._record("finishing workout", e)
            return False
        self.state = SessionState.FINISHED
        self.slots = []
        log.info("workout %s finished", self.workout_id)
        return True

    # -- persisted sets ------------------------------------------------------

    def edit_set(self, set_id: int, **fields) -> Optional[dict]:
        self._require(SessionState.IN_PROGRESS)
        try:
            saved = self.store.update_set(set_id, **fields)
        except PERSISTENCE_ERRORS as e:
            self._record(f"editing set {set_id}", e)
            return None
        self._remember_set(saved)
        # keep the slot in step so a later flush does not write old values back
        for slot in self.slots:
            if slot.set_id == set_id:
                for name in ("weight", "reps", "rpe"):
                    if name in fields and saved.get(name) is not None:
                        setattr(slot, name, saved[name])
        return saved

    def delete_set(self, set_id: int) -> bool:
        self._require(SessionState.IN_PROGRESS)
        try:
            self.store.delete_set(set_id)
        except PERSISTENCE_ERRORS as e:
            self._record(f"deleting set {set_id}", e)
            return False
        self._forget_set(set_id)
        for i, slot in enumerate(self.slots):
            if slot.set_id == set_id:
                self.slots[i] = DraftSlot(set_number=slot.set_number)
        return True

    # -- internals -----------------------------------------------------------

    def _land_on(self, index: int) -> None:
        self.cursor = index
        ex = self.current_exercise
        planned: Sequence[int] = range(ex.planned_sets) if ex else ()
        self.slots = [DraftSlot(set_number=i + 1) for i in planned]

    def _remember_set(self, saved: dict) -> None:
        self._forget_set(saved["id"])
        self.sets.append(saved)

    def _forget_set(self, set_id: int) -> None:
        self.sets = [s for s in self.sets if s["id"] != set_id]

    def _drop_stored(self, slot: DraftSlot, exercise_name: str) -> bool:
        try:
            self.store.delete_set(slot.set_id)
        except PERSISTENCE_ERRORS as e:
            self._record(f"clearing {exercise_name} set {slot.set_number}", e)
            return False
        self._forget_set(slot.set_id)
        slot.set_id = None
        return True

    def _require(self, state: SessionState) -> None:
        if self.state is not state:
            raise SessionStateError(f"session is {self.state.value}, expected {state.value}")

    def _record(self, what: str, exc: Exception) -> None:
        msg = f"{what} failed: {exc}"
        log.error("workout %s: %s", self.workout_id, msg)
        self.errors.append(msg)
