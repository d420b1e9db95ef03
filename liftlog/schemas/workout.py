from typing import Literal
from pydantic import BaseModel, field_validator, model_validator

from liftlog.schemas.common import NameStr, NonNegInt, PosInt, Rpe, UtcDatetime, Weight

WorkoutStatus = Literal["active", "completed"]

class WorkoutCreate(BaseModel):
    routine_id: int | None = None
    routine_name: NameStr | None = None
    start_time: UtcDatetime | None = None

    @model_validator(mode="after")
    def needs_routine_or_name(self):
        if self.routine_id is None and self.routine_name is None:
            raise ValueError("routine_id or routine_name is required")
        return self

class WorkoutUpdate(BaseModel):
    end_time: UtcDatetime | None = None
    routine_name: NameStr | None = None

class SetFields(BaseModel):
    exercise_name: NameStr
    weight: Weight = 0
    reps: NonNegInt = 0
    rpe: Rpe = 5
    # None -> next number for this exercise in the workout
    set_number: PosInt | None = None

class SetCreate(SetFields):
    pass

class WorkoutSetCreate(SetFields):
    workout_id: int

class SetUpdate(BaseModel):
    exercise_name: NameStr | None = None
    weight: Weight | None = None
    reps: NonNegInt | None = None
    rpe: Rpe | None = None
    set_number: PosInt | None = None

    @field_validator("*")
    @classmethod
    def no_explicit_nulls(cls, v):
        # omitted is fine; an explicit null would blank a NOT NULL column
        if v is None:
            raise ValueError("field cannot be null")
        return v

class SetRead(BaseModel):
    id: int
    workout_id: int
    exercise_name: str
    weight: float
    reps: int
    rpe: int
    set_number: int
    created_at: UtcDatetime | None = None

    model_config = {"from_attributes": True}

class WorkoutRead(BaseModel):
    id: int
    user_id: int
    routine_id: int | None = None
    routine_name: str
    start_time: UtcDatetime
    end_time: UtcDatetime | None = None
    completed: bool
    created_at: UtcDatetime | None = None

    model_config = {"from_attributes": True}

class WorkoutDetail(WorkoutRead):
    sets: list[SetRead] = []

class ExerciseSummary(BaseModel):
    exercise_name: str
    sets: int
    total_reps: int
    volume: float
    top_weight: float
    avg_rpe: float | None = None

class WorkoutSummary(BaseModel):
    duration_minutes: int | None = None
    total_sets: int
    total_reps: int
    total_volume: float
    exercises: list[ExerciseSummary]

class WorkoutHistoryItem(WorkoutDetail):
    summary: WorkoutSummary
