from pydantic import BaseModel, Field

from liftlog.schemas.common import NameStr, NonNegInt, UtcDatetime

class ExerciseCreate(BaseModel):
    name: NameStr
    planned_sets: NonNegInt = 1
    # None -> appended after the current last exercise
    order_index: NonNegInt | None = None

class RoutineExerciseCreate(ExerciseCreate):
    routine_id: int

class ExerciseRead(BaseModel):
    id: int
    routine_id: int
    name: str
    planned_sets: int
    order_index: int

    model_config = {"from_attributes": True}

class RoutineCreate(BaseModel):
    name: NameStr
    exercises: list[ExerciseCreate] = Field(default_factory=list, max_length=100)

class RoutineRead(BaseModel):
    id: int
    user_id: int
    name: str
    created_at: UtcDatetime | None = None
    exercises: list[ExerciseRead] = []

    model_config = {"from_attributes": True}
