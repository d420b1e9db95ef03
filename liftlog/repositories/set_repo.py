from __future__ import annotations
from typing import Optional
from sqlalchemy import select, func
from liftlog.models import Workout, WorkoutSet
from liftlog.repositories.base import BaseRepository

class SetRepository(BaseRepository[WorkoutSet]):
    model = WorkoutSet

    def get_owned(self, set_id: int, user_id: int) -> Optional[WorkoutSet]:
        # Ownership check via set -> workout -> user
        stmt = select(WorkoutSet).join(Workout)\
                                 .where(WorkoutSet.id == set_id, Workout.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_by_workout(self, workout_id: int) -> list[WorkoutSet]:
        stmt = select(WorkoutSet).where(WorkoutSet.workout_id == workout_id)\
                                 .order_by(WorkoutSet.exercise_name.asc(),
                                           WorkoutSet.set_number.asc(),
                                           WorkoutSet.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create(
        self,
        workout_id: int,
        *,
        exercise_name: str,
        weight: float,
        reps: int,
        rpe: int,
        set_number: Optional[int],
    ) -> WorkoutSet:
        if set_number is None:
            # Auto-increment based on current max for this exercise in the workout
            max_num = self.db.execute(
                select(func.max(WorkoutSet.set_number)).where(
                    WorkoutSet.workout_id == workout_id,
                    WorkoutSet.exercise_name == exercise_name,
                )
            ).scalar_one()
            set_number = (max_num or 0) + 1

        s = WorkoutSet(
            workout_id=workout_id,
            exercise_name=exercise_name,
            weight=weight,
            reps=reps,
            rpe=rpe,
            set_number=set_number,
        )
        return self.save(s)

    def update(self, workout_set: WorkoutSet, **fields) -> WorkoutSet:
        for key, value in fields.items():
            setattr(workout_set, key, value)
        self.db.commit()
        self.db.refresh(workout_set)
        return workout_set
