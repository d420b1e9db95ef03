from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from liftlog.models import Workout
from liftlog.repositories.base import BaseRepository

class WorkoutRepository(BaseRepository[Workout]):
    model = Workout

    def get_owned(self, workout_id: int, user_id: int) -> Optional[Workout]:
        workout = self.get(workout_id)
        if workout is None or workout.user_id != user_id:
            return None
        return workout

    def list_by_user(
        self,
        user_id: int,
        *,
        status: Optional[str] = None,
        with_sets: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Workout]:
        stmt = select(Workout).where(Workout.user_id == user_id)
        if status == "active":
            stmt = stmt.where(Workout.end_time.is_(None))
        elif status == "completed":
            stmt = stmt.where(Workout.end_time.is_not(None))
        if with_sets:
            stmt = stmt.options(selectinload(Workout.sets))
        stmt = stmt.order_by(Workout.start_time.desc(), Workout.id.desc()).limit(limit).offset(offset)
        return list(self.db.execute(stmt).scalars().all())

    def create(
        self,
        user_id: int,
        *,
        routine_id: Optional[int],
        routine_name: str,
        start_time: datetime,
        end_time: Optional[datetime] = None,
    ) -> Workout:
        w = Workout(
            user_id=user_id,
            routine_id=routine_id,
            routine_name=routine_name,
            start_time=start_time,
            end_time=end_time,
        )
        return self.save(w)

    def update(self, workout: Workout, **fields) -> Workout:
        for key, value in fields.items():
            setattr(workout, key, value)
        self.db.commit()
        self.db.refresh(workout)
        return workout
