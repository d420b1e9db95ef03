from __future__ import annotations
from typing import Iterable, Optional
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from liftlog.models import Routine, RoutineExercise
from liftlog.repositories.base import BaseRepository

class RoutineRepository(BaseRepository[Routine]):
    model = Routine

    def get_owned(self, routine_id: int, user_id: int) -> Optional[Routine]:
        routine = self.get(routine_id)
        if routine is None or routine.user_id != user_id:
            return None
        return routine

    def list_by_user(self, user_id: int) -> list[Routine]:
        stmt = select(Routine).where(Routine.user_id == user_id)\
                              .options(selectinload(Routine.exercises))\
                              .order_by(Routine.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, user_id: int, *, name: str, exercises: Iterable[dict] = ()) -> Routine:
        """Insert the routine and its exercises in one transaction."""
        routine = Routine(user_id=user_id, name=name)
        next_index = 0
        for ex in exercises:
            order_index = ex.get("order_index")
            if order_index is None:
                order_index = next_index
            next_index = max(next_index, order_index + 1)
            routine.exercises.append(
                RoutineExercise(name=ex["name"], planned_sets=ex["planned_sets"], order_index=order_index)
            )
        try:
            self.db.add(routine)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(routine)
        return routine


class RoutineExerciseRepository(BaseRepository[RoutineExercise]):
    model = RoutineExercise

    def get_owned(self, exercise_id: int, user_id: int) -> Optional[RoutineExercise]:
        # Ownership check via exercise -> routine -> user
        stmt = select(RoutineExercise).join(Routine)\
                                      .where(RoutineExercise.id == exercise_id, Routine.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_by_routine(self, routine_id: int) -> list[RoutineExercise]:
        stmt = select(RoutineExercise).where(RoutineExercise.routine_id == routine_id)\
                                      .order_by(RoutineExercise.order_index.asc(), RoutineExercise.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, routine_id: int, *, name: str, planned_sets: int, order_index: Optional[int]) -> RoutineExercise:
        if order_index is None:
            # Append after the current max for this routine
            max_idx = self.db.execute(
                select(func.max(RoutineExercise.order_index)).where(RoutineExercise.routine_id == routine_id)
            ).scalar_one()
            order_index = 0 if max_idx is None else max_idx + 1
        ex = RoutineExercise(routine_id=routine_id, name=name, planned_sets=planned_sets, order_index=order_index)
        return self.save(ex)
