from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.deps.auth import get_current_user
from liftlog.models import User
from liftlog.repositories.routine_repo import RoutineExerciseRepository, RoutineRepository
from liftlog.schemas.routine import (
    ExerciseCreate,
    ExerciseRead,
    RoutineCreate,
    RoutineExerciseCreate,
    RoutineRead,
)

router = APIRouter(prefix="/api", tags=["routines"])

def _owned_routine_or_404(db: Session, routine_id: int, user: User):
    routine = RoutineRepository(db).get_owned(routine_id, user.id)
    if not routine:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Routine not found")
    return routine

@router.get("/routines", response_model=list[RoutineRead])
def list_routines(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return RoutineRepository(db).list_by_user(current.id)

@router.post("/routines", response_model=RoutineRead, status_code=status.HTTP_201_CREATED)
def create_routine(payload: RoutineCreate, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return RoutineRepository(db).create(
        current.id,
        name=payload.name,
        exercises=[ex.model_dump() for ex in payload.exercises],
    )

@router.get("/routines/{routine_id}", response_model=RoutineRead)
def get_routine(routine_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return _owned_routine_or_404(db, routine_id, current)

@router.delete("/routines/{routine_id}")
def delete_routine(routine_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    routine = _owned_routine_or_404(db, routine_id, current)
    RoutineRepository(db).delete(routine)
    return {"success": True}

@router.get("/routines/{routine_id}/exercises", response_model=list[ExerciseRead])
def list_routine_exercises(routine_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    _owned_routine_or_404(db, routine_id, current)
    return RoutineExerciseRepository(db).list_by_routine(routine_id)

@router.post("/routines/{routine_id}/exercises", response_model=ExerciseRead, status_code=status.HTTP_201_CREATED)
def add_routine_exercise(
    routine_id: int,
    payload: ExerciseCreate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    _owned_routine_or_404(db, routine_id, current)
    return RoutineExerciseRepository(db).create(
        routine_id,
        name=payload.name,
        planned_sets=payload.planned_sets,
        order_index=payload.order_index,
    )

@router.post("/routine-exercises", response_model=ExerciseRead, status_code=status.HTTP_201_CREATED)
def create_routine_exercise(
    payload: RoutineExerciseCreate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return add_routine_exercise(
        payload.routine_id,
        ExerciseCreate(name=payload.name, planned_sets=payload.planned_sets, order_index=payload.order_index),
        db=db,
        current=current,
    )

@router.delete("/routine-exercises/{exercise_id}")
def delete_routine_exercise(exercise_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    repo = RoutineExerciseRepository(db)
    ex = repo.get_owned(exercise_id, current.id)
    if not ex:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    repo.delete(ex)
    return {"success": True}
