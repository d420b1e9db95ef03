import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.deps.auth import get_current_user
from liftlog.errors import WorkoutFinishedError
from liftlog.models import User
from liftlog.repositories.routine_repo import RoutineRepository
from liftlog.repositories.workout_repo import WorkoutRepository
from liftlog.schemas.workout import (
    WorkoutCreate,
    WorkoutDetail,
    WorkoutHistoryItem,
    WorkoutRead,
    WorkoutStatus,
    WorkoutUpdate,
)
from liftlog.services.history import summarize_workout
from liftlog.timeutil import as_utc, utcnow

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workouts", tags=["workouts"])

def owned_workout_or_404(db: Session, workout_id: int, user: User):
    workout = WorkoutRepository(db).get_owned(workout_id, user.id)
    if not workout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return workout

@router.get("", response_model=list[WorkoutRead])
def list_workouts(
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    status_: WorkoutStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    return WorkoutRepository(db).list_by_user(current.id, status=status_, limit=limit, offset=offset)

@router.get("/history", response_model=list[WorkoutHistoryItem])
def workout_history(
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    workouts = WorkoutRepository(db).list_by_user(
        current.id, status="completed", with_sets=True, limit=limit, offset=offset
    )
    return [
        {**WorkoutDetail.model_validate(w).model_dump(), "summary": summarize_workout(w)}
        for w in workouts
    ]

@router.post("", response_model=WorkoutRead, status_code=status.HTTP_201_CREATED)
def start_workout(payload: WorkoutCreate, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    routine_name = payload.routine_name
    if payload.routine_id is not None:
        routine = RoutineRepository(db).get_owned(payload.routine_id, current.id)
        if not routine:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Routine not found")
        routine_name = routine_name or routine.name

    workout = WorkoutRepository(db).create(
        current.id,
        routine_id=payload.routine_id,
        routine_name=routine_name,
        start_time=payload.start_time or utcnow(),
    )
    log.info("workout started id=%s user_id=%s", workout.id, current.id)
    return workout

@router.get("/{workout_id}", response_model=WorkoutDetail)
def get_workout(workout_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return owned_workout_or_404(db, workout_id, current)

@router.patch("/{workout_id}", response_model=WorkoutRead)
def update_workout(
    workout_id: int,
    payload: WorkoutUpdate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    workout = owned_workout_or_404(db, workout_id, current)
    if workout.end_time is not None:
        raise WorkoutFinishedError("Workout already finished")

    changes = payload.model_dump(exclude_unset=True)
    if "end_time" in changes:
        end_time = changes["end_time"]
        if end_time is None:
            raise HTTPException(status_code=400, detail="end_time cannot be cleared")
        if end_time < as_utc(workout.start_time):
            raise HTTPException(status_code=400, detail="end_time must not be before start_time")
    if changes.get("routine_name", "") is None:
        raise HTTPException(status_code=400, detail="routine_name cannot be null")

    workout = WorkoutRepository(db).update(workout, **changes)
    if "end_time" in changes:
        log.info("workout finished id=%s user_id=%s", workout.id, current.id)
    return workout

@router.delete("/{workout_id}")
def delete_workout(workout_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    workout = owned_workout_or_404(db, workout_id, current)
    WorkoutRepository(db).delete(workout)
    return {"success": True}
