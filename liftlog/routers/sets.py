from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.deps.auth import get_current_user
from liftlog.models import User
from liftlog.repositories.set_repo import SetRepository
from liftlog.routers.workouts import owned_workout_or_404
from liftlog.schemas.workout import SetCreate, SetRead, SetUpdate, WorkoutSetCreate

router = APIRouter(prefix="/api", tags=["sets"])

@router.get("/workouts/{workout_id}/sets", response_model=list[SetRead])
def list_sets(workout_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    owned_workout_or_404(db, workout_id, current)
    return SetRepository(db).list_by_workout(workout_id)

@router.post("/workouts/{workout_id}/sets", response_model=SetRead, status_code=status.HTTP_201_CREATED)
def add_set(
    workout_id: int,
    payload: SetCreate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    owned_workout_or_404(db, workout_id, current)
    return SetRepository(db).create(workout_id, **payload.model_dump())

@router.post("/workout-sets", response_model=SetRead, status_code=status.HTTP_201_CREATED)
def create_workout_set(
    payload: WorkoutSetCreate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    owned_workout_or_404(db, payload.workout_id, current)
    return SetRepository(db).create(**payload.model_dump())

@router.patch("/workout-sets/{set_id}", response_model=SetRead)
def update_set(
    set_id: int,
    payload: SetUpdate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    repo = SetRepository(db)
    s = repo.get_owned(set_id, current.id)
    if not s:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Set not found")
    return repo.update(s, **payload.model_dump(exclude_unset=True))

@router.delete("/workout-sets/{set_id}")
def delete_set(set_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    repo = SetRepository(db)
    s = repo.get_owned(set_id, current.id)
    if not s:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Set not found")
    repo.delete(s)
    return {"success": True}
