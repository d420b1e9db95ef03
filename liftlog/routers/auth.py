import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.models import User
from liftlog.schemas.user import AuthResponse, Credentials, MeResponse, UserSignup
from liftlog.security import create_session, delete_session, hash_password, verify_password
from liftlog.deps.auth import get_current_user, get_session_token
from liftlog.repositories.auth_session_repo import AuthSessionRepository
from liftlog.repositories.user_repo import UserRepository

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

def _auth_response(db: Session, user: User) -> dict:
    return {"user": user, "sessionId": create_session(db, user.id)}

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: UserSignup, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    if repo.get_by_username(payload.username):
        raise HTTPException(status_code=400, detail="Username already exists")
    try:
        user = repo.create(username=payload.username, password_hash=hash_password(payload.password))
    except ValueError as e:
        if str(e) == "username_already_exists":
            raise HTTPException(status_code=400, detail="Username already exists")
        raise
    log.info("signup user_id=%s", user.id)
    return _auth_response(db, user)

@router.post("/signin", response_model=AuthResponse)
def signin(payload: Credentials, db: Session = Depends(get_db)):
    user = UserRepository(db).get_by_username(payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        log.info("signin rejected username=%s", payload.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    # keep the registry bounded
    AuthSessionRepository(db).purge_expired()
    return _auth_response(db, user)

@router.post("/signout")
def signout(token: str | None = Depends(get_session_token), db: Session = Depends(get_db)):
    if token:
        delete_session(db, token)
    return {"success": True}

@router.get("/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)):
    return {"user": current_user}
