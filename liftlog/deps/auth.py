# liftlog/deps/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session
from jose.exceptions import ExpiredSignatureError

from liftlog.db import get_db
from liftlog.models import User
from liftlog.security import resolve_session

SESSION_HEADER = "x-session-id"

# Exposes the session header in Swagger; signup/signin hand out the value
session_header = APIKeyHeader(name=SESSION_HEADER, auto_error=False)

def get_session_token(token: str | None = Depends(session_header)) -> str | None:
    return token or None

def get_current_user(
    db: Session = Depends(get_db),
    token: str | None = Depends(get_session_token),
) -> User:
    unauth = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )
    if not token:
        raise unauth
    try:
        user_id = resolve_session(db, token)
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired",
        )
    if user_id is None:
        raise unauth

    user = db.get(User, user_id)
    if not user:
        raise unauth
    return user
