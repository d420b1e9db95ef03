import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional
from passlib.context import CryptContext
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session
from liftlog.repositories.auth_session_repo import AuthSessionRepository
from liftlog.settings import get_settings
from liftlog.timeutil import utcnow

log = logging.getLogger(__name__)
pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(p: str) -> str:
    return pwd_ctx.hash(p)

def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_ctx.verify(plain, hashed)

def encode_token(
    sub: str,
    sid: str,
    *,
    expires_minutes: Optional[int] = None,
) -> str:
    s = get_settings()
    now = utcnow()
    exp = now + timedelta(minutes=expires_minutes if expires_minutes is not None else s.SESSION_TTL_MINUTES)
    payload: Dict[str, Any] = {
        "sub": sub,
        "sid": sid,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, s.SECRET_KEY, algorithm=s.ALGORITHM)

def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiration. Raise if token is expired/invalid.
    """
    s = get_settings()
    payload = jwt.decode(
        token,
        s.SECRET_KEY,
        algorithms=[s.ALGORITHM],
        options={"verify_signature": True, "verify_exp": True},
    )
    if "exp" not in payload or "sid" not in payload:
        raise JWTError("Missing claims")
    return payload

# Session registry: a signed token pointing at a revocable auth_sessions row

def create_session(db: Session, user_id: int, *, expires_minutes: Optional[int] = None) -> str:
    s = get_settings()
    minutes = expires_minutes if expires_minutes is not None else s.SESSION_TTL_MINUTES
    sid = secrets.token_urlsafe(32)
    AuthSessionRepository(db).create(
        user_id,
        token_id=sid,
        expires_at=utcnow() + timedelta(minutes=minutes),
    )
    log.info("session opened user_id=%s", user_id)
    return encode_token(str(user_id), sid, expires_minutes=minutes)

def resolve_session(db: Session, token: str) -> Optional[int]:
    """Return the user id behind a live token, or None.

    Raises ExpiredSignatureError for a well-formed but expired token so the
    caller can tell the user why.
    """
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise
    except JWTError:
        return None
    row = AuthSessionRepository(db).get_live(payload["sid"])
    if row is None or str(row.user_id) != str(payload.get("sub")):
        return None
    return row.user_id

def delete_session(db: Session, token: str) -> None:
    s = get_settings()
    try:
        # expired tokens may still be signed out
        payload = jwt.decode(
            token, s.SECRET_KEY, algorithms=[s.ALGORITHM], options={"verify_exp": False}
        )
    except JWTError:
        return
    sid = payload.get("sid")
    if sid and AuthSessionRepository(db).revoke(sid):
        log.info("session revoked user_id=%s", payload.get("sub"))
