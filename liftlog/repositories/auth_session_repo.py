from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy import delete, or_, select

from liftlog.models import AuthSession
from liftlog.repositories.base import BaseRepository
from liftlog.timeutil import as_utc, utcnow

class AuthSessionRepository(BaseRepository[AuthSession]):
    model = AuthSession

    def get_by_token_id(self, token_id: str) -> Optional[AuthSession]:
        stmt = select(AuthSession).where(AuthSession.token_id == token_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: int) -> list[AuthSession]:
        stmt = select(AuthSession).where(AuthSession.user_id == user_id).order_by(AuthSession.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_live(self, token_id: str) -> Optional[AuthSession]:
        row = self.get_by_token_id(token_id)
        if row is None or row.revoked_at is not None:
            return None
        if as_utc(row.expires_at) <= utcnow():
            return None
        return row

    def create(self, user_id: int, *, token_id: str, expires_at: datetime) -> AuthSession:
        return self.save(AuthSession(user_id=user_id, token_id=token_id, expires_at=expires_at))

    def revoke(self, token_id: str) -> bool:
        row = self.get_by_token_id(token_id)
        if row is None or row.revoked_at is not None:
            return False
        row.revoked_at = utcnow()
        self.db.commit()
        return True

    def purge_expired(self) -> int:
        """Drop expired and revoked rows; returns how many went."""
        stmt = delete(AuthSession).where(
            or_(AuthSession.expires_at <= utcnow(), AuthSession.revoked_at.is_not(None))
        )
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        self.db.commit()
        return result.rowcount or 0
