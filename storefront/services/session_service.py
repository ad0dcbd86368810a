from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from storefront.core.security import generate_session_token, hash_token
from storefront.models.session import UserSession
from storefront.utils.helpers import utcnow

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class IssuedSession:
    session_id: str
    token: str
    expires_at: datetime


class SessionService:

    @staticmethod
    def create(
        db: Session,
        user_id: int,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        ttl_days: int = 7,
    ) -> IssuedSession:
        """Persist a new session and return the raw token for the cookie.

        Only the token's hash is stored, so a leaked table cannot be replayed.
        """
        if ttl_days <= 0:
            raise ValueError("Session TTL must be positive")

        token = generate_session_token()
        now = utcnow()
        session = UserSession(
            user_id=user_id,
            token_hash=hash_token(token),
            user_agent=user_agent[:512] if user_agent else None,
            ip_address=ip_address[:45] if ip_address else None,
            created_at=now,
            last_activity_at=now,
            expires_at=now + timedelta(days=ttl_days),
        )
        db.add(session)
        db.commit()

        return IssuedSession(session_id=session.id, token=token, expires_at=session.expires_at)

    @staticmethod
    def fetch_by_token(db: Session, token: str) -> Optional[UserSession]:
        if not token:
            return None
        return db.query(UserSession).filter(UserSession.token_hash == hash_token(token)).first()

    @staticmethod
    def delete(db: Session, session_id: str) -> bool:
        deleted = (
            db.query(UserSession)
            .filter(UserSession.id == session_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted > 0

    @staticmethod
    def delete_all_for_user(db: Session, user_id: int, keep_session_id: Optional[str] = None) -> int:
        query = db.query(UserSession).filter(UserSession.user_id == user_id)
        if keep_session_id:
            query = query.filter(UserSession.id != keep_session_id)
        deleted = query.delete(synchronize_session=False)
        db.commit()
        return deleted

    @staticmethod
    def extend(db: Session, session_id: str, ttl_days: int) -> Optional[datetime]:
        if ttl_days <= 0:
            raise ValueError("Session TTL must be positive")
        expires_at = utcnow() + timedelta(days=ttl_days)
        updated = (
            db.query(UserSession)
            .filter(UserSession.id == session_id)
            .update({UserSession.expires_at: expires_at}, synchronize_session=False)
        )
        db.commit()
        return expires_at if updated else None

    @staticmethod
    def touch(db: Session, session: UserSession, now: Optional[datetime] = None) -> None:
        session.last_activity_at = now or utcnow()
        db.commit()

    @staticmethod
    def sweep_expired(db: Session, now: Optional[datetime] = None) -> int:
        """Delete every session whose expiry is strictly before `now`."""
        now = now or utcnow()
        deleted = (
            db.query(UserSession)
            .filter(UserSession.expires_at < now)
            .delete(synchronize_session=False)
        )
        db.commit()
        if deleted:
            logger.info(f"Swept {deleted} expired session(s)")
        return deleted

    @staticmethod
    def check(
        db: Session,
        token: str,
        now: Optional[datetime] = None,
    ) -> Tuple[SessionState, Optional[UserSession]]:
        """Resolve `token` to a live session.

        An expired session is deleted on the spot and triggers a sweep, so a
        lagging background job never leaves dead rows answering requests.
        """
        now = now or utcnow()
        session = SessionService.fetch_by_token(db, token)
        if session is None:
            return SessionState.NOT_FOUND, None

        if session.is_expired(now):
            logger.info(f"Session expired: {session.id}")
            SessionService.delete(db, session.id)
            SessionService.sweep_expired(db, now)
            return SessionState.EXPIRED, None

        return SessionState.VALID, session

    @staticmethod
    def validate(db: Session, token: str, now: Optional[datetime] = None) -> bool:
        state, _ = SessionService.check(db, token, now)
        return state is SessionState.VALID

    @staticmethod
    def list_for_user(db: Session, user_id: int, now: Optional[datetime] = None) -> List[UserSession]:
        now = now or utcnow()
        return (
            db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.expires_at >= now)
            .order_by(UserSession.created_at.desc())
            .all()
        )
