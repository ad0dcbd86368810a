from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
import logging

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.models.session import UserSession
from storefront.models.user import User
from storefront.services.session_service import SessionService, SessionState
from storefront.utils.cookies import (
    clear_session_cookie,
    has_session_cookie,
    read_session_token,
    set_session_cookie,
)
from storefront.utils.errors import (
    AccountInactiveError,
    AdminRequiredError,
    APIError,
    EmailNotVerifiedError,
    ErrorCode,
    SessionError,
)
from storefront.utils.helpers import utcnow

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """Authenticated caller handed explicitly to route handlers."""

    user: User
    session: UserSession
    token: str

    @property
    def user_id(self) -> int:
        return self.user.id


def _refresh_session(response: Response, db: Session, context: AuthContext) -> None:
    """Slide the expiry forward past the half-life and throttle activity writes."""
    session = context.session
    now = utcnow()

    if settings.SESSION_SLIDING_ENABLED:
        ttl = timedelta(days=settings.SESSION_TTL_DAYS)
        if session.expires_at - now < ttl / 2:
            expires_at = SessionService.extend(db, session.id, settings.SESSION_TTL_DAYS)
            if expires_at is not None:
                session.expires_at = expires_at
                set_session_cookie(response, context.token, int(ttl.total_seconds()))
                logger.info(f"Session extended: {session.id}")

    last_seen = session.last_activity_at
    if last_seen is None or (now - last_seen).total_seconds() >= settings.SESSION_ACTIVITY_TOUCH_SECONDS:
        SessionService.touch(db, session, now)


def resolve_session(request: Request, db: Session) -> AuthContext:
    """Resolve the request's cookie to an `AuthContext` or raise the matching 401/403."""
    token = read_session_token(request)
    if token is None:
        # A malformed cookie is still a cookie worth clearing
        raise SessionError(
            ErrorCode.NO_SESSION,
            "Authentication required",
            clear_session_cookie=has_session_cookie(request),
        )

    state, session = SessionService.check(db, token)
    if state is SessionState.NOT_FOUND:
        raise SessionError(ErrorCode.SESSION_NOT_FOUND, "Session not found")
    if state is SessionState.EXPIRED:
        raise SessionError(ErrorCode.SESSION_EXPIRED, "Session expired, please sign in again")

    user = db.query(User).filter(User.id == session.user_id).first()
    if user is None:
        logger.warning(f"Dropping orphan session {session.id} for missing user {session.user_id}")
        SessionService.delete(db, session.id)
        raise SessionError(ErrorCode.USER_NOT_FOUND, "User not found")

    if not user.is_active:
        logger.info(f"Dropping session {session.id} for {user.status} user {user.id}")
        SessionService.delete(db, session.id)
        raise AccountInactiveError(user.status, clear_session_cookie=True)

    return AuthContext(user=user, session=session, token=token)


def require_session(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> AuthContext:
    """Dependency for endpoints that need a signed-in caller"""
    context = resolve_session(request, db)
    _refresh_session(response, db, context)
    return context


def optional_session(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> Optional[AuthContext]:
    """Like `require_session` but yields None instead of failing.

    A stale or invalid cookie is cleared on the way out.
    """
    try:
        context = resolve_session(request, db)
    except APIError as exc:
        if exc.clear_session_cookie:
            clear_session_cookie(response)
        return None

    _refresh_session(response, db, context)
    return context


def require_admin(context: AuthContext = Depends(require_session)) -> AuthContext:
    """Verify current user is an admin"""
    if not context.user.is_admin:
        raise AdminRequiredError()
    return context


def require_verified_email(context: AuthContext = Depends(require_session)) -> AuthContext:
    if not context.user.email_verified:
        raise EmailNotVerifiedError(context.user.email)
    return context
