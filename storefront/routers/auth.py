from typing import Optional
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.password_policy import validate_password_strength
from storefront.dependencies.auth import AuthContext, optional_session, require_session
from storefront.dependencies.rate_limit import auth_rate_limit, user_rate_limit
from storefront.schemas.auth import (
    PasswordStrengthRequest,
    PasswordStrengthResponse,
    RegisterRequest,
    SessionResponse,
    SigninRequest,
)
from storefront.schemas.common import ErrorResponse
from storefront.services.auth_service import AuthService, serialize_user
from storefront.services.session_service import IssuedSession, SessionService
from storefront.utils.cookies import clear_session_cookie, read_session_token, set_session_cookie
from storefront.utils.errors import APIError, InternalServerError, MissingFieldsError
from storefront.utils.helpers import format_response, get_client_ip, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)


def _issue_cookie(response: Response, issued: IssuedSession) -> None:
    max_age = round((issued.expires_at - utcnow()).total_seconds())
    set_session_cookie(response, issued.token, max_age)


def _client_meta(request: Request) -> dict:
    return {
        "ip_address": get_client_ip(request, trust_forwarded=settings.TRUST_PROXY_HEADERS),
        "user_agent": request.headers.get("user-agent"),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    _: None = Depends(auth_rate_limit),
):
    """
    Register with email/password
    - Validate inputs and password policy
    - Create user
    - Sign the new account in
    """
    try:
        user, issued = AuthService.register(db, payload, **_client_meta(request))
    except APIError:
        raise
    except Exception:
        logger.exception("Registration failed")
        raise InternalServerError()

    _issue_cookie(response, issued)
    return format_response(user=serialize_user(user))


@router.post("/signin")
def signin(
    payload: SigninRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    _: None = Depends(auth_rate_limit),
):
    """Email/password sign-in; `rememberMe` keeps the session for longer."""
    try:
        user, issued = AuthService.signin(
            db,
            payload.email,
            payload.password,
            remember_me=payload.remember_me,
            **_client_meta(request),
        )
    except APIError:
        raise
    except Exception:
        logger.exception("Sign-in failed")
        raise InternalServerError()

    _issue_cookie(response, issued)
    return format_response(user=serialize_user(user))


@router.post("/signout")
def signout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    _: None = Depends(user_rate_limit),
):
    try:
        AuthService.signout(db, read_session_token(request))
    except Exception:
        logger.exception("Sign-out failed")
        raise InternalServerError()

    clear_session_cookie(response)
    return format_response(message="Signed out")


@router.post("/signout-all")
def signout_all(
    response: Response,
    _: None = Depends(user_rate_limit),
    context: AuthContext = Depends(require_session),
    db: Session = Depends(get_db),
):
    """Sign out of every device, including this one."""
    revoked = SessionService.delete_all_for_user(db, context.user_id)
    clear_session_cookie(response)
    return format_response(message="Signed out everywhere", revoked=revoked)


@router.get("/me")
def me(
    _: None = Depends(user_rate_limit),
    context: AuthContext = Depends(require_session),
):
    return format_response(user=serialize_user(context.user))


@router.get("/session")
def session_status(
    _: None = Depends(user_rate_limit),
    context: Optional[AuthContext] = Depends(optional_session),
):
    return format_response(
        authenticated=context is not None,
        user=serialize_user(context.user) if context else None,
    )


@router.get("/sessions")
def list_sessions(
    _: None = Depends(user_rate_limit),
    context: AuthContext = Depends(require_session),
    db: Session = Depends(get_db),
):
    sessions = []
    for session in SessionService.list_for_user(db, context.user_id):
        item = SessionResponse.model_validate(session)
        item.current = session.id == context.session.id
        sessions.append(item.model_dump(by_alias=True, mode="json"))
    return format_response(sessions=sessions)


@router.get("/check-email")
def check_email(
    email: Optional[str] = None,
    db: Session = Depends(get_db),
    _: None = Depends(auth_rate_limit),
):
    return format_response(available=AuthService.email_available(db, email))


@router.post("/password-strength", response_model=PasswordStrengthResponse, response_model_by_alias=True)
async def password_strength(
    payload: PasswordStrengthRequest,
    _: None = Depends(auth_rate_limit),
):
    if payload.password is None:
        raise MissingFieldsError(["password"])
    result = validate_password_strength(payload.password)
    return PasswordStrengthResponse(
        valid=result.valid,
        strength=result.strength.value,
        score=result.score,
        errors=result.errors,
    )
