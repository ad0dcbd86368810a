"""Account management endpoints for the signed-in user."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.dependencies.auth import AuthContext, require_session
from storefront.dependencies.rate_limit import user_rate_limit
from storefront.schemas.auth import ChangePasswordRequest
from storefront.services.auth_service import AuthService
from storefront.utils.errors import APIError, ForbiddenError, InternalServerError
from storefront.utils.helpers import format_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/{user_id}/password")
def change_password(
    user_id: int,
    payload: ChangePasswordRequest,
    _: None = Depends(user_rate_limit),
    context: AuthContext = Depends(require_session),
    db: Session = Depends(get_db),
):
    """
    Change the caller's password
    - Only the account owner may change it
    - Every other session of the account is revoked
    """
    if context.user_id != user_id:
        raise ForbiddenError("You can only change your own password")

    try:
        revoked = AuthService.change_password(
            db,
            context.user,
            payload.current_password,
            payload.new_password,
            keep_session_id=context.session.id,
        )
    except APIError:
        raise
    except Exception:
        logger.exception(f"Password change failed for user {user_id}")
        raise InternalServerError()

    return format_response(message="Password updated", revokedSessions=revoked)
