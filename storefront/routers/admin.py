"""Admin endpoints."""
import logging
import time

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.dependencies.auth import AuthContext, require_admin
from storefront.dependencies.rate_limit import user_rate_limit
from storefront.services.session_service import SessionService
from storefront.utils.helpers import format_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/rate-limits")
async def rate_limit_stats(
    request: Request,
    _: None = Depends(user_rate_limit),
    admin: AuthContext = Depends(require_admin),
):
    """Snapshot of live rate limit windows."""
    store = request.app.state.rate_limit_store
    entries = await store.stats(time.time())
    return format_response(backend=store.backend, total=len(entries), entries=entries)


@router.post("/sessions/sweep")
def sweep_sessions(
    _: None = Depends(user_rate_limit),
    admin: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    swept = SessionService.sweep_expired(db)
    logger.info(f"Admin {admin.user_id} swept {swept} expired session(s)")
    return format_response(swept=swept)


@router.delete("/users/{user_id}/sessions")
def revoke_user_sessions(
    user_id: int,
    _: None = Depends(user_rate_limit),
    admin: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Force sign-out of every session a user holds."""
    revoked = SessionService.delete_all_for_user(db, user_id)
    logger.info(f"Admin {admin.user_id} revoked {revoked} session(s) of user {user_id}")
    return format_response(revoked=revoked)
