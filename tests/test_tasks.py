from datetime import timedelta

from storefront.models.session import UserSession
from storefront.services.session_service import SessionService
from storefront.tasks.session_tasks import sweep_expired_sessions
from storefront.utils.helpers import utcnow


def test_sweep_task_removes_expired_sessions(db_session, create_user):
    user = create_user()
    dead = SessionService.create(db_session, user.id)
    live = SessionService.create(db_session, user.id)
    db_session.query(UserSession).filter(UserSession.id == dead.session_id).update(
        {UserSession.expires_at: utcnow() - timedelta(hours=1)}
    )
    db_session.commit()

    result = sweep_expired_sessions.apply()

    assert result.successful()
    assert result.get() >= 1
    db_session.expire_all()
    assert SessionService.fetch_by_token(db_session, dead.token) is None
    assert SessionService.fetch_by_token(db_session, live.token) is not None


def test_beat_schedule_points_at_sweep_task():
    from storefront.core.celery_app import celery_app

    entry = celery_app.conf.beat_schedule["sweep-expired-sessions"]
    assert entry["task"] == sweep_expired_sessions.name
