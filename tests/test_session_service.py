from datetime import timedelta

import pytest

from storefront.core.security import hash_token
from storefront.models.session import UserSession
from storefront.services.session_service import SessionService, SessionState
from storefront.utils.helpers import utcnow


def _expire(db, session_id, ago=timedelta(minutes=1)):
    db.query(UserSession).filter(UserSession.id == session_id).update({UserSession.expires_at: utcnow() - ago})
    db.commit()


def test_create_stores_only_token_hash(db_session, create_user):
    user = create_user()

    issued = SessionService.create(db_session, user.id, user_agent="pytest", ip_address="10.0.0.1")

    row = db_session.query(UserSession).filter(UserSession.id == issued.session_id).one()
    assert row.token_hash == hash_token(issued.token)
    assert issued.token not in (row.token_hash, row.id)
    assert row.user_agent == "pytest"
    assert row.ip_address == "10.0.0.1"
    assert timedelta(days=6, hours=23) < row.expires_at - utcnow() <= timedelta(days=7)


def test_create_truncates_metadata(db_session, create_user):
    user = create_user()

    issued = SessionService.create(db_session, user.id, user_agent="x" * 2000)

    row = db_session.query(UserSession).filter(UserSession.id == issued.session_id).one()
    assert len(row.user_agent) == 512
    assert row.ip_address is None


@pytest.mark.parametrize("ttl_days", [0, -1])
def test_create_rejects_non_positive_ttl(db_session, create_user, ttl_days):
    user = create_user()

    with pytest.raises(ValueError):
        SessionService.create(db_session, user.id, ttl_days=ttl_days)


def test_tokens_are_unique_per_session(db_session, create_user):
    user = create_user()

    first = SessionService.create(db_session, user.id)
    second = SessionService.create(db_session, user.id)

    assert first.token != second.token
    assert first.session_id != second.session_id


def test_check_states(db_session, create_user):
    user = create_user()
    issued = SessionService.create(db_session, user.id)

    state, session = SessionService.check(db_session, issued.token)
    assert state is SessionState.VALID
    assert session.user_id == user.id
    assert SessionService.validate(db_session, issued.token) is True

    state, session = SessionService.check(db_session, "0" * 64)
    assert state is SessionState.NOT_FOUND
    assert session is None
    assert SessionService.validate(db_session, "") is False


def test_expired_session_is_deleted_and_swept(db_session, create_user):
    user = create_user()
    expired = SessionService.create(db_session, user.id)
    other_expired = SessionService.create(db_session, user.id)
    live = SessionService.create(db_session, user.id)
    _expire(db_session, expired.session_id)
    _expire(db_session, other_expired.session_id)

    state, session = SessionService.check(db_session, expired.token)

    assert state is SessionState.EXPIRED
    assert session is None
    db_session.expire_all()
    remaining = {row.id for row in db_session.query(UserSession).filter(UserSession.user_id == user.id)}
    assert remaining == {live.session_id}


def test_session_expiring_exactly_now_is_still_valid(db_session, create_user):
    user = create_user()
    issued = SessionService.create(db_session, user.id)
    row = SessionService.fetch_by_token(db_session, issued.token)

    assert SessionService.validate(db_session, issued.token, now=row.expires_at) is True
    assert SessionService.validate(db_session, issued.token, now=row.expires_at + timedelta(seconds=1)) is False


def test_delete_is_idempotent(db_session, create_user):
    user = create_user()
    issued = SessionService.create(db_session, user.id)

    assert SessionService.delete(db_session, issued.session_id) is True
    assert SessionService.delete(db_session, issued.session_id) is False
    assert SessionService.fetch_by_token(db_session, issued.token) is None


def test_delete_all_for_user_can_keep_one(db_session, create_user):
    user = create_user()
    other = create_user()
    keep = SessionService.create(db_session, user.id)
    SessionService.create(db_session, user.id)
    SessionService.create(db_session, user.id)
    other_session = SessionService.create(db_session, other.id)

    assert SessionService.delete_all_for_user(db_session, user.id, keep_session_id=keep.session_id) == 2
    assert SessionService.validate(db_session, keep.token) is True
    assert SessionService.validate(db_session, other_session.token) is True

    assert SessionService.delete_all_for_user(db_session, user.id) == 1
    assert SessionService.delete_all_for_user(db_session, user.id) == 0


def test_extend(db_session, create_user):
    user = create_user()
    issued = SessionService.create(db_session, user.id, ttl_days=1)

    new_expiry = SessionService.extend(db_session, issued.session_id, ttl_days=30)

    assert new_expiry > issued.expires_at + timedelta(days=28)
    db_session.expire_all()
    assert SessionService.fetch_by_token(db_session, issued.token).expires_at == new_expiry
    assert SessionService.extend(db_session, "missing", ttl_days=1) is None
    with pytest.raises(ValueError):
        SessionService.extend(db_session, issued.session_id, ttl_days=0)


def test_sweep_expired_counts_only_dead_rows(db_session, create_user):
    user = create_user()
    dead = SessionService.create(db_session, user.id)
    live = SessionService.create(db_session, user.id)
    _expire(db_session, dead.session_id, ago=timedelta(days=2))

    assert SessionService.sweep_expired(db_session) >= 1
    assert SessionService.sweep_expired(db_session) == 0
    assert SessionService.fetch_by_token(db_session, dead.token) is None
    assert SessionService.fetch_by_token(db_session, live.token) is not None


def test_list_for_user_skips_expired(db_session, create_user):
    user = create_user()
    first = SessionService.create(db_session, user.id)
    second = SessionService.create(db_session, user.id)
    dead = SessionService.create(db_session, user.id)
    _expire(db_session, dead.session_id)

    ids = [row.id for row in SessionService.list_for_user(db_session, user.id)]

    assert set(ids) == {first.session_id, second.session_id}


def test_touch_updates_last_activity(db_session, create_user):
    user = create_user()
    issued = SessionService.create(db_session, user.id)
    row = SessionService.fetch_by_token(db_session, issued.token)
    later = utcnow() + timedelta(minutes=5)

    SessionService.touch(db_session, row, later)

    db_session.expire_all()
    assert SessionService.fetch_by_token(db_session, issued.token).last_activity_at == later
