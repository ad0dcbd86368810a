from datetime import timedelta


async def test_admin_routes_require_admin(async_client, create_user, sign_in, cookie_headers):
    user = create_user()
    _, token = await sign_in(user.email)

    r = await async_client.get("/api/admin/rate-limits", headers=cookie_headers(token))

    assert r.status_code == 403
    assert r.json()["code"] == "ADMIN_REQUIRED"


async def test_admin_routes_require_session(async_client):
    r = await async_client.post("/api/admin/sessions/sweep")

    assert r.status_code == 401
    assert r.json()["code"] == "NO_SESSION"


async def test_rate_limit_snapshot(async_client, create_user, sign_in, cookie_headers):
    admin = create_user(is_admin=True)
    _, token = await sign_in(admin.email)

    r = await async_client.get("/api/admin/rate-limits", headers=cookie_headers(token))

    assert r.status_code == 200
    body = r.json()
    assert body["backend"] == "memory"
    keys = {entry["key"] for entry in body["entries"]}
    assert any(key.startswith("auth:") for key in keys)
    assert any(key.startswith("user:") for key in keys)


async def test_sweep_expired_sessions(async_client, create_user, sign_in, cookie_headers, db_session):
    from storefront.models.session import UserSession
    from storefront.services.session_service import SessionService
    from storefront.utils.helpers import utcnow

    admin = create_user(is_admin=True)
    _, token = await sign_in(admin.email)
    victim = create_user()
    stale = SessionService.create(db_session, victim.id)
    db_session.query(UserSession).filter(UserSession.id == stale.session_id).update(
        {UserSession.expires_at: utcnow() - timedelta(days=1)}
    )
    db_session.commit()

    r = await async_client.post("/api/admin/sessions/sweep", headers=cookie_headers(token))

    assert r.status_code == 200
    assert r.json()["swept"] >= 1
    assert SessionService.fetch_by_token(db_session, stale.token) is None


async def test_force_sign_out_user(async_client, create_user, sign_in, cookie_headers):
    admin = create_user(is_admin=True)
    _, admin_token = await sign_in(admin.email)
    user = create_user()
    _, user_token = await sign_in(user.email)

    r = await async_client.delete(f"/api/admin/users/{user.id}/sessions", headers=cookie_headers(admin_token))

    assert r.status_code == 200
    assert r.json()["revoked"] == 1
    r = await async_client.get("/api/auth/me", headers=cookie_headers(user_token))
    assert r.status_code == 401
