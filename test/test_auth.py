"""
Login, logout, session exclusivity and current-user resolution.
"""
from datetime import timedelta

import config
from database.models import Session as DBSession, User, ActivityLog, UserRole
from core.utils import local_now
from conftest import ADMIN_PASSWORD, DEFAULT_PASSWORD


def test_login_returns_token_and_profile(client, make_user):
    make_user("officer1", role=UserRole.OFFICER, first_name="Ana", last_name="Perez")

    response = client.post("/api/auth/login", json={"username": "officer1", "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["sessionToken"]
    assert body["user"]["username"] == "officer1"
    assert body["user"]["role"] == "officer"
    assert body["user"]["landingView"] == "register"
    assert "hashedPassword" not in body["user"]
    assert config.SESSION_COOKIE_NAME in response.cookies


def test_login_wrong_password_and_unknown_user_look_the_same(client, make_user):
    make_user("officer1")

    wrong = client.post("/api/auth/login", json={"username": "officer1", "password": "badpass1"})
    unknown = client.post("/api/auth/login", json={"username": "nobody", "password": "badpass1"})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["code"] == unknown.json()["code"] == "INVALID_CREDENTIALS"
    assert wrong.json()["detail"] == unknown.json()["detail"]


def test_login_body_validation(client):
    response = client.post("/api/auth/login", json={"username": "", "password": ""})

    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert {"username", "password"} <= fields


def test_short_wrong_password_is_invalid_credentials(client, make_user):
    make_user("officer1")

    response = client.post("/api/auth/login", json={"username": "officer1", "password": "123"})

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_second_login_while_session_live_is_rejected(client, make_user, login):
    make_user("officer1")
    login("officer1")

    response = client.post("/api/auth/login", json={"username": "officer1", "password": DEFAULT_PASSWORD})

    assert response.status_code == 409
    assert response.json()["code"] == "SESSION_CONFLICT"


def test_logout_frees_the_account(client, make_user, login):
    make_user("officer1")
    headers = login("officer1")

    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    assert client.get("/api/auth/user", headers=headers).status_code == 401

    login("officer1")


def test_logout_is_idempotent(client, make_user, login):
    make_user("officer1")
    headers = login("officer1")

    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    assert client.post("/api/auth/logout").status_code == 200


def test_expired_session_does_not_lock_the_account(client, make_user, login, db_session):
    user_id = make_user("officer1")
    headers = login("officer1")

    record = db_session.query(DBSession).filter(DBSession.user_id == user_id).one()
    record.expires_at = local_now() - timedelta(minutes=1)
    db_session.commit()

    assert client.get("/api/auth/user", headers=headers).status_code == 401
    login("officer1")


def test_dangling_session_reference_does_not_lock_the_account(client, make_user, login, db_session):
    user_id = make_user("officer1")
    login("officer1")

    db_session.query(DBSession).filter(DBSession.user_id == user_id).delete()
    db_session.commit()

    login("officer1")


def test_current_user_requires_credentials(client):
    response = client.get("/api/auth/user")

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"


def test_current_user_with_bearer_token(client, admin_headers):
    response = client.get("/api/auth/user", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["username"] == config.DEFAULT_ADMIN_USERNAME
    assert body["landingView"] == "dashboard"
    assert set(body["capabilities"]) == {
        "view_dashboard", "register_detainee", "search_detainees", "manage_users"
    }


def test_current_user_with_session_key_header(client):
    token = client.post(
        "/api/auth/login",
        json={"username": config.DEFAULT_ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    ).json()["sessionToken"]
    client.cookies.clear()

    response = client.get("/api/auth/user", headers={"X-Session-Key": token})

    assert response.status_code == 200


def test_current_user_with_session_cookie(client):
    client.post("/api/auth/login", json={"username": config.DEFAULT_ADMIN_USERNAME, "password": ADMIN_PASSWORD})

    response = client.get("/api/auth/user")

    assert response.status_code == 200
    assert response.json()["username"] == config.DEFAULT_ADMIN_USERNAME


def test_garbage_token_is_unauthenticated(client):
    response = client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-session"})

    assert response.status_code == 401


def test_login_and_logout_are_audited(client, make_user, login, db_session):
    user_id = make_user("officer1")
    headers = login("officer1")
    client.post("/api/auth/logout", headers=headers)

    actions = [a.action for a in db_session.query(ActivityLog).filter(ActivityLog.user_id == user_id)
               .order_by(ActivityLog.id)]
    assert actions == ["login", "logout"]


def test_login_records_last_login_and_session_claim(client, make_user, login, db_session):
    user_id = make_user("officer1")
    login("officer1")

    user = db_session.get(User, user_id)
    record = db_session.query(DBSession).filter(DBSession.user_id == user_id).one()
    assert user.last_login is not None
    assert user.active_session_id == record.sid
    assert record.expires_at - record.created_at == timedelta(hours=config.SESSION_EXPIRE_HOURS)


def test_default_admin_is_seeded(client, db_session):
    admin = db_session.query(User).filter(User.username == config.DEFAULT_ADMIN_USERNAME).one()

    assert admin.role == UserRole.ADMIN


def test_health_and_root_are_public(client):
    assert client.get("/").status_code == 200
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["checks"]["database"]["status"] == "ok"
