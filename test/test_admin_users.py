"""
User directory administration: create, update, suspend, reactivate, delete.
"""
from datetime import timedelta

from database.models import ActivityLog, SearchLog, Session as DBSession, User, UserRole, UserStatus
from core.utils import local_now
from conftest import DEFAULT_PASSWORD


def _future(days=3):
    return (local_now() + timedelta(days=days)).isoformat()


def test_create_user_defaults_to_officer(client, admin_headers, db_session):
    response = client.post(
        "/api/admin/users",
        json={"username": "nuevo", "password": "abc123", "firstName": "Luis", "email": "luis@example.com"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "officer"
    assert body["status"] == "active"
    assert body["firstName"] == "Luis"
    assert "password" not in body and "hashedPassword" not in body

    activity = db_session.query(ActivityLog).filter(ActivityLog.action == "create_user").one()
    assert "nuevo" in activity.description


def test_created_user_can_log_in(client, admin_headers, login):
    client.post("/api/admin/users", json={"username": "nuevo", "password": "abc123", "role": "agent"},
                headers=admin_headers)

    headers = login("nuevo", "abc123")

    assert client.get("/api/auth/user", headers=headers).json()["landingView"] == "search"


def test_duplicate_username(client, admin_headers, make_user):
    make_user("repetido")

    response = client.post("/api/admin/users", json={"username": "repetido", "password": "abc123"},
                           headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_USERNAME"


def test_short_password_is_rejected(client, admin_headers):
    response = client.post("/api/admin/users", json={"username": "nuevo", "password": "123"},
                           headers=admin_headers)

    assert response.status_code == 400


def test_list_and_get_users(client, admin_headers, make_user):
    user_id = make_user("officer1")

    usernames = {u["username"] for u in client.get("/api/admin/users", headers=admin_headers).json()}
    single = client.get(f"/api/admin/users/{user_id}", headers=admin_headers)

    assert {"admin", "officer1"} <= usernames
    assert single.json()["username"] == "officer1"
    assert client.get("/api/admin/users/999", headers=admin_headers).status_code == 404


def test_search_users(client, admin_headers, make_user):
    make_user("carlos_p", role=UserRole.AGENT)
    make_user("carlos_q", role=UserRole.OFFICER)
    make_user("maria", role=UserRole.AGENT)

    by_name = client.post("/api/admin/users/search", json={"username": "CARLOS"}, headers=admin_headers).json()
    by_both = client.post("/api/admin/users/search", json={"username": "carlos", "role": "agent"},
                          headers=admin_headers).json()

    assert sorted(u["username"] for u in by_name) == ["carlos_p", "carlos_q"]
    assert [u["username"] for u in by_both] == ["carlos_p"]


def test_update_user_role_and_profile(client, admin_headers, make_user):
    user_id = make_user("officer1")

    response = client.put(f"/api/admin/users/{user_id}",
                          json={"role": "supervisor", "lastName": "Mendez"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["role"] == "supervisor"
    assert response.json()["lastName"] == "Mendez"


def test_update_cannot_suspend(client, admin_headers, make_user):
    user_id = make_user("officer1")

    response = client.put(f"/api/admin/users/{user_id}", json={"status": "suspended"}, headers=admin_headers)

    assert response.status_code == 400


def test_update_to_taken_username(client, admin_headers, make_user):
    make_user("officer1")
    other_id = make_user("officer2")

    response = client.put(f"/api/admin/users/{other_id}", json={"username": "officer1"}, headers=admin_headers)

    assert response.status_code == 409


def test_suspension_revokes_session_and_blocks_login(client, admin_headers, make_user, login):
    user_id = make_user("officer1")
    officer = login("officer1")

    response = client.post(
        f"/api/admin/users/{user_id}/suspend",
        json={"suspendedUntil": _future(), "suspendedReason": "Investigacion interna"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "suspended"
    assert response.json()["suspendedReason"] == "Investigacion interna"
    assert client.get("/api/auth/user", headers=officer).status_code == 401

    relogin = client.post("/api/auth/login", json={"username": "officer1", "password": DEFAULT_PASSWORD})
    assert relogin.status_code == 403
    assert relogin.json()["code"] == "ACCOUNT_SUSPENDED"


def test_reactivate_restores_access(client, admin_headers, make_user, login, db_session):
    user_id = make_user("officer1")
    client.post(f"/api/admin/users/{user_id}/suspend",
                json={"suspendedUntil": _future(), "suspendedReason": "Sancion"}, headers=admin_headers)

    response = client.post(f"/api/admin/users/{user_id}/reactivate", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "active"
    assert body["suspendedUntil"] is None and body["suspendedReason"] is None
    login("officer1")


def test_update_status_active_lifts_suspension(client, admin_headers, make_user):
    user_id = make_user("officer1")
    client.post(f"/api/admin/users/{user_id}/suspend",
                json={"suspendedUntil": _future(), "suspendedReason": "Sancion"}, headers=admin_headers)

    response = client.put(f"/api/admin/users/{user_id}", json={"status": "active"}, headers=admin_headers)

    assert response.json()["status"] == "active"
    assert response.json()["suspendedReason"] is None


def test_suspension_needs_future_date_and_reason(client, admin_headers, make_user):
    user_id = make_user("officer1")
    past = (local_now() - timedelta(days=1)).isoformat()

    in_past = client.post(f"/api/admin/users/{user_id}/suspend",
                          json={"suspendedUntil": past, "suspendedReason": "x"}, headers=admin_headers)
    no_reason = client.post(f"/api/admin/users/{user_id}/suspend",
                            json={"suspendedUntil": _future(), "suspendedReason": "  "}, headers=admin_headers)

    assert in_past.status_code == 400
    assert no_reason.status_code == 400


def test_admin_cannot_suspend_or_delete_self(client, admin_headers, db_session):
    admin_id = db_session.query(User).filter(User.username == "admin").one().id

    suspend = client.post(f"/api/admin/users/{admin_id}/suspend",
                          json={"suspendedUntil": _future(), "suspendedReason": "x"}, headers=admin_headers)
    delete = client.delete(f"/api/admin/users/{admin_id}", headers=admin_headers)

    assert suspend.status_code == delete.status_code == 400
    assert delete.json()["code"] == "SELF_ACTION_DENIED"


def test_delete_user_removes_logs_and_session(client, admin_headers, make_user, login, db_session):
    user_id = make_user("agent1", role=UserRole.AGENT)
    agent = login("agent1")
    client.post("/api/search", json={"cedula": "123"}, headers=agent)

    response = client.delete(f"/api/admin/users/{user_id}", headers=admin_headers)

    assert response.status_code == 200
    assert db_session.get(User, user_id) is None
    assert db_session.query(ActivityLog).filter(ActivityLog.user_id == user_id).count() == 0
    assert db_session.query(SearchLog).filter(SearchLog.user_id == user_id).count() == 0
    assert db_session.query(DBSession).filter(DBSession.user_id == user_id).count() == 0
    assert client.get("/api/auth/user", headers=agent).status_code == 401
    assert db_session.query(ActivityLog).filter(ActivityLog.action == "delete_user").count() == 1


def test_delete_user_with_registrations_is_a_conflict(client, admin_headers, make_user, login, register, db_session):
    user_id = make_user("officer1")
    register(login("officer1"))

    response = client.delete(f"/api/admin/users/{user_id}", headers=admin_headers)

    assert response.status_code == 409
    assert db_session.get(User, user_id) is not None


def test_delete_unknown_user(client, admin_headers):
    assert client.delete("/api/admin/users/999", headers=admin_headers).status_code == 404


def test_non_admin_cannot_manage_users(client, role_headers):
    supervisor = role_headers(UserRole.SUPERVISOR)

    assert client.get("/api/admin/users", headers=supervisor).status_code == 403
    assert client.post("/api/admin/users", json={"username": "x12", "password": "abc123"},
                       headers=supervisor).status_code == 403


def test_status_enum_round_trip(client, admin_headers, make_user, db_session):
    user_id = make_user("officer1")
    client.post(f"/api/admin/users/{user_id}/suspend",
                json={"suspendedUntil": _future(), "suspendedReason": "x"}, headers=admin_headers)

    assert db_session.get(User, user_id).status == UserStatus.SUSPENDED
