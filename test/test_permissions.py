"""
Role capability table and its enforcement on the HTTP surface.
"""
import pytest

from auth.permissions import Capability, capabilities_for, has_capability, landing_view
from database.models import UserRole
from conftest import JPEG_BYTES

EXPECTED = {
    UserRole.ADMIN: {Capability.VIEW_DASHBOARD, Capability.REGISTER_DETAINEE,
                     Capability.SEARCH_DETAINEES, Capability.MANAGE_USERS},
    UserRole.SUPERVISOR: {Capability.VIEW_DASHBOARD, Capability.REGISTER_DETAINEE,
                          Capability.SEARCH_DETAINEES},
    UserRole.OFFICER: {Capability.REGISTER_DETAINEE, Capability.SEARCH_DETAINEES},
    UserRole.AGENT: {Capability.SEARCH_DETAINEES},
}


@pytest.mark.parametrize("role", list(UserRole))
def test_capability_table(role):
    assert capabilities_for(role) == EXPECTED[role]
    for capability in Capability:
        assert has_capability(role, capability) == (capability in EXPECTED[role])


def test_roles_accept_string_values():
    assert has_capability("agent", Capability.SEARCH_DETAINEES)
    assert not has_capability("agent", Capability.REGISTER_DETAINEE)


def test_unknown_role_has_no_capabilities():
    assert capabilities_for("janitor") == frozenset()


@pytest.mark.parametrize("role, view", [
    (UserRole.ADMIN, "dashboard"),
    (UserRole.SUPERVISOR, "dashboard"),
    (UserRole.OFFICER, "register"),
    (UserRole.AGENT, "search"),
])
def test_landing_view(role, view):
    assert landing_view(role) == view


def _probe(client, headers, capability):
    if capability == Capability.VIEW_DASHBOARD:
        return client.get("/api/dashboard/stats", headers=headers)
    if capability == Capability.REGISTER_DETAINEE:
        return client.post(
            "/api/ocr/process",
            files={"document": ("cedula.jpg", JPEG_BYTES, "image/jpeg")},
            headers=headers,
        )
    if capability == Capability.SEARCH_DETAINEES:
        return client.get("/api/detainees", headers=headers)
    return client.get("/api/admin/users", headers=headers)


@pytest.mark.parametrize("role", [UserRole.SUPERVISOR, UserRole.OFFICER, UserRole.AGENT])
def test_routes_enforce_capabilities(client, role_headers, role):
    headers = role_headers(role)

    for capability in Capability:
        response = _probe(client, headers, capability)
        if capability in EXPECTED[role]:
            assert response.status_code == 200, (role, capability, response.text)
        else:
            assert response.status_code == 403, (role, capability, response.text)
            assert response.json()["code"] == "FORBIDDEN"


def test_admin_reaches_every_route(client, admin_headers):
    for capability in Capability:
        assert _probe(client, admin_headers, capability).status_code == 200


def test_protected_routes_require_a_session(client):
    for capability in Capability:
        assert _probe(client, {}, capability).status_code == 401
