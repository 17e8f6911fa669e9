"""
Role-based authorization policy.

Every role maps to a fixed set of capabilities; routes ask for a capability,
never for a list of roles.
"""
import enum
from typing import Dict, FrozenSet, Union

from database.models import UserRole


class Capability(str, enum.Enum):
    """Operations gated by role."""
    VIEW_DASHBOARD = "view_dashboard"
    REGISTER_DETAINEE = "register_detainee"
    SEARCH_DETAINEES = "search_detainees"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: Dict[UserRole, FrozenSet[Capability]] = {
    UserRole.ADMIN: frozenset({
        Capability.VIEW_DASHBOARD,
        Capability.REGISTER_DETAINEE,
        Capability.SEARCH_DETAINEES,
        Capability.MANAGE_USERS,
    }),
    UserRole.SUPERVISOR: frozenset({
        Capability.VIEW_DASHBOARD,
        Capability.REGISTER_DETAINEE,
        Capability.SEARCH_DETAINEES,
    }),
    UserRole.OFFICER: frozenset({
        Capability.REGISTER_DETAINEE,
        Capability.SEARCH_DETAINEES,
    }),
    UserRole.AGENT: frozenset({
        Capability.SEARCH_DETAINEES,
    }),
}

# Default view after login; presentation only, not a security boundary
LANDING_VIEWS: Dict[UserRole, str] = {
    UserRole.ADMIN: "dashboard",
    UserRole.SUPERVISOR: "dashboard",
    UserRole.OFFICER: "register",
    UserRole.AGENT: "search",
}


def _as_role(role: Union[UserRole, str]) -> UserRole:
    return role if isinstance(role, UserRole) else UserRole(role)


def capabilities_for(role: Union[UserRole, str]) -> FrozenSet[Capability]:
    """Capability set of a role; unknown roles get nothing."""
    try:
        return ROLE_CAPABILITIES[_as_role(role)]
    except (ValueError, KeyError):
        return frozenset()


def has_capability(role: Union[UserRole, str], capability: Capability) -> bool:
    return capability in capabilities_for(role)


def landing_view(role: Union[UserRole, str]) -> str:
    try:
        return LANDING_VIEWS[_as_role(role)]
    except (ValueError, KeyError):
        return "search"
