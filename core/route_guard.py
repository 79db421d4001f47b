# core/route_guard.py

from typing import Dict, Iterable, List, Optional, Protocol

from core.logging_config import logger
from core.roles import has_any_role
from core.sidebar_config import ROUTE_ROLES
from models.access import GuardDecision
from models.enums import GuardState


AUTH_ROUTE = "/auth"
HOME_ROUTE = "/"


class GuardUser(Protocol):
    id: str
    roles: List[str]


def required_roles_for_path(path: str, route_roles: Optional[Dict[str, List[str]]] = None) -> List[str]:
    """
    Roles required for ``path`` using the longest matching route prefix.
    Unknown routes require nothing.
    """
    table = ROUTE_ROLES if route_roles is None else route_roles
    path = "/" + (path or "").strip("/")

    best = None
    for prefix in table:
        if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
            if best is None or len(prefix) > len(best):
                best = prefix

    return list(table[best]) if best else []


def evaluate_route_guard(
    user: Optional[GuardUser],
    required_roles: Iterable[str] = (),
    loading: bool = False,
) -> GuardDecision:
    required = list(required_roles or [])

    if loading:
        return GuardDecision(state=GuardState.loading, required_roles=required)

    if user is None:
        logger.info("Route guard: not authenticated, redirecting to /auth")
        return GuardDecision(
            state=GuardState.unauthenticated,
            redirect_to=AUTH_ROUTE,
            required_roles=required,
        )

    if not has_any_role(user.roles, required):
        logger.info(f"Route guard: user {user.id} lacks roles {required}")
        return GuardDecision(
            state=GuardState.unauthorized,
            redirect_to=HOME_ROUTE,
            required_roles=required,
        )

    return GuardDecision(state=GuardState.authorized, required_roles=required)


def evaluate_path(user: Optional[GuardUser], path: str, loading: bool = False) -> GuardDecision:
    return evaluate_route_guard(user, required_roles_for_path(path), loading=loading)
