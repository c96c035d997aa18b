"""Route access table for the presentation layer's pages.

Each page declares whether it needs an authenticated actor, which roles
may open it, and whether the actor must be active.  Admin-override
satisfies any role requirement but never the active requirement.
Unknown paths are denied.
"""

from __future__ import annotations

from dataclasses import dataclass

from evalguard.auth.actor import Actor
from evalguard.auth.roles import Role


@dataclass(frozen=True)
class RouteRule:
    require_auth: bool = True
    require_roles: frozenset[Role] | None = None   # None = any role
    require_active: bool = True


_ALL_ROLES = frozenset(Role)
_LEADERSHIP = frozenset({Role.DIRECTOR, Role.LEADER})
_DIRECTORS = frozenset({Role.DIRECTOR})

PUBLIC = RouteRule(require_auth=False, require_active=False)

ROUTE_ACCESS: dict[str, RouteRule] = {
    "/": RouteRule(),
    "/login": PUBLIC,
    "/reset-password": PUBLIC,
    "/notifications": RouteRule(),
    "/settings": RouteRule(),
    "/self-evaluation": RouteRule(require_roles=_ALL_ROLES),
    "/leader-evaluation": RouteRule(require_roles=_LEADERSHIP),
    "/potential-evaluation": RouteRule(require_roles=_LEADERSHIP),
    "/salary/progressions": RouteRule(require_roles=_LEADERSHIP),
    "/consensus": RouteRule(require_roles=_DIRECTORS),
    "/nine-box": RouteRule(require_roles=_DIRECTORS),
    "/pdi": RouteRule(require_roles=_DIRECTORS),
    "/reports": RouteRule(require_roles=_DIRECTORS),
    "/users": RouteRule(require_roles=_DIRECTORS),
    "/users/new": RouteRule(require_roles=_DIRECTORS),
    "/salary": RouteRule(require_roles=_DIRECTORS),
    "/salary/tracks": RouteRule(require_roles=_DIRECTORS),
}


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def can_access_route(
    actor: Actor | None,
    path: str,
    routes: dict[str, RouteRule] = ROUTE_ACCESS,
) -> bool:
    rule = routes.get(_normalize(path))
    if rule is None:
        return False
    if not rule.require_auth:
        return True
    if actor is None:
        return False
    if rule.require_active and not actor.active:
        return False
    if rule.require_roles is None or actor.is_admin:
        return True
    return actor.role in rule.require_roles
