"""FastAPI dependencies for the authorization engine.

Dependencies:
  get_engine_dep          → the process-wide AuthorizationEngine
  get_current_actor       → the Actor the host application resolved for
                            this request (request.state.actor)
  require_permission(...) → restrict to actors holding resource:action

EvalGuard does not authenticate anyone.  The host application's session
layer puts an `Actor` on `request.state.actor` (or overrides
`get_current_actor`); these dependencies only read it.
"""

from fastapi import Depends, HTTPException, Request, status

from evalguard.auth.actor import Actor
from evalguard.auth.engine import AuthorizationEngine, get_engine
from evalguard.auth.roles import Action
from evalguard.middleware.exceptions import PermissionDeniedError


def get_engine_dep() -> AuthorizationEngine:
    return get_engine()


async def get_current_actor(request: Request) -> Actor:
    actor = getattr(request.state, "actor", None)
    if not isinstance(actor, Actor):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No actor resolved for this request",
        )
    return actor


def require_permission(resource: str, action: Action | str):
    """Dependency factory: restrict to actors allowed resource:action.

    Usage:
        @router.get("/audit")
        async def audit_view(actor: Actor = Depends(require_permission("audit_logs", "read"))):
            ...
    """
    action_name = getattr(action, "value", action)

    async def _check(
        actor: Actor = Depends(get_current_actor),
        engine: AuthorizationEngine = Depends(get_engine_dep),
    ) -> Actor:
        if not engine.has_permission(actor, resource, action):
            raise PermissionDeniedError(f"Missing permission: {resource}:{action_name}")
        return actor

    return _check
