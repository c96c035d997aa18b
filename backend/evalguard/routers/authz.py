"""Authorization decisions over HTTP.

Route overview:
  POST /permissions/check    - may the actor perform action on resource
  POST /permissions/resource - CRUD map for one resource
  POST /ownership/check      - run one ownership predicate
  POST /operations/validate  - errors + warnings for a sensitive operation
  POST /operations/begin     - validate and, if needed, issue a confirmation token
  POST /operations/confirm   - claim a confirmation token
  POST /operations/cancel    - discard a confirmation token
  POST /ui-flags             - advisory display flags
  POST /routes/check         - may the actor open a page
  GET  /me/permissions       - effective grants of the current actor
  GET  /me/flags             - display flags of the current actor
  GET  /matrix               - the loaded matrix (requires audit_logs:read)

Denials are regular 200 responses with `allowed: false`.
"""

from fastapi import APIRouter, Depends, status

from evalguard.auth.actor import Actor
from evalguard.auth.deps import get_current_actor, get_engine_dep, require_permission
from evalguard.auth.engine import AuthorizationEngine
from evalguard.auth.navigation import can_access_route
from evalguard.schemas.authz import (
    CancelRequest,
    ConfirmRequest,
    DecisionOut,
    MatrixOut,
    OperationDecisionOut,
    OperationRequest,
    OwnershipCheckRequest,
    PermissionCheckRequest,
    ResourceAccessOut,
    ResourceAccessRequest,
    RouteCheckRequest,
    UIFlagsRequest,
    ValidationResultOut,
)
from evalguard.services.confirmation import (
    ConfirmationService,
    OperationDecision,
    get_confirmation_service,
)

router = APIRouter()


def _decision_out(decision: OperationDecision) -> OperationDecisionOut:
    return OperationDecisionOut(
        status=decision.status,
        operation=decision.operation,
        result=ValidationResultOut(**decision.result.to_dict()),
        token=decision.token,
        expires_in=decision.expires_in,
    )


# ── Permissions ──────────────────────────────────────────────

@router.post("/permissions/check", response_model=DecisionOut)
async def check_permission(
    body: PermissionCheckRequest,
    engine: AuthorizationEngine = Depends(get_engine_dep),
):
    allowed = engine.has_permission(body.actor.to_actor(), body.resource, body.action)
    return DecisionOut(allowed=allowed)


@router.post("/permissions/resource", response_model=ResourceAccessOut)
async def resource_access(
    body: ResourceAccessRequest,
    engine: AuthorizationEngine = Depends(get_engine_dep),
):
    access = engine.evaluator.resource_access(body.actor.to_actor(), body.resource)
    return ResourceAccessOut(resource=body.resource, **access)


# ── Ownership ────────────────────────────────────────────────

@router.post("/ownership/check", response_model=DecisionOut)
async def check_ownership(
    body: OwnershipCheckRequest,
    engine: AuthorizationEngine = Depends(get_engine_dep),
):
    allowed = engine.ownership.check(
        body.predicate,
        body.actor.to_actor(),
        target_id=body.target_id,
        target_reports_to=body.target_reports_to,
        team_responsible_id=body.team_responsible_id,
    )
    return DecisionOut(allowed=allowed)


# ── Operations ───────────────────────────────────────────────

@router.post("/operations/validate", response_model=ValidationResultOut)
async def validate_operation(
    body: OperationRequest,
    engine: AuthorizationEngine = Depends(get_engine_dep),
):
    result = engine.validate_operation(body.operation, body.actor.to_actor(), body.target)
    return ValidationResultOut(**result.to_dict())


@router.post("/operations/begin", response_model=OperationDecisionOut)
async def begin_operation(
    body: OperationRequest,
    service: ConfirmationService = Depends(get_confirmation_service),
):
    decision = await service.begin(body.operation, body.actor.to_actor(), body.target)
    return _decision_out(decision)


@router.post("/operations/confirm", response_model=OperationDecisionOut)
async def confirm_operation(
    body: ConfirmRequest,
    service: ConfirmationService = Depends(get_confirmation_service),
):
    decision = await service.confirm(body.token, body.actor.to_actor())
    return _decision_out(decision)


@router.post("/operations/cancel", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_operation(
    body: CancelRequest,
    service: ConfirmationService = Depends(get_confirmation_service),
):
    await service.cancel(body.token)


# ── Presentation helpers ─────────────────────────────────────

@router.post("/ui-flags", response_model=dict[str, bool])
async def ui_flags(
    body: UIFlagsRequest,
    engine: AuthorizationEngine = Depends(get_engine_dep),
):
    return engine.derive_ui_flags(body.actor.to_actor())


@router.post("/routes/check", response_model=DecisionOut)
async def check_route(body: RouteCheckRequest):
    actor = body.actor.to_actor() if body.actor else None
    return DecisionOut(allowed=can_access_route(actor, body.path))


# ── Current actor ────────────────────────────────────────────

@router.get("/me/permissions", response_model=dict[str, list[str]])
async def my_permissions(
    actor: Actor = Depends(get_current_actor),
    engine: AuthorizationEngine = Depends(get_engine_dep),
):
    return engine.evaluator.permissions_for(actor)


@router.get("/me/flags", response_model=dict[str, bool])
async def my_flags(
    actor: Actor = Depends(get_current_actor),
    engine: AuthorizationEngine = Depends(get_engine_dep),
):
    return engine.derive_ui_flags(actor)


@router.get("/matrix", response_model=MatrixOut)
async def view_matrix(
    _actor: Actor = Depends(require_permission("audit_logs", "read")),
    engine: AuthorizationEngine = Depends(get_engine_dep),
):
    return MatrixOut(roles=engine.matrix.to_dict(), operations=list(engine.validator.operations))
