"""Authorization engine: one matrix, the evaluators built around it.

    engine = AuthorizationEngine(PermissionMatrix.default())
    engine.has_permission(actor, "salary", "read")
    engine.ownership.can_edit_user(actor, target_id, target_reports_to)
    engine.validate_operation("deactivate_user", actor, {"is_director": True})
    engine.derive_ui_flags(actor)

Every call is pure and synchronous.  The process-wide engine comes from
`get_engine()`, built from settings on first use (or at startup, so a bad
matrix aborts the process before it serves requests).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from evalguard.auth.actor import Actor
from evalguard.auth.operations import (
    OperationValidator,
    ValidationResult,
    build_default_validator,
)
from evalguard.auth.ownership import OwnershipResolver
from evalguard.auth.permissions import PermissionEvaluator, PermissionMatrix, load_matrix
from evalguard.auth.roles import Action
from evalguard.auth.visibility import derive_ui_flags
from evalguard.config import settings

audit = logging.getLogger("evalguard.audit")


class AuthorizationEngine:

    def __init__(
        self,
        matrix: PermissionMatrix,
        validator: OperationValidator | None = None,
    ):
        self.matrix = matrix
        self.evaluator = PermissionEvaluator(matrix)
        self.ownership = OwnershipResolver()
        self.validator = validator or build_default_validator()

    def has_permission(self, actor: Actor, resource: str, action: Action | str) -> bool:
        allowed = self.evaluator.has_permission(actor, resource, action)
        action_name = getattr(action, "value", action)
        if allowed:
            audit.debug(f"allow {actor.id} {resource}:{action_name}")
        else:
            audit.info(f"deny {actor.id} {resource}:{action_name}")
        return allowed

    def validate_operation(
        self,
        operation: str,
        actor: Actor,
        target: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        result = self.validator.validate(operation, actor, target)
        if not result.is_valid:
            audit.info(f"blocked {operation} for {actor.id}: {'; '.join(result.errors)}")
        return result

    def can_execute(
        self,
        operation: str,
        actor: Actor,
        target: Mapping[str, Any] | None = None,
    ) -> bool:
        return self.validator.can_execute(operation, actor, target)

    def derive_ui_flags(self, actor: Actor) -> dict[str, bool]:
        return derive_ui_flags(actor)


# ── Process-wide engine ─────────────────────────────────────

_engine: Optional[AuthorizationEngine] = None


def get_engine() -> AuthorizationEngine:
    """Get or build the process-wide engine from settings."""
    global _engine
    if _engine is None:
        _engine = AuthorizationEngine(load_matrix(settings.permission_matrix_file))
    return _engine


def set_engine(engine: AuthorizationEngine | None) -> None:
    """Replace the process-wide engine (tests, embedding applications)."""
    global _engine
    _engine = engine
