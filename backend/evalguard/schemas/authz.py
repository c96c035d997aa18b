from typing import Any, Literal

from pydantic import BaseModel, Field

from evalguard.auth.actor import Actor
from evalguard.auth.ownership import PREDICATE_NAMES

PredicateName = Literal[PREDICATE_NAMES]  # type: ignore[valid-type]


# ── Actor snapshot (resolved by the caller's session layer) ─

class ActorIn(BaseModel):
    """User profile fields the engine needs.  Flags are converted to a role once."""
    id: str = Field(min_length=1)
    is_director: bool = False
    is_leader: bool = False
    is_admin: bool = False
    active: bool = True
    reports_to: str | None = None

    def to_actor(self) -> Actor:
        return Actor.from_profile(self.model_dump())


# ── Permissions ─────────────────────────────────────────────

class PermissionCheckRequest(BaseModel):
    actor: ActorIn
    resource: str
    action: str


class ResourceAccessRequest(BaseModel):
    actor: ActorIn
    resource: str


class ResourceAccessOut(BaseModel):
    resource: str
    can_create: bool
    can_read: bool
    can_update: bool
    can_delete: bool


class DecisionOut(BaseModel):
    allowed: bool


# ── Ownership ───────────────────────────────────────────────

class OwnershipCheckRequest(BaseModel):
    actor: ActorIn
    predicate: PredicateName
    target_id: str | None = None
    target_reports_to: str | None = None
    team_responsible_id: str | None = None


# ── Operations ──────────────────────────────────────────────

class OperationRequest(BaseModel):
    actor: ActorIn
    operation: str = Field(min_length=1)
    target: dict[str, Any] = Field(default_factory=dict)


class ValidationResultOut(BaseModel):
    is_valid: bool
    errors: list[str]
    warnings: list[str]


class OperationDecisionOut(BaseModel):
    status: Literal["proceed", "confirm", "blocked"]
    operation: str
    result: ValidationResultOut
    token: str | None = None
    expires_in: float | None = None


class ConfirmRequest(BaseModel):
    actor: ActorIn
    token: str = Field(min_length=1)


class CancelRequest(BaseModel):
    token: str = Field(min_length=1)


# ── Presentation helpers ────────────────────────────────────

class UIFlagsRequest(BaseModel):
    actor: ActorIn


class RouteCheckRequest(BaseModel):
    actor: ActorIn | None = None     # None = anonymous visitor
    path: str


class MatrixOut(BaseModel):
    roles: dict[str, dict[str, list[str]]]
    operations: list[str]
