"""Role-based permission matrix for EvalGuard.

Design:
  - Each role has a fixed set of (resource, actions) grants, defined in
    `DEFAULT_MATRIX` or loaded once at startup from a JSON file.
  - Nothing is inherited between roles: a director grant does not imply
    the leader grant, every pair is listed explicitly.
  - A missing (role, resource) entry means "no actions".
  - `PermissionEvaluator` wraps a matrix with the two gates that sit in
    front of it: inactive actors are denied everything, admin-override
    actors are allowed everything.

Resources: see `evalguard.auth.roles.RESOURCES`
Actions:   create, read, update, delete
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from evalguard.auth.actor import Actor
from evalguard.auth.roles import (
    ALL_ACTIONS,
    KNOWN_RESOURCES,
    RESOURCES,
    Action,
    Role,
    parse_action,
)

logger = logging.getLogger(__name__)

C, R, U, D = Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE


# ── Role → default grants ───────────────────────────────────

DEFAULT_MATRIX: dict[Role, dict[str, set[Action]]] = {
    Role.DIRECTOR: {
        "users": {C, R, U, D},
        "teams": {C, R, U, D},
        "departments": {C, R, U, D},
        "evaluations": {C, R, U, D},
        "consensus": {C, R, U, D},
        "reports": {R},
        "audit_logs": {R},
        "salary": {C, R, U, D},
    },

    Role.LEADER: {
        "users": {R, U},            # direct reports only (see ownership)
        "teams": {C, R, U},         # teams they are responsible for
        "departments": {R},
        "evaluations": {C, R, U},
        "reports": {R},
        "salary": {R},              # their team's salaries
    },

    Role.EMPLOYEE: {
        "users": {R},               # own profile
        "teams": {R},
        "departments": {R},
        "evaluations": {C, R, U},   # own evaluations
        "salary": {R},              # own salary
    },
}


class MatrixConfigurationError(ValueError):
    """The permission matrix is unusable.  Raised at startup only."""


# ── Matrix ──────────────────────────────────────────────────

class PermissionMatrix:
    """Immutable {role → resource → actions} table.

    Safe to share between threads and requests: nothing mutates it after
    construction.
    """

    __slots__ = ("_rows",)

    def __init__(self, rows: Mapping[Role, Mapping[str, frozenset[Action]]]):
        frozen = {
            role: MappingProxyType(
                {resource: frozenset(actions) for resource, actions in grants.items() if actions}
            )
            for role, grants in rows.items()
        }
        if not any(frozen.values()):
            raise MatrixConfigurationError("Permission matrix grants no actions to any role")
        self._rows = MappingProxyType(frozen)

    @classmethod
    def default(cls) -> "PermissionMatrix":
        return cls(DEFAULT_MATRIX)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PermissionMatrix":
        """Build a matrix from plain data: {"director": {"users": ["read"]}}.

        Every role, resource and action name must be known.  Roles left out
        of `data` get no grants.
        """
        if not isinstance(data, Mapping) or not data:
            raise MatrixConfigurationError("Permission matrix must be a non-empty object")

        rows: dict[Role, dict[str, frozenset[Action]]] = {}
        for role_name, grants in data.items():
            try:
                role = Role(role_name)
            except ValueError:
                raise MatrixConfigurationError(
                    f"Unknown role '{role_name}'. Must be one of: {', '.join(r.value for r in Role)}"
                ) from None
            if not isinstance(grants, Mapping):
                raise MatrixConfigurationError(f"Grants for role '{role_name}' must be an object")

            row: dict[str, frozenset[Action]] = {}
            for resource, actions in grants.items():
                if resource not in KNOWN_RESOURCES:
                    raise MatrixConfigurationError(
                        f"Unknown resource '{resource}' in role '{role_name}'"
                    )
                if not isinstance(actions, (list, tuple)):
                    raise MatrixConfigurationError(
                        f"Actions for {role_name}/{resource} must be a list"
                    )
                parsed = set()
                for name in actions:
                    action = parse_action(name)
                    if action is None:
                        raise MatrixConfigurationError(
                            f"Unknown action '{name}' for {role_name}/{resource}"
                        )
                    parsed.add(action)
                row[resource] = frozenset(parsed)
            rows[role] = row

        return cls(rows)

    def actions_for(self, role: Role, resource: str) -> frozenset[Action]:
        row = self._rows.get(role)
        if row is None:
            return frozenset()
        return row.get(resource, frozenset())

    def allows(self, role: Role, resource: str, action: Action) -> bool:
        return action in self.actions_for(role, resource)

    def grants_for(self, role: Role) -> dict[str, list[str]]:
        """Return the role's grants as sorted plain data."""
        row = self._rows.get(role, {})
        return {
            resource: sorted(a.value for a in actions)
            for resource, actions in sorted(row.items())
        }

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        return {role.value: self.grants_for(role) for role in Role}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PermissionMatrix):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(json.dumps(self.to_dict(), sort_keys=True))


def load_matrix(path: str | Path | None = None) -> PermissionMatrix:
    """Load the matrix from a JSON file, or return the built-in table.

    Raises MatrixConfigurationError when the file is missing, unreadable,
    not JSON, or describes an invalid matrix.
    """
    if not path:
        logger.info("Using built-in permission matrix")
        return PermissionMatrix.default()

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise MatrixConfigurationError(f"Permission matrix file not found: {path}") from None
    except (OSError, json.JSONDecodeError) as e:
        raise MatrixConfigurationError(f"Cannot read permission matrix {path}: {e}") from e

    matrix = PermissionMatrix.from_mapping(data)
    logger.info(f"Loaded permission matrix from {path}")
    return matrix


# ── Evaluation ──────────────────────────────────────────────

class PermissionEvaluator:
    """Answers "may this actor perform this action on this resource"."""

    def __init__(self, matrix: PermissionMatrix):
        self.matrix = matrix

    def has_permission(self, actor: Actor, resource: str, action: Action | str) -> bool:
        """Check one (resource, action) pair for an actor.

        1. Inactive actors are denied, admin-override included.
        2. Admin-override actors are allowed.
        3. Otherwise the actor's role row decides; unknown resources or
           actions are denied, as are non-string resources.
        """
        if not actor.active or not isinstance(resource, str):
            return False
        if actor.is_admin:
            return True
        parsed = parse_action(action)
        if parsed is None:
            return False
        return self.matrix.allows(actor.role, resource, parsed)

    def resource_access(self, actor: Actor, resource: str) -> dict[str, bool]:
        """CRUD booleans for a single resource."""
        return {
            f"can_{action.value}": self.has_permission(actor, resource, action)
            for action in Action
        }

    def permissions_for(self, actor: Actor) -> dict[str, list[str]]:
        """The actor's effective grants as {resource: [actions]}."""
        if not actor.active:
            return {}
        if actor.is_admin:
            every = sorted(a.value for a in ALL_ACTIONS)
            return {resource: list(every) for resource in sorted(RESOURCES)}
        return self.matrix.grants_for(actor.role)
