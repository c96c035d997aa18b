"""Roles, actions and resources known to the authorization engine.

A user's role is stored as two legacy booleans (`is_director`,
`is_leader`).  `role_from_flags` is the single conversion point from those
flags to a `Role`; nothing else in the engine looks at the raw flags.
"""

from __future__ import annotations

import enum


class Role(str, enum.Enum):
    DIRECTOR = "director"
    LEADER = "leader"
    EMPLOYEE = "employee"


class Action(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


ALL_ACTIONS: frozenset[Action] = frozenset(Action)


# ── Resources ───────────────────────────────────────────────

RESOURCES: tuple[str, ...] = (
    "users",
    "teams",
    "departments",
    "evaluations",
    "consensus",
    "reports",
    "audit_logs",
    "salary",
    # No role row grants these; only admin-override reaches them
    "settings",
    "cycles",
    "pdi",
)

KNOWN_RESOURCES: frozenset[str] = frozenset(RESOURCES)


def role_from_flags(is_director: bool, is_leader: bool) -> Role:
    """Derive the role from the stored flags.  Director wins if both are set."""
    if is_director:
        return Role.DIRECTOR
    if is_leader:
        return Role.LEADER
    return Role.EMPLOYEE


def parse_action(value: Action | str) -> Action | None:
    """Return the Action for `value`, or None if it names no action."""
    if isinstance(value, Action):
        return value
    try:
        return Action(value)
    except ValueError:
        return None
