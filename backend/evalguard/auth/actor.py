"""The authenticated principal a decision is made for.

Actors are read-only snapshots built per request by the caller (session
layer) and discarded after the decision.  The engine never loads them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from evalguard.auth.roles import Role, role_from_flags


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role
    is_admin: bool = False     # superuser: bypasses the permission matrix
    active: bool = True
    reports_to: str | None = None   # id of this actor's own manager

    @property
    def is_director(self) -> bool:
        return self.role is Role.DIRECTOR

    @property
    def is_leader(self) -> bool:
        return self.role is Role.LEADER

    @classmethod
    def from_profile(cls, profile: Mapping[str, Any]) -> "Actor":
        """Build an actor from a stored user profile row.

        Reads `id`, `is_director`, `is_leader`, `is_admin`, `active` and
        `reports_to`.  Missing flags default to False, except `active`
        which must be present and truthy for the actor to be active.
        """
        return cls(
            id=str(profile["id"]),
            role=role_from_flags(
                bool(profile.get("is_director")),
                bool(profile.get("is_leader")),
            ),
            is_admin=bool(profile.get("is_admin")),
            active=bool(profile.get("active")),
            reports_to=profile.get("reports_to"),
        )
