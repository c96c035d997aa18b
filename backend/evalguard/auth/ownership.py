"""Per-instance authorization: who may act on whom.

The flat matrix answers "may a leader update users".  These predicates
answer the finer question "may *this* leader update *this* user", using
the relationship between the actor and the target:

  - self-reference    (target is the actor)
  - management chain  (target reports to the actor)
  - team ownership    (actor is the team's responsible)

Every predicate denies inactive actors.
"""

from __future__ import annotations

from typing import Callable

from evalguard.auth.actor import Actor


def _is_privileged(actor: Actor) -> bool:
    return actor.is_admin or actor.is_director


class OwnershipResolver:

    # ── Hierarchical checks ─────────────────────────────────

    def can_edit_user(
        self,
        actor: Actor,
        target_id: str,
        target_reports_to: str | None = None,
    ) -> bool:
        if not actor.active:
            return False
        if _is_privileged(actor):
            return True
        if actor.is_leader and target_reports_to is not None and target_reports_to == actor.id:
            return True
        return target_id == actor.id

    def can_edit_team(self, actor: Actor, team_responsible_id: str | None) -> bool:
        # Teams with no responsible assigned are not editable by leaders
        if not actor.active:
            return False
        if _is_privileged(actor):
            return True
        return actor.is_leader and team_responsible_id is not None and team_responsible_id == actor.id

    def can_evaluate_user(
        self,
        actor: Actor,
        target_id: str,
        target_reports_to: str | None,
    ) -> bool:
        """Self-evaluation is checked before any role check."""
        if not actor.active:
            return False
        if target_id == actor.id:
            return True
        if _is_privileged(actor):
            return True
        return actor.is_leader and target_reports_to is not None and target_reports_to == actor.id

    # ── Role-only checks ────────────────────────────────────

    def can_create_team(self, actor: Actor) -> bool:
        return actor.active and (_is_privileged(actor) or actor.is_leader)

    def can_create_user(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_deactivate_user(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_delete_team(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_create_department(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_edit_department(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_delete_department(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_view_reports(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_view_audit_logs(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_access_consensus(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    def can_access_nine_box(self, actor: Actor) -> bool:
        return actor.active and _is_privileged(actor)

    # ── Dispatch by name ────────────────────────────────────

    def check(
        self,
        name: str,
        actor: Actor,
        *,
        target_id: str | None = None,
        target_reports_to: str | None = None,
        team_responsible_id: str | None = None,
    ) -> bool:
        """Run the predicate called `name`.  Unknown names are denied.

        Hierarchical predicates that need a target id deny when none is
        given.
        """
        if name == "can_edit_user":
            return target_id is not None and self.can_edit_user(actor, target_id, target_reports_to)
        if name == "can_evaluate_user":
            return target_id is not None and self.can_evaluate_user(actor, target_id, target_reports_to)
        if name == "can_edit_team":
            return self.can_edit_team(actor, team_responsible_id)

        if name not in ROLE_PREDICATES:
            return False
        predicate: Callable[[Actor], bool] = getattr(self, name)
        return predicate(actor)


HIERARCHICAL_PREDICATES: frozenset[str] = frozenset({
    "can_edit_user",
    "can_edit_team",
    "can_evaluate_user",
})

ROLE_PREDICATES: frozenset[str] = frozenset({
    "can_create_team",
    "can_create_user",
    "can_deactivate_user",
    "can_delete_team",
    "can_create_department",
    "can_edit_department",
    "can_delete_department",
    "can_view_reports",
    "can_view_audit_logs",
    "can_access_consensus",
    "can_access_nine_box",
})

PREDICATE_NAMES: tuple[str, ...] = tuple(sorted(HIERARCHICAL_PREDICATES | ROLE_PREDICATES))
