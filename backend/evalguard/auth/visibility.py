"""Display flags for the presentation layer.

These flags only hide or show affordances.  They are NOT an authorization
boundary: every operation behind a flag is checked again by the evaluator,
the ownership resolver or the operation validator before it runs.  The
flags are derived from their own table on purpose and never read the
permission matrix.
"""

from __future__ import annotations

from evalguard.auth.actor import Actor
from evalguard.auth.roles import Role

ADMIN = "admin"

_MANAGERS = frozenset({ADMIN, Role.DIRECTOR})
_LEADERSHIP = frozenset({ADMIN, Role.DIRECTOR, Role.LEADER})
_EVALUATED = frozenset({Role.LEADER, Role.EMPLOYEE})


# flag → audiences that see it
UI_FLAG_AUDIENCES: dict[str, frozenset] = {
    # Navigation
    "show_self_evaluation": _EVALUATED,
    "show_leader_evaluation": _LEADERSHIP,
    "show_potential_evaluation": _LEADERSHIP,
    "show_salary_progressions": _LEADERSHIP,
    "show_team_management": _LEADERSHIP,
    "show_consensus": _MANAGERS,
    "show_nine_box": _MANAGERS,
    "show_action_plan": _MANAGERS,
    "show_reports": _MANAGERS,
    "show_user_management": _MANAGERS,
    "show_department_management": _MANAGERS,
    "show_salary_management": _MANAGERS,

    # Actions
    "show_create_user_button": _MANAGERS,
    "show_create_team_button": _LEADERSHIP,
    "show_create_department_button": _MANAGERS,
    "show_export_button": _LEADERSHIP,
    "show_bulk_actions_button": _MANAGERS,

    # Sensitive information
    "show_salary_info": _MANAGERS,
    "show_full_contact_info": _LEADERSHIP,
    "show_audit_logs": _MANAGERS,
    "show_system_settings": _MANAGERS,
}

UI_FLAGS: tuple[str, ...] = tuple(UI_FLAG_AUDIENCES)


def derive_ui_flags(actor: Actor) -> dict[str, bool]:
    """Flat {flag: bool} map for one actor.  Inactive actors see nothing."""
    audience = ADMIN if actor.is_admin else actor.role
    return {
        flag: actor.active and audience in audiences
        for flag, audiences in UI_FLAG_AUDIENCES.items()
    }
