"""Validation of sensitive operations.

Each operation key is bound to one rule function.  A rule inspects the
actor and a snapshot of the target and records:

  - errors    → blocking, the operation must not run (confirmation or not)
  - warnings  → non-blocking, the caller must get explicit confirmation

Adding an operation means registering one more rule:

    @validator.register("archive_cycle")
    def _archive_cycle(actor, target, report):
        if not actor.is_director:
            report.error("Only directors can archive cycles")

Admin-override actors pass every registered operation untouched.  Unknown
operation keys always fail with a single error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from evalguard.auth.actor import Actor

UNKNOWN_OPERATION_ERROR = "Operation not permitted"


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def requires_confirmation(self) -> bool:
        return self.is_valid and len(self.warnings) > 0

    @property
    def proceeds_immediately(self) -> bool:
        return not self.errors and not self.warnings

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass
class ValidationReport:
    """Mutable collector handed to a rule; frozen into a ValidationResult."""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def result(self) -> ValidationResult:
        return ValidationResult(
            is_valid=not self.errors,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
        )


Rule = Callable[[Actor, Mapping[str, Any], ValidationReport], None]


class OperationValidator:
    """Registry of operation rules."""

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}

    def register(self, key: str) -> Callable[[Rule], Rule]:
        if not key or not isinstance(key, str):
            raise ValueError("Operation key must be a non-empty string")

        def decorator(rule: Rule) -> Rule:
            if key in self._rules:
                raise ValueError(f"Operation '{key}' is already registered")
            self._rules[key] = rule
            return rule

        return decorator

    @property
    def operations(self) -> tuple[str, ...]:
        return tuple(sorted(self._rules))

    def is_registered(self, key: str) -> bool:
        return key in self._rules

    def validate(
        self,
        key: str,
        actor: Actor,
        target: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        rule = self._rules.get(key)
        if rule is None:
            return ValidationResult(is_valid=False, errors=(UNKNOWN_OPERATION_ERROR,))

        if actor.is_admin:
            return ValidationResult(is_valid=True)

        report = ValidationReport()
        rule(actor, target or {}, report)
        return report.result()

    def can_execute(
        self,
        key: str,
        actor: Actor,
        target: Mapping[str, Any] | None = None,
    ) -> bool:
        return self.validate(key, actor, target).is_valid and actor.active


# ── Built-in rules ──────────────────────────────────────────

def _teams_count(target: Mapping[str, Any]) -> float:
    try:
        return float(target.get("teams_count") or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def register_default_rules(validator: OperationValidator) -> OperationValidator:
    """Register the application's sensitive operations on `validator`."""

    @validator.register("promote_to_admin")
    def _promote_to_admin(actor, target, report):
        # Admins never reach the rule
        report.error("Only administrators can promote users to admin")

    @validator.register("promote_to_director")
    def _promote_to_director(actor, target, report):
        if not actor.is_director:
            report.error("Only administrators and directors can promote users to director")

    @validator.register("deactivate_user")
    def _deactivate_user(actor, target, report):
        if not actor.is_director:
            report.error("Only administrators and directors can deactivate users")
        if target.get("is_admin"):
            report.error("An administrator cannot be deactivated")
        if target.get("is_director"):
            report.warn("You are deactivating a director. This may affect the system.")

    @validator.register("delete_department")
    def _delete_department(actor, target, report):
        if not actor.is_director:
            report.error("Only administrators and directors can delete departments")
        if _teams_count(target) > 0:
            report.warn("This department has active teams")

    @validator.register("change_team_leader")
    def _change_team_leader(actor, target, report):
        if not (actor.is_director or actor.is_leader):
            report.error("Only administrators, directors and leaders can change team leaders")

    @validator.register("modify_salary")
    def _modify_salary(actor, target, report):
        if not actor.is_director:
            report.error("Only administrators and directors can modify salaries")

    @validator.register("approve_progression")
    def _approve_progression(actor, target, report):
        if not actor.is_director:
            report.error("Only administrators and directors can approve progressions")

    return validator


def build_default_validator() -> OperationValidator:
    return register_default_rules(OperationValidator())
