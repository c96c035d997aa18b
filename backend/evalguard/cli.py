"""Management CLI for the permission matrix.

Usage:
    python -m evalguard.cli show-matrix [FILE]          # Print the effective matrix
    python -m evalguard.cli check-matrix FILE           # Validate a matrix file
    python -m evalguard.cli flags ROLE [--admin] [--inactive]
                                                        # Print UI flags for a role
"""

import json
import sys

from evalguard.auth.actor import Actor
from evalguard.auth.permissions import MatrixConfigurationError, load_matrix
from evalguard.auth.roles import Role
from evalguard.auth.visibility import derive_ui_flags
from evalguard.config import settings

USAGE = "Usage: python -m evalguard.cli [show-matrix [FILE]|check-matrix FILE|flags ROLE [--admin] [--inactive]]"


def show_matrix(path: str | None = None) -> int:
    try:
        matrix = load_matrix(path or settings.permission_matrix_file)
    except MatrixConfigurationError as e:
        print(f"  FAILED: {e}")
        return 1

    for role, grants in matrix.to_dict().items():
        print(role)
        if not grants:
            print("  (no grants)")
        for resource, actions in grants.items():
            print(f"  {resource:<12} {', '.join(actions)}")
    return 0


def check_matrix(path: str) -> int:
    try:
        matrix = load_matrix(path)
    except MatrixConfigurationError as e:
        print(f"  FAILED: {e}")
        return 1

    grants = sum(len(actions) for row in matrix.to_dict().values() for actions in row.values())
    print(f"  OK ({grants} grant(s))")
    return 0


def show_flags(role_name: str, *options: str) -> int:
    try:
        role = Role(role_name)
    except ValueError:
        print(f"Unknown role '{role_name}'. Must be one of: {', '.join(r.value for r in Role)}")
        return 1

    actor = Actor(
        id="cli",
        role=role,
        is_admin="--admin" in options,
        active="--inactive" not in options,
    )
    print(json.dumps(derive_ui_flags(actor), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    cmd = args[0] if args else ""
    if cmd == "show-matrix":
        return show_matrix(args[1] if len(args) > 1 else None)
    if cmd == "check-matrix" and len(args) > 1:
        return check_matrix(args[1])
    if cmd == "flags" and len(args) > 1:
        return show_flags(args[1], *args[2:])
    print(USAGE)
    return 2


if __name__ == "__main__":
    sys.exit(main())
