"""Tests for display flags and page access."""

import pytest

from evalguard.auth.actor import Actor
from evalguard.auth.navigation import ROUTE_ACCESS, can_access_route
from evalguard.auth.roles import Role
from evalguard.auth.visibility import UI_FLAGS, derive_ui_flags


@pytest.mark.unit
class TestUIFlags:

    def test_flag_set_is_stable(self, director, leader, employee, admin):
        for actor in (director, leader, employee, admin):
            assert tuple(derive_ui_flags(actor)) == UI_FLAGS
        assert len(UI_FLAGS) == 21

    def test_director(self, director):
        flags = derive_ui_flags(director)
        assert flags["show_salary_info"] is True
        assert flags["show_create_team_button"] is True
        assert flags["show_consensus"] is True
        assert flags["show_self_evaluation"] is False

    def test_leader(self, leader):
        flags = derive_ui_flags(leader)
        assert flags["show_create_team_button"] is True
        assert flags["show_leader_evaluation"] is True
        assert flags["show_full_contact_info"] is True
        assert flags["show_self_evaluation"] is True
        assert flags["show_salary_info"] is False
        assert flags["show_user_management"] is False

    def test_employee(self, employee):
        flags = derive_ui_flags(employee)
        assert flags["show_self_evaluation"] is True
        assert [name for name, shown in flags.items() if shown] == ["show_self_evaluation"]

    def test_admin_sees_everything_but_self_evaluation(self, admin):
        flags = derive_ui_flags(admin)
        hidden = [name for name, shown in flags.items() if not shown]
        assert hidden == ["show_self_evaluation"]

    @pytest.mark.parametrize("role", list(Role))
    def test_inactive_sees_nothing(self, role):
        actor = Actor(id="x", role=role, is_admin=True, active=False)
        assert not any(derive_ui_flags(actor).values())

    def test_pure(self, leader):
        assert derive_ui_flags(leader) == derive_ui_flags(leader)


@pytest.mark.unit
class TestRouteAccess:

    def test_public_routes(self):
        assert can_access_route(None, "/login") is True
        assert can_access_route(None, "/reset-password") is True
        assert can_access_route(None, "/") is False

    def test_authenticated_routes(self, employee):
        assert can_access_route(employee, "/") is True
        assert can_access_route(employee, "/notifications") is True
        assert can_access_route(employee, "/self-evaluation") is True

    def test_leadership_routes(self, leader, employee, director):
        for path in ("/leader-evaluation", "/potential-evaluation", "/salary/progressions"):
            assert can_access_route(leader, path) is True
            assert can_access_route(director, path) is True
            assert can_access_route(employee, path) is False

    def test_director_routes(self, director, leader):
        for path in ("/consensus", "/nine-box", "/pdi", "/reports", "/users/new", "/salary/tracks"):
            assert can_access_route(director, path) is True
            assert can_access_route(leader, path) is False

    def test_admin_satisfies_roles_not_activity(self, admin, inactive_admin):
        assert can_access_route(admin, "/consensus") is True
        assert can_access_route(inactive_admin, "/consensus") is False
        assert can_access_route(inactive_admin, "/login") is True

    def test_inactive_actor(self):
        actor = Actor(id="E5", role=Role.EMPLOYEE, active=False)
        assert can_access_route(actor, "/") is False

    def test_path_normalization(self, director):
        assert can_access_route(director, "/users/") is True
        assert can_access_route(director, "/reports?year=2025") is True

    def test_unknown_path_denied(self, admin):
        assert can_access_route(admin, "/admin/secret") is False

    def test_every_route_has_rule(self):
        assert "/" in ROUTE_ACCESS and len(ROUTE_ACCESS) == 17
