"""Tests for the authorization HTTP endpoints."""

import pytest
from httpx import AsyncClient

from conftest import actor_payload
from evalguard.auth.deps import get_current_actor
from evalguard.main import app


@pytest.mark.api
@pytest.mark.asyncio
class TestPermissionEndpoints:

    async def test_check_allowed(self, client: AsyncClient, employee):
        resp = await client.post(
            "/api/authz/permissions/check",
            json={"actor": actor_payload(employee), "resource": "salary", "action": "read"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"allowed": True}

    async def test_check_denied_is_not_an_error(self, client: AsyncClient, employee):
        resp = await client.post(
            "/api/authz/permissions/check",
            json={"actor": actor_payload(employee), "resource": "salary", "action": "update"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"allowed": False}

    async def test_unknown_action_denied(self, client: AsyncClient, director):
        resp = await client.post(
            "/api/authz/permissions/check",
            json={"actor": actor_payload(director), "resource": "users", "action": "approve"},
        )
        assert resp.json() == {"allowed": False}

    async def test_director_wins_over_leader_flag(self, client: AsyncClient):
        payload = {"id": "X1", "is_director": True, "is_leader": True, "active": True}
        resp = await client.post(
            "/api/authz/permissions/check",
            json={"actor": payload, "resource": "salary", "action": "delete"},
        )
        assert resp.json() == {"allowed": True}

    async def test_resource_access(self, client: AsyncClient, leader):
        resp = await client.post(
            "/api/authz/permissions/resource",
            json={"actor": actor_payload(leader), "resource": "users"},
        )
        assert resp.json() == {
            "resource": "users",
            "can_create": False,
            "can_read": True,
            "can_update": True,
            "can_delete": False,
        }

    async def test_missing_actor_is_validation_error(self, client: AsyncClient):
        resp = await client.post(
            "/api/authz/permissions/check",
            json={"resource": "users", "action": "read"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
        fields = [e["field"] for e in resp.json()["error"]["details"]["errors"]]
        assert fields == ["body -> actor"]


@pytest.mark.api
@pytest.mark.asyncio
class TestOwnershipEndpoint:

    async def test_manager_may_evaluate(self, client: AsyncClient, leader):
        resp = await client.post(
            "/api/authz/ownership/check",
            json={
                "actor": actor_payload(leader),
                "predicate": "can_evaluate_user",
                "target_id": "E1",
                "target_reports_to": "L1",
            },
        )
        assert resp.json() == {"allowed": True}

    async def test_unrelated_leader(self, client: AsyncClient, other_leader):
        resp = await client.post(
            "/api/authz/ownership/check",
            json={
                "actor": actor_payload(other_leader),
                "predicate": "can_edit_user",
                "target_id": "E1",
                "target_reports_to": "L1",
            },
        )
        assert resp.json() == {"allowed": False}

    async def test_unknown_predicate_rejected(self, client: AsyncClient, director):
        resp = await client.post(
            "/api/authz/ownership/check",
            json={"actor": actor_payload(director), "predicate": "can_fly"},
        )
        assert resp.status_code == 422


@pytest.mark.api
@pytest.mark.asyncio
class TestOperationEndpoints:

    async def test_validate(self, client: AsyncClient, director):
        resp = await client.post(
            "/api/authz/operations/validate",
            json={
                "actor": actor_payload(director),
                "operation": "deactivate_user",
                "target": {"is_director": True},
            },
        )
        data = resp.json()
        assert data["is_valid"] is True
        assert data["errors"] == []
        assert len(data["warnings"]) == 1

    async def test_validate_unknown_operation(self, client: AsyncClient, admin):
        resp = await client.post(
            "/api/authz/operations/validate",
            json={"actor": actor_payload(admin), "operation": "format_disk"},
        )
        assert resp.json() == {
            "is_valid": False,
            "errors": ["Operation not permitted"],
            "warnings": [],
        }

    async def test_begin_confirm(self, client: AsyncClient, director):
        resp = await client.post(
            "/api/authz/operations/begin",
            json={
                "actor": actor_payload(director),
                "operation": "delete_department",
                "target": {"teams_count": 4},
            },
        )
        begun = resp.json()
        assert begun["status"] == "confirm"
        assert begun["expires_in"] == 5.0

        resp = await client.post(
            "/api/authz/operations/confirm",
            json={"actor": actor_payload(director), "token": begun["token"]},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "proceed"

        # Single use
        resp = await client.post(
            "/api/authz/operations/confirm",
            json={"actor": actor_payload(director), "token": begun["token"]},
        )
        assert resp.status_code == 410
        assert resp.json()["error"]["code"] == "CONFIRMATION_EXPIRED"

    async def test_begin_blocked(self, client: AsyncClient, employee):
        resp = await client.post(
            "/api/authz/operations/begin",
            json={"actor": actor_payload(employee), "operation": "modify_salary"},
        )
        data = resp.json()
        assert data["status"] == "blocked"
        assert data["token"] is None
        assert data["result"]["errors"]

    async def test_cancel(self, client: AsyncClient, director):
        resp = await client.post(
            "/api/authz/operations/begin",
            json={
                "actor": actor_payload(director),
                "operation": "deactivate_user",
                "target": {"is_director": True},
            },
        )
        token = resp.json()["token"]

        resp = await client.post("/api/authz/operations/cancel", json={"token": token})
        assert resp.status_code == 204

        resp = await client.post(
            "/api/authz/operations/confirm",
            json={"actor": actor_payload(director), "token": token},
        )
        assert resp.status_code == 410


@pytest.mark.api
@pytest.mark.asyncio
class TestPresentationEndpoints:

    async def test_ui_flags(self, client: AsyncClient, leader):
        resp = await client.post("/api/authz/ui-flags", json={"actor": actor_payload(leader)})
        flags = resp.json()
        assert flags["show_create_team_button"] is True
        assert flags["show_salary_info"] is False

    async def test_route_check_anonymous(self, client: AsyncClient):
        resp = await client.post("/api/authz/routes/check", json={"path": "/login"})
        assert resp.json() == {"allowed": True}

    async def test_route_check_employee(self, client: AsyncClient, employee):
        resp = await client.post(
            "/api/authz/routes/check",
            json={"actor": actor_payload(employee), "path": "/nine-box"},
        )
        assert resp.json() == {"allowed": False}


@pytest.mark.api
@pytest.mark.asyncio
class TestCurrentActorEndpoints:

    async def test_requires_actor(self, client: AsyncClient):
        resp = await client.get("/api/authz/me/flags")
        assert resp.status_code == 401

    async def test_my_permissions(self, client: AsyncClient, employee):
        app.dependency_overrides[get_current_actor] = lambda: employee
        resp = await client.get("/api/authz/me/permissions")
        assert resp.status_code == 200
        assert resp.json()["salary"] == ["read"]

    async def test_my_flags(self, client: AsyncClient, director):
        app.dependency_overrides[get_current_actor] = lambda: director
        resp = await client.get("/api/authz/me/flags")
        assert resp.json()["show_audit_logs"] is True

    async def test_matrix_requires_audit_log_access(self, client: AsyncClient, leader):
        app.dependency_overrides[get_current_actor] = lambda: leader
        resp = await client.get("/api/authz/matrix")
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "PERMISSION_DENIED"

    async def test_matrix_for_director(self, client: AsyncClient, director):
        app.dependency_overrides[get_current_actor] = lambda: director
        resp = await client.get("/api/authz/matrix")
        assert resp.status_code == 200
        data = resp.json()
        assert data["roles"]["employee"]["salary"] == ["read"]
        assert "deactivate_user" in data["operations"]


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:

    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_ready(self, client: AsyncClient):
        resp = await client.get("/health/ready")
        assert resp.status_code == 200
        assert resp.json()["checks"]["confirmation_store"] == "ok"

    async def test_unknown_route_uses_error_body(self, client: AsyncClient):
        resp = await client.get("/api/authz/nowhere")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "HTTP_404"
