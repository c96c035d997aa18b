"""Pytest configuration and fixtures for EvalGuard tests.

Provides actors for the usual org chart, a fresh engine, a confirmation
service with a controllable clock, and an HTTP client bound to the app.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from evalguard.auth.actor import Actor
from evalguard.auth.engine import AuthorizationEngine, set_engine
from evalguard.auth.permissions import PermissionMatrix
from evalguard.auth.roles import Role
from evalguard.main import app
from evalguard.services.confirmation import (
    ConfirmationService,
    InMemoryConfirmationStore,
    set_confirmation_service,
)


# ── Org chart ────────────────────────────────────────────────
#
#   D1 (director)
#   L1 (leader)  ← E1 (employee) reports to L1
#   L2 (leader, unrelated)

@pytest.fixture
def director() -> Actor:
    return Actor(id="D1", role=Role.DIRECTOR)


@pytest.fixture
def leader() -> Actor:
    return Actor(id="L1", role=Role.LEADER, reports_to="D1")


@pytest.fixture
def other_leader() -> Actor:
    return Actor(id="L2", role=Role.LEADER, reports_to="D1")


@pytest.fixture
def employee() -> Actor:
    return Actor(id="E1", role=Role.EMPLOYEE, reports_to="L1")


@pytest.fixture
def admin() -> Actor:
    return Actor(id="A1", role=Role.EMPLOYEE, is_admin=True)


@pytest.fixture
def inactive_admin() -> Actor:
    return Actor(id="A2", role=Role.DIRECTOR, is_admin=True, active=False)


# ── Engine ───────────────────────────────────────────────────

@pytest.fixture
def engine() -> AuthorizationEngine:
    return AuthorizationEngine(PermissionMatrix.default())


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def confirmation_service(engine, clock) -> ConfirmationService:
    return ConfirmationService(
        engine,
        InMemoryConfirmationStore(clock=clock),
        window_seconds=5.0,
    )


# ── HTTP client ──────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(engine, confirmation_service) -> AsyncGenerator[AsyncClient, None]:
    """Client bound to the app, with a fresh engine and confirmation store."""
    set_engine(engine)
    set_confirmation_service(confirmation_service)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    set_confirmation_service(None)
    set_engine(None)


def actor_payload(actor: Actor) -> dict:
    """Request body form of an actor (profile flags, not the role)."""
    return {
        "id": actor.id,
        "is_director": actor.role is Role.DIRECTOR,
        "is_leader": actor.role is Role.LEADER,
        "is_admin": actor.is_admin,
        "active": actor.active,
        "reports_to": actor.reports_to,
    }
