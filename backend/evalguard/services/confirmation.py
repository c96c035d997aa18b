"""Confirm/cancel round-trip for operations that only raise warnings.

Flow:
  1. Caller asks to begin an operation.  The engine validates it:
       errors            → "blocked", nothing is stored
       no errors/warnings → "proceed", nothing is stored
       warnings only      → "confirm", a pending action is stored under a
                            random token for `confirmation_window_seconds`
  2. The user confirms: the caller sends the token back.  The token is
     single use; the operation is validated again for the confirming actor
     and proceeds only if it still has no errors.
  3. The user cancels, or the window passes: the pending action is gone.

Storage:
  - memory: a dict with deadlines, one process only (dev, tests).
  - redis:  one key per token with a TTL equal to the window; claims check
            the owner, then GETDEL so a token can't be confirmed twice across
            workers.
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional

import redis.asyncio as redis

from evalguard.auth.actor import Actor
from evalguard.auth.engine import AuthorizationEngine, get_engine
from evalguard.auth.operations import ValidationResult
from evalguard.config import settings
from evalguard.middleware.exceptions import (
    ConfirmationExpiredError,
    ConfirmationUnavailableError,
)
from evalguard.utils.redis_client import get_redis

logger = logging.getLogger(__name__)
audit = logging.getLogger("evalguard.audit")

STATUS_PROCEED = "proceed"
STATUS_CONFIRM = "confirm"
STATUS_BLOCKED = "blocked"

INACTIVE_ACTOR_ERROR = "Inactive users cannot perform operations"


@dataclass(frozen=True)
class PendingAction:
    token: str
    operation: str
    actor_id: str
    target: dict[str, Any] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()

    def to_json(self) -> str:
        data = asdict(self)
        data["warnings"] = list(self.warnings)
        return json.dumps(data)

    @classmethod
    def from_json(cls, raw: str) -> "PendingAction":
        data = json.loads(raw)
        return cls(
            token=data["token"],
            operation=data["operation"],
            actor_id=data["actor_id"],
            target=data.get("target") or {},
            warnings=tuple(data.get("warnings") or ()),
        )


@dataclass(frozen=True)
class OperationDecision:
    status: str
    operation: str
    result: ValidationResult
    token: str | None = None
    expires_in: float | None = None


# ── Stores ──────────────────────────────────────────────────

class ConfirmationStore:
    """Where pending actions wait for confirmation."""

    async def stash(self, pending: PendingAction, ttl: float) -> None:
        raise NotImplementedError

    async def claim(self, token: str, actor_id: str) -> PendingAction | None:
        """Remove and return the pending action owned by actor_id.

        Returns None if the token is gone or belongs to another actor, in
        which case the pending action is left in place.
        """
        raise NotImplementedError

    async def discard(self, token: str) -> bool:
        raise NotImplementedError

    async def ping(self) -> bool:
        return True


class InMemoryConfirmationStore(ConfirmationStore):

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        # {token: (pending, deadline)}
        self._pending: dict[str, tuple[PendingAction, float]] = {}

    def _prune(self) -> None:
        now = self._clock()
        for token in [t for t, (_, deadline) in self._pending.items() if deadline <= now]:
            del self._pending[token]

    async def stash(self, pending: PendingAction, ttl: float) -> None:
        self._prune()
        self._pending[pending.token] = (pending, self._clock() + ttl)

    async def claim(self, token: str, actor_id: str) -> PendingAction | None:
        entry = self._pending.get(token)
        if entry is None:
            return None
        pending, deadline = entry
        if deadline <= self._clock():
            del self._pending[token]
            return None
        if pending.actor_id != actor_id:
            return None
        del self._pending[token]
        return pending

    async def discard(self, token: str) -> bool:
        return self._pending.pop(token, None) is not None

    def __len__(self) -> int:
        self._prune()
        return len(self._pending)


class RedisConfirmationStore(ConfirmationStore):

    def __init__(
        self,
        client_factory: Callable[[], Awaitable[redis.Redis]] = get_redis,
        prefix: str = "confirm:",
    ):
        self._client_factory = client_factory
        self._prefix = prefix

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def stash(self, pending: PendingAction, ttl: float) -> None:
        client = await self._client_factory()
        try:
            await client.set(
                self._key(pending.token),
                pending.to_json(),
                px=max(1, int(ttl * 1000)),
            )
        except redis.RedisError as e:
            logger.error(f"Failed to store pending action: {e}")
            raise ConfirmationUnavailableError() from e

    async def claim(self, token: str, actor_id: str) -> PendingAction | None:
        client = await self._client_factory()
        key = self._key(token)
        try:
            raw = await client.get(key)
            if raw is None or PendingAction.from_json(raw).actor_id != actor_id:
                return None
            # Only the owner gets here, so at most one of its claims wins
            raw = await client.getdel(key)
        except redis.RedisError as e:
            # Fail closed: an unreadable token is an expired token
            logger.error(f"Failed to claim pending action: {e}")
            return None
        if raw is None:
            return None
        return PendingAction.from_json(raw)

    async def discard(self, token: str) -> bool:
        client = await self._client_factory()
        try:
            return await client.delete(self._key(token)) > 0
        except redis.RedisError as e:
            logger.warning(f"Failed to discard pending action: {e}")
            return False

    async def ping(self) -> bool:
        client = await self._client_factory()
        try:
            return bool(await client.ping())
        except redis.RedisError:
            return False


# ── Service ─────────────────────────────────────────────────

class ConfirmationService:

    def __init__(
        self,
        engine: AuthorizationEngine,
        store: ConfirmationStore,
        window_seconds: float = 5.0,
    ):
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.engine = engine
        self.store = store
        self.window_seconds = window_seconds

    def _decide(self, operation: str, actor: Actor, result: ValidationResult) -> OperationDecision | None:
        """Return a final decision, or None when confirmation is needed."""
        if result.is_valid and not actor.active:
            result = ValidationResult(
                is_valid=False,
                errors=(INACTIVE_ACTOR_ERROR,),
                warnings=result.warnings,
            )
        if not result.is_valid:
            return OperationDecision(status=STATUS_BLOCKED, operation=operation, result=result)
        if result.proceeds_immediately:
            return OperationDecision(status=STATUS_PROCEED, operation=operation, result=result)
        return None

    async def begin(
        self,
        operation: str,
        actor: Actor,
        target: Mapping[str, Any] | None = None,
    ) -> OperationDecision:
        target = dict(target or {})
        result = self.engine.validate_operation(operation, actor, target)
        decision = self._decide(operation, actor, result)
        if decision is not None:
            return decision

        pending = PendingAction(
            token=secrets.token_urlsafe(24),
            operation=operation,
            actor_id=actor.id,
            target=target,
            warnings=result.warnings,
        )
        await self.store.stash(pending, self.window_seconds)
        audit.info(f"confirmation requested: {operation} by {actor.id}")
        return OperationDecision(
            status=STATUS_CONFIRM,
            operation=operation,
            result=result,
            token=pending.token,
            expires_in=self.window_seconds,
        )

    async def confirm(self, token: str, actor: Actor) -> OperationDecision:
        pending = await self.store.claim(token, actor.id)
        if pending is None:
            raise ConfirmationExpiredError()

        result = self.engine.validate_operation(pending.operation, actor, pending.target)
        decision = self._decide(pending.operation, actor, result)
        if decision is None:
            # Warnings were accepted by the user
            decision = OperationDecision(status=STATUS_PROCEED, operation=pending.operation, result=result)
        audit.info(f"confirmation claimed: {pending.operation} by {actor.id} → {decision.status}")
        return decision

    async def cancel(self, token: str) -> bool:
        discarded = await self.store.discard(token)
        if discarded:
            audit.info("confirmation cancelled")
        return discarded


# ── Process-wide service ────────────────────────────────────

_service: Optional[ConfirmationService] = None


def build_store(backend: str) -> ConfirmationStore:
    if backend == "redis":
        return RedisConfirmationStore()
    return InMemoryConfirmationStore()


def get_confirmation_service() -> ConfirmationService:
    global _service
    if _service is None:
        _service = ConfirmationService(
            get_engine(),
            build_store(settings.confirmation_backend),
            window_seconds=settings.confirmation_window_seconds,
        )
    return _service


def set_confirmation_service(service: ConfirmationService | None) -> None:
    global _service
    _service = service
