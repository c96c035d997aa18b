"""Application lifespan: build the engine up front, release Redis on exit.

Building the engine at startup means a broken permission matrix stops the
process before it serves a single request.

Usage:
    from evalguard.services.lifecycle import lifespan
    app = FastAPI(lifespan=lifespan, ...)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from evalguard.auth.engine import get_engine
from evalguard.config import settings
from evalguard.services.confirmation import get_confirmation_service
from evalguard.utils.redis_client import close_redis

logger = logging.getLogger("evalguard.lifecycle")


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = get_engine()
    service = get_confirmation_service()
    logger.info(
        f"Authorization engine ready: {len(engine.validator.operations)} operations, "
        f"confirmation window {service.window_seconds:.1f}s ({settings.confirmation_backend} store)"
    )
    yield
    await close_redis()
