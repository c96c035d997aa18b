from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from evalguard.config import settings
from evalguard.middleware.exceptions import register_exception_handlers
from evalguard.routers import authz, health
from evalguard.services.lifecycle import lifespan

app = FastAPI(
    title="EvalGuard",
    description="Authorization and operation validation for performance management",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(authz.router, prefix="/api/authz", tags=["authz"])
