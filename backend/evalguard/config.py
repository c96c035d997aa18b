from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Redis (shared confirmation store)
    redis_url: str = "redis://localhost:6379/0"

    # Authorization engine
    # JSON file with {role: {resource: [actions]}}; empty = built-in table
    permission_matrix_file: str | None = None

    # Confirmation round-trip for operations that only raise warnings
    confirmation_window_seconds: float = Field(default=5.0, gt=0)
    confirmation_backend: Literal["memory", "redis"] = "memory"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
