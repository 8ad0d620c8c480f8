from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    database_url: str | None = None  # MongoDB URL, e.g. mongodb://localhost:27017/tokengate
    session_backend: Literal["mongo", "memory"] | None = None  # defaults to mongo when database_url is set
    session_lifetime_seconds: int = Field(default=24 * 60 * 60, gt=0)
    token_bytes: int = Field(default=32, ge=16)  # random bytes per token, urlsafe-encoded
    verifier_timeout_seconds: float = Field(default=5.0, gt=0)
    sweep_interval_seconds: int = Field(default=0, ge=0)  # 0 disables background reclamation
    admin_email: str | None = None  # seed account, created on startup if missing
    admin_password: str | None = None
    cors_origins: list[str] = []

    model_config = {
        "env_file": [".env"],
        "env_prefix": "TOKENGATE_",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def _resolve_session_backend(self) -> Self:
        if self.session_backend is None:
            self.session_backend = "mongo" if self.database_url else "memory"
        if self.session_backend == "mongo" and not self.database_url:
            raise ValueError("session_backend 'mongo' requires database_url")
        return self
