"""OTP Login — configuration loaded from environment."""

from typing import Literal

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── OTP policy ────────────────────────────────────────
    otp_expiry_ms: int = Field(60_000, gt=0, description="Code lifetime in ms")
    otp_length: int = Field(6, ge=1, le=18, description="Digit count")
    max_attempts: int = Field(3, gt=0, description="Attempts before lockout")
    otp_store_key: str = "otp_store"

    # ── Analytics ─────────────────────────────────────────
    analytics_log_size: int = Field(50, ge=0)
    analytics_queue_size: int = Field(500, gt=0)
    analytics_endpoint: AnyHttpUrl | Literal[""] = ""

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Login"
    mode: Literal["development", "production"] = "production"
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_development(self) -> bool:
        return self.mode == "development"


# Singleton settings instance
settings = Settings()
