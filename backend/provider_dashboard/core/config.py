from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from typing import Any, ClassVar
from decimal import Decimal
import json
from pathlib import Path
import os


CLASSIFICATION_SCHEMES = ("three_bucket", "two_bucket")


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # JWT configuration (provide a fallback for local development)
    SECRET_KEY: str = "fallback_secret_for_dev_only"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database URL
    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'dashboard.db'}"

    # CORS origins
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    CORS_ALLOW_ALL: bool = False

    # Default currency code used when rendering money
    DEFAULT_CURRENCY: str = "USD"

    # Marketplace split policy
    PLATFORM_FEE_RATE: Decimal = Decimal("0.12")
    INSTANT_PAYOUT_FEE_RATE: Decimal = Decimal("0.015")

    # Booking list presentation
    BOOKINGS_PAGE_SIZE: int = 10
    CLASSIFICATION_SCHEME: str = "three_bucket"

    # Observability
    LOG_LEVEL: str = "INFO"
    ENABLE_CONSOLE_TRACING: bool = False
    OTEL_EXCLUDE_HEALTH: bool = True

    model_config = SettingsConfigDict(extra="ignore", case_sensitive=True)

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("CLASSIFICATION_SCHEME", mode="before")
    def normalize_scheme(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower().replace("-", "_")
            if v not in CLASSIFICATION_SCHEMES:
                raise ValueError(
                    f"CLASSIFICATION_SCHEME must be one of {', '.join(CLASSIFICATION_SCHEMES)}"
                )
        return v

    @field_validator("PLATFORM_FEE_RATE", "INSTANT_PAYOUT_FEE_RATE")
    def rate_in_unit_interval(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 1:
            raise ValueError("rates must be between 0 and 1")
        return v

    @field_validator("BOOKINGS_PAGE_SIZE")
    def positive_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("BOOKINGS_PAGE_SIZE must be at least 1")
        return v

    @model_validator(mode="after")
    def allow_all_if_requested(cls, values: "Settings") -> "Settings":
        if values.CORS_ALLOW_ALL:
            values.CORS_ORIGINS = ["*"]
        return values

    @property
    def PROVIDER_NET_RATE(self) -> Decimal:
        return Decimal("1") - self.PLATFORM_FEE_RATE


def load_settings() -> "Settings":
    return Settings(_env_file=os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")))


settings = load_settings()
