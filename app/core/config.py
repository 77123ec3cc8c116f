"""Application configuration and settings."""

from functools import lru_cache
from typing import List, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

DEFAULT_BACKEND_URL = "http://localhost:3001/api"


class Settings(BaseSettings):
    """Application settings."""

    # Service Configuration
    service_name: str = Field(default="tenant-ledger-view", alias="SERVICE_NAME")
    service_version: str = Field(default="1.0.0", alias="SERVICE_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    port: int = Field(default=8000, alias="PORT")
    host: str = Field(default="0.0.0.0", alias="HOST")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")

    # Data provider URLs
    identity_service_url: str = Field(default=DEFAULT_BACKEND_URL, alias="IDENTITY_SERVICE_URL")
    billing_service_url: str = Field(default=DEFAULT_BACKEND_URL, alias="BILLING_SERVICE_URL")
    room_service_url: str = Field(default=DEFAULT_BACKEND_URL, alias="ROOM_SERVICE_URL")
    maintenance_service_url: str = Field(default=DEFAULT_BACKEND_URL, alias="MAINTENANCE_SERVICE_URL")
    payment_service_url: str = Field(default=DEFAULT_BACKEND_URL, alias="PAYMENT_SERVICE_URL")
    overdue_service_url: str = Field(default=DEFAULT_BACKEND_URL, alias="OVERDUE_SERVICE_URL")

    # Provider transport
    provider_timeout_seconds: float = Field(default=10.0, alias="PROVIDER_TIMEOUT_SECONDS")
    health_check_timeout_seconds: float = Field(default=5.0, alias="HEALTH_CHECK_TIMEOUT_SECONDS")

    # Dashboard behaviour
    payment_history_limit: int = Field(default=20, alias="PAYMENT_HISTORY_LIMIT")
    payment_history_max_limit: int = Field(default=100, alias="PAYMENT_HISTORY_MAX_LIMIT")
    dashboard_poll_interval_seconds: int = Field(default=30, alias="DASHBOARD_POLL_INTERVAL_SECONDS")

    # CORS
    enable_cors: bool = Field(default=True, alias="ENABLE_CORS")
    cors_origins: Union[List[str], str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ORIGINS",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @field_validator("provider_timeout_seconds", "health_check_timeout_seconds")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be greater than zero")
        return v

    @field_validator("dashboard_poll_interval_seconds")
    @classmethod
    def validate_poll_interval(cls, v: int) -> int:
        if not 15 <= v <= 30:
            raise ValueError("Dashboard poll interval must be between 15 and 30 seconds")
        return v

    @model_validator(mode="after")
    def validate_payment_history_limits(self) -> "Settings":
        if self.payment_history_max_limit < 1:
            raise ValueError("Payment history max limit must be at least 1")
        if not 1 <= self.payment_history_limit <= self.payment_history_max_limit:
            raise ValueError("Payment history limit must be between 1 and the max limit")
        return self

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
        "populate_by_name": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
