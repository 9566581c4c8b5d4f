"""Application configuration using Pydantic Settings.

This project loads configuration from environment variables.

Optionally, you may point `ENV_FILE` at a local env file (for development).
Leave it unset in deployed environments so injected variables are the single
source of truth.
"""

import os
from enum import Enum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gateway_audit.domain.enums import Severity


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Configuration is loaded from environment variables, with support
    for .env files in development.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "gateway-audit"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"

    # Metrics token for protecting /metrics endpoint
    metrics_token: str | None = None

    # Health check token for protecting /health (optional)
    # When set, the endpoint requires X-Health-Token header
    health_token: str | None = None

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Maximum accepted request body, configuration trees included
    max_request_size_mb: int = Field(default=1, ge=1)

    # Audit defaults, applied when a caller does not send its own filters
    audit_default_severities: str = "CRITICAL,HIGH,MEDIUM,LOW"
    audit_excluded_rules: str = ""

    # Compact codec
    codec_compression_level: int = 9

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def audit_default_severities_list(self) -> list[str]:
        """Parse the default severity filter into a list."""
        return [s.strip().upper() for s in self.audit_default_severities.split(",") if s.strip()]

    @property
    def audit_excluded_rules_list(self) -> list[str]:
        """Parse the default excluded rule IDs into a list."""
        return [r.strip() for r in self.audit_excluded_rules.split(",") if r.strip()]

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("audit_default_severities")
    @classmethod
    def validate_audit_default_severities(cls, v: str) -> str:
        """Every listed severity must be a known level."""
        known = {s.value for s in Severity}
        for level in (s.strip().upper() for s in v.split(",") if s.strip()):
            if level not in known:
                raise ValueError(
                    f"audit_default_severities must only contain {sorted(known)}, got '{level}'"
                )
        return v

    @field_validator("codec_compression_level")
    @classmethod
    def validate_codec_compression_level(cls, v: int) -> int:
        """gzip only accepts levels 0 to 9."""
        if not 0 <= v <= 9:
            raise ValueError(f"codec_compression_level must be between 0 and 9, got {v}")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        These checks prevent insecure configurations from being deployed to production.
        """
        if self.app_env == AppEnvironment.PROD:
            # CORS must not allow localhost in production
            for origin in self.cors_origins_list:
                if "localhost" in origin or "127.0.0.1" in origin:
                    raise ValueError(
                        f"CORS origins must not contain localhost in production: {origin}"
                    )

        return self


settings = Settings()
