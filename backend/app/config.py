# backend/app/config.py
import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Database (in-memory storage when unset)
    database_url: Optional[str] = Field(
        default=None,
        description="Database URL; leave empty to use in-memory storage",
    )

    # Sessions
    session_secret: str = Field(
        default="local-dev-session-secret-change-me",
        description="Secret used to sign session cookies",
    )
    session_max_age_days: int = Field(
        default=7, description="Session cookie lifetime in days"
    )

    # JWT
    jwt_secret_key: str = Field(
        default="local-dev-jwt-secret-key-change-me-please",
        description="Secret key for JWT tokens",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=7 * 24 * 60, description="Access token expiration in minutes"
    )

    # Barcode lookup API (UPCitemdb)
    barcode_api_url: str = Field(
        default="https://api.upcitemdb.com/prod/trial/lookup",
        description="Barcode lookup endpoint",
    )
    barcode_api_key: Optional[str] = Field(
        default=None, description="UPCitemdb user key (paid plans only)"
    )
    barcode_api_timeout: float = Field(
        default=30.0, description="Lookup request timeout in seconds"
    )

    # Google OAuth
    google_client_id: str = Field(default="", description="Google OAuth client ID")
    google_client_secret: str = Field(
        default="", description="Google OAuth client secret"
    )
    google_callback_url: str = Field(
        default="http://localhost:8000/api/auth/google/callback",
        description="OAuth redirect URI registered with Google",
    )

    # PayPal donations
    paypal_client_id: str = Field(default="", description="PayPal client ID")
    paypal_client_secret: str = Field(default="", description="PayPal client secret")
    paypal_environment: str = Field(
        default="sandbox", description="PayPal environment (sandbox/production)"
    )

    # Debug and logging
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Environment
    environment: str = Field(default="development", description="Environment name")

    model_config = SettingsConfigDict(env_file=os.getenv("ENV_FILE", ".env"), case_sensitive=False)

    @field_validator("database_url", mode="before")
    def validate_database_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate database URL."""
        if not v:
            return None
        if not v.startswith(("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError(
                "Database URL must be a PostgreSQL or sqlite+aiosqlite connection string"
            )
        return v

    @field_validator("jwt_secret_key")
    def validate_jwt_secret_key(cls, v: str) -> str:
        """Validate JWT secret key."""
        if len(v) < 32:
            raise ValueError("JWT secret key must be at least 32 characters long")
        return v

    @field_validator("environment")
    def validate_environment(cls, v: str) -> str:
        """Validate environment."""
        allowed_environments = ["development", "staging", "production"]
        if v not in allowed_environments:
            raise ValueError(f"Environment must be one of: {allowed_environments}")
        return v

    @property
    def async_database_url(self) -> Optional[str]:
        """Database URL with the async driver selected."""
        if not self.database_url:
            return None
        return self.database_url.replace("postgresql://", "postgresql+asyncpg://")

    @property
    def paypal_base_url(self) -> str:
        """Get PayPal API base URL based on environment."""
        if self.paypal_environment == "production":
            return "https://api-m.paypal.com"
        return "https://api-m.sandbox.paypal.com"

    @property
    def google_oauth_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def paypal_enabled(self) -> bool:
        return bool(self.paypal_client_id and self.paypal_client_secret)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
