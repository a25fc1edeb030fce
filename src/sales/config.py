"""Application configuration with structured settings groups."""
import logging
from functools import lru_cache

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# =============================================================================
# Nested Settings Models
# =============================================================================


class DatabasePoolSettings(BaseModel):
    """
    Connection pool limits for the shared database engine.

    pool_size bounds concurrent database usage; with max_overflow=0 requests
    beyond it wait up to pool_timeout seconds for a free connection.
    """

    pool_size: int = 10
    max_overflow: int = 0
    pool_timeout: float = 30.0


class AuthSettings(BaseModel):
    """
    Token validation settings.

    When both main_api_url and auth_endpoint are set, tokens are validated by
    POSTing to the main backend first. jwt_secret is used for local verification,
    either directly or as a fallback when the main backend cannot be reached.
    """

    main_api_url: str | None = None
    auth_endpoint: str | None = None
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    timeout_seconds: float = 5.0
    allowed_roles: list[str] = ["sales", "admin"]

    @property
    def remote_validation_url(self) -> str | None:
        """Full URL of the remote validation endpoint, None when not configured."""
        if not self.main_api_url or not self.auth_endpoint:
            return None
        return f"{self.main_api_url.rstrip('/')}{self.auth_endpoint}"


class PaginationSettings(BaseModel):
    """Defaults and upper bounds for client listings."""

    default_page_size: int = 10
    max_page_size: int = 100
    default_recent_limit: int = 10


class S3Settings(BaseModel):
    """S3 storage settings for uploaded client documents."""

    bucket_name: str = "sales-client-documents"
    endpoint_url: str | None = None  # For LocalStack: http://localhost:4566
    public_base_url: str | None = None
    document_key_pattern: str = "clients/{client_id}/{field_name}/{upload_id}-{filename}"
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_content_types: list[str] = [
        "application/pdf",
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ]


class AWSSettings(BaseModel):
    """AWS credentials and region settings."""

    region: str = "us-east-1"
    access_key_id: str | None = None
    secret_access_key: str | None = None


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Application settings with nested configuration groups.

    Environment variables use double underscore as delimiter for nested values.
    Example: AUTH__JWT_SECRET=change-me, PAGINATION__MAX_PAGE_SIZE=50
    """

    # Application metadata
    app_name: str = "Sales Service"
    service_name: str = "sales-service"
    app_version: str = "1.0.0"
    environment: str = "development"

    # Database
    database_url: str = "postgresql+asyncpg://localhost/sales"

    # Nested settings groups
    database: DatabasePoolSettings = DatabasePoolSettings()
    auth: AuthSettings = AuthSettings()
    pagination: PaginationSettings = PaginationSettings()
    s3: S3Settings = S3Settings()
    aws: AWSSettings = AWSSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
