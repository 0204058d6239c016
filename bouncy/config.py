"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (or a local .env file).
Components receive a Settings object explicitly; get_settings() is only the
fallback when none is passed.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class ElasticsearchSettings(BaseSettings):
    """Elasticsearch connection configuration."""

    model_config = SettingsConfigDict(env_prefix="ES_")

    url: str = Field(
        default="http://localhost:9200",
        description="Elasticsearch server URL",
    )
    username: str | None = Field(
        default=None,
        description="HTTP basic auth user (optional)",
    )
    password: SecretStr | None = Field(
        default=None,
        description="HTTP basic auth password (optional)",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="API key, takes precedence over basic auth",
    )
    verify_certs: bool = Field(
        default=True,
        description="Verify TLS certificates",
    )
    request_timeout_s: float = Field(
        default=30.0,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=3,
        description="Transport-level retries on connection errors",
    )
    include_type_name: bool = Field(
        default=False,
        description="Send _type in bulk descriptors (pre-7.x clusters only)",
    )


class BouncySettings(BaseSettings):
    """Index synchronization configuration."""

    model_config = SettingsConfigDict(env_prefix="BOUNCY_")

    index: str = Field(
        default="bouncy",
        description="Default index name for records without an override",
    )
    auto_index: bool = Field(
        default=True,
        description="Mirror record saves and deletes into the index",
    )
    default_size: int = Field(
        default=1000,
        description="Result size cap used by the query builders",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested settings
    elasticsearch: ElasticsearchSettings = Field(default_factory=ElasticsearchSettings)
    bouncy: BouncySettings = Field(default_factory=BouncySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
