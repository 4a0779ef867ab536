"""DockGate configuration management."""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fixed lifecycle cadences. These are not exposed as settings.
TASK_RETENTION_SECONDS = 60 * 60
TASK_SWEEP_INTERVAL_SECONDS = 60
HEARTBEAT_INTERVAL_SECONDS = 30


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """DockGate configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="DOCKGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # General
    env: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"
    debug: bool = False

    # Security (shared bearer token for the API and the log stream)
    api_token: Optional[str] = None

    # Scheduler
    max_concurrent_tasks: int = Field(
        default=5,
        description="Maximum engine operations in flight at once",
    )

    # Docker engine
    docker_socket_path: str = Field(
        default="/var/run/docker.sock",
        description="Socket path, or a full unix:// / tcp:// engine URL",
    )
    docker_timeout_seconds: int = Field(default=60, ge=1, description="Engine API timeout")

    # Log streaming
    observer_outbox_size: int = Field(
        default=1000,
        ge=1,
        description="Lines buffered per log observer before new lines are dropped",
    )

    # CORS configuration
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = True
    cors_allowed_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
    )
    cors_allowed_headers: list[str] = Field(
        default=["Authorization", "Content-Type", "X-API-Key"],
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Validators
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {v}")
        return v

    @field_validator("api_token")
    @classmethod
    def validate_api_token(cls, v: Optional[str], info) -> Optional[str]:
        """Require a token outside development."""
        env = info.data.get("env")
        if env in [Environment.PRODUCTION, Environment.STAGING] and not v:
            raise ValueError(f"api_token is required in {env.value} environment")
        return v or None

    @property
    def docker_base_url(self) -> str:
        """Engine URL for the Docker client."""
        if "://" in self.docker_socket_path:
            return self.docker_socket_path
        return f"unix://{self.docker_socket_path}"


settings = Settings()
