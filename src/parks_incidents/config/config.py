"""Configuration settings for the parks incident desk."""

from functools import lru_cache

from pydantic import Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings for the incident desk client and the reference API.

    Values are read from environment variables (and a local ``.env`` file) so the
    same code runs against a developer laptop, staging, or the production API.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # Application settings
    app_name: str = Field(default="Parks Incident Desk", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment (development, staging, production)")
    timezone: str = Field(default="America/Mexico_City", description="Timezone used for incident timestamps")

    # Reference API server settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_token: SecretStr | None = Field(default=None, description="Bearer token required by mutating routes")
    seed_demo_data: bool = Field(default=True, description="Load demo parks, assets and incidents on startup")

    # Client settings
    api_base_url: str = Field(default="http://localhost:8000", description="Base URL of the incidents API")
    api_client_token: SecretStr = Field(default=SecretStr("dev-token"), description="Bearer token sent by the client")
    api_user_id: int = Field(default=1, ge=1, description="User id sent in the X-User-Id header")
    request_timeout: float = Field(default=15.0, gt=0, description="HTTP request timeout in seconds")
    cache_stale_time: float = Field(default=0.0, ge=0, description="Seconds a cached query stays fresh")
    default_page_size: int = Field(default=10, ge=1, le=200, description="Incidents per page in list views")
    reporter_name: str = Field(default="Parks Administration", description="Reporter name for staff-filed incidents")

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")
    log_file: str | None = Field(default=None, description="Log file path")
    log_rotation: bool = Field(default=True, description="Enable log rotation")
    log_max_size: str = Field(default="100MB", description="Maximum log file size")
    log_backup_count: int = Field(default=5, description="Number of backup log files")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["development", "dev", "local", "test", "staging", "stage", "production", "prod"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment in ("development", "dev", "local", "test")

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment in ("production", "prod")

    def get_client_headers(self) -> dict[str, str]:
        """
        Get the headers every client request carries.

        Returns:
            dict: Authorization, user id and content type headers
        """
        return {
            "Authorization": f"Bearer {self.api_client_token.get_secret_value()}",
            "X-User-Id": str(self.api_user_id),
            "Content-Type": "application/json",
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
