"""Application configuration from environment variables."""

import os
from os.path import dirname, abspath, join
from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives at the repository root, above backend/
base_dir = dirname(dirname(dirname(abspath(__file__))))
env_file_path = join(base_dir, ".env")

if os.path.exists(env_file_path):
    load_dotenv(env_file_path)


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=env_file_path,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Server
    app_name: str = "WPHub Pro"
    debug: bool = False
    environment: str = "development"  # development, staging, production
    log_level: str = "INFO"

    # Public origin of the dashboard; the handshake callback lands here
    app_origin: str = "http://localhost:5173"
    connect_callback_path: str = "/connect-success"

    # Auth
    auth_secret_key: str = "wphub-dev-secret-change-in-production"

    # Secret sealing (AES-256-GCM key material)
    encryption_key: str | None = None

    # Database
    database_url: str = "sqlite+aiosqlite:///./wphub.db"

    # Execution backend (Appwrite functions API)
    execution_endpoint: str = "https://cloud.appwrite.io/v1"
    execution_project_id: str | None = None
    execution_api_key: str | None = None
    proxy_function_id: str = "wp-proxy"
    execution_http_timeout_seconds: float = 15.0

    # Logging sinks (optional)
    syslog_host: str | None = None
    syslog_port: int = 514

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def callback_url(self) -> str:
        """Absolute URL the WordPress authorization page sends the user back to."""
        return f"{self.app_origin.rstrip('/')}/{self.connect_callback_path.lstrip('/')}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    s = Settings()
    secrets_path = Path("/run/secrets")

    def _read_secret(secret_name: str) -> str | None:
        secret_file = secrets_path / secret_name
        if secret_file.exists():
            return secret_file.read_text().strip()
        return None

    # Docker secrets fill whatever the environment left empty
    if secrets_path.exists():
        if not s.encryption_key:
            s.encryption_key = _read_secret("wphub_encryption_key")
        if not s.execution_api_key:
            s.execution_api_key = _read_secret("wphub_execution_api_key")
        auth_secret = _read_secret("wphub_auth_secret")
        if auth_secret:
            s.auth_secret_key = auth_secret

    return s
