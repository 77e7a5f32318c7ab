"""Configuration management for Archivist."""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_B2_AUTHORIZE_URL = "https://api.backblazeb2.com/b2api/v2/b2_authorize_account"


class Settings(BaseSettings):
    """Application settings loaded from ARCHIVIST_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ARCHIVIST_",
        case_sensitive=True,
        extra="ignore",
    )

    ENV: str = "local"
    SERVICE_NAME: str = "archivist"
    SERVICE_VERSION: str = "0.1.0"
    BIND: str = "0.0.0.0:8080"

    # B2 Account Configuration
    B2_KEY_ID: str = ""
    B2_KEY_TOKEN: str = ""
    B2_BUCKET_ID: str = ""
    B2_AUTHORIZE_URL: str = DEFAULT_B2_AUTHORIZE_URL

    # Upload Retry Policy
    UPLOAD_MAX_ATTEMPTS: int = 5
    UPLOAD_RETRY_DELAY_SECONDS: float = 1.0  # Backoff after 408/429
    UPLOAD_DEADLINE_SECONDS: float | None = None  # None = no deadline
    EAGER_SESSION_REFRESH: bool = True  # Re-authorize the account on every target refresh

    # Inbound Body Buffering
    MAX_UPLOAD_MB: int = 100
    SPOOL_MAX_MEMORY_MB: int = 16  # Larger bodies spill to a temporary file

    # Outbound HTTP Client
    REQUEST_TIMEOUT: int = 300  # seconds for B2 calls
    HTTP_MAX_CONNECTIONS: int = 100
    HTTP_KEEPALIVE_EXPIRY: float = 90.0
    LOG_LEVEL: str = "INFO"

    @property
    def bind_host(self) -> str:
        """Host part of BIND, defaulting to all interfaces."""
        host, _, _ = self.BIND.rpartition(":")
        return host or "0.0.0.0"

    @property
    def bind_port(self) -> int:
        """Port part of BIND."""
        _, _, port = self.BIND.rpartition(":")
        return int(port)

    @property
    def max_upload_bytes(self) -> int:
        """Convert MAX_UPLOAD_MB to bytes."""
        return self.MAX_UPLOAD_MB * 1024 * 1024

    @property
    def spool_max_memory_bytes(self) -> int:
        """Convert SPOOL_MAX_MEMORY_MB to bytes."""
        return self.SPOOL_MAX_MEMORY_MB * 1024 * 1024


# Singleton settings instance
settings = Settings()
