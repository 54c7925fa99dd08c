"""
App Configuration.

This module defines the global application settings using Pydantic Settings.
It loads configuration variables from environment variables and/or a .env file,
ensuring typed and validated settings for the application.

Attributes:
    settings: The global instance of the Settings class, ready to be imported and used.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application Settings.

    This class defines the configuration for the application, validating
    environment variables against the specified types.

    Attributes:
        PROJECT_NAME: The name of the project (default: "Loop Gatekeeper").
        DATABASE_URL: The connection string for the database.
        JWT_SECRET: HMAC secret used to verify session tokens.
        GITHUB_API_URL: Base URL of the GitHub REST API.
        GITHUB_TIMEOUT_SECONDS: Per-call timeout for outbound GitHub requests.
        GITHUB_PAGE_SIZE: Upper bound for per_page on paginated listings.
        LOG_LEVEL: Root log level.
    """

    # Core
    PROJECT_NAME: str = "Loop Gatekeeper"
    DATABASE_URL: str
    LOG_LEVEL: str = "INFO"

    # Auth
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # GitHub
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TIMEOUT_SECONDS: float = 10.0
    GITHUB_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore"
    )


settings = Settings()
