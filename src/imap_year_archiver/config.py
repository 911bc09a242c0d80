"""Application configuration and settings.

Objective:
    Provide a single source of truth for runtime configuration used across the
    application (IMAP credentials, connection details, and logging).

Responsibilities:
    - Define the fixed protocol constants (batch size, archive root, required
      capability).
    - Load environment-driven settings via :class:`Settings` (Pydantic
      BaseSettings).
    - Turn missing credentials into a descriptive :class:`ConfigError` before
      any network activity happens.

High-level call tree:
    - :func:`get_settings` -> returns :class:`Settings`
        - raises :class:`src.imap_year_archiver.exceptions.ConfigError`

Operational notes:
    - ``Settings`` loads from ``.env`` by default via ``pydantic-settings``.
    - Most modules accept a ``Settings`` object explicitly to enable testing;
      the orchestrator falls back to :func:`get_settings` when not provided.
"""

import logging

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

# Maximum number of UIDs sent in a single FETCH/MOVE request
MAX_UIDS = 256

# Parent of the per-year folders, e.g. "Archives/2019"
ARCHIVE_ROOT = "Archives"

REQUIRED_CAPABILITY = "MOVE"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The settings model is flat and human-editable via `.env`. Field names map
    directly to environment variables (``imap_username`` -> ``IMAP_USERNAME``).

    Attributes:
        imap_username: Login name for the mailbox.
        imap_password: Password for the mailbox.
        imap_port: Plain IMAP port; the session is upgraded with STARTTLS.
        imap_mailbox: Source mailbox scanned for old messages.
        imap_timeout: Socket timeout in seconds for the IMAP connection.
        log_level: Logging level.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    imap_username: str = Field(..., min_length=1, description="IMAP login name")
    imap_password: str = Field(..., min_length=1, description="IMAP password")

    imap_port: int = Field(default=143, ge=1, le=65535, description="IMAP port (STARTTLS)")
    imap_mailbox: str = Field(default="INBOX", description="Mailbox to archive from")
    imap_timeout: float = Field(
        default=60.0, gt=0, description="Socket timeout in seconds"
    )

    log_level: str = Field(default="INFO", description="Logging level")


def get_settings() -> Settings:
    """
    Load and return application settings.

    This helper is a convenience for production code. For tests, you typically
    construct a :class:`Settings` instance directly or pass a mocked settings
    object.

    Returns:
        Settings: Application settings instance.

    Raises:
        ConfigError: If a required environment variable is missing or invalid.
    """
    try:
        return Settings()
    except ValidationError as e:
        fields = []
        for error in e.errors():
            if error.get("loc"):
                fields.append(str(error["loc"][0]).upper())
        names = ", ".join(dict.fromkeys(fields)) or "unknown"
        raise ConfigError(f"Missing or invalid env var: {names}") from e
