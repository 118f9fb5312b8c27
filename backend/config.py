"""
Application configuration with Docker secrets support.

Settings are read once when the process starts. Secrets are read using the
_read_secret() pattern:
  1. Direct env var (e.g., SMTP_PASS)
  2. File-based env var (e.g., SMTP_PASS_FILE → reads file path)
  3. Missing secrets resolve to "" so mail delivery is simply not configured
"""

import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


class ConfigurationError(Exception):
    """Raised when mail settings are present but unusable."""


def _read_secret(
    env_var: str, file_env_var: str | None = None, default: str | None = None
) -> str:
    """Read a secret from env var or Docker secrets file.

    Args:
        env_var: Direct environment variable name (e.g., SMTP_PASS)
        file_env_var: File path env var name (e.g., SMTP_PASS_FILE).
                      If None, defaults to env_var + '_FILE'.
        default: Returned when neither source provides a value. If None, a
                 missing secret is an error.

    Returns:
        The secret value.

    Raises:
        ValueError: If neither source provides a value and no default is given.
    """
    if file_env_var is None:
        file_env_var = f"{env_var}_FILE"

    # Priority 1: Direct env var
    value = os.environ.get(env_var)
    if value:
        return value

    # Priority 2: File-based (Docker secrets pattern)
    file_path = os.environ.get(file_env_var)
    if file_path:
        try:
            with open(file_path, "r") as f:
                value = f.read().strip()
            if value:
                return value
        except FileNotFoundError:
            logger.error(f"Secret file not found: {file_path} (from {file_env_var})")
        except PermissionError:
            logger.error(f"Permission denied reading: {file_path} (from {file_env_var})")

    if default is not None:
        return default
    raise ValueError(
        f"Secret not configured. Set {env_var} env var or {file_env_var} pointing to a file."
    )


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _first_non_empty(*values: str) -> str:
    for value in values:
        if value:
            return value
    return ""


class Settings:
    """Application settings loaded from environment and Docker secrets."""

    def __init__(self):
        self.port = int(_env("PORT", "3000") or "3000")

        # Storage and static pages
        self.submissions_dir = Path(_env("SUBMISSIONS_DIR", "submissions"))
        self.static_dir = Path(_env("STATIC_DIR") or BASE_DIR / "static")

        # SMTP (basic auth)
        self.smtp_host = _env("SMTP_HOST") or "smtp.office365.com"
        self.smtp_port = _env("SMTP_PORT") or "587"
        self.smtp_secure = _env("SMTP_SECURE").lower() == "true"
        self.smtp_user = _env("SMTP_USER")
        self.smtp_pass = _read_secret("SMTP_PASS", default="")
        self.smtp_from = _env("SMTP_FROM")

        # Microsoft Graph (app credentials)
        self.app_mailbox = _env("APP_MAILBOX")
        self.graph_tenant_id = _env("GRAPH_TENANT_ID")
        self.graph_client_id = _env("GRAPH_CLIENT_ID")
        self.graph_client_secret = _read_secret("GRAPH_CLIENT_SECRET", default="")

        # Routing
        self.mail_to = _env("MAIL_TO")
        self.forward_to = _env("FORWARD_TO")

        self.mail_timeout = float(_env("MAIL_TIMEOUT_SECONDS", "30") or "30")

    @property
    def mail_from(self) -> str:
        """Sender address: APP_MAILBOX, then SMTP_FROM, then SMTP_USER."""
        return _first_non_empty(self.app_mailbox, self.smtp_from, self.smtp_user)

    @property
    def mail_recipient(self) -> str:
        """Recipient address: FORWARD_TO, then MAIL_TO."""
        return _first_non_empty(self.forward_to, self.mail_to)


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return settings
