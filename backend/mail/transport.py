"""Pick the mail transport for the current configuration."""

import logging

from config import ConfigurationError, Settings
from mail.base import MailTransport
from mail.graph import GraphConfig, GraphTransport
from mail.smtp import SmtpConfig, SmtpTransport

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


def graph_config(settings: Settings) -> GraphConfig | None:
    """Graph app credentials, or None when none are set.

    Raises:
        ConfigurationError: If only some of the credentials are set.
    """
    values = {
        "GRAPH_TENANT_ID": settings.graph_tenant_id,
        "GRAPH_CLIENT_ID": settings.graph_client_id,
        "GRAPH_CLIENT_SECRET": settings.graph_client_secret,
    }
    if not any(values.values()):
        return None
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Microsoft Graph mail settings are incomplete: set {', '.join(missing)}."
        )
    return GraphConfig(
        tenant_id=settings.graph_tenant_id,
        client_id=settings.graph_client_id,
        client_secret=settings.graph_client_secret,
    )


def smtp_config(settings: Settings) -> SmtpConfig | None:
    """SMTP settings, or None unless both SMTP_USER and SMTP_PASS are set.

    Raises:
        ConfigurationError: If SMTP_PORT is not a valid port number.
    """
    if not (settings.smtp_user and settings.smtp_pass):
        return None
    try:
        port = int(settings.smtp_port)
    except ValueError:
        raise ConfigurationError(f"SMTP_PORT must be a number, got {settings.smtp_port!r}.")
    if not 0 < port < 65536:
        raise ConfigurationError(f"SMTP_PORT is out of range: {port}.")
    return SmtpConfig(
        host=settings.smtp_host,
        port=port,
        secure=settings.smtp_secure or port == SMTPS_PORT,
        username=settings.smtp_user,
        password=settings.smtp_pass,
    )


def select_transport(settings: Settings) -> MailTransport | None:
    """Graph when its app credentials are set, else SMTP, else None."""
    graph = graph_config(settings)
    if graph is not None:
        return GraphTransport(graph, timeout=settings.mail_timeout)
    smtp = smtp_config(settings)
    if smtp is not None:
        return SmtpTransport(smtp, timeout=settings.mail_timeout)
    return None
