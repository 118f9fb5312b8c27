"""SMTP mail transport (basic auth) built on aiosmtplib."""

import logging
from dataclasses import dataclass
from email.message import EmailMessage

import aiosmtplib

from mail.base import MailSendError, MailTransport
from mail.message import MailMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    secure: bool
    username: str
    password: str


class SmtpTransport(MailTransport):
    """Authenticated SMTP send.

    ``secure`` means implicit TLS (usually port 465); otherwise STARTTLS is
    negotiated when the server offers it.
    """

    name = "smtp"

    def __init__(self, config: SmtpConfig, timeout: float = 30.0):
        self.config = config
        self.timeout = timeout

    async def send(self, message: MailMessage) -> None:
        email = build_email_message(message)
        logger.info(
            "SMTP send via %s:%s (secure=%s)", self.config.host, self.config.port, self.config.secure
        )
        try:
            await aiosmtplib.send(
                email,
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.password,
                use_tls=self.config.secure,
                timeout=self.timeout,
            )
        except aiosmtplib.SMTPAuthenticationError as e:
            raise MailSendError(
                "The SMTP server rejected the login. Check SMTP_USER and SMTP_PASS.",
                detail=f"{e.code} {e.message}",
                status_code=e.code,
            ) from e
        except aiosmtplib.SMTPResponseException as e:
            raise MailSendError(
                "The SMTP server refused the email.",
                detail=f"{e.code} {e.message}",
                status_code=e.code,
            ) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise MailSendError(
                f"Could not send email through {self.config.host}:{self.config.port}.",
                detail=repr(e),
            ) from e


def build_email_message(message: MailMessage) -> EmailMessage:
    email = EmailMessage()
    email["From"] = message.sender
    email["To"] = message.recipient
    email["Subject"] = message.subject
    if message.reply_to:
        email["Reply-To"] = message.reply_to
    email.set_content(message.text)
    for attachment in message.attachments:
        maintype, _, subtype = attachment.content_type.partition("/")
        if not subtype:
            maintype, subtype = "application", "octet-stream"
        email.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype,
            filename=attachment.filename,
        )
    return email
