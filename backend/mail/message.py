"""Outgoing quote email and its attachments."""

import re
from dataclasses import dataclass, field

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class MailMessage:
    sender: str
    recipient: str
    subject: str
    text: str
    reply_to: str | None = None
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)


def is_valid_email(value: str | None) -> bool:
    """Syntactic ``local@domain.tld`` check; no DNS or deliverability lookup."""
    if not value:
        return False
    return bool(_EMAIL_RE.match(value.strip()))


def build_message(
    *,
    sender: str,
    recipient: str,
    subject: str,
    text: str,
    reply_to: str | None,
    pdf: bytes,
    pdf_filename: str,
    uploads: list[Attachment] | tuple[Attachment, ...] = (),
) -> MailMessage:
    """Assemble the email: rendered PDF first, then uploads in upload order.

    ``reply_to`` is dropped unless it looks like an email address.
    """
    reply = reply_to.strip() if is_valid_email(reply_to) else None
    attachments = (Attachment(pdf_filename, pdf, PDF_CONTENT_TYPE), *uploads)
    return MailMessage(
        sender=sender,
        recipient=recipient,
        subject=subject,
        text=text,
        reply_to=reply,
        attachments=attachments,
    )
