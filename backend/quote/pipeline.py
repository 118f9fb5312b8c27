"""Quote submission pipeline: render, persist, then try to email.

Persistence is the durability guarantee. Email is a best-effort
notification: once a submission is saved, a delivery problem is logged and
reported as ``emailed=False``, never as a failed request.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from config import Settings
from document.renderer import render_quote_pdf
from document.store import SubmissionStore
from mail.base import MailSendError, MailTransport
from mail.message import Attachment, build_message, is_valid_email
from mail.transport import select_transport
from quote.fields import build_subject, build_summary, field_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Submission:
    fields: dict = field(default_factory=dict)
    attachments: tuple[Attachment, ...] = ()


# ── Delivery outcomes ────────────────────────────────────────────────


@dataclass(frozen=True)
class Delivered:
    transport: str


@dataclass(frozen=True)
class SkippedNoTransport:
    pass


@dataclass(frozen=True)
class SkippedInvalidAddress:
    sender: str
    recipient: str


@dataclass(frozen=True)
class DeliveryFailed:
    transport: str
    message: str
    detail: str | None = None


DeliveryOutcome = Union[Delivered, SkippedNoTransport, SkippedInvalidAddress, DeliveryFailed]


@dataclass(frozen=True)
class SubmissionResult:
    submission_id: str
    delivery: DeliveryOutcome

    @property
    def emailed(self) -> bool:
        return isinstance(self.delivery, Delivered)


async def process_submission(
    submission: Submission,
    settings: Settings,
    store: SubmissionStore | None = None,
) -> SubmissionResult:
    """Run one submission through the pipeline.

    Raises:
        ConfigurationError: Mail settings are present but unusable. Checked
            before anything is rendered or saved.
        RenderError: The PDF could not be built. Nothing is saved.
        PersistenceError: The record could not be written. Nothing is sent.
    """
    store = store or SubmissionStore(settings.submissions_dir)
    transport = select_transport(settings)
    filenames = [attachment.filename for attachment in submission.attachments]
    logger.info(
        "Received quote request with %d field(s) and %d file(s)",
        len(submission.fields),
        len(filenames),
    )

    submitted_at = datetime.now()
    pdf = await render_quote_pdf(submission.fields, filenames, submitted_at)
    summary = build_summary(submission.fields)

    submission_id = await store.save(submission.fields, submission.attachments, pdf, summary)

    delivery = await _deliver(transport, settings, submission, submission_id, pdf, summary)
    _log_delivery(submission_id, delivery)
    return SubmissionResult(submission_id=submission_id, delivery=delivery)


async def _deliver(
    transport: MailTransport | None,
    settings: Settings,
    submission: Submission,
    submission_id: str,
    pdf: bytes,
    summary: str,
) -> DeliveryOutcome:
    if transport is None:
        return SkippedNoTransport()

    sender, recipient = settings.mail_from, settings.mail_recipient
    if not (is_valid_email(sender) and is_valid_email(recipient)):
        return SkippedInvalidAddress(sender=sender, recipient=recipient)

    message = build_message(
        sender=sender,
        recipient=recipient,
        subject=build_subject(submission.fields),
        text=summary,
        reply_to=field_text(submission.fields.get("email")),
        pdf=pdf,
        pdf_filename=f"quote-request-{submission_id}.pdf",
        uploads=submission.attachments,
    )
    try:
        await transport.send(message)
    except MailSendError as e:
        return DeliveryFailed(transport=transport.name, message=e.message, detail=e.detail)
    except Exception as e:
        # Already saved; an unexpected transport bug must not fail the request
        logger.exception("Unexpected %s transport error", transport.name)
        return DeliveryFailed(transport=transport.name, message="Unexpected mail error", detail=repr(e))
    return Delivered(transport=transport.name)


def _log_delivery(submission_id: str, delivery: DeliveryOutcome) -> None:
    if isinstance(delivery, Delivered):
        logger.info("Submission %s emailed via %s", submission_id, delivery.transport)
    elif isinstance(delivery, SkippedNoTransport):
        logger.warning("Submission %s saved; no mail transport configured", submission_id)
    elif isinstance(delivery, SkippedInvalidAddress):
        logger.warning(
            "Submission %s saved; email skipped, invalid sender %r or recipient %r",
            submission_id,
            delivery.sender,
            delivery.recipient,
        )
    else:
        logger.error(
            "Submission %s saved; %s delivery failed: %s | %s",
            submission_id,
            delivery.transport,
            delivery.message,
            delivery.detail,
        )
