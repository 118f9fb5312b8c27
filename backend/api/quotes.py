"""Quote request endpoints.

GET  /quote - Redirect back to the form
POST /quote - Accept the form (multipart, files under ``drawings``), save it,
              and try to email it
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from starlette.datastructures import FormData, UploadFile

from api.responses import quote_response
from config import ConfigurationError, Settings, get_settings
from document.renderer import RenderError
from document.store import PersistenceError
from mail.message import Attachment
from quote.pipeline import DeliveryFailed, Submission, process_submission

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quote"])

MAX_FILE_SIZE = 4 * 1024 * 1024  # 4 MB
UPLOAD_FIELD = "drawings"

SENT_MESSAGE = "Thanks! Your quote request has been sent."
SAVED_MESSAGE = "Thanks! Your quote request has been received. Reference: {reference}."
FAILED_MESSAGE = "Sorry, something went wrong saving your request. Please try again."


class AttachmentTooLarge(Exception):
    """Raised when an uploaded drawing exceeds MAX_FILE_SIZE."""


@router.get("/quote")
async def quote_page_redirect():
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/quote")
async def submit_quote(request: Request, settings: Settings = Depends(get_settings)):
    """Save the quote request, then email it if a transport is configured."""
    try:
        async with request.form() as form:
            submission = await read_submission(form)
        result = await process_submission(submission, settings)
    except AttachmentTooLarge as e:
        logger.warning("Rejected upload: %s", e)
        return quote_response(request, False, str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
    except ConfigurationError as e:
        logger.error("Mail configuration error: %s", e)
        return quote_response(request, False, str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
    except (RenderError, PersistenceError) as e:
        logger.error("Quote request not saved: %s", e)
        return quote_response(request, False, FAILED_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception:
        logger.exception("Quote request failed")
        return quote_response(request, False, FAILED_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)

    extra = {"reference": result.submission_id, "emailed": result.emailed}
    if result.emailed:
        return quote_response(request, True, SENT_MESSAGE, **extra)
    if isinstance(result.delivery, DeliveryFailed):
        extra["email_error"] = result.delivery.message
    message = SAVED_MESSAGE.format(reference=result.submission_id)
    return quote_response(request, True, message, **extra)


async def read_submission(form: FormData) -> Submission:
    """Split multipart form data into text fields and uploaded drawings.

    Repeated text keys keep every value as a list. Empty file parts (no file
    chosen in the browser) are skipped.

    Raises:
        AttachmentTooLarge: If any drawing is larger than MAX_FILE_SIZE.
    """
    fields: dict = {}
    for key in form.keys():
        values = [v for v in form.getlist(key) if isinstance(v, str)]
        if values:
            fields[key] = values[0] if len(values) == 1 else values

    attachments = []
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        if key != UPLOAD_FIELD:
            logger.warning("Ignoring file uploaded under unexpected field %r", key)
            continue
        content = await value.read(MAX_FILE_SIZE + 1)
        if not value.filename and not content:
            continue
        if len(content) > MAX_FILE_SIZE:
            raise AttachmentTooLarge(
                f"File too large: {value.filename}. "
                f"Maximum size is {MAX_FILE_SIZE // (1024 * 1024)}MB per file."
            )
        attachments.append(
            Attachment(
                filename=value.filename or "file",
                content=content,
                content_type=value.content_type or "application/octet-stream",
            )
        )
    return Submission(fields=fields, attachments=tuple(attachments))
