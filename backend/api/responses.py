"""Shape replies as JSON or plain text depending on the caller's Accept header."""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel


class QuoteReply(BaseModel):
    ok: bool
    message: str
    reference: Optional[str] = None
    emailed: Optional[bool] = None
    email_error: Optional[str] = None


def wants_json(request: Request) -> bool:
    """True when the caller declares it accepts JSON (fetch/XHR clients)."""
    accept = (request.headers.get("accept") or "").lower()
    return "application/json" in accept or "+json" in accept


def quote_response(
    request: Request,
    ok: bool,
    message: str,
    status_code: int = 200,
    **extra,
) -> Response:
    """``{"ok", "message", ...}`` for JSON callers, else the message alone."""
    if wants_json(request):
        reply = QuoteReply(ok=ok, message=message, **extra)
        return JSONResponse(reply.model_dump(exclude_none=True), status_code=status_code)
    return PlainTextResponse(message, status_code=status_code)
