"""AgriBuild quote intake FastAPI application."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exception_handlers import http_exception_handler

from api import pages, quotes
from config import settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Not Found. Please open / and submit the form."

app = FastAPI(title="AgriBuild Quote API", version="1.0.0")

app.include_router(pages.router)
app.include_router(quotes.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)
    return await http_exception_handler(request, exc)


@app.on_event("startup")
async def startup():
    """Make sure the submissions directory exists and report the mail setup."""
    settings.submissions_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Saving submissions under %s", settings.submissions_dir.resolve())
    if settings.graph_client_id:
        logger.info("Mail transport: Microsoft Graph as %s", settings.mail_from or "(no sender)")
    elif settings.smtp_user:
        logger.info("Mail transport: SMTP %s:%s", settings.smtp_host, settings.smtp_port)
    else:
        logger.warning("No mail transport configured; submissions will only be saved")


@app.get("/health")
async def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
