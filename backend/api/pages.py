"""Static pages: the quote form and the thank-you page."""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from config import Settings, get_settings

router = APIRouter(tags=["pages"])


@router.get("/")
async def quote_form(settings: Settings = Depends(get_settings)):
    return FileResponse(settings.static_dir / "index.html", media_type="text/html")


@router.get("/thank-you")
async def thank_you(settings: Settings = Depends(get_settings)):
    return FileResponse(settings.static_dir / "thank-you.html", media_type="text/html")
