"""Render a quote request as a PDF document."""

import asyncio
import logging
from datetime import datetime
from typing import Mapping, Sequence

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from quote.fields import QUOTE_SECTIONS, defaulted_value

logger = logging.getLogger(__name__)

DOCUMENT_TITLE = "AgriBuild Quote Request"
NO_FILES_TEXT = "No files uploaded."

MARGIN_MM = 17  # ~48pt
LINE_HEIGHT = 5

TITLE_COLOR = (17, 17, 17)
MUTED_COLOR = (107, 114, 128)
HEADING_COLOR = (27, 47, 107)


class RenderError(Exception):
    """Raised when the PDF document cannot be built."""


def format_submitted_at(moment: datetime) -> str:
    """en-GB style timestamp, e.g. ``18 Oct 2026, 14:05``."""
    return moment.strftime("%d %b %Y, %H:%M")


async def render_quote_pdf(
    fields: Mapping,
    filenames: Sequence[str],
    submitted_at: datetime | None = None,
) -> bytes:
    """Build the quote PDF off the event loop and return the complete document.

    Raises:
        RenderError: If any part of the document fails to build. No partial
            output is ever returned.
    """
    moment = submitted_at or datetime.now()
    try:
        return await asyncio.to_thread(_build_pdf, fields, list(filenames), moment)
    except RenderError:
        raise
    except Exception as e:
        logger.exception("PDF render failed")
        raise RenderError(f"Could not render quote PDF: {e}") from e


def _build_pdf(fields: Mapping, filenames: list[str], submitted_at: datetime) -> bytes:
    pdf = FPDF(format="A4")
    pdf.set_margins(MARGIN_MM, MARGIN_MM, MARGIN_MM)
    pdf.set_auto_page_break(auto=True, margin=MARGIN_MM)
    pdf.add_page()

    pdf.set_font("Helvetica", "", 21)
    pdf.set_text_color(*TITLE_COLOR)
    _line(pdf, DOCUMENT_TITLE, height=9)
    pdf.ln(1)

    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(*MUTED_COLOR)
    _line(pdf, f"Submitted: {format_submitted_at(submitted_at)}")
    pdf.set_text_color(*TITLE_COLOR)
    pdf.ln(LINE_HEIGHT)

    for title, section_fields in QUOTE_SECTIONS:
        _heading(pdf, title)
        for name, label in section_fields:
            pdf.set_font("Helvetica", "B", 10)
            pdf.write(LINE_HEIGHT, _sanitize_for_latin1(f"{label}: "))
            pdf.set_font("Helvetica", "", 10)
            pdf.write(LINE_HEIGHT, _sanitize_for_latin1(defaulted_value(fields.get(name))))
            pdf.ln(LINE_HEIGHT)
        pdf.ln(4)

    _heading(pdf, "Uploaded Drawings")
    pdf.set_font("Helvetica", "", 10)
    if not filenames:
        _line(pdf, NO_FILES_TEXT)
    else:
        for index, filename in enumerate(filenames, start=1):
            _line(pdf, f"{index}. {filename}")

    return bytes(pdf.output())


def _heading(pdf: FPDF, title: str) -> None:
    pdf.set_font("Helvetica", "B", 13)
    pdf.set_text_color(*HEADING_COLOR)
    _line(pdf, title, height=7)
    pdf.set_text_color(*TITLE_COLOR)
    pdf.ln(1)


def _line(pdf: FPDF, text: str, height: float = LINE_HEIGHT) -> None:
    pdf.multi_cell(
        0, height, _sanitize_for_latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT
    )


# Unicode → ASCII replacements for Latin-1 safe PDF output
_UNICODE_REPLACEMENTS = {
    "\u2013": "-",   # en-dash
    "\u2014": "--",  # em-dash
    "\u2018": "'",   # left single quote
    "\u2019": "'",   # right single quote
    "\u201c": '"',   # left double quote
    "\u201d": '"',   # right double quote
    "\u2026": "...", # ellipsis
    "\u2022": "*",   # bullet
    "\u00a0": " ",   # non-breaking space
    "\u200b": "",    # zero-width space
    "\u2011": "-",   # non-breaking hyphen
    "\u2010": "-",   # hyphen
    "\ufeff": "",    # BOM
}


def _sanitize_for_latin1(text: str) -> str:
    """Replace unicode characters that Helvetica cannot render."""
    for char, replacement in _UNICODE_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    # Drop any remaining non-Latin-1 characters
    return text.encode("latin-1", errors="replace").decode("latin-1")
