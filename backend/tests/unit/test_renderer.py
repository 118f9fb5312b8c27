"""Tests for document.renderer: PDF content and failure handling."""

import io
from datetime import datetime
from unittest.mock import patch

import pdfplumber
import pytest

from document.renderer import RenderError, format_submitted_at, render_quote_pdf
from quote.fields import FIELD_LABELS


def _pdf_text(data: bytes) -> str:
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


class TestFormatSubmittedAt:
    def test_en_gb_style(self):
        assert format_submitted_at(datetime(2026, 10, 18, 14, 5)) == "18 Oct 2026, 14:05"


class TestRenderQuotePdf:
    async def test_returns_pdf_bytes(self):
        data = await render_quote_pdf({}, [])
        assert data.startswith(b"%PDF")

    async def test_title_timestamp_and_sections(self):
        data = await render_quote_pdf({}, [], submitted_at=datetime(2026, 1, 2, 9, 30))
        text = _pdf_text(data)
        assert "AgriBuild Quote Request" in text
        assert "Submitted: 02 Jan 2026, 09:30" in text
        positions = [
            text.index(title)
            for title in ("Project Details", "Specification", "Site & Delivery", "Contact Details", "Uploaded Drawings")
        ]
        assert positions == sorted(positions)

    async def test_empty_fields_show_not_provided(self):
        text = _pdf_text(await render_quote_pdf({}, []))
        assert text.count("Not provided") == len(FIELD_LABELS)

    async def test_values_are_rendered(self):
        text = _pdf_text(await render_quote_pdf({"first_name": "Jane", "site_postcode": "AB1 2CD"}, []))
        assert "Jane" in text
        assert "AB1 2CD" in text
        assert text.count("Not provided") == len(FIELD_LABELS) - 2

    async def test_no_files(self):
        text = _pdf_text(await render_quote_pdf({}, []))
        assert "No files uploaded." in text

    async def test_files_listed_in_order(self):
        text = _pdf_text(await render_quote_pdf({}, ["plan.pdf", "elevation.png", "site.jpg"]))
        assert "No files uploaded." not in text
        assert text.index("1. plan.pdf") < text.index("2. elevation.png") < text.index("3. site.jpg")

    async def test_non_latin1_text_does_not_fail(self):
        data = await render_quote_pdf({"project_notes": "Barn – “big” ☃"}, [])
        assert data.startswith(b"%PDF")

    async def test_build_failure_raises_render_error(self):
        with patch("document.renderer._build_pdf", side_effect=RuntimeError("font missing")):
            with pytest.raises(RenderError, match="font missing"):
                await render_quote_pdf({}, [])
