"""Tests for PDF preview rendering and text extraction"""
from unittest.mock import patch

import pytest

from resume_analyzer.app.services import pdf_converter
from resume_analyzer.app.services.pdf_converter import (
    convert_pdf_to_image,
    extract_text_from_pdf,
    image_name_for,
    is_pdf,
    render_scale,
)

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_is_pdf_by_mime_extension_or_magic():
    assert is_pdf(b"", "x.bin", "application/pdf")
    assert is_pdf(b"", "CV.PDF", None)
    assert is_pdf(b"%PDF-1.7 ...", "upload", None)
    assert not is_pdf(b"hello", "notes.txt", "text/plain")


def test_image_name_for_replaces_pdf_suffix():
    assert image_name_for("resume.PDF") == "resume.png"
    assert image_name_for("") == "resume.png"


def test_render_scale_clamped():
    assert render_scale(612) == pytest.approx(2000 / 612)
    assert render_scale(100) == 4.0
    assert render_scale(5000) == 1.0
    assert render_scale(0) == 1.0


def test_convert_pdf_to_image_renders_first_page(sample_pdf):
    result = convert_pdf_to_image(sample_pdf, "ada.pdf", "application/pdf")
    assert result.ok
    assert result.error is None
    assert result.file_name == "ada.png"
    assert result.content_type == "image/png"
    assert result.image_bytes.startswith(PNG_MAGIC)
    assert result.width > 1000
    assert result.height > result.width


def test_convert_empty_input_is_validation_error():
    result = convert_pdf_to_image(b"", "a.pdf")
    assert not result.ok
    assert result.error == "Invalid or empty file"


def test_convert_non_pdf_is_rejected_without_retry():
    with patch.object(pdf_converter, "_render_first_page") as render:
        result = convert_pdf_to_image(b"plain text", "notes.txt", "text/plain")
    assert result.error == "File is not a PDF"
    render.assert_not_called()


def test_convert_corrupt_pdf_reports_attempts():
    result = convert_pdf_to_image(b"%PDF-1.4 garbage that is not a pdf", "bad.pdf", max_retries=2)
    assert not result.ok
    assert result.image_bytes is None
    assert result.error.startswith("Failed after 2 attempts: PDF parsing failed")


def test_convert_retries_transient_render_failure(sample_pdf):
    real_render = pdf_converter._render_first_page
    calls = {"n": 0}

    def flaky(data, file_name):
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("renderer crashed")
        return real_render(data, file_name)

    with patch.object(pdf_converter, "_render_first_page", side_effect=flaky):
        result = convert_pdf_to_image(sample_pdf, "ada.pdf", max_retries=3)
    assert result.ok
    assert calls["n"] == 2


def test_no_pages_is_terminal():
    with patch.object(
        pdf_converter, "_render_first_page", side_effect=pdf_converter.PdfValidationError("PDF has no pages")
    ) as render:
        result = convert_pdf_to_image(b"%PDF-1.4", "empty.pdf", max_retries=3)
    assert result.error == "PDF has no pages"
    assert render.call_count == 1


def test_extract_text_from_pdf(sample_pdf):
    text = extract_text_from_pdf(sample_pdf)
    assert "Ada Lovelace" in text
    assert "EXPERIENCE" in text


def test_extract_text_from_garbage_returns_empty():
    assert extract_text_from_pdf(b"not a pdf") == ""
