"""
PDF utilities - first-page preview rendering and text extraction with pdfplumber.
"""
from __future__ import annotations

import io
import re
from dataclasses import dataclass

import pdfplumber

from resume_analyzer.app.core.config import settings
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.utils.retry import RetryError, retry_call

logger = get_logger("services.pdf_converter")

PDF_MAGIC = b"%PDF"
_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


class PdfValidationError(ValueError):
    """Input can never be rendered; retrying will not help."""


@dataclass
class PdfConversionResult:
    image_bytes: bytes | None = None
    file_name: str | None = None
    content_type: str = "image/png"
    width: int = 0
    height: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.image_bytes)


def is_pdf(data: bytes, file_name: str = "", content_type: str | None = None) -> bool:
    """Accept by MIME type, .pdf extension or %PDF magic bytes."""
    if content_type and "pdf" in content_type.lower():
        return True
    if file_name.lower().endswith(".pdf"):
        return True
    return data[:1024].lstrip().startswith(PDF_MAGIC)


def image_name_for(file_name: str) -> str:
    return f"{_PDF_SUFFIX.sub('', file_name or 'resume')}.png"


def render_scale(page_width: float) -> float:
    """Scale for ~pdf_target_width px output, clamped to [1, pdf_max_scale]."""
    if page_width <= 0:
        return 1.0
    return min(settings.pdf_max_scale, max(1.0, settings.pdf_target_width / page_width))


def _validate(data: bytes, file_name: str, content_type: str | None) -> None:
    if not data:
        raise PdfValidationError("Invalid or empty file")
    if not is_pdf(data, file_name, content_type):
        raise PdfValidationError("File is not a PDF")


def _render_first_page(data: bytes, file_name: str) -> PdfConversionResult:
    # fresh buffer per attempt; pdfplumber holds the stream open while rendering
    try:
        pdf = pdfplumber.open(io.BytesIO(data))
    except Exception as e:
        raise RuntimeError(f"PDF parsing failed: {e}") from e

    with pdf:
        if not pdf.pages:
            raise PdfValidationError("PDF has no pages")
        page = pdf.pages[0]
        scale = render_scale(float(page.width))
        page_image = page.to_image(resolution=72 * scale)
        image = page_image.original

        out = io.BytesIO()
        image.save(out, format="PNG")
        return PdfConversionResult(
            image_bytes=out.getvalue(),
            file_name=image_name_for(file_name),
            width=image.width,
            height=image.height,
        )


def convert_pdf_to_image(
    data: bytes,
    file_name: str,
    content_type: str | None = None,
    max_retries: int | None = None,
) -> PdfConversionResult:
    """
    Render page 1 of a PDF to PNG.

    Never raises for conversion problems: the outcome is reported in
    PdfConversionResult.error. Validation failures are returned at once;
    parse/render failures are retried with linear backoff.
    """
    attempts = max_retries if max_retries is not None else settings.pdf_max_retries
    try:
        _validate(data, file_name, content_type)
        result = retry_call(
            lambda: _render_first_page(data, file_name),
            max_attempts=attempts,
            base_delay=settings.pdf_retry_backoff,
            backoff="linear",
            non_retryable=(PdfValidationError,),
            description="PDF conversion",
        )
    except PdfValidationError as e:
        logger.warning("PDF conversion rejected file_name=%s reason=%s", file_name, e)
        return PdfConversionResult(error=str(e))
    except RetryError as e:
        logger.error("PDF conversion gave up file_name=%s error=%s", file_name, e.last_error)
        return PdfConversionResult(
            error=f"Failed after {e.attempts} attempts: {e.last_error or 'Unknown error'}"
        )

    logger.info(
        "PDF converted file_name=%s image=%s size=%dx%d bytes=%d",
        file_name,
        result.file_name,
        result.width,
        result.height,
        len(result.image_bytes or b""),
    )
    return result


def extract_text_from_pdf(data: bytes) -> str:
    """Extract raw text from all pages. Returns "" when nothing can be read."""
    text_parts = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text()
                if page_text:
                    text_parts.append(page_text)
    except Exception as e:
        logger.warning("PDF text extraction failed: %s", e)
        return ""
    return "\n".join(text_parts)
