"""PDF text extraction with PyMuPDF and a pdfminer.six fallback."""
from __future__ import annotations

import io
from typing import Callable, Dict, List, Tuple

import fitz  # PyMuPDF
from pdfminer.high_level import extract_pages
from pdfminer.layout import LTTextContainer

from emailextract import config
from emailextract.models import TextBlob
from emailextract.utils.errors import ExtractionError
from emailextract.utils.logging_setup import get_logger

logger = get_logger(__name__)

__all__ = ["backend_order", "extract_pdf", "extract_pdf_fitz", "extract_pdf_pdfminer"]


def _page_limit() -> int:
    limit = int(config.PDF_MAX_PAGES or 0)
    return limit if limit > 0 else 0


def _mailto_targets(page) -> List[str]:
    try:
        links = page.get_links() or []
    except Exception:
        return []
    found: List[str] = []
    for link in links:
        uri = (link.get("uri") or "").strip()
        if uri.lower().startswith("mailto:"):
            email = uri[7:].split("?", 1)[0]
            if email:
                found.append(email)
    return found


def extract_pdf_fitz(data: bytes) -> TextBlob:
    """Return one fragment per page using PyMuPDF.

    ``mailto:`` link targets, which often are not part of the visible text,
    are appended as one extra fragment.
    """

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise ExtractionError(f"PyMuPDF cannot open PDF: {exc}") from exc

    blob = TextBlob()
    mailtos: list[str] = []
    try:
        if doc.needs_pass and not doc.authenticate(""):
            raise ExtractionError("PDF is encrypted")
        if doc.page_count == 0:
            raise ExtractionError("PDF has no pages")
        limit = _page_limit()
        for index, page in enumerate(doc):
            if limit and index >= limit:
                logger.info("PDF page limit reached (%d pages)", limit)
                break
            try:
                text = page.get_text("text") or ""
            except Exception as exc:
                logger.warning("PDF page %d unreadable: %s", index + 1, exc)
                text = ""
            blob.append(text)
            mailtos.extend(_mailto_targets(page))
    finally:
        doc.close()

    if mailtos:
        blob.append(" ".join(dict.fromkeys(mailtos)))
    return blob


def extract_pdf_pdfminer(data: bytes) -> TextBlob:
    """Return one fragment per page using pdfminer.six.

    pdfminer parses pages lazily; when it breaks half-way the pages read so
    far are kept.
    """

    blob = TextBlob()
    limit = _page_limit()
    try:
        for layout in extract_pages(io.BytesIO(data), maxpages=limit):
            blob.append(
                "".join(
                    element.get_text()
                    for element in layout
                    if isinstance(element, LTTextContainer)
                )
            )
    except Exception as exc:
        if not len(blob):
            raise ExtractionError(f"pdfminer cannot parse PDF: {exc}") from exc
        logger.warning("pdfminer stopped after %d pages: %s", len(blob), exc)
    if not len(blob):
        raise ExtractionError("PDF has no pages")
    return blob


_BACKENDS: Dict[str, Callable[[bytes], TextBlob]] = {
    "fitz": extract_pdf_fitz,
    "pdfminer": extract_pdf_pdfminer,
}


def backend_order() -> Tuple[str, ...]:
    backend = config.PDF_BACKEND
    if backend == "auto":
        return ("fitz", "pdfminer")
    if backend in _BACKENDS:
        return (backend,)
    return ("fitz", "pdfminer")


def extract_pdf(data: bytes) -> TextBlob:
    """Extract per-page text from PDF ``data`` in document order.

    Pages without a text layer (scanned images) yield an empty fragment.
    Raises :class:`ExtractionError` when no backend can read the document.
    """

    last_error: ExtractionError | None = None
    for name in backend_order():
        try:
            return _BACKENDS[name](data)
        except ExtractionError as exc:
            logger.warning("PDF backend %s failed: %s", name, exc.reason)
            last_error = exc
    if last_error is None:
        raise ExtractionError("no PDF backend configured")
    raise last_error
