"""Best-effort decoding of plain text payloads.

Dump files are not guaranteed to be validly encoded, so decoding never raises:
undecodable sequences become U+FFFD instead.
"""

from __future__ import annotations

import codecs

from charset_normalizer import from_bytes

from emailextract import config
from emailextract.models import TextBlob
from emailextract.utils.logging_setup import get_logger

logger = get_logger(__name__)

__all__ = ["best_effort_decode", "detect_encoding", "extract_plain"]

_BOM_ENCODINGS = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def detect_encoding(data: bytes) -> str:
    """Guess the encoding of ``data``; ``utf-8`` when nothing better is known."""

    for bom, encoding in _BOM_ENCODINGS:
        if data.startswith(bom):
            return encoding
    try:
        data.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass
    sample = data[: config.TEXT_DETECT_BYTES]
    best = from_bytes(sample).best()
    if best is not None and best.encoding:
        return best.encoding
    return "utf-8"


def best_effort_decode(data: bytes) -> str:
    """Decode ``data`` using the detected encoding with replacement."""

    if not data:
        return ""
    encoding = detect_encoding(data)
    try:
        return data.decode(encoding, errors="replace")
    except LookupError:
        logger.debug("Unknown codec %s, falling back to utf-8", encoding)
        return data.decode("utf-8", errors="replace")


def extract_plain(data: bytes) -> TextBlob:
    """Treat raw ``data`` as text and return it as a single fragment."""

    return TextBlob([best_effort_decode(data)])
