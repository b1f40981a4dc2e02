"""Environment-driven settings for the extractor.

Values are read once at import time. The CLI loads ``.env`` files before this
module is imported, so overrides placed there are honoured too.
"""

import os


def _int(name: str, default: int) -> int:
    """Read integer environment variables with graceful fallback."""

    try:
        raw = os.getenv(name, "")
        return int(raw.strip() or default)
    except ValueError:
        return default


def _float(name: str, default: float) -> float:
    """Read float environment variables with graceful fallback."""

    try:
        raw = os.getenv(name, "")
        return float(raw.strip() or default)
    except ValueError:
        return default


def _str(name: str, default: str) -> str:
    """Read string environment variables with stripping."""

    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip()
    return raw if raw else default


# -------- Sniffing / decoding --------
SNIFF_BYTES = max(16, _int("SNIFF_BYTES", 8192))
# Sample size handed to charset-normalizer for encoding detection
TEXT_DETECT_BYTES = max(1024, _int("TEXT_DETECT_BYTES", 64 * 1024))

# -------- PDF --------
PDF_BACKEND = _str("PDF_BACKEND", "auto").lower()
if PDF_BACKEND not in {"fitz", "pdfminer", "auto"}:
    PDF_BACKEND = "auto"
PDF_MAX_PAGES = _int("PDF_MAX_PAGES", 0)

# -------- ZIP containers --------
ZIP_MAX_FILES = _int("ZIP_MAX_FILES", 5000)
ZIP_MAX_TOTAL_UNCOMP_MB = _int("ZIP_MAX_TOTAL_UNCOMP_MB", 1024)
ZIP_MAX_MEMBER_MB = _int("ZIP_MAX_MEMBER_MB", 256)
ZIP_RATIO_LIMIT = _float("ZIP_RATIO_LIMIT", 1000.0)

# -------- Run --------
PARSE_MAX_WORKERS = max(1, _int("PARSE_MAX_WORKERS", 1))
# Empty means the built-in pattern from emailextract.harvester
EMAIL_PATTERN = _str("EMAIL_PATTERN", "")
OUTPUT_PATH = _str("OUTPUT_PATH", "emails.txt")
