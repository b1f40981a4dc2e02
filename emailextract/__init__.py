"""Extract e-mail addresses from plain text, PDF and ZIP-based documents."""

from emailextract.models import (
    EmailSet,
    FileClassification,
    FileKind,
    FileReport,
    Outcome,
    RunResult,
    TextBlob,
    ZipSubtype,
)

__version__ = "1.0.1"

__all__ = [
    "EmailSet",
    "FileClassification",
    "FileKind",
    "FileReport",
    "Outcome",
    "RunResult",
    "TextBlob",
    "ZipSubtype",
    "__version__",
]
