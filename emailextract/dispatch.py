"""Route a classified file to the extractor for its format."""

from __future__ import annotations

from typing import Callable, Dict

from emailextract.extraction_pdf import extract_pdf
from emailextract.extraction_text import extract_plain
from emailextract.extraction_xml import extract_xml
from emailextract.extraction_zip import NO_DOCUMENT_ENTRY, decompose
from emailextract.models import FileClassification, FileKind, TextBlob, ZipSubtype
from emailextract.utils.errors import (
    ClassificationAmbiguous,
    ContainerError,
    ContainerSkipped,
)

__all__ = ["EXTRACTORS", "dispatch"]

Extractor = Callable[[FileClassification, bytes], TextBlob]


def _plain(_classification: FileClassification, data: bytes) -> TextBlob:
    return extract_plain(data)


def _pdf(_classification: FileClassification, data: bytes) -> TextBlob:
    return extract_pdf(data)


def _container(classification: FileClassification, data: bytes) -> TextBlob:
    if classification.subtype is ZipSubtype.UNKNOWN_ZIP:
        if classification.detail:
            raise ContainerError(classification.detail)
        raise ContainerSkipped(NO_DOCUMENT_ENTRY)
    container = decompose(data, classification.subtype)
    return extract_xml(container.entries)


def _unrecognized(classification: FileClassification, _data: bytes) -> TextBlob:
    raise ClassificationAmbiguous(classification.detail or "unrecognized format")


EXTRACTORS: Dict[FileKind, Extractor] = {
    FileKind.PLAIN_TEXT: _plain,
    FileKind.PDF: _pdf,
    FileKind.ZIP_CONTAINER: _container,
    FileKind.UNRECOGNIZED: _unrecognized,
}

_missing = set(FileKind) - set(EXTRACTORS)
if _missing:  # pragma: no cover - guards additions to FileKind
    raise RuntimeError(f"no extractor registered for {sorted(k.value for k in _missing)}")


def dispatch(classification: FileClassification, data: bytes) -> TextBlob:
    """Extract the text of ``data`` according to ``classification``.

    Raises an :class:`~emailextract.utils.errors.ExtractError` subclass when
    the file yields no text: ``ClassificationAmbiguous`` and
    ``ContainerSkipped`` mean "skip", the others mean "failed".
    """

    return EXTRACTORS[classification.kind](classification, data)
