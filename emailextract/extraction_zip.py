"""Decompose ZIP-based document containers into their text-bearing entries.

Office Open XML (DOCX/XLSX/PPTX) and OpenDocument (ODT/ODS/ODP) files are ZIP
archives with a fixed internal layout. The document family is recognised by
the entry names it exposes, and only the XML parts that hold document text
are handed on to the XML extractor.
"""

from __future__ import annotations

import io
import re
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import Iterable, List, Pattern, Tuple

from emailextract.models import ContainerEntry, ZipSubtype
from emailextract.utils import zip_limits as zl
from emailextract.utils.errors import ContainerError, ContainerSkipped
from emailextract.utils.logging_setup import get_logger

logger = get_logger(__name__)

__all__ = [
    "DecomposedContainer",
    "NO_DOCUMENT_ENTRY",
    "decompose",
    "detect_subtype",
    "open_container",
    "probe_container",
]

NO_DOCUMENT_ENTRY = "no recognized document entry"

_MIMETYPE_ENTRY = "mimetype"
_MIMETYPE_MAX_BYTES = 256
_ODF_MIMETYPES = {
    "application/vnd.oasis.opendocument.text": ZipSubtype.ODT,
    "application/vnd.oasis.opendocument.text-template": ZipSubtype.ODT,
    "application/vnd.oasis.opendocument.text-master": ZipSubtype.ODT,
    "application/vnd.oasis.opendocument.spreadsheet": ZipSubtype.ODS,
    "application/vnd.oasis.opendocument.spreadsheet-template": ZipSubtype.ODS,
    "application/vnd.oasis.opendocument.presentation": ZipSubtype.ODP,
    "application/vnd.oasis.opendocument.presentation-template": ZipSubtype.ODP,
}

# Marker entries identifying each Office Open XML family
_OOXML_MARKERS: Tuple[Tuple[ZipSubtype, Pattern[str]], ...] = (
    (ZipSubtype.DOCX, re.compile(r"^word/document\.xml$")),
    (
        ZipSubtype.XLSX,
        re.compile(r"^xl/(?:workbook\.xml|sharedStrings\.xml|worksheets/[^/]+\.xml)$"),
    ),
    (
        ZipSubtype.PPTX,
        re.compile(r"^ppt/(?:presentation\.xml|slides/slide\d+\.xml)$"),
    ),
)

_ODF_TEXT_ENTRIES = re.compile(r"^(?:content|styles)\.xml$")

# Entries that carry document text, per family
_TEXT_ENTRIES: dict[ZipSubtype, Pattern[str]] = {
    ZipSubtype.DOCX: re.compile(
        r"^word/(?:document|footnotes|endnotes|comments|(?:header|footer)\d*)\.xml$"
    ),
    ZipSubtype.XLSX: re.compile(
        r"^xl/(?:sharedStrings\.xml|worksheets/sheet\d*\.xml|comments\d*\.xml)$"
    ),
    ZipSubtype.PPTX: re.compile(
        r"^ppt/(?:slides/slide\d+\.xml|notesSlides/notesSlide\d+\.xml)$"
    ),
    ZipSubtype.ODT: _ODF_TEXT_ENTRIES,
    ZipSubtype.ODS: _ODF_TEXT_ENTRIES,
    ZipSubtype.ODP: _ODF_TEXT_ENTRIES,
}

_READ_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    OSError,
    RuntimeError,
    NotImplementedError,
)


@dataclass(slots=True)
class DecomposedContainer:
    """Result of decomposing one archive: its family and text entries."""

    subtype: ZipSubtype
    entries: List[ContainerEntry] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def open_container(data: bytes) -> zipfile.ZipFile:
    """Open ``data`` as a ZIP archive, enforcing the archive limits."""

    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, OSError, ValueError) as exc:
        raise ContainerError(f"corrupt archive: {exc}") from exc
    ok, reason = zl.validate_zip_safely(zf)
    if not ok:
        zf.close()
        raise ContainerError(f"archive rejected: {reason}")
    return zf


def _read_mimetype(zf: zipfile.ZipFile) -> str:
    try:
        info = zf.getinfo(_MIMETYPE_ENTRY)
    except KeyError:
        return ""
    if info.file_size > _MIMETYPE_MAX_BYTES:
        return ""
    try:
        raw = zf.read(info)
    except _READ_ERRORS:
        return ""
    return raw.decode("ascii", errors="ignore").strip()


def detect_subtype(names: Iterable[str], mimetype: str = "") -> ZipSubtype:
    """Return the document family for an archive with entry ``names``.

    ``mimetype`` is the content of the OpenDocument ``mimetype`` entry, when
    the archive has one.
    """

    odf = _ODF_MIMETYPES.get(mimetype.strip())
    if odf is not None:
        return odf

    name_list = list(names)
    for subtype, marker in _OOXML_MARKERS:
        if any(marker.match(name) for name in name_list):
            return subtype
    # OpenDocument without a (known) mimetype entry: treat as text document
    if "content.xml" in name_list:
        return ZipSubtype.ODT
    return ZipSubtype.UNKNOWN_ZIP


def _subtype_of(zf: zipfile.ZipFile) -> ZipSubtype:
    names = [info.filename for info in zl.iter_members(zf)]
    return detect_subtype(names, _read_mimetype(zf))


def probe_container(data: bytes) -> Tuple[ZipSubtype, str]:
    """Return ``(subtype, problem)`` for ZIP ``data`` without raising.

    ``problem`` is empty for a readable archive; otherwise it describes why
    the archive could not be opened and ``subtype`` is ``UNKNOWN_ZIP``.
    """

    try:
        zf = open_container(data)
    except ContainerError as exc:
        return ZipSubtype.UNKNOWN_ZIP, exc.reason
    with zf:
        return _subtype_of(zf), ""


def _read_entry(zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> bytes | None:
    name = info.filename
    if info.flag_bits & 0x1:
        logger.warning("ZIP entry skipped (encrypted): %s", name)
        return None
    if not zl.is_safe_member_name(name):
        logger.warning("ZIP entry skipped (unsafe path): %s", name)
        return None
    if zl.is_suspicious_member(info):
        logger.warning(
            "ZIP entry skipped (size %d, compressed %d): %s",
            info.file_size,
            info.compress_size,
            name,
        )
        return None
    try:
        return zf.read(info)
    except _READ_ERRORS as exc:
        logger.warning("ZIP entry unreadable %s: %s", name, exc)
        return None


def decompose(data: bytes, subtype: ZipSubtype | None = None) -> DecomposedContainer:
    """Open ``data`` and return the entries holding document text.

    When ``subtype`` is omitted it is detected from the archive directory.
    Entries come back in archive enumeration order.

    Raises :class:`ContainerSkipped` for archives of no known document family
    and :class:`ContainerError` for unreadable archives or when none of the
    expected entries could be read.
    """

    with open_container(data) as zf:
        if subtype is None or subtype is ZipSubtype.UNKNOWN_ZIP:
            subtype = _subtype_of(zf)
        if subtype is ZipSubtype.UNKNOWN_ZIP:
            raise ContainerSkipped(NO_DOCUMENT_ENTRY)

        pattern = _TEXT_ENTRIES[subtype]
        result = DecomposedContainer(subtype)
        for info in zl.iter_members(zf):
            if not pattern.match(info.filename):
                continue
            payload = _read_entry(zf, info)
            if payload is None:
                result.skipped.append(info.filename)
                continue
            result.entries.append(ContainerEntry(info.filename, payload))

    if not result.entries:
        if result.skipped:
            raise ContainerError(
                "no readable document entry (skipped: " + ", ".join(result.skipped) + ")"
            )
        raise ContainerError(f"expected entry missing for {subtype.value}")
    logger.debug(
        "ZIP %s: %d text entries, %d skipped",
        subtype.value,
        len(result.entries),
        len(result.skipped),
    )
    return result
