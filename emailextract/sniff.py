"""Identify a file's content type from its leading bytes.

The file name is never consulted: extensions are untrusted metadata. See
https://en.wikipedia.org/wiki/List_of_file_signatures for the signatures.
Plain text has no magic number, so it is recognised by elimination plus a
cheap "does this look like text" check on the prefix.
"""

from __future__ import annotations

from emailextract import config
from emailextract.extraction_zip import probe_container
from emailextract.models import FileClassification, FileKind, ZipSubtype

__all__ = ["sniff", "classify", "looks_like_text"]

PDF_MAGIC = b"%PDF-"
# Readers accept the header anywhere in the first KiB of a binary prefix
PDF_SEARCH_WINDOW = 1024
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")

_BOMS = (
    b"\xef\xbb\xbf",
    b"\xff\xfe\x00\x00",
    b"\x00\x00\xfe\xff",
    b"\xff\xfe",
    b"\xfe\xff",
)

# (offset, signature, name) for binary formats that carry no extractable text
_BINARY_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\x89PNG\r\n\x1a\n", "PNG"),
    (0, b"\xff\xd8\xff", "JPEG"),
    (0, b"GIF87a", "GIF"),
    (0, b"GIF89a", "GIF"),
    (0, b"BM", "BMP"),
    (0, b"II*\x00", "TIFF"),
    (0, b"MM\x00*", "TIFF"),
    (0, b"RIFF", "RIFF"),
    (0, b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "OLE2 compound document"),
    (0, b"\x1f\x8b", "gzip"),
    (0, b"BZh", "bzip2"),
    (0, b"\xfd7zXZ\x00", "xz"),
    (0, b"7z\xbc\xaf\x27\x1c", "7z"),
    (0, b"Rar!\x1a\x07", "RAR"),
    (0, b"\x7fELF", "ELF"),
    (0, b"MZ", "PE executable"),
    (0, b"\xcf\xfa\xed\xfe", "Mach-O"),
    (0, b"\xce\xfa\xed\xfe", "Mach-O"),
    (0, b"\xca\xfe\xba\xbe", "Java class / Mach-O fat"),
    (0, b"SQLite format 3\x00", "SQLite"),
    (0, b"ID3", "MP3"),
    (0, b"OggS", "Ogg"),
    (0, b"fLaC", "FLAC"),
    (4, b"ftyp", "ISO media"),
    (0, b"\x00asm", "WebAssembly"),
)

_STRONG_SIGNATURE_LEN = 4

# Share of C0 control bytes (NUL counts, whitespace not) allowed in text
_MAX_CONTROL_RATIO = 0.10
_TEXT_CONTROLS = frozenset(b"\t\n\r\f\v\x1b")


def _binary_signature(prefix: bytes) -> tuple[str | None, bool]:
    """Return the matched format name and whether the match is decisive.

    Signatures shorter than four bytes ("BM", "MZ", …) also start ordinary
    words, so they only count when the prefix does not read as text.
    """

    for offset, magic, name in _BINARY_SIGNATURES:
        if prefix[offset : offset + len(magic)] == magic:
            return name, len(magic) >= _STRONG_SIGNATURE_LEN
    return None, False


def looks_like_text(prefix: bytes) -> bool:
    """Return ``True`` when ``prefix`` plausibly starts a text file."""

    if prefix.startswith(_BOMS):
        return True
    controls = sum(1 for b in prefix if b < 0x20 and b not in _TEXT_CONTROLS)
    return controls <= len(prefix) * _MAX_CONTROL_RATIO


def sniff(prefix: bytes) -> FileClassification:
    """Classify a file from (at most) its first ``SNIFF_BYTES`` bytes.

    ZIP files come back as ``ZipContainer(UnknownZip)``: the document family
    lives in the archive directory, which :func:`classify` inspects.
    """

    head = bytes(prefix[: config.SNIFF_BYTES])
    if not head:
        return FileClassification.unrecognized("empty file")
    if head.startswith(ZIP_MAGICS):
        return FileClassification.zip_container(ZipSubtype.UNKNOWN_ZIP)
    if head.startswith(PDF_MAGIC):
        return FileClassification.pdf()
    text_like = looks_like_text(head)
    # A text file merely quoting the header is still text
    if not text_like and PDF_MAGIC in head[:PDF_SEARCH_WINDOW]:
        return FileClassification.pdf()
    # BOM-prefixed text must win over two-byte signatures such as "MZ"
    if head.startswith(_BOMS):
        return FileClassification.plain_text()
    name, strong = _binary_signature(head)
    if name is not None and (strong or not text_like):
        return FileClassification.unrecognized(f"{name} signature")
    if text_like:
        return FileClassification.plain_text()
    return FileClassification.unrecognized("binary content")


def classify(data: bytes) -> FileClassification:
    """Classify a whole file, refining ZIP containers by their directory.

    An archive whose directory cannot be read stays ``UnknownZip`` and keeps
    the reason in ``detail``.
    """

    outer = sniff(data)
    if outer.kind is not FileKind.ZIP_CONTAINER:
        return outer
    subtype, problem = probe_container(data)
    return FileClassification(FileKind.ZIP_CONTAINER, subtype, detail=problem)
