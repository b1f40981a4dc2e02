"""Collect text nodes from the XML parts of Office and OpenDocument files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Iterable, List, Tuple

from emailextract.models import ContainerEntry, TextBlob
from emailextract.utils.errors import ExtractionError
from emailextract.utils.logging_setup import get_logger

logger = get_logger(__name__)

__all__ = ["extract_xml", "xml_to_text"]

# Local names (namespace stripped) of elements that end a block of text.
# Covers WordprocessingML/DrawingML paragraphs and breaks, SpreadsheetML
# cells and shared strings, and ODF paragraphs, headings, cells and spaces.
_BREAK_ELEMENTS = frozenset(
    {
        "p",
        "h",
        "br",
        "cr",
        "tab",
        "s",
        "line-break",
        "si",
        "c",
        "tc",
        "table-cell",
        "list-item",
        "note",
    }
)

_FEED_CHUNK = 64 * 1024


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _refuse_doctype(data: bytes) -> None:
    # Document parts never declare a DTD; entity expansion is an attack vector
    head = data[:4096].lower()
    if b"<!doctype" in head or b"<!entity" in head:
        raise ExtractionError("XML part declares a DTD")


def xml_to_text(data: bytes, name: str = "") -> str:
    """Return the concatenated text content of one XML document.

    Attributes, comments and processing instructions are ignored. Text of a
    malformed document is kept up to the point where parsing failed.
    """

    _refuse_doctype(data)
    root = _parse_partial(data, name)
    if root is None:
        return ""
    parts: List[str] = []
    stack: List[Tuple[ET.Element, bool]] = [(root, False)]
    while stack:
        elem, closed = stack.pop()
        if closed:
            if isinstance(elem.tag, str) and _local(elem.tag) in _BREAK_ELEMENTS:
                parts.append("\n")
            if elem.tail and elem is not root:
                parts.append(elem.tail)
            continue
        if elem.text:
            parts.append(elem.text)
        stack.append((elem, True))
        stack.extend((child, False) for child in reversed(elem))
    return "".join(parts)


def _parse_partial(data: bytes, name: str) -> ET.Element | None:
    """Parse ``data`` and return its root, even when parsing stops early.

    The pull parser builds the tree as it goes, so after a syntax error the
    root still holds every element read before the damaged spot.
    """

    parser = ET.XMLPullParser(events=("start",))
    root: ET.Element | None = None
    try:
        for start in range(0, len(data), _FEED_CHUNK):
            parser.feed(data[start : start + _FEED_CHUNK])
            if root is None:
                root = _first_element(parser)
        # Syntax errors are queued as events; draining re-raises them here
        for _event in parser.read_events():
            pass
        parser.close()
    except ET.ParseError as exc:
        logger.warning("Malformed XML in %s: %s", name or "<entry>", exc)
    return root


def _first_element(parser: ET.XMLPullParser) -> ET.Element | None:
    for _event, elem in parser.read_events():
        return elem
    return None


def extract_xml(entries: Iterable[ContainerEntry]) -> TextBlob:
    """Return one fragment per entry, in the order the entries were given."""

    blob = TextBlob()
    for entry in entries:
        blob.append(xml_to_text(entry.data, entry.name))
    return blob
