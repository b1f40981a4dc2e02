"""Data models shared across the extraction pipeline."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator


class FileKind(str, Enum):
    """Outer content type derived from the leading bytes of a file."""

    PLAIN_TEXT = "plain_text"
    PDF = "pdf"
    ZIP_CONTAINER = "zip_container"
    UNRECOGNIZED = "unrecognized"


class ZipSubtype(str, Enum):
    """Document family stored inside a ZIP container."""

    DOCX = "docx"
    XLSX = "xlsx"
    PPTX = "pptx"
    ODT = "odt"
    ODS = "ods"
    ODP = "odp"
    UNKNOWN_ZIP = "unknown_zip"


@dataclass(frozen=True, slots=True)
class FileClassification:
    """Immutable classification of a single input file.

    ``subtype`` is set exactly when ``kind`` is :attr:`FileKind.ZIP_CONTAINER`.
    ``detail`` carries a short human readable hint for unrecognised input
    (``"empty file"``, ``"PNG signature"`` …).
    """

    kind: FileKind
    subtype: ZipSubtype | None = None
    detail: str = ""

    def __post_init__(self) -> None:
        if (self.kind is FileKind.ZIP_CONTAINER) != (self.subtype is not None):
            raise ValueError("subtype must be set only for ZIP containers")

    @classmethod
    def plain_text(cls) -> "FileClassification":
        return cls(FileKind.PLAIN_TEXT)

    @classmethod
    def pdf(cls) -> "FileClassification":
        return cls(FileKind.PDF)

    @classmethod
    def zip_container(cls, subtype: ZipSubtype) -> "FileClassification":
        return cls(FileKind.ZIP_CONTAINER, subtype)

    @classmethod
    def unrecognized(cls, detail: str = "") -> "FileClassification":
        return cls(FileKind.UNRECOGNIZED, detail=detail)

    @property
    def label(self) -> str:
        if self.subtype is not None:
            return f"{self.kind.value}:{self.subtype.value}"
        return self.kind.value

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True, slots=True)
class ContainerEntry:
    """One named file inside a ZIP archive."""

    name: str
    data: bytes


@dataclass(slots=True)
class TextBlob:
    """Ordered text fragments extracted from one input file."""

    fragments: list[str] = field(default_factory=list)

    def append(self, fragment: str) -> None:
        self.fragments.append(fragment or "")

    def extend(self, fragments: Iterable[str]) -> None:
        for fragment in fragments:
            self.append(fragment)

    def __iter__(self) -> Iterator[str]:
        return iter(self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)

    def is_empty(self) -> bool:
        return not any(fragment.strip() for fragment in self.fragments)


class EmailSet:
    """Run-wide set of unique addresses.

    Addresses are stored lower-cased, so two spellings that differ only in
    case collapse to one entry. Insertion is guarded by a lock; merging is a
    plain set union and may happen in any order.
    """

    __slots__ = ("_items", "_lock")

    def __init__(self, emails: Iterable[str] = ()) -> None:
        self._items: set[str] = set()
        self._lock = threading.Lock()
        self.update(emails)

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def add(self, email: str) -> bool:
        """Insert ``email``; return ``True`` when it was not present yet."""

        key = self._key(email)
        if not key:
            return False
        with self._lock:
            if key in self._items:
                return False
            self._items.add(key)
            return True

    def update(self, emails: Iterable[str]) -> int:
        """Insert every address from ``emails`` and return how many were new."""

        keys = {self._key(e) for e in emails}
        keys.discard("")
        with self._lock:
            before = len(self._items)
            self._items |= keys
            return len(self._items) - before

    def merge(self, other: "EmailSet") -> "EmailSet":
        """Union ``other`` into this set in place and return ``self``."""

        if other is self:
            return self
        self.update(other.snapshot())
        return self

    @classmethod
    def union(cls, *sets: "EmailSet") -> "EmailSet":
        """Return a new set holding the union of ``sets``."""

        result = cls()
        for item in sets:
            result.merge(item)
        return result

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._items)

    def sorted(self) -> list[str]:
        return sorted(self.snapshot())

    def __contains__(self, email: object) -> bool:
        if not isinstance(email, str):
            return False
        with self._lock:
            return self._key(email) in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EmailSet):
            return self.snapshot() == other.snapshot()
        if isinstance(other, (set, frozenset)):
            return self.snapshot() == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"EmailSet({self.sorted()!r})"


class Outcome(str, Enum):
    EXTRACTED = "extracted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class FileReport:
    """Diagnostic event describing what happened to a single input file.

    Parameters
    ----------
    identifier:
        Caller supplied name of the file (usually its path).
    outcome:
        :class:`Outcome` of the per-file pipeline.
    classification:
        Classification computed for the file, if sniffing got that far.
    count:
        Number of distinct addresses found in this file.
    reason:
        Why the file was skipped or failed; empty on success.
    emails:
        The addresses found in this file, merged into the run set by the driver.
    """

    identifier: str
    outcome: Outcome
    classification: FileClassification | None = None
    count: int = 0
    reason: str = ""
    emails: frozenset[str] = frozenset()

    @classmethod
    def extracted(
        cls, identifier: str, classification: FileClassification, emails: Iterable[str]
    ) -> "FileReport":
        found = frozenset(emails)
        return cls(identifier, Outcome.EXTRACTED, classification, len(found), "", found)

    @classmethod
    def skipped(
        cls, identifier: str, reason: str, classification: FileClassification | None = None
    ) -> "FileReport":
        return cls(identifier, Outcome.SKIPPED, classification, 0, reason)

    @classmethod
    def failed(
        cls, identifier: str, reason: str, classification: FileClassification | None = None
    ) -> "FileReport":
        return cls(identifier, Outcome.FAILED, classification, 0, reason)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the report into a dictionary safe for JSON output."""

        return {
            "identifier": self.identifier,
            "outcome": self.outcome.value,
            "classification": self.classification.label if self.classification else None,
            "count": self.count,
            "reason": self.reason,
        }


@dataclass(slots=True)
class RunResult:
    """Everything a run produced: the unique addresses plus per-file reports."""

    emails: EmailSet = field(default_factory=EmailSet)
    reports: list[FileReport] = field(default_factory=list)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for report in self.reports if report.outcome is outcome)

    @property
    def extracted(self) -> int:
        return self._count(Outcome.EXTRACTED)

    @property
    def skipped(self) -> int:
        return self._count(Outcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(Outcome.FAILED)

    def summary(self) -> str:
        return (
            f"files={len(self.reports)} extracted={self.extracted} "
            f"skipped={self.skipped} failed={self.failed} emails={len(self.emails)}"
        )


__all__ = [
    "ContainerEntry",
    "EmailSet",
    "FileClassification",
    "FileKind",
    "FileReport",
    "Outcome",
    "RunResult",
    "TextBlob",
    "ZipSubtype",
]
