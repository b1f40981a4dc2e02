"""Quick ZIP archive validation before reading any member."""

from __future__ import annotations

import posixpath
import zipfile
from typing import Iterator, Tuple

from emailextract import config

__all__ = [
    "is_safe_member_name",
    "is_suspicious_member",
    "iter_members",
    "validate_zip_safely",
]

_MB = 1024 * 1024


def iter_members(zf: zipfile.ZipFile) -> Iterator[zipfile.ZipInfo]:
    """Yield non-directory members from ``zf`` in directory order."""

    for info in zf.infolist():
        if info.is_dir():
            continue
        yield info


def is_safe_member_name(name: str) -> bool:
    """Reject absolute names and names that climb out of the archive root."""

    normalized = name.replace("\\", "/")
    if normalized.startswith("/"):
        return False
    return ".." not in posixpath.normpath(normalized).split("/")


def is_suspicious_member(info: zipfile.ZipInfo) -> bool:
    """Detect members too large to read or compressed at an absurd ratio."""

    comp = max(info.compress_size or 1, 1)
    uncomp = max(info.file_size or 1, 1)
    ratio = float(uncomp) / float(comp)
    return ratio > config.ZIP_RATIO_LIMIT or uncomp > config.ZIP_MAX_MEMBER_MB * _MB


def validate_zip_safely(zf: zipfile.ZipFile) -> Tuple[bool, str | None]:
    """Lightweight validation of an open archive before deep parsing.

    Checks that the number of members does not exceed ``ZIP_MAX_FILES`` and
    that the declared total uncompressed size stays under
    ``ZIP_MAX_TOTAL_UNCOMP_MB``. Returns ``(ok, reason)`` where ``reason`` is
    provided only when validation fails.
    """

    total_uncompressed = 0
    files_cnt = 0
    for info in iter_members(zf):
        files_cnt += 1
        if files_cnt > config.ZIP_MAX_FILES:
            return False, f"too many members (> {config.ZIP_MAX_FILES})"
        total_uncompressed += info.file_size or 0
        if total_uncompressed > config.ZIP_MAX_TOTAL_UNCOMP_MB * _MB:
            return False, f"uncompressed size exceeds {config.ZIP_MAX_TOTAL_UNCOMP_MB} MB"
    return True, None
