"""Write the harvested addresses and per-file reports to disk."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable

from emailextract.models import FileReport

__all__ = ["write_emails", "write_report"]


def _atomic_write(path: str | Path, content: str) -> Path:
    target = Path(path).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}_", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target


def write_emails(emails: Iterable[str], path: str | Path) -> Path:
    """Write ``emails`` sorted, one per line, replacing ``path`` atomically.

    Returns the absolute path that was written.
    """

    return _atomic_write(path, "".join(f"{email}\n" for email in sorted(set(emails))))


def write_report(reports: Iterable[FileReport], path: str | Path) -> Path:
    """Dump one JSON object per file report, in processing order."""

    payload = [report.to_dict() for report in reports]
    return _atomic_write(path, json.dumps(payload, ensure_ascii=False, indent=2) + "\n")
