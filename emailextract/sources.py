"""Collect input files from the paths given on the command line."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List

from emailextract.pipeline import Source
from emailextract.utils.logging_setup import get_logger

logger = get_logger(__name__)

__all__ = ["collect_files", "iter_sources"]


def _walk(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_file():
                yield path


def _log_walk_error(exc: OSError) -> None:
    logger.warning("Cannot list %s: %s", exc.filename, exc.strerror or exc)


def collect_files(paths: Iterable[str | Path], *, recursive: bool = True) -> List[Path]:
    """Return the regular files named by ``paths``, expanding directories.

    Directories are walked recursively (symlinked directories are not
    followed) unless ``recursive`` is false, in which case only their direct
    children are taken. Missing paths are logged and ignored. Each file is
    listed once, in the order it was first reached.
    """

    seen: set[Path] = set()
    files: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            candidates: Iterable[Path] = [path]
        elif path.is_dir():
            if recursive:
                candidates = _walk(path)
            else:
                candidates = sorted(p for p in path.iterdir() if p.is_file())
        else:
            logger.warning("Path does not exist: %s", path)
            continue
        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            files.append(candidate)
    return files


def iter_sources(files: Iterable[Path]) -> Iterator[Source]:
    """Yield ``(identifier, loader)`` pairs; bytes are read by the worker."""

    for path in files:
        yield str(path), path.read_bytes
