"""Central logging configuration helpers."""

from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_CONFIGURED = False


def _ensure_parent(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass


def _level_from_env(default: int = logging.INFO) -> int:
    raw = (os.getenv("EMAILEXTRACT_LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(level: Optional[int] = None) -> None:
    """Configure the root logger once with console and optional file handlers.

    File handlers are only attached when ``EMAILEXTRACT_LOG_DIR`` is set.
    """

    global _CONFIGURED
    if _CONFIGURED:
        if level is not None:
            logging.getLogger().setLevel(level)
        return

    root = logging.getLogger()
    root.setLevel(level if level is not None else _level_from_env())

    fmt = logging.Formatter(_DEFAULT_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    log_dir = (os.getenv("EMAILEXTRACT_LOG_DIR") or "").strip()
    if log_dir:
        base_dir = Path(log_dir).resolve()
        info_log = base_dir / "emailextract_info.log"
        err_log = base_dir / "emailextract_errors.log"
        _ensure_parent(info_log)
        _ensure_parent(err_log)

        info_handler = TimedRotatingFileHandler(
            info_log.as_posix(), when="midnight", backupCount=7, encoding="utf-8"
        )
        info_handler.setLevel(logging.INFO)
        info_handler.setFormatter(fmt)
        root.addHandler(info_handler)

        err_handler = TimedRotatingFileHandler(
            err_log.as_posix(), when="midnight", backupCount=14, encoding="utf-8"
        )
        err_handler.setLevel(logging.ERROR)
        err_handler.setFormatter(fmt)
        root.addHandler(err_handler)

    _CONFIGURED = True


def get_logger(name: str, *, level: Optional[int] = None) -> logging.Logger:
    """Return a named logger; handlers are attached by :func:`setup_logging`."""

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


__all__ = ["get_logger", "setup_logging"]
