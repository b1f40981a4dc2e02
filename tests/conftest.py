"""Test configuration and shared fixtures."""

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from emailextract import config


@pytest.fixture(autouse=True)
def _default_settings(monkeypatch):
    """Pin settings so a developer's environment cannot leak into tests."""

    monkeypatch.setattr(config, "SNIFF_BYTES", 8192)
    monkeypatch.setattr(config, "TEXT_DETECT_BYTES", 64 * 1024)
    monkeypatch.setattr(config, "PDF_BACKEND", "auto")
    monkeypatch.setattr(config, "PDF_MAX_PAGES", 0)
    monkeypatch.setattr(config, "ZIP_MAX_FILES", 5000)
    monkeypatch.setattr(config, "ZIP_MAX_TOTAL_UNCOMP_MB", 1024)
    monkeypatch.setattr(config, "ZIP_MAX_MEMBER_MB", 256)
    monkeypatch.setattr(config, "ZIP_RATIO_LIMIT", 1000.0)
    monkeypatch.setattr(config, "PARSE_MAX_WORKERS", 1)
    monkeypatch.setattr(config, "EMAIL_PATTERN", "")
    monkeypatch.setattr(config, "OUTPUT_PATH", "emails.txt")
