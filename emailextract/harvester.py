"""Find address-shaped substrings in extracted text.

The pattern deliberately overmatches: anything shaped like
``local@domain.tld`` is collected, no RFC 5322 validation is attempted.
See https://www.regular-expressions.info/email.html for the trade-offs.
"""

from __future__ import annotations

import re
from typing import Iterable, Pattern, Set

from emailextract import config
from emailextract.models import EmailSet, TextBlob
from emailextract.utils.errors import PatternEngineFault

__all__ = [
    "DEFAULT_EMAIL_PATTERN",
    "compile_pattern",
    "find_emails",
    "harvest",
    "harvest_into",
]

DEFAULT_EMAIL_PATTERN = r"\b[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\b"


def compile_pattern(source: str) -> Pattern[str]:
    """Compile ``source``; a broken pattern is a configuration defect."""

    try:
        return re.compile(source)
    except (re.error, TypeError, RecursionError) as exc:
        raise PatternEngineFault(f"email pattern does not compile: {exc}") from exc


_PATTERN_CACHE: dict[str, Pattern[str]] = {}


def _active_pattern() -> Pattern[str]:
    source = config.EMAIL_PATTERN or DEFAULT_EMAIL_PATTERN
    pattern = _PATTERN_CACHE.get(source)
    if pattern is None:
        pattern = compile_pattern(source)
        _PATTERN_CACHE[source] = pattern
    return pattern


def find_emails(text: str, pattern: Pattern[str] | None = None) -> Set[str]:
    """Return every non-overlapping match in ``text``, lower-cased."""

    if not text or "@" not in text:
        return set()
    regex = pattern if pattern is not None else _active_pattern()
    try:
        return {match.group(0).lower() for match in regex.finditer(text)}
    except (re.error, RecursionError, MemoryError) as exc:
        raise PatternEngineFault(f"email pattern failed while matching: {exc}") from exc


def harvest(blob: TextBlob | Iterable[str]) -> Set[str]:
    """Collect the unique addresses found in every fragment of ``blob``."""

    pattern = _active_pattern()
    found: Set[str] = set()
    for fragment in blob:
        found |= find_emails(fragment, pattern)
    return found


def harvest_into(blob: TextBlob | Iterable[str], accumulator: EmailSet) -> int:
    """Harvest ``blob`` into ``accumulator``; return the distinct count found."""

    found = harvest(blob)
    accumulator.update(found)
    return len(found)
