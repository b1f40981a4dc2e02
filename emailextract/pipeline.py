"""Per-file pipeline (sniff → dispatch → extract → harvest) and run driver."""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Tuple, Union

from emailextract import config
from emailextract.dispatch import dispatch
from emailextract.harvester import harvest
from emailextract.models import EmailSet, FileClassification, FileReport, Outcome, RunResult
from emailextract.parallel_parse import parallel_map
from emailextract.sniff import classify
from emailextract.utils.errors import (
    ClassificationAmbiguous,
    ContainerSkipped,
    ExtractError,
)
from emailextract.utils.logging_setup import get_logger

logger = get_logger(__name__)

__all__ = ["Source", "process_document", "process_source", "run"]

# Content is either the bytes themselves or a callable reading them lazily
Source = Tuple[str, Union[bytes, Callable[[], bytes]]]

_SKIP_ERRORS = (ClassificationAmbiguous, ContainerSkipped)


def process_document(identifier: str, data: bytes) -> FileReport:
    """Run the whole pipeline for one file and describe the outcome.

    Per-file problems never escape: they are turned into a skipped or failed
    report. Only :class:`~emailextract.utils.errors.PatternEngineFault`
    propagates, because it means every other file would fail the same way.
    """

    classification: Optional[FileClassification] = None
    try:
        classification = classify(data)
        blob = dispatch(classification, data)
    except _SKIP_ERRORS as exc:
        return FileReport.skipped(identifier, exc.reason, classification)
    except ExtractError as exc:
        return FileReport.failed(identifier, exc.reason, classification)
    except Exception as exc:
        logger.exception("Unexpected error while extracting %s", identifier)
        return FileReport.failed(identifier, f"unexpected error: {exc!r}", classification)

    if blob.is_empty():
        logger.debug("No text found in %s (%s)", identifier, classification.label)
    emails = harvest(blob)
    return FileReport.extracted(identifier, classification, emails)


def process_source(source: Source) -> FileReport:
    """Load the content of ``source`` if needed, then process it."""

    identifier, content = source
    if callable(content):
        try:
            content = content()
        except OSError as exc:
            return FileReport.failed(identifier, f"read error: {exc.strerror or exc}")
    return process_document(identifier, content)


def _log_report(report: FileReport) -> None:
    label = report.classification.label if report.classification else "-"
    if report.outcome is Outcome.EXTRACTED:
        logger.info("Extracted %d addresses from %s (%s)", report.count, report.identifier, label)
    elif report.outcome is Outcome.SKIPPED:
        logger.warning("Skipped %s (%s): %s", report.identifier, label, report.reason)
    else:
        logger.error("Failed %s (%s): %s", report.identifier, label, report.reason)


def run(
    sources: Iterable[Source],
    *,
    accumulator: Optional[EmailSet] = None,
    max_workers: Optional[int] = None,
    on_report: Optional[Callable[[FileReport], None]] = None,
) -> RunResult:
    """Process every source and collect the unique addresses.

    ``accumulator`` lets callers merge several runs into one set. Reports are
    returned in input order regardless of ``max_workers``.
    """

    workers = config.PARSE_MAX_WORKERS if max_workers is None else max(1, max_workers)
    result = RunResult(emails=accumulator if accumulator is not None else EmailSet())
    for report in parallel_map(sources, process_source, workers):
        result.emails.update(report.emails)
        result.reports.append(report)
        _log_report(report)
        if on_report is not None:
            on_report(report)
    logger.info("Run finished: %s", result.summary())
    return result
