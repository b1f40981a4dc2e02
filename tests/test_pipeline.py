"""End-to-end behaviour of the per-file pipeline and the run driver."""

from __future__ import annotations

import io
import zipfile

import pytest

import emailextract.pipeline as pipeline
from emailextract import config
from emailextract.dispatch import EXTRACTORS
from emailextract.extraction_zip import NO_DOCUMENT_ENTRY
from emailextract.models import EmailSet, FileClassification, FileKind, Outcome, ZipSubtype
from emailextract.utils.errors import PatternEngineFault
from tests.util_factories import make_docx, make_pdf, make_xlsx, make_zip


def test_text_scenario():
    report = pipeline.process_document(
        "dump.txt", b"contact: Jane.Doe@Example.COM or jane.doe@example.com!"
    )
    assert report.outcome is Outcome.EXTRACTED
    assert report.emails == {"jane.doe@example.com"}
    assert report.count == 1


def test_pdf_with_image_only_page():
    report = pipeline.process_document("scan.pdf", make_pdf(["a@b.co", ""]))
    assert report.outcome is Outcome.EXTRACTED
    assert report.count == 1
    assert report.emails == {"a@b.co"}


def test_zip_without_document_entries_is_skipped():
    report = pipeline.process_document("bundle.zip", make_zip({"list.txt": "a@b.com"}))
    assert report.outcome is Outcome.SKIPPED
    assert report.reason == NO_DOCUMENT_ENTRY
    assert report.classification.subtype is ZipSubtype.UNKNOWN_ZIP
    assert report.emails == frozenset()


def test_odt_content_scenario():
    data = make_zip({"content.xml": "<text>x@y.io</text>"})
    assert data.startswith(b"PK\x03\x04")
    report = pipeline.process_document("doc.odt", data)
    assert report.classification == FileClassification.zip_container(ZipSubtype.ODT)
    assert report.emails == {"x@y.io"}


def test_empty_file_is_skipped():
    report = pipeline.process_document("empty", b"")
    assert report.outcome is Outcome.SKIPPED
    assert report.classification.kind is FileKind.UNRECOGNIZED


def test_unexpected_extractor_error_is_contained(monkeypatch):
    def explode(_classification, _data):
        raise KeyError("library bug")

    monkeypatch.setitem(EXTRACTORS, FileKind.PLAIN_TEXT, explode)
    report = pipeline.process_document("a.txt", b"a@b.com")
    assert report.outcome is Outcome.FAILED
    assert "library bug" in report.reason


def test_corrupt_zip_does_not_stop_the_run():
    docx = make_docx(["first@example.com"])
    sources = [
        ("good.docx", docx),
        ("broken.docx", docx[: len(docx) // 2]),
        ("later.xlsx", make_xlsx([["later@example.com"]])),
        ("notes.txt", b"LATER@example.com, last@example.com"),
    ]
    result = pipeline.run(sources)
    outcomes = [r.outcome for r in result.reports]
    assert outcomes == [Outcome.EXTRACTED, Outcome.FAILED, Outcome.EXTRACTED, Outcome.EXTRACTED]
    assert result.emails == {"first@example.com", "later@example.com", "last@example.com"}
    assert result.reports[1].reason.startswith("corrupt archive")


def test_failed_read_is_reported():
    def unreadable() -> bytes:
        raise PermissionError(13, "Permission denied")

    result = pipeline.run([("secret.txt", unreadable), ("ok.txt", lambda: b"ok@example.com")])
    assert [r.outcome for r in result.reports] == [Outcome.FAILED, Outcome.EXTRACTED]
    assert result.reports[0].reason == "read error: Permission denied"


def test_parallel_run_matches_sequential():
    sources = [(f"f{idx}.txt", f"user{idx % 7}@Example.com".encode()) for idx in range(40)]
    sequential = pipeline.run(sources, max_workers=1)
    parallel = pipeline.run(sources, max_workers=4)
    assert sequential.emails == parallel.emails
    assert [r.identifier for r in parallel.reports] == [s[0] for s in sources]
    assert len(parallel.emails) == 7


def test_accumulator_spans_runs():
    acc = EmailSet()
    pipeline.run([("a", b"a@x.io")], accumulator=acc)
    result = pipeline.run([("b", b"b@x.io A@X.IO")], accumulator=acc)
    assert result.emails is acc
    assert acc == {"a@x.io", "b@x.io"}


def test_on_report_callback():
    seen = []
    pipeline.run([("a", b"a@x.io"), ("b", b"")], on_report=seen.append)
    assert [r.identifier for r in seen] == ["a", "b"]


def test_pattern_fault_aborts_run(monkeypatch):
    monkeypatch.setattr(config, "EMAIL_PATTERN", "(unclosed")
    with pytest.raises(PatternEngineFault):
        pipeline.run([("a.txt", b"a@b.com"), ("b.txt", b"c@d.com")])


def test_classification_is_pure():
    data = make_pdf(["x@y.io"])
    first = pipeline.process_document("one.pdf", data)
    second = pipeline.process_document("renamed.txt", data)
    assert first.classification == second.classification
    assert first.emails == second.emails


def test_dump_with_stray_nul_is_harvested():
    data = b"user1@dump.example:pass\n" * 50 + b"\x00" + b"user2@dump.example:pass\n" * 50
    report = pipeline.process_document("breach.txt", data)
    assert report.outcome is Outcome.EXTRACTED
    assert report.emails == {"user1@dump.example", "user2@dump.example"}


def test_text_mentioning_pdf_header_is_harvested():
    data = b"log: upload starts with %PDF-1.4 header; contact admin@site.example\n"
    report = pipeline.process_document("upload.log", data)
    assert report.classification == FileClassification.plain_text()
    assert report.emails == {"admin@site.example"}


def test_zip_holding_a_pdf_is_skipped():
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_STORED) as zf:
        zf.writestr("invoice.pdf", make_pdf(["in@zip.example"]))
    report = pipeline.process_document("bundle.zip", buf.getvalue())
    assert report.outcome is Outcome.SKIPPED
    assert report.reason == NO_DOCUMENT_ENTRY
    assert report.emails == frozenset()
