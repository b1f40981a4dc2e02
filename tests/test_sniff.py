import io
import zipfile

import pytest

from emailextract import config
from emailextract.models import FileClassification, FileKind, ZipSubtype
from emailextract.sniff import classify, looks_like_text, sniff
from tests.util_factories import (
    ODP_MIMETYPE,
    ODS_MIMETYPE,
    make_docx,
    make_odf,
    make_pdf,
    make_pptx,
    make_xlsx,
    make_zip,
    odf_content,
)


@pytest.mark.parametrize(
    "prefix, kind",
    [
        (b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n", FileKind.PDF),
        (b"\x00\x00\x00\x00\x1a\x1a\x1a\x1a%PDF-1.4\n", FileKind.PDF),
        (b"garbage before header\n%PDF-1.4\n", FileKind.PLAIN_TEXT),
        (b"PK\x03\x04\x14\x00\x00\x00", FileKind.ZIP_CONTAINER),
        (b"PK\x05\x06" + b"\x00" * 18, FileKind.ZIP_CONTAINER),
        (b"name,email\njohn,john@example.com\n", FileKind.PLAIN_TEXT),
        (b"\xef\xbb\xbfhello", FileKind.PLAIN_TEXT),
        (b"\xff\xfeh\x00i\x00", FileKind.PLAIN_TEXT),
        (b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR", FileKind.UNRECOGNIZED),
        (b"\x7fELF\x02\x01\x01\x00", FileKind.UNRECOGNIZED),
        (b"\x00\x01\x02\x03\x04\x05", FileKind.UNRECOGNIZED),
        (b"", FileKind.UNRECOGNIZED),
    ],
)
def test_sniff_kinds(prefix, kind):
    assert sniff(prefix).kind is kind


def test_zip_prefix_has_pending_subtype():
    assert sniff(b"PK\x03\x04rest") == FileClassification.zip_container(ZipSubtype.UNKNOWN_ZIP)


def test_empty_file_reason():
    result = sniff(b"")
    assert result.kind is FileKind.UNRECOGNIZED
    assert result.detail == "empty file"


def test_short_signature_does_not_hide_text():
    # "BM" and "MZ" are BMP/PE magics but also start ordinary words
    assert sniff(b"BMW dealers: sales@bmw.example.com\n").kind is FileKind.PLAIN_TEXT
    assert sniff(b"MZ\x90\x00\x03\x00\x00\x00").kind is FileKind.UNRECOGNIZED


def test_signature_reported_in_detail():
    assert sniff(b"GIF89a\x01\x00").detail == "GIF signature"


def test_extension_is_irrelevant():
    # Same bytes always classify the same, whatever the caller calls them
    pdf = make_pdf(["a@b.co"])
    assert sniff(pdf) == sniff(bytes(pdf))
    assert classify(pdf) == classify(pdf) == FileClassification.pdf()


def test_only_prefix_is_read(monkeypatch):
    monkeypatch.setattr(config, "SNIFF_BYTES", 16)
    # A NUL byte beyond the sniff window cannot influence the result
    assert sniff(b"plain text here!" + b"\x00" * 64).kind is FileKind.PLAIN_TEXT


def test_looks_like_text():
    assert looks_like_text(b"hello\tworld\r\n")
    assert not looks_like_text(b"a\x00b")
    assert looks_like_text(b"x" * 40 + b"\x00" + b"y" * 40)
    assert not looks_like_text(bytes(range(1, 32)) * 4)


@pytest.mark.parametrize(
    "data, subtype",
    [
        (make_docx(["hello"]), ZipSubtype.DOCX),
        (make_xlsx([["hello"]]), ZipSubtype.XLSX),
        (make_pptx([["hello"]]), ZipSubtype.PPTX),
        (make_odf(odf_content("hello")), ZipSubtype.ODT),
        (make_odf(odf_content("hello"), mimetype=ODS_MIMETYPE), ZipSubtype.ODS),
        (make_odf(odf_content("hello"), mimetype=ODP_MIMETYPE), ZipSubtype.ODP),
        (make_odf(odf_content("hello"), mimetype=None), ZipSubtype.ODT),
        (make_zip({"readme.txt": "a@b.com"}), ZipSubtype.UNKNOWN_ZIP),
    ],
)
def test_classify_refines_zip_subtype(data, subtype):
    result = classify(data)
    assert result.kind is FileKind.ZIP_CONTAINER
    assert result.subtype is subtype


def test_classify_corrupt_zip_keeps_reason():
    data = make_docx(["x"])[:-30]
    result = classify(data)
    assert result.subtype is ZipSubtype.UNKNOWN_ZIP
    assert result.detail.startswith("corrupt archive")


def test_classification_invariant():
    with pytest.raises(ValueError):
        FileClassification(FileKind.PDF, ZipSubtype.DOCX)
    with pytest.raises(ValueError):
        FileClassification(FileKind.ZIP_CONTAINER)


def test_zip_magic_wins_over_embedded_pdf():
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_STORED) as zf:
        zf.writestr("invoice.pdf", make_pdf(["in@zip.example"]))
    data = buf.getvalue()
    assert b"%PDF-" in data[:1024]
    assert classify(data) == FileClassification.zip_container(ZipSubtype.UNKNOWN_ZIP)


def test_text_quoting_pdf_header_stays_text():
    data = b"log: upload starts with %PDF-1.4 header; contact admin@site.example\n"
    assert sniff(data).kind is FileKind.PLAIN_TEXT


def test_stray_nul_in_dump_is_text():
    data = b"user1@dump.example:pass\n" * 50 + b"\x00" + b"user2@dump.example:pass\n" * 50
    assert sniff(data).kind is FileKind.PLAIN_TEXT
