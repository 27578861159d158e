"""
Property-based tests for content-based format detection.

Property: Classification is derived from content; names and MIME types
only matter when the content is inconclusive, and sniffing never raises.
"""

import io
import zipfile

import pytest
from hypothesis import given, settings, strategies as st

from relay_service.processing.sniff import DetectedFormat, FormatKind, looks_like_pdf, sniff

HINTS = st.sampled_from([
    None, "", "photo.jpg", "scan.png", "report.docx", "notes.txt",
    "image/png", "image/jpeg", "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/pdf", "report.pdf",
])

SIGNATURES = {
    b"\x89PNG\r\n\x1a\n" + b"\x00" * 16: "png",
    b"\xff\xd8\xff\xe0" + b"\x00" * 16: "jpeg",
    b"GIF89a" + b"\x00" * 16: "gif",
    b"GIF87a" + b"\x00" * 16: "gif",
    b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 8: "webp",
    b"II*\x00" + b"\x00" * 16: "tiff",
    b"MM\x00*" + b"\x00" * 16: "tiff",
    b"BM\x36\x00\x0c\x00\x00\x00\x00\x00\x36\x00\x00\x00": "bmp",
}


@given(body=st.binary(max_size=256), hint=HINTS)
@settings(max_examples=200)
def test_pdf_signature_wins_over_any_hint(body, hint):
    """
    Property: Any buffer starting with %PDF is a PDF, whatever the sender claimed.
    """
    detected = sniff(b"%PDF" + body, hint)
    assert detected.kind is FormatKind.PDF
    assert detected.from_hint is False


@given(data=st.binary(max_size=512), hint=st.one_of(st.none(), st.text(max_size=40)))
@settings(max_examples=300)
def test_sniff_never_raises(data, hint):
    """
    Property: Arbitrary (malformed, truncated) input always yields a DetectedFormat.
    """
    detected = sniff(data, hint)
    assert isinstance(detected, DetectedFormat)


@pytest.mark.parametrize("data,subtype", list(SIGNATURES.items()))
def test_image_signatures(data, subtype):
    detected = sniff(data, "document.pdf")
    assert detected.kind is FormatKind.IMAGE
    assert detected.subtype == subtype
    assert detected.is_image


def test_real_png_is_image(make_png):
    assert sniff(make_png(), "report.pdf").kind is FormatKind.IMAGE


def test_docx_container_detected_without_hint(make_docx):
    detected = sniff(make_docx("hello"), None)
    assert detected.kind is FormatKind.WORD_DOCUMENT
    assert detected.from_hint is False


def test_docx_content_wins_over_pdf_hint(make_docx):
    assert sniff(make_docx("hello"), "application/pdf").kind is FormatKind.WORD_DOCUMENT


def test_zip_without_word_part_is_unknown():
    out = io.BytesIO()
    with zipfile.ZipFile(out, "w") as zf:
        zf.writestr("xl/workbook.xml", "<workbook/>")
    assert sniff(out.getvalue()).kind is FormatKind.UNKNOWN


def test_truncated_zip_is_unknown():
    assert sniff(b"PK\x03\x04\x14\x00").kind is FormatKind.UNKNOWN


def test_truncated_png_signature_is_unknown():
    assert sniff(b"\x89PN").kind is FormatKind.UNKNOWN


def test_empty_buffer_is_unknown():
    assert sniff(b"").kind is FormatKind.UNKNOWN
    assert sniff(None).kind is FormatKind.UNKNOWN


@pytest.mark.parametrize("hint", ["scan.PDF", "application/pdf", "Application/PDF; charset=binary"])
def test_pdf_hint_breaks_tie_for_unknown_content(hint):
    detected = sniff(b"plain words", hint)
    assert detected.kind is FormatKind.PDF
    assert detected.from_hint is True


def test_docx_hint_breaks_tie_for_unknown_content():
    detected = sniff(b"plain words", None, "letter.DOCX")
    assert detected.kind is FormatKind.WORD_DOCUMENT
    assert detected.from_hint is True


@pytest.mark.parametrize("hint", ["photo.jpg", "image/png", "notes.txt", "letter.doc"])
def test_other_hints_do_not_classify(hint):
    assert sniff(b"plain words", hint).kind is FormatKind.UNKNOWN


@pytest.mark.parametrize("data", [
    b"\r\n\r\n%PDF-1.4\n...",
    b"\xef\xbb\xbf%PDF-1.7\n...",
])
def test_pdf_header_after_whitespace_or_bom(data):
    assert looks_like_pdf(data)
    assert sniff(data).kind is FormatKind.PDF


def test_text_mentioning_pdf_header_is_not_pdf():
    data = b"Notes: the file header is %PDF-1.7 followed by objects"
    assert not looks_like_pdf(data)
    assert sniff(data).kind is FormatKind.UNKNOWN
    assert sniff(data, "text/plain", "notes.txt").kind is FormatKind.UNKNOWN


def test_looks_like_pdf_rejects_short_buffers():
    assert not looks_like_pdf(b"%PD")
    assert not looks_like_pdf(b"")
