"""
Content-based format detection.

Classifies a byte buffer by its signature, ignoring whatever name or MIME
type the sender claimed. Names and MIME types are only consulted when the
content itself is inconclusive.
"""

import io
import zipfile
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class FormatKind(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    WORD_DOCUMENT = "word_document"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DetectedFormat:
    """Result of sniffing a buffer."""
    kind: FormatKind
    subtype: Optional[str] = None
    from_hint: bool = False

    @property
    def is_image(self) -> bool:
        return self.kind is FormatKind.IMAGE


UNKNOWN = DetectedFormat(FormatKind.UNKNOWN)

# (offset, signature, subtype); checked in order
_IMAGE_SIGNATURES: Tuple[Tuple[int, bytes, str], ...] = (
    (0, b"\x89PNG\r\n\x1a\n", "png"),
    (0, b"\xff\xd8\xff", "jpeg"),
    (0, b"GIF87a", "gif"),
    (0, b"GIF89a", "gif"),
    (0, b"II*\x00", "tiff"),
    (0, b"MM\x00*", "tiff"),
)

_PDF_SIGNATURE = b"%PDF"
_UTF8_BOM = b"\xef\xbb\xbf"
_ZIP_SIGNATURE = b"PK\x03\x04"
_DOCX_MARKER = "word/document.xml"


def _sniff_image(buffer: bytes) -> Optional[str]:
    for offset, signature, subtype in _IMAGE_SIGNATURES:
        if buffer[offset:offset + len(signature)] == signature:
            return subtype
    if len(buffer) >= 12 and buffer[:4] == b"RIFF" and buffer[8:12] == b"WEBP":
        return "webp"
    # BMP: "BM" followed by a 4-byte file size and 4 reserved zero bytes
    if len(buffer) >= 14 and buffer[:2] == b"BM" and buffer[6:10] == b"\x00\x00\x00\x00":
        return "bmp"
    return None


def _is_docx_container(buffer: bytes) -> bool:
    try:
        with zipfile.ZipFile(io.BytesIO(buffer)) as zf:
            return _DOCX_MARKER in zf.namelist()
    except (zipfile.BadZipFile, OSError, ValueError, EOFError):
        return False


def looks_like_pdf(buffer: bytes) -> bool:
    """Check whether a buffer starts with %PDF, allowing a BOM or leading whitespace."""
    if not buffer or len(buffer) < len(_PDF_SIGNATURE):
        return False
    head = buffer[len(_UTF8_BOM):] if buffer.startswith(_UTF8_BOM) else buffer
    return head[:1024].lstrip().startswith(_PDF_SIGNATURE)


def _sniff_content(buffer: bytes) -> DetectedFormat:
    if not buffer:
        return UNKNOWN

    if buffer.startswith(_PDF_SIGNATURE):
        return DetectedFormat(FormatKind.PDF)

    subtype = _sniff_image(buffer)
    if subtype:
        return DetectedFormat(FormatKind.IMAGE, subtype)

    if buffer.startswith(_ZIP_SIGNATURE):
        if _is_docx_container(buffer):
            return DetectedFormat(FormatKind.WORD_DOCUMENT, "docx")
        return UNKNOWN

    if looks_like_pdf(buffer):
        return DetectedFormat(FormatKind.PDF)

    return UNKNOWN


def _sniff_hint(hint: str) -> Optional[DetectedFormat]:
    lower = hint.strip().lower()
    if not lower:
        return None
    if "application/pdf" in lower or lower.endswith(".pdf"):
        return DetectedFormat(FormatKind.PDF, from_hint=True)
    if "wordprocessingml" in lower or lower.endswith(".docx"):
        return DetectedFormat(FormatKind.WORD_DOCUMENT, "docx", from_hint=True)
    return None


def sniff(buffer: bytes, *hints: Optional[str]) -> DetectedFormat:
    """
    Classify a buffer as image, PDF, word document or unknown.

    Content signatures always win. Hints (filenames or MIME types) only
    break the tie when the content is inconclusive, and only for PDF and
    word documents; an image is never inferred from a name alone.

    Args:
        buffer: Raw attachment bytes
        *hints: Optional filenames or MIME types supplied by the sender

    Returns:
        DetectedFormat: Classification; never raises
    """
    try:
        detected = _sniff_content(bytes(buffer or b""))
    except Exception:
        detected = UNKNOWN

    if detected.kind is not FormatKind.UNKNOWN:
        return detected

    for hint in hints:
        if not isinstance(hint, str):
            continue
        from_hint = _sniff_hint(hint)
        if from_hint:
            return from_hint
    return detected
