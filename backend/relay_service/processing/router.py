"""
Extraction router.

Sniffs an attachment and dispatches it to the first matching extractor in
an ordered rule table. Adding a format means adding one rule.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from relay_service.infrastructure.logging import RelayLogger
from .sniff import DetectedFormat, FormatKind, sniff
from .word import extract_docx_text


@dataclass(frozen=True)
class RawAttachment:
    """Attachment bytes plus the sender's advisory name and MIME type."""
    data: bytes
    name: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def hints(self) -> Tuple[Optional[str], ...]:
        return (self.mime_type, self.name)


@dataclass(frozen=True)
class ExtractionResult:
    kind: DetectedFormat
    text: str = ""
    page_count: Optional[int] = None


Rule = Tuple[str, Callable[[DetectedFormat], bool], Callable[[RawAttachment, DetectedFormat], ExtractionResult]]


def decode_plain_text(data: bytes) -> str:
    """
    Decode bytes as UTF-8 text.

    Returns:
        str: Decoded and trimmed text, or an empty string if the bytes are not valid UTF-8
    """
    try:
        return data.decode("utf-8-sig").strip()
    except UnicodeDecodeError:
        return ""


class ExtractionRouter:
    """Turn any attachment into an ExtractionResult."""

    def __init__(self, image_extractor, pdf_extractor, log: Optional[RelayLogger] = None):
        self.image_extractor = image_extractor
        self.pdf_extractor = pdf_extractor
        self.log = log or RelayLogger(component="Router")
        self.rules: List[Rule] = [
            ("image OCR", lambda fmt: fmt.kind is FormatKind.IMAGE, self._extract_image),
            ("PDF", lambda fmt: fmt.kind is FormatKind.PDF, self._extract_pdf),
            ("DOCX", lambda fmt: fmt.kind is FormatKind.WORD_DOCUMENT, self._extract_docx),
        ]

    def _extract_image(self, attachment: RawAttachment, fmt: DetectedFormat) -> ExtractionResult:
        return ExtractionResult(fmt, self.image_extractor.extract_image_text(attachment.data))

    def _extract_pdf(self, attachment: RawAttachment, fmt: DetectedFormat) -> ExtractionResult:
        result = self.pdf_extractor.extract_pdf_text(attachment.data)
        return ExtractionResult(fmt, result.text, result.page_count)

    def _extract_docx(self, attachment: RawAttachment, fmt: DetectedFormat) -> ExtractionResult:
        return ExtractionResult(fmt, extract_docx_text(attachment.data))

    def extract(self, attachment: RawAttachment) -> ExtractionResult:
        """
        Extract text from an attachment.

        Args:
            attachment: Raw bytes with optional name/MIME hints

        Returns:
            ExtractionResult: Detected format and text (never None, possibly empty)

        Raises:
            OcrFailure: Image OCR failed
            PdfParseFailure: PDF could not be opened
            PdfOcrFailure: A page failed during the scanned-PDF fallback
            DocumentParseFailure: DOCX container could not be read
        """
        self.log.debug("First bytes (hex): %s", attachment.data[:8].hex())
        fmt = sniff(attachment.data, *attachment.hints)
        self.log.debug("Detected format: %s", fmt)

        for name, matches, handler in self.rules:
            if matches(fmt):
                self.log.debug("Extractor branch: %s", name)
                return handler(attachment, fmt)

        self.log.debug("Extractor branch: plain text fallback")
        return ExtractionResult(fmt, decode_plain_text(attachment.data))

    def extract_file(
        self,
        path: Union[str, Path],
        name: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> ExtractionResult:
        """Read a staged file and extract it; the staged filename is used when no name is given."""
        path = Path(path)
        return self.extract(RawAttachment(path.read_bytes(), name or path.name, mime_type))
