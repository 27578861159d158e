"""
PDF text extraction with an OCR fallback for scanned documents.

The text layer is tried first. When it yields fewer than min_text_len
characters the document is treated as a scan: the leading pages are
rasterized with PyMuPDF and each page image goes through OCR.

A page that fails to render or OCR aborts the whole fallback with
PdfOcrFailure; no partial result is returned.
"""

from dataclasses import dataclass
from typing import Optional

import fitz  # PyMuPDF for PDF

from relay_service.errors import OcrFailure, PdfOcrFailure, PdfParseFailure
from relay_service.infrastructure.logging import RelayLogger

# If the text layer is shorter than this, treat the PDF as a scan and run OCR
PDF_TEXT_MIN_LEN = 30

# OCR limits (avoid huge CPU time)
PDF_OCR_MAX_PAGES = 3
PDF_OCR_SCALE = 2.0


@dataclass(frozen=True)
class PdfExtraction:
    text: str
    page_count: int
    used_ocr: bool = False


def page_marker(page_number: int) -> str:
    return f"[PAGE {page_number}]"


class PdfExtractor:
    """Extract text from PDF bytes, falling back to OCR of the first pages."""

    def __init__(
        self,
        image_extractor,
        min_text_len: int = PDF_TEXT_MIN_LEN,
        max_pages: int = PDF_OCR_MAX_PAGES,
        scale: float = PDF_OCR_SCALE,
        log: Optional[RelayLogger] = None,
    ):
        self.image_extractor = image_extractor
        self.min_text_len = min_text_len
        self.max_pages = max_pages
        self.scale = scale
        self.log = log or RelayLogger(component="PDF")

    def _open(self, data: bytes) -> "fitz.Document":
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError, TypeError) as e:
            raise PdfParseFailure(f"Could not open PDF: {e}") from e

        if doc.needs_pass and not doc.authenticate(""):
            doc.close()
            raise PdfParseFailure("PDF is password protected")
        if doc.page_count == 0:
            doc.close()
            raise PdfParseFailure("PDF has no pages")
        return doc

    def _direct_text(self, doc: "fitz.Document") -> str:
        text_chunks = []
        try:
            for page in doc:
                t = page.get_text()
                if t:
                    text_chunks.append(t)
        except (RuntimeError, ValueError) as e:
            raise PdfParseFailure(f"Could not read PDF text layer: {e}") from e
        return "\n".join(text_chunks).strip()

    def render_page(self, page: "fitz.Page") -> bytes:
        """Rasterize one page at the configured magnification and return PNG bytes."""
        pix = page.get_pixmap(matrix=fitz.Matrix(self.scale, self.scale), alpha=False)
        self.log.debug("Page %d rendered: %dx%d", page.number + 1, pix.width, pix.height)
        return pix.tobytes("png")

    def ocr_pages(self, doc: "fitz.Document") -> str:
        """
        OCR the leading pages of an open document.

        Args:
            doc: Open PyMuPDF document

        Returns:
            str: Page texts prefixed with [PAGE n] markers, trimmed; may be empty

        Raises:
            PdfOcrFailure: If any selected page fails to render or OCR
        """
        pages_to_do = min(doc.page_count, self.max_pages)
        self.log.debug("OCR fallback: pages=%d, doing=%d, scale=%s", doc.page_count, pages_to_do, self.scale)

        out = ""
        for index in range(pages_to_do):
            number = index + 1
            try:
                png = self.render_page(doc.load_page(index))
                text = self.image_extractor.extract_image_text(png)
            except (OcrFailure, RuntimeError, ValueError) as e:
                raise PdfOcrFailure(f"OCR failed on page {number}: {e}", page=number) from e

            self.log.debug("Page %d text length: %d", number, len(text))
            if text:
                out += f"\n\n{page_marker(number)}\n{text}"

        return out.strip()

    def extract_pdf_text(self, data: bytes) -> PdfExtraction:
        """
        Extract text from a PDF.

        Args:
            data: Raw bytes of the PDF file

        Returns:
            PdfExtraction: Text (possibly empty), page count and whether OCR ran

        Raises:
            PdfParseFailure: If the document cannot be opened
            PdfOcrFailure: If a page fails during the OCR fallback
        """
        with self._open(data) as doc:
            page_count = doc.page_count
            text = self._direct_text(doc)
            self.log.debug("Text layer length: %d", len(text))

            if len(text) >= self.min_text_len:
                return PdfExtraction(text=text, page_count=page_count)

            self.log.debug("PDF seems scanned or empty, running OCR fallback")
            ocr_text = self.ocr_pages(doc)
            self.log.debug("OCR total length: %d", len(ocr_text))
            return PdfExtraction(text=ocr_text, page_count=page_count, used_ocr=True)
