"""
Error taxonomy for the document relay.

Extractor errors propagate to the per-message handler, which turns them
into a fixed user-facing reply. Nothing in this package retries.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for all relay errors."""


class ConfigurationError(RelayError, ValueError):
    """Required configuration is missing or malformed."""


class DownloadFailure(RelayError):
    """A chat attachment could not be resolved or downloaded."""


class TelegramApiError(RelayError):
    """The Bot API rejected a call or could not be reached."""


class BackendFailure(RelayError):
    """The conversational backend failed or returned an unusable body."""


class ExtractionError(RelayError):
    """Base class for structural text-extraction failures."""


class OcrFailure(ExtractionError):
    """The image could not be decoded or the OCR engine failed."""


class PdfParseFailure(ExtractionError):
    """The PDF structure could not be opened."""


class PdfOcrFailure(ExtractionError):
    """A page failed to render or OCR during the scanned-PDF fallback."""

    def __init__(self, message: str, page: Optional[int] = None):
        super().__init__(message)
        self.page = page


class DocumentParseFailure(ExtractionError):
    """A word-processor container could not be read."""
