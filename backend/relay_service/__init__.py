"""
Document Relay

Receives files or text from a Telegram chat, extracts plain text from
images, PDFs and DOCX files (with OCR for scans), forwards the text to a
conversational backend and relays the reply.

Structure:
- processing/: format detection and text extraction
- api/: Telegram and backend clients
- core/: per-message pipeline and long-poll loop
- infrastructure/: logging, extraction log, staging, monitoring
"""

from .config import RelayConfig
from .errors import (
    RelayError,
    ConfigurationError,
    DownloadFailure,
    TelegramApiError,
    BackendFailure,
    ExtractionError,
    OcrFailure,
    PdfParseFailure,
    PdfOcrFailure,
    DocumentParseFailure,
)
from .processing import (
    DetectedFormat,
    FormatKind,
    sniff,
    ImageOcrExtractor,
    PdfExtractor,
    extract_docx_text,
    ExtractionResult,
    ExtractionRouter,
    RawAttachment,
    build_router,
)
from .api import ConversationRelay, TelegramClient
from .core import MessageHandler, run_polling
from .infrastructure import LogConfig, RelayLogger, get_logger

__all__ = [
    # Config
    'RelayConfig',

    # Errors
    'RelayError',
    'ConfigurationError',
    'DownloadFailure',
    'TelegramApiError',
    'BackendFailure',
    'ExtractionError',
    'OcrFailure',
    'PdfParseFailure',
    'PdfOcrFailure',
    'DocumentParseFailure',

    # Processing
    'DetectedFormat',
    'FormatKind',
    'sniff',
    'ImageOcrExtractor',
    'PdfExtractor',
    'extract_docx_text',
    'ExtractionResult',
    'ExtractionRouter',
    'RawAttachment',
    'build_router',

    # API
    'ConversationRelay',
    'TelegramClient',

    # Core
    'MessageHandler',
    'run_polling',

    # Infrastructure
    'LogConfig',
    'RelayLogger',
    'get_logger',
]
