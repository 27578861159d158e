"""
Processing module for attachment text extraction.

This module provides a unified interface for:
- Content-based format detection
- OCR text extraction from images
- PDF text extraction with OCR fallback for scans
- DOCX text extraction
- Routing an attachment to the right extractor
"""

from typing import Optional

from relay_service.infrastructure.logging import LogConfig, get_logger
from .sniff import DetectedFormat, FormatKind, sniff, looks_like_pdf
from .ocr import ImageOcrExtractor, init_model, preprocess_image
from .pdf import PdfExtraction, PdfExtractor, page_marker
from .word import extract_docx_text
from .router import ExtractionResult, ExtractionRouter, RawAttachment, decode_plain_text


def build_router(config, reader=None, log_config: Optional[LogConfig] = None) -> ExtractionRouter:
    """
    Wire up the extraction pipeline from a RelayConfig.

    Args:
        config: RelayConfig with OCR and PDF limits
        reader: Optional pre-built OCR reader (mainly for tests)
        log_config: Logging configuration (defaults to config.log)

    Returns:
        ExtractionRouter ready to use
    """
    log_config = log_config or config.log
    image_extractor = ImageOcrExtractor(
        reader=reader,
        languages=config.ocr_languages,
        max_width=config.ocr_max_width,
        log=get_logger("OCR", log_config),
    )
    pdf_extractor = PdfExtractor(
        image_extractor,
        min_text_len=config.pdf_text_min_len,
        max_pages=config.pdf_ocr_max_pages,
        scale=config.pdf_ocr_scale,
        log=get_logger("PDF", log_config),
    )
    return ExtractionRouter(image_extractor, pdf_extractor, log=get_logger("Router", log_config))


__all__ = [
    # Detection
    'DetectedFormat',
    'FormatKind',
    'sniff',
    'looks_like_pdf',

    # Extractors
    'ImageOcrExtractor',
    'init_model',
    'preprocess_image',
    'PdfExtraction',
    'PdfExtractor',
    'page_marker',
    'extract_docx_text',

    # Unified interface
    'ExtractionResult',
    'ExtractionRouter',
    'RawAttachment',
    'decode_plain_text',
    'build_router',
]
