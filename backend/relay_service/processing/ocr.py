"""
OCR utilities for text extraction from images.

This module normalizes image buffers with Pillow and runs EasyOCR on the
result. The EasyOCR model is heavy, so one reader per language set is
shared across the process.
"""

import io
import threading
from typing import Dict, Optional, Sequence, Tuple

import easyocr
from PIL import Image, ImageOps

from relay_service.errors import OcrFailure
from relay_service.infrastructure.logging import RelayLogger

DEFAULT_LANGUAGES: Tuple[str, ...] = ("ru", "en")
DEFAULT_MAX_WIDTH = 1600

# Reader instances keyed by language tuple (initialized once)
_readers: Dict[Tuple[str, ...], "easyocr.Reader"] = {}
_readers_lock = threading.Lock()


def init_model(langs: Sequence[str] = DEFAULT_LANGUAGES, log: Optional[RelayLogger] = None):
    """
    Initialize the OCR model.
    Call this once at program startup to avoid slow first-time loading
    inside message handlers.

    Args:
        langs: Language codes to support (default: Russian and English)
        log: Logger for progress messages

    Returns:
        The shared easyocr.Reader for this language set
    """
    log = log or RelayLogger(component="OCR")
    key = tuple(langs)
    with _readers_lock:
        reader = _readers.get(key)
        if reader is None:
            log.info("Initializing EasyOCR model for %s...", "+".join(key))
            reader = easyocr.Reader(list(key), gpu=False)
            _readers[key] = reader
            log.info("Model initialized successfully")
    return reader


def preprocess_image(img_bytes: bytes, max_width: int = DEFAULT_MAX_WIDTH) -> bytes:
    """
    Normalize an image for OCR.

    Applies EXIF orientation, downsizes to at most max_width pixels wide
    (smaller images are left as they are), converts to RGB and re-encodes
    as PNG.

    Args:
        img_bytes: Raw bytes of any format Pillow can open
        max_width: Upper bound on the output width

    Returns:
        bytes: PNG-encoded image

    Raises:
        OcrFailure: If the bytes cannot be decoded as an image
    """
    try:
        with Image.open(io.BytesIO(img_bytes)) as opened:
            opened.load()
            img = ImageOps.exif_transpose(opened)
            if img.width > max_width:
                height = max(1, round(img.height * max_width / img.width))
                img = img.resize((max_width, height), Image.Resampling.LANCZOS)
            img = img.convert("RGB")

            out = io.BytesIO()
            img.save(out, format="PNG")
            return out.getvalue()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise OcrFailure(f"Could not decode image: {e}") from e


class ImageOcrExtractor:
    """
    Extract text from image buffers.

    The reader is resolved lazily so that constructing an extractor never
    loads the model; tests pass their own reader.
    """

    def __init__(
        self,
        reader=None,
        languages: Sequence[str] = DEFAULT_LANGUAGES,
        max_width: int = DEFAULT_MAX_WIDTH,
        log: Optional[RelayLogger] = None,
    ):
        self._reader = reader
        self.languages = tuple(languages)
        self.max_width = max_width
        self.log = log or RelayLogger(component="OCR")

    @property
    def reader(self):
        if self._reader is None:
            self._reader = init_model(self.languages, self.log)
        return self._reader

    def extract_image_text(self, img_bytes: bytes) -> str:
        """
        Extract text from image bytes.

        Args:
            img_bytes: Raw bytes of the image file

        Returns:
            str: Recognized text, lines joined by newlines and trimmed

        Raises:
            OcrFailure: If the image cannot be decoded or the engine fails
        """
        png = preprocess_image(img_bytes, self.max_width)
        self.log.debug("Running OCR on %d-byte PNG", len(png))

        try:
            segments = self.reader.readtext(png, detail=0, paragraph=True)
        except Exception as e:
            raise OcrFailure(f"OCR engine failed: {e}") from e

        self.log.debug("Extracted %d text segments", len(segments))
        return "\n".join(str(s) for s in segments).strip()
