"""
Relay configuration.

All settings come from the environment (optionally via a .env file).
Three secrets are required; everything else has a default.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from relay_service.errors import ConfigurationError
from relay_service.infrastructure.logging import LogConfig

REQUIRED_VARS = ("TELEGRAM_BOT_TOKEN", "VOICEFLOW_API_KEY", "VOICEFLOW_VERSION_ID")

DEFAULT_BACKEND_URL = "https://general-runtime.voiceflow.com"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class RelayConfig:
    """Runtime settings for the relay."""
    telegram_token: str
    backend_api_key: str
    backend_version_id: str

    backend_base_url: str = DEFAULT_BACKEND_URL
    production: bool = False
    port: int = 3000
    webhook_url: str = ""

    tmp_dir: Path = Path("tmp")
    log_dir: Path = Path("logs")

    max_image_mb: int = 15
    max_document_mb: int = 20
    max_text_chars: int = 6000

    pdf_text_min_len: int = 30
    pdf_ocr_max_pages: int = 3
    pdf_ocr_scale: float = 2.0

    ocr_max_width: int = 1600
    ocr_languages: Tuple[str, ...] = ("ru", "en")

    log: LogConfig = field(default_factory=LogConfig)

    @property
    def max_image_bytes(self) -> int:
        return self.max_image_mb * 1024 * 1024

    @property
    def max_document_bytes(self) -> int:
        return self.max_document_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """
        Load configuration from the environment.

        Returns:
            RelayConfig populated from environment variables

        Raises:
            ConfigurationError: If a required secret is missing or a numeric value is malformed
        """
        load_dotenv()

        missing = [name for name in REQUIRED_VARS if not os.getenv(name)]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing)
            )

        langs = tuple(
            lang.strip() for lang in os.getenv("OCR_LANGS", "ru,en").split(",") if lang.strip()
        )

        return cls(
            telegram_token=os.environ["TELEGRAM_BOT_TOKEN"],
            backend_api_key=os.environ["VOICEFLOW_API_KEY"],
            backend_version_id=os.environ["VOICEFLOW_VERSION_ID"],
            backend_base_url=os.getenv("VOICEFLOW_BASE_URL", DEFAULT_BACKEND_URL).rstrip("/"),
            production=os.getenv("RELAY_ENV", "development").lower() == "production",
            port=_int_env("PORT", 3000),
            webhook_url=os.getenv("WEBHOOK_URL") or os.getenv("RENDER_EXTERNAL_URL", ""),
            tmp_dir=Path(os.getenv("TMP_DIR", "tmp")),
            log_dir=Path(os.getenv("LOG_DIR", "logs")),
            max_image_mb=_int_env("MAX_IMG_MB", 15),
            max_document_mb=_int_env("MAX_DOC_MB", 20),
            max_text_chars=_int_env("RELAY_MAX_TEXT", 6000),
            pdf_text_min_len=_int_env("PDF_TEXT_MIN_LEN", 30),
            pdf_ocr_max_pages=_int_env("PDF_OCR_MAX_PAGES", 3),
            pdf_ocr_scale=_float_env("PDF_OCR_SCALE", 2.0),
            ocr_max_width=_int_env("OCR_MAX_WIDTH", 1600),
            ocr_languages=langs or ("ru", "en"),
            log=LogConfig.from_env(),
        )
