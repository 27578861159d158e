"""
Append-only log of extracted text.

One file per calendar day (responses_YYYY-MM-DD.log). Each record is a
delimited block with the full text; records are never rewritten.
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .logging import RelayLogger

_WHITESPACE = re.compile(r"\s+")


def safe_short(text: Optional[str], max_len: int = 350) -> str:
    """
    Collapse whitespace and cap a string for single-line previews.

    Args:
        text: Text to preview (None is treated as empty)
        max_len: Maximum preview length before the ellipsis

    Returns:
        str: Preview string, with a trailing ellipsis when cut
    """
    s = _WHITESPACE.sub(" ", text or "").strip()
    return s[:max_len] + "…" if len(s) > max_len else s


class ExtractionLog:
    """Writes one record per handled message to a per-day log file."""

    def __init__(self, log_dir: Union[str, Path], log: Optional[RelayLogger] = None):
        self.log_dir = Path(log_dir)
        self.log = log or RelayLogger(component="ExtractionLog")

    def path_for(self, when: datetime) -> Path:
        return self.log_dir / f"responses_{when.strftime('%Y-%m-%d')}.log"

    def append(
        self,
        user_id: str,
        kind: str,
        file_name: Optional[str],
        extracted: Optional[str],
        now: Optional[datetime] = None,
    ) -> Path:
        """
        Append a record for one message.

        Args:
            user_id: Chat participant identifier
            kind: Event kind (text, photo, document)
            file_name: Attachment name, or None for text messages
            extracted: Extracted or typed text
            now: Timestamp override (defaults to the current UTC time)

        Returns:
            Path: The log file written to
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)

        ts = now or datetime.now(timezone.utc)
        text = extracted or ""
        header = f"[{ts.isoformat()}] user={user_id} kind={kind} file={file_name or '-'} chars={len(text)}"

        self.log.info('%s preview="%s"', header, safe_short(text))

        path = self.path_for(ts)
        body = f"{header}\n--- BEGIN ---\n{text}\n--- END ---\n\n"
        with open(path, "a", encoding="utf-8") as f:
            f.write(body)
        return path
