"""
Staging area for downloaded attachments.

Every staged file is named after the message's unique file identifier, so
concurrent requests never collide. A staged file lives only for the
duration of one attachment's processing.
"""

import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from .logging import RelayLogger

_UNSAFE_CHARS = re.compile(r"[^\w.\-]+")


def sanitize_filename(name: Optional[str], max_len: int = 120) -> str:
    """
    Make a user-supplied filename safe to use on disk.

    Args:
        name: Original filename (may be None or empty)
        max_len: Maximum length of the result

    Returns:
        str: Filename containing only word characters, dots and dashes
    """
    return _UNSAFE_CHARS.sub("_", str(name or "file"))[:max_len]


class StagingArea:
    """Creates and removes per-attachment files under one directory."""

    def __init__(self, root: Union[str, Path], log: Optional[RelayLogger] = None):
        self.root = Path(root)
        self.log = log or RelayLogger(component="Staging")

    @contextmanager
    def stage(self, name: str, data: bytes) -> Iterator[Path]:
        """
        Write data to a staging file and remove it when the block exits.

        Args:
            name: Unique staging filename (sanitized again here)
            data: File contents

        Yields:
            Path: Location of the staged file
        """
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / sanitize_filename(name)
        path.write_bytes(data)
        self.log.debug("Staged %s (%d bytes)", path, len(data))
        try:
            yield path
        finally:
            path.unlink(missing_ok=True)
            self.log.debug("Removed %s", path)
