"""
Word-processor (.docx) text extraction.

Only Office Open XML containers are read; legacy binary .doc files are
left to the plain-text fallback.
"""

import io
import zipfile
from pathlib import Path
from typing import Union

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from relay_service.errors import DocumentParseFailure


def extract_docx_text(source: Union[bytes, str, Path]) -> str:
    """
    Extract text from a DOCX file.

    Paragraphs come first, followed by the text of table cells.

    Args:
        source: Raw bytes of the DOCX file or a path to it

    Returns:
        str: Non-empty lines joined by newlines, trimmed

    Raises:
        DocumentParseFailure: If the container cannot be read
    """
    file_like = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else str(source)

    try:
        doc = Document(file_like)
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise DocumentParseFailure(f"Could not read word document: {e}") from e

    lines = [para.text for para in doc.paragraphs if para.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append("\t".join(cells))

    return "\n".join(lines).strip()
