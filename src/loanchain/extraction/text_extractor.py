"""Text Extractor - PDF to a single plain-text buffer.

Pages are read in order with PyPDF (no OCR). Within a page all whitespace
runs collapse to single spaces; pages are joined with a newline, so patterns
that must not cross a page boundary can rely on '.' stopping at '\\n'.
"""

import asyncio
import io
import os
from pathlib import Path
from typing import BinaryIO, Union

from pypdf import PdfReader

from ..common.exceptions import DocumentUnreadable
from ..common.safe_log import safe_log

DEFAULT_MAX_PAGES = 30

DocumentSource = Union[str, os.PathLike, bytes, BinaryIO]


def document_name(source: DocumentSource) -> str | None:
    """File name without extension, when the source is a path."""
    if isinstance(source, (str, os.PathLike)):
        return Path(source).stem
    return None


def _open_reader(source: DocumentSource) -> PdfReader:
    if isinstance(source, bytes):
        stream: Union[str, os.PathLike, BinaryIO] = io.BytesIO(source)
    else:
        stream = source

    name = str(source) if isinstance(source, (str, os.PathLike)) else None
    try:
        reader = PdfReader(stream)
        if reader.is_encrypted and not reader.decrypt(""):
            raise DocumentUnreadable("PDF is password protected", document_id=name)
        # Page tree is parsed lazily; force it here so corrupt files fail now
        len(reader.pages)
        return reader
    except DocumentUnreadable:
        raise
    except Exception as e:
        raise DocumentUnreadable(f"Cannot open PDF: {str(e)}", document_id=name, cause=e) from e


def extract_text(source: DocumentSource, max_pages: int = DEFAULT_MAX_PAGES) -> str:
    """Extract the text of the first ``max_pages`` pages of a PDF.

    Args:
        source: Path, raw bytes or binary stream of the PDF
        max_pages: Page cap; later pages are silently ignored

    Returns:
        Page texts joined by newlines

    Raises:
        DocumentUnreadable: if the document cannot be opened or parsed
    """
    reader = _open_reader(source)
    total_pages = len(reader.pages)
    page_count = min(total_pages, max_pages)

    page_texts = []
    for i in range(page_count):
        try:
            text = reader.pages[i].extract_text() or ""
        except Exception as e:
            safe_log("Error extracting page", page=i + 1, error=str(e))
            text = ""
        page_texts.append(" ".join(text.split()))

    full_text = "\n".join(page_texts)
    safe_log(
        "Extracted text",
        pages=page_count,
        total_pages=total_pages,
        chars=len(full_text),
    )
    return full_text


async def extract_text_async(source: DocumentSource, max_pages: int = DEFAULT_MAX_PAGES) -> str:
    """Run ``extract_text`` in a worker thread."""
    return await asyncio.to_thread(extract_text, source, max_pages)
