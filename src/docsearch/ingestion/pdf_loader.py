"""PDF text extraction.

Uses PyMuPDF (fitz) for fast PDF text extraction. Whole-document extraction
is still slow enough that PDF support is disabled by default during a bulk
rebuild; see ``AppConfig.enable_pdf``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import fitz  # PyMuPDF

from docsearch.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)


def iter_text_parts(path: Path) -> Iterator[str]:
    """Yield text content from a PDF file page by page.

    Open and per-page failures are logged and skipped so that one malformed
    PDF never aborts an indexing run.
    """
    try:
        doc = fitz.open(path)
    except Exception as exc:
        LOGGER.error("Failed to open PDF %s: %s", path, exc)
        return

    try:
        for index in range(len(doc)):
            try:
                page = doc[index]
                text = page.get_text() or ""
                normalized = normalize_whitespace(text.splitlines())
                if normalized:
                    yield normalized + "\n"
            except Exception as exc:
                LOGGER.warning("Failed to read page %s in %s: %s", index, path, exc)
    finally:
        doc.close()


def read_pdf_text(path: Path) -> str:
    return "".join(iter_text_parts(path))
