"""Route a file to the extractor for its format and build the index record."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from docsearch.ingestion.legacy_doc import read_legacy_doc
from docsearch.ingestion.office import read_docx, read_xls, read_xlsx
from docsearch.ingestion.pdf_loader import read_pdf_text
from docsearch.ingestion.plain import read_plain_text
from docsearch.models import IndexedDocument
from docsearch.utils.files import file_type_of

LOGGER = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset(
    {
        "txt", "md", "markdown", "rst", "log", "csv",
        "json", "toml", "yaml", "yml", "ini", "cfg", "xml",
        "html", "htm", "css",
        "rs", "js", "ts", "py", "sh", "c", "h", "cpp", "java", "go",
    }
)

Extractor = Callable[[Path], str]

EXTRACTORS: Dict[str, Extractor] = {
    **{ext: read_plain_text for ext in TEXT_EXTENSIONS},
    "docx": read_docx,
    "xlsx": read_xlsx,
    "xlsm": read_xlsx,
    "xls": read_xls,
    "doc": read_legacy_doc,
}


def extract_text(path: Path, *, enable_pdf: bool = False) -> str:
    """Extract the text of ``path``; unsupported or broken files yield ``""``."""
    file_type = file_type_of(path)
    if file_type == "pdf":
        extractor: Optional[Extractor] = read_pdf_text if enable_pdf else None
    else:
        extractor = EXTRACTORS.get(file_type)
    if extractor is None:
        return ""
    try:
        return extractor(path)
    except Exception as exc:
        LOGGER.warning("Extraction failed for %s: %s", path, exc)
        return ""


def build_document(
    path: Path, *, enable_pdf: bool = False, max_file_size: int | None = None
) -> IndexedDocument:
    """Assemble the index record for one file.

    Raises ``OSError`` only when the file cannot be stat'ed; content
    extraction problems leave ``content`` empty instead.
    """
    stat = path.stat()
    if max_file_size is not None and stat.st_size > max_file_size:
        LOGGER.debug("Skipping content of %s (%d bytes)", path, stat.st_size)
        content = ""
    else:
        content = extract_text(path, enable_pdf=enable_pdf)
    return IndexedDocument(
        title=path.name,
        content=content,
        file_path=str(path.absolute()),
        file_type=file_type_of(path),
        modified_time=stat.st_mtime_ns // 1_000_000,
        file_size=stat.st_size,
    )
