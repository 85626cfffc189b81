"""Text extraction for Office formats (.docx, .xlsx, .xls)."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Any, List, Optional
from xml import sax

import xlrd
from openpyxl import load_workbook

LOGGER = logging.getLogger(__name__)

DOCX_BODY_PART = "word/document.xml"


class TextNodeCollector(sax.ContentHandler):
    """Collect trimmed, non-blank text nodes in document order."""

    def __init__(self) -> None:
        super().__init__()
        self.parts: List[str] = []
        self._buffer: List[str] = []

    def _flush(self) -> None:
        text = "".join(self._buffer).strip()
        self._buffer.clear()
        if text:
            self.parts.append(text)

    def characters(self, content: str) -> None:
        # The parser may deliver one text node in several chunks.
        self._buffer.append(content)

    def startElement(self, name, attrs) -> None:
        self._flush()

    def endElement(self, name) -> None:
        self._flush()

    def endDocument(self) -> None:
        self._flush()


def read_docx(path: Path) -> str:
    """Concatenate the text nodes of a .docx body, each followed by a space.

    Paragraph and table structure is not preserved.
    """
    collector = TextNodeCollector()
    try:
        with zipfile.ZipFile(path) as archive, archive.open(DOCX_BODY_PART) as body:
            sax.parse(body, collector)
    except (zipfile.BadZipFile, KeyError, sax.SAXException, OSError) as exc:
        LOGGER.warning("Failed to read DOCX %s: %s", path, exc)
        return ""
    return "".join(f"{text} " for text in collector.parts)


def format_cell(value: Any) -> Optional[str]:
    """Render a cell value, or ``None`` for types that carry no text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, str):
        return value
    return None


def read_xlsx(path: Path) -> str:
    """Dump every sheet row by row: cells space-terminated, rows newline-terminated."""
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except Exception as exc:
        LOGGER.warning("Failed to open workbook %s: %s", path, exc)
        return ""

    parts: list[str] = []
    try:
        for sheet_name in workbook.sheetnames:
            for row in workbook[sheet_name].iter_rows(values_only=True):
                for value in row:
                    rendered = format_cell(value)
                    if rendered is not None:
                        parts.append(rendered)
                        parts.append(" ")
                parts.append("\n")
    except Exception as exc:
        LOGGER.warning("Failed to read workbook %s: %s", path, exc)
        return ""
    finally:
        workbook.close()
    return "".join(parts)


def _xls_cell_value(cell: xlrd.sheet.Cell) -> Any:
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype in (xlrd.XL_CELL_TEXT, xlrd.XL_CELL_NUMBER):
        return cell.value
    # Dates, errors and blanks carry no text.
    return None


def read_xls(path: Path) -> str:
    """Dump a legacy BIFF workbook in the same layout as :func:`read_xlsx`."""
    try:
        workbook = xlrd.open_workbook(str(path), on_demand=True)
    except Exception as exc:
        LOGGER.warning("Failed to open workbook %s: %s", path, exc)
        return ""

    parts: list[str] = []
    try:
        for sheet in workbook.sheets():
            for row_index in range(sheet.nrows):
                for cell in sheet.row(row_index):
                    rendered = format_cell(_xls_cell_value(cell))
                    if rendered is not None:
                        parts.append(rendered)
                        parts.append(" ")
                parts.append("\n")
    except Exception as exc:
        LOGGER.warning("Failed to read workbook %s: %s", path, exc)
        return ""
    finally:
        workbook.release_resources()
    return "".join(parts)
