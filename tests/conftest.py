"""Shared fixtures that build small documents in every supported format."""

from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence
from xml.sax.saxutils import escape

import pytest
from openpyxl import Workbook

from docsearch.config import AppConfig
from docsearch.index.storage import IndexStore

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# Compound File Binary signature found at the start of every .doc file.
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def docx_xml(paragraphs: Iterable[str]) -> str:
    body = "".join(
        f"<w:p><w:r><w:t xml:space=\"preserve\">{escape(text)}</w:t></w:r></w:p>"
        for text in paragraphs
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{W_NS}"><w:body>{body}</w:body></w:document>'
    )


def legacy_doc_bytes(*chunks: bytes) -> bytes:
    """Fake a .doc byte stream: OLE header, padding, then the given chunks."""
    return OLE_MAGIC + b"\x00" * 8 + b"".join(chunks)


def utf16(text: str) -> bytes:
    return text.encode("utf-16-le")


def set_mtime_ms(path: Path, epoch_ms: int) -> None:
    ns = epoch_ms * 1_000_000
    os.utime(path, ns=(ns, ns))


@pytest.fixture
def make_docx(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, paragraphs: Sequence[str]) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("[Content_Types].xml", "<Types/>")
            archive.writestr("word/document.xml", docx_xml(paragraphs))
        return path

    return _make


@pytest.fixture
def make_xlsx(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, sheets: Dict[str, List[list]]) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook = Workbook()
        for position, (title, rows) in enumerate(sheets.items()):
            sheet = workbook.active if position == 0 else workbook.create_sheet()
            sheet.title = title
            for row in rows:
                sheet.append(row)
        workbook.save(path)
        return path

    return _make


@pytest.fixture
def make_legacy_doc(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, *chunks: bytes) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(legacy_doc_bytes(*chunks))
        return path

    return _make


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    path = tmp_path / "docs"
    path.mkdir()
    return path


@pytest.fixture
def index_dir(tmp_path: Path) -> Path:
    return tmp_path / "index"


@pytest.fixture
def store(index_dir: Path) -> IndexStore:
    return IndexStore(index_dir)


@pytest.fixture
def config(index_dir: Path) -> AppConfig:
    return AppConfig(index_dir=index_dir)
