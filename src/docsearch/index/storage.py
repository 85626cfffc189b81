"""On-disk lifecycle of the single Whoosh index directory."""

from __future__ import annotations

import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from whoosh import index as whoosh_index
from whoosh.index import Index
from whoosh.writing import IndexWriter

from docsearch.index.schema import build_schema

LOGGER = logging.getLogger(__name__)


class IndexStore:
    """Owns the index directory: wipe, create, open and measure it."""

    def __init__(self, index_dir: Path, *, writer_limit_mb: int = 128) -> None:
        self.index_dir = Path(index_dir)
        self.writer_limit_mb = writer_limit_mb

    def exists(self) -> bool:
        return self.index_dir.is_dir() and whoosh_index.exists_in(str(self.index_dir))

    def reset(self) -> Index:
        """Delete the directory and create an empty index in its place.

        A rebuild is always a full replace; nothing from the previous index
        survives this call.
        """
        if self.index_dir.exists():
            LOGGER.debug("Removing previous index at %s", self.index_dir)
            shutil.rmtree(self.index_dir)
        self.index_dir.mkdir(parents=True, exist_ok=True)
        return whoosh_index.create_in(str(self.index_dir), build_schema())

    def open(self) -> Index:
        return whoosh_index.open_dir(str(self.index_dir), readonly=True)

    @contextmanager
    def writer(self, index: Index) -> Iterator[IndexWriter]:
        """Yield a writer and commit it on exit, cancelling on error."""
        writer = index.writer(limitmb=self.writer_limit_mb)
        try:
            yield writer
        except Exception:
            writer.cancel()
            raise
        writer.commit()

    def size_bytes(self) -> int:
        """Sum of the regular files directly inside the index directory."""
        if not self.index_dir.is_dir():
            return 0
        total = 0
        for entry in self.index_dir.iterdir():
            try:
                if entry.is_file():
                    total += entry.stat().st_size
            except OSError:
                continue
        return total
