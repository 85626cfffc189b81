"""Index rebuild pipeline."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from docsearch.config import AppConfig
from docsearch.index.storage import IndexStore
from docsearch.ingestion.dispatcher import build_document
from docsearch.models import DirectoryConfig, IndexedDocument, IndexProgress, now_ms
from docsearch.utils.files import collect_files

LOGGER = logging.getLogger(__name__)

ProgressSink = Callable[[IndexProgress], None]


def log_progress(progress: IndexProgress) -> None:
    """Default sink: the final snapshot at INFO, the rest at DEBUG."""
    if progress.is_indexing:
        LOGGER.debug(
            "Indexing %d/%d (%d%%)",
            progress.indexed_files,
            progress.total_files,
            progress.progress,
        )
    else:
        LOGGER.info(
            "Index rebuilt: %d/%d files, %d bytes",
            progress.indexed_files,
            progress.total_files,
            progress.index_size_bytes,
        )


def compute_progress(processed: int, total: int) -> int:
    if total == 0:
        return 100
    return round(processed / total * 100)


@dataclass(slots=True)
class RebuildStats:
    total: int = 0
    indexed: int = 0
    failed: int = 0
    failed_files: list[Path] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.indexed + self.failed


class IndexOrchestrator:
    """Turns directory configs into a freshly built index."""

    def __init__(
        self,
        store: IndexStore,
        *,
        sink: Optional[ProgressSink] = None,
        enable_pdf: bool = False,
        max_file_size: int | None = None,
        exclude_patterns: Sequence[str] = (),
    ) -> None:
        self.store = store
        self.sink = sink or log_progress
        self.enable_pdf = enable_pdf
        self.max_file_size = max_file_size
        self.exclude_patterns = tuple(exclude_patterns)

    @classmethod
    def from_config(
        cls, config: AppConfig, *, sink: Optional[ProgressSink] = None
    ) -> "IndexOrchestrator":
        store = IndexStore(config.resolve_index_dir(Path.cwd()), writer_limit_mb=config.writer_limit_mb)
        return cls(
            store,
            sink=sink,
            enable_pdf=config.enable_pdf,
            max_file_size=config.max_file_size,
            exclude_patterns=config.exclude_patterns,
        )

    def _emit(self, progress: IndexProgress) -> None:
        try:
            self.sink(progress)
        except Exception as exc:
            LOGGER.warning("Progress sink failed: %s", exc)

    def run(self, directories: Sequence[DirectoryConfig]) -> IndexProgress:
        """Rebuild the index synchronously and return the final snapshot."""
        files = collect_files(directories, self.exclude_patterns)
        stats = RebuildStats(total=len(files))
        LOGGER.info("Collected %d files from %d directories", stats.total, len(directories))
        self._emit(IndexProgress(is_indexing=True, progress=0, total_files=stats.total, indexed_files=0))

        try:
            self._write(files, stats)
        except Exception as exc:
            # Index creation or commit failed; observers still get a final event.
            LOGGER.exception("Index rebuild failed: %s", exc)

        if stats.failed_files:
            LOGGER.warning(
                "Failed to index %d of %d files: %s",
                stats.failed,
                stats.total,
                ", ".join(str(path) for path in stats.failed_files),
            )

        final = IndexProgress(
            is_indexing=False,
            progress=100,
            total_files=stats.total,
            indexed_files=stats.indexed,
            index_size_bytes=self.store.size_bytes(),
            last_updated_epoch_ms=now_ms(),
        )
        self._emit(final)
        return final

    def _write(self, files: Sequence[Path], stats: RebuildStats) -> None:
        index = self.store.reset()
        with self.store.writer(index) as writer:
            for path in files:
                try:
                    document = build_document(
                        path, enable_pdf=self.enable_pdf, max_file_size=self.max_file_size
                    )
                    writer.add_document(**_document_fields(document))
                    stats.indexed += 1
                except Exception as exc:
                    LOGGER.error("Failed to index %s: %s", path, exc)
                    stats.failed += 1
                    stats.failed_files.append(path)

                self._emit(
                    IndexProgress(
                        is_indexing=True,
                        progress=compute_progress(stats.processed, stats.total),
                        total_files=stats.total,
                        indexed_files=stats.indexed,
                    )
                )


def _document_fields(document: IndexedDocument) -> dict:
    fields = {
        "title": document.title,
        "file_path": document.file_path,
        "file_type": document.file_type,
        "modified_time": document.modified_time,
        "file_size": document.file_size,
    }
    if document.content:
        fields["content"] = document.content
    return fields


def rebuild_index(
    directories: Sequence[DirectoryConfig],
    *,
    config: AppConfig | None = None,
    sink: Optional[ProgressSink] = None,
) -> None:
    """Schedule a full rebuild on a background thread and return immediately.

    Progress is only observable through ``sink``. There is no way to wait for
    or cancel a rebuild. Rebuilds are not serialized against each other: two
    concurrent calls race on the same index directory, so whoever schedules
    rebuilds must make sure only one runs at a time.
    """
    orchestrator = IndexOrchestrator.from_config(config or AppConfig(), sink=sink)
    worker = threading.Thread(
        target=orchestrator.run,
        args=(list(directories),),
        name="docsearch-rebuild",
        daemon=True,
    )
    worker.start()
