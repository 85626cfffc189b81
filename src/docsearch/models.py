"""Core DocSearch data models."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(slots=True)
class DirectoryConfig:
    """A directory root the user asked to index."""

    path: str
    enabled: bool = True
    recursive: bool = True
    last_indexed: int = 0


@dataclass(slots=True)
class IndexedDocument:
    """Record submitted to the index for a single file."""

    title: str
    content: str
    file_path: str
    file_type: str
    modified_time: int
    file_size: int


@dataclass(slots=True)
class DateRange:
    """Half-open ``[start, end)`` interval in epoch milliseconds."""

    start: Optional[int] = None
    end: Optional[int] = None


@dataclass(slots=True)
class SizeRange:
    """Inclusive file size interval in bytes."""

    min: Optional[int] = None
    max: Optional[int] = None


class DatePreset(str, Enum):
    ANY = "any"
    LAST_DAY = "lastDay"
    LAST_WEEK = "lastWeek"
    LAST_MONTH = "lastMonth"

    def to_range(self, now: int | None = None) -> Optional[DateRange]:
        window = {
            DatePreset.LAST_DAY: DAY_MS,
            DatePreset.LAST_WEEK: 7 * DAY_MS,
            DatePreset.LAST_MONTH: 30 * DAY_MS,
        }.get(self)
        if window is None:
            return None
        current = now_ms() if now is None else now
        return DateRange(start=current - window, end=None)


@dataclass(slots=True)
class SearchFilters:
    """Structured filters combined with the free-text query."""

    file_types: Optional[List[str]] = None
    date_range: Optional[DateRange] = None
    date_preset: Optional[DatePreset] = None
    size_range: Optional[SizeRange] = None

    def effective_date_range(self, now: int | None = None) -> Optional[DateRange]:
        """Explicit range wins over the preset."""
        if self.date_range is not None:
            return self.date_range
        if self.date_preset is not None:
            return self.date_preset.to_range(now)
        return None


@dataclass(slots=True)
class SearchResult:
    id: str
    title: str
    content: str
    file_path: str
    file_type: str
    modified_time: int
    score: float
    highlights: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "filePath": self.file_path,
            "fileType": self.file_type,
            "modifiedTime": self.modified_time,
            "score": self.score,
            "highlights": list(self.highlights),
        }


@dataclass(slots=True)
class SearchResponse:
    results: List[SearchResult] = field(default_factory=list)
    total_count: int = 0
    search_time_ms: float = 0.0
    has_more: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "totalCount": self.total_count,
            "searchTime": self.search_time_ms,
            "hasMore": self.has_more,
        }


@dataclass(slots=True)
class IndexProgress:
    """Snapshot pushed to the progress sink during a rebuild."""

    is_indexing: bool
    progress: int
    total_files: int
    indexed_files: int
    index_size_bytes: int = 0
    last_updated_epoch_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isIndexing": self.is_indexing,
            "progress": self.progress,
            "totalFiles": self.total_files,
            "indexedFiles": self.indexed_files,
            "indexSize": self.index_size_bytes,
            "lastUpdated": self.last_updated_epoch_ms,
        }
