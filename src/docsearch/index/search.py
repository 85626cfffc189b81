"""Full-text search with structured filters and highlighted snippets."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional

from whoosh import query as wq
from whoosh.qparser import MultifieldParser

from docsearch.config import AppConfig
from docsearch.errors import IndexOpenError, QueryParseError
from docsearch.index.schema import SEARCH_FIELDS
from docsearch.index.storage import IndexStore
from docsearch.ingestion.dispatcher import TEXT_EXTENSIONS
from docsearch.models import SearchFilters, SearchResponse, SearchResult
from docsearch.utils.text import snippet_with_highlight

LOGGER = logging.getLogger(__name__)

# Logical file-type tags offered by clients; anything else is a literal extension.
FILE_TYPE_GROUPS = {
    "text": tuple(sorted(TEXT_EXTENSIONS)),
    "doc": ("doc", "docx"),
    "xls": ("xls", "xlsx", "xlsm"),
    "ppt": ("ppt", "pptx"),
}

SNIPPET_PRE_CHARS = 60
SNIPPET_POST_CHARS = 140


def expand_file_types(tags: Iterable[str]) -> List[str]:
    """Expand logical tags to concrete extensions, deduplicated in order."""
    expanded: List[str] = []
    for tag in tags:
        normalized = tag.strip().lower().lstrip(".")
        if not normalized:
            continue
        for ext in FILE_TYPE_GROUPS.get(normalized, (normalized,)):
            if ext not in expanded:
                expanded.append(ext)
    return expanded


def build_filter_clauses(filters: SearchFilters | None, *, now: int | None = None) -> List[wq.Query]:
    if filters is None:
        return []
    clauses: List[wq.Query] = []
    if filters.file_types:
        extensions = expand_file_types(filters.file_types)
        if extensions:
            clauses.append(wq.Or([wq.Term("file_type", ext) for ext in extensions]))
    date_range = filters.effective_date_range(now)
    if date_range is not None and (date_range.start is not None or date_range.end is not None):
        clauses.append(
            wq.NumericRange("modified_time", date_range.start, date_range.end, endexcl=True)
        )
    size_range = filters.size_range
    if size_range is not None and (size_range.min is not None or size_range.max is not None):
        clauses.append(wq.NumericRange("file_size", size_range.min, size_range.max))
    return clauses


def _normalize_score(score: float, max_score: float) -> float:
    divisor = max_score if max_score > 0 else 1.0
    return min(score / divisor, 1.0)


class Searcher:
    """High-level API to query the index."""

    def __init__(self, store: IndexStore) -> None:
        self.store = store

    def parse(self, text: str, schema) -> wq.Query:
        if not text.strip():
            return wq.Every()
        parser = MultifieldParser(list(SEARCH_FIELDS), schema)
        try:
            return parser.parse(text)
        except Exception as exc:
            raise QueryParseError(f"parse query error: {exc}") from exc

    def search(
        self,
        query: str,
        *,
        limit: int = 50,
        offset: int = 0,
        filters: Optional[SearchFilters] = None,
    ) -> SearchResponse:
        started = time.perf_counter()
        if not self.store.exists():
            return SearchResponse()

        try:
            index = self.store.open()
        except Exception as exc:
            raise IndexOpenError(f"open index error: {exc}") from exc

        try:
            clauses = [self.parse(query, index.schema)] + build_filter_clauses(filters)
            combined = clauses[0] if len(clauses) == 1 else wq.And(clauses)
            LOGGER.debug("Executing query %r", combined)

            with index.searcher() as searcher:
                hits = searcher.search(combined, limit=max(offset + limit, 1))
                total_count = len(hits)
                max_score = hits[0].score if hits.scored_length() else 1.0
                results = [
                    self._to_result(hit, query, max_score)
                    for hit in list(hits)[offset : offset + limit]
                ]
        finally:
            index.close()

        return SearchResponse(
            results=results,
            total_count=total_count,
            search_time_ms=(time.perf_counter() - started) * 1000,
            has_more=offset + len(results) < total_count,
        )

    def _to_result(self, hit, query: str, max_score: float) -> SearchResult:
        content = hit.get("content", "") or ""
        file_path = hit.get("file_path", "")
        highlights = []
        if content:
            snippet = snippet_with_highlight(
                content, query, pre_chars=SNIPPET_PRE_CHARS, post_chars=SNIPPET_POST_CHARS
            )
            if snippet:
                highlights.append(snippet)
        return SearchResult(
            id=file_path,
            title=hit.get("title", ""),
            content=content,
            file_path=file_path,
            file_type=hit.get("file_type", ""),
            modified_time=int(hit.get("modified_time", 0) or 0),
            score=_normalize_score(float(hit.score or 0.0), float(max_score or 0.0)),
            highlights=highlights,
        )


def search_index(
    query: str,
    limit: int | None = None,
    offset: int | None = None,
    filters: SearchFilters | None = None,
    *,
    config: AppConfig | None = None,
) -> SearchResponse:
    """Run one synchronous, read-only search against the configured index."""
    config = config or AppConfig()
    store = IndexStore(config.resolve_index_dir(Path.cwd()))
    return Searcher(store).search(
        query,
        limit=config.default_limit if limit is None else limit,
        offset=offset or 0,
        filters=filters,
    )
