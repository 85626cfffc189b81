"""Exceptions surfaced to DocSearch callers.

Indexing never raises to its caller: extraction and per-file write failures
are logged and absorbed. Only the synchronous search path reports errors,
always as one of the ``SearchError`` subclasses below.
"""

from __future__ import annotations


class DocSearchError(Exception):
    """Base class for DocSearch errors."""


class SearchError(DocSearchError):
    """A search request could not be served."""


class IndexOpenError(SearchError):
    """The on-disk index exists but could not be opened."""


class QueryParseError(SearchError):
    """The query string was rejected by the query grammar."""
