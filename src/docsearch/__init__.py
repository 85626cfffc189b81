"""DocSearch - local full-text search for text, Word, Excel and PDF documents."""

from docsearch.index.indexer import rebuild_index
from docsearch.index.search import search_index

__all__ = ["rebuild_index", "search_index"]
__version__ = "0.1.0"
