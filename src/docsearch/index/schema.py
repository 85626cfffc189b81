"""Index schema and per-field character n-gram analyzers.

Chinese text has no whitespace word boundaries, so both searchable text
fields are segmented into overlapping character n-grams instead of words.
Titles use 1-3 grams so that single-character queries still hit short file
names; bodies use 2-3 grams to keep the index size reasonable. Every gram
is lowercased so Latin queries are case-insensitive.
"""

from __future__ import annotations

from whoosh import fields
from whoosh.analysis import Analyzer, LowercaseFilter, NgramTokenizer

SEARCH_FIELDS = ("title", "content")

TITLE_NGRAM = (1, 3)
CONTENT_NGRAM = (2, 3)


def title_analyzer() -> Analyzer:
    return NgramTokenizer(*TITLE_NGRAM) | LowercaseFilter()


def content_analyzer() -> Analyzer:
    return NgramTokenizer(*CONTENT_NGRAM) | LowercaseFilter()


def build_schema() -> fields.Schema:
    """Build the index schema.

    Analyzers are pickled into the index table of contents, so an index
    opened later tokenizes queries exactly like it tokenized documents.
    """
    return fields.Schema(
        title=fields.TEXT(stored=True, analyzer=title_analyzer()),
        content=fields.TEXT(stored=True, analyzer=content_analyzer()),
        # Identity of a document; exact match only.
        file_path=fields.ID(stored=True, unique=True),
        file_type=fields.ID(stored=True),
        modified_time=fields.NUMERIC(
            numtype=int, bits=64, signed=True, stored=True, sortable=True
        ),
        file_size=fields.NUMERIC(numtype=int, bits=64, stored=True),
    )
