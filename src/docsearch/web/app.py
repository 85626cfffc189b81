"""FastAPI application exposing rebuild and search over HTTP."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from docsearch.config import AppConfig
from docsearch.errors import QueryParseError, SearchError
from docsearch.index.indexer import rebuild_index
from docsearch.index.search import search_index
from docsearch.models import (
    DatePreset,
    DateRange,
    DirectoryConfig,
    SearchFilters,
    SizeRange,
)

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="DocSearch API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.config = AppConfig()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DirectoryPayload(CamelModel):
    path: str
    enabled: bool = True
    recursive: bool = True
    last_indexed: int = 0


class IndexPayload(CamelModel):
    directories: List[DirectoryPayload]


class DateRangePayload(CamelModel):
    start: Optional[int] = None
    end: Optional[int] = None


class SizeRangePayload(CamelModel):
    min: Optional[int] = None
    max: Optional[int] = None


class FiltersPayload(CamelModel):
    file_types: Optional[List[str]] = None
    date_range: Optional[DateRangePayload] = None
    date_preset: Optional[DatePreset] = None
    file_size_range: Optional[SizeRangePayload] = None

    def to_filters(self) -> SearchFilters:
        return SearchFilters(
            file_types=self.file_types,
            date_range=DateRange(**self.date_range.model_dump()) if self.date_range else None,
            date_preset=self.date_preset,
            size_range=SizeRange(**self.file_size_range.model_dump())
            if self.file_size_range
            else None,
        )


class SearchPayload(CamelModel):
    query: str = ""
    limit: Optional[int] = Field(default=None, ge=0, le=1000)
    offset: Optional[int] = Field(default=None, ge=0)
    filters: Optional[FiltersPayload] = None


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/index", status_code=202)
async def index_documents(payload: IndexPayload, request: Request) -> dict[str, Any]:
    """Schedule a full rebuild; progress is reported through the log only."""
    directories = [
        DirectoryConfig(
            path=item.path,
            enabled=item.enabled,
            recursive=item.recursive,
            last_indexed=item.last_indexed,
        )
        for item in payload.directories
    ]
    rebuild_index(directories, config=request.app.state.config)
    return {"status": "scheduled", "directories": len(directories)}


@app.post("/search")
async def search_documents(payload: SearchPayload, request: Request) -> dict[str, Any]:
    filters = payload.filters.to_filters() if payload.filters else None
    try:
        response = search_index(
            payload.query,
            limit=payload.limit,
            offset=payload.offset,
            filters=filters,
            config=request.app.state.config,
        )
    except QueryParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SearchError as exc:
        LOGGER.error("Search failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return response.to_dict()
