"""API routes for the archive search service."""

import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
import structlog

from ..search.search_manager import SearchManager
from ..upstream.archive_client import ArchiveUpstreamError

logger = structlog.get_logger("archive_search.api")

router = APIRouter()


class SearchRequest(BaseModel):
    """Request model for search endpoint."""
    query: str = Field(..., description="Upstream search query (may use Lucene syntax)")
    rerank_query: Optional[str] = Field(None, description="Clean user query used only for re-ranking")
    page: int = Field(1, ge=1, description="1-based page number")
    rows: int = Field(10, ge=1, description="Page size")
    rerank: bool = Field(True, description="Re-rank an over-fetched candidate window")


class SearchResponse(BaseModel):
    """Response model for search endpoint."""
    docs: List[Dict[str, Any]] = Field(..., description="Archive documents for this page")
    total: int = Field(..., description="Upstream total match count")
    query: str = Field(..., description="Original query")
    page: int = Field(..., description="Requested page")
    rows: int = Field(..., description="Requested page size")
    reranked: bool = Field(..., description="Re-ranking requested")
    latency_ms: float = Field(..., description="Search latency in milliseconds")


def get_search_manager(request: Request) -> SearchManager:
    """Get search manager from application state."""
    return request.app.state.search_manager


def get_metrics(request: Request):
    """Get metrics collector from application state."""
    return request.app.state.metrics_collector


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    search_manager: SearchManager = Depends(get_search_manager),
    metrics_collector = Depends(get_metrics)
):
    """Search the archive and re-rank the results."""
    start_time = time.time()

    try:
        result = await search_manager.search(
            query=request.query,
            rerank_query=request.rerank_query,
            page=request.page,
            rows=request.rows,
            rerank=request.rerank
        )

        duration = time.time() - start_time
        metrics_collector.record_search(reranked=request.rerank, duration=duration)

        return SearchResponse(
            docs=result.docs,
            total=result.total,
            query=request.query,
            page=request.page,
            rows=request.rows,
            reranked=request.rerank,
            latency_ms=duration * 1000
        )

    except Exception as e:
        logger.error("Search failed", query=request.query, error=str(e))
        raise HTTPException(status_code=500, detail=f"Search failed: {str(e)}")


@router.get("/items/{identifier}")
async def get_item(
    identifier: str,
    search_manager: SearchManager = Depends(get_search_manager)
):
    """Return upstream metadata for a single archive item."""
    try:
        item = await search_manager.get_item(identifier)
    except ArchiveUpstreamError as e:
        logger.error("Item lookup failed", identifier=identifier, error=str(e))
        raise HTTPException(status_code=502, detail=f"Upstream archive unavailable: {str(e)}")

    if item is None:
        raise HTTPException(status_code=404, detail=f"Item not found: {identifier}")

    logger.info("Item metadata retrieved", identifier=identifier)
    return item
