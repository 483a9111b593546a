"""Search manager for archive queries with local re-ranking.

Fetches an over-sized candidate window from the upstream archive search,
re-ranks it with the batch-local pipeline in ``archive_search.ranking`` and
truncates to the requested page size. Upstream failures degrade to an empty
result instead of raising.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import structlog

from libs.common.config import SearchConfig
from libs.common.metrics import MetricsCollector
from libs.common.tracing import get_search_tracer
from ..ranking.fusion import rerank as rerank_candidates
from ..upstream.archive_client import ArchiveClient, ArchiveUpstreamError

logger = structlog.get_logger("archive_search.search_manager")


@dataclass
class SearchResult:
    """Documents for one page plus the upstream total match count."""
    docs: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0


def compute_fetch_window(
    page: int,
    rows: int,
    rerank: bool,
    multiplier: int = 5,
    max_rows: int = 100
) -> Tuple[int, int]:
    """Return ``(start, fetch_rows)`` for an upstream request.

    Re-ranking over-fetches ``rows * multiplier`` candidates, capped at
    ``max_rows``. The start offset is always based on ``rows``.
    """
    start = (page - 1) * rows
    if not rerank:
        return start, rows
    return start, min(max_rows, max(rows, rows * multiplier))


class SearchManager:
    """Manages search requests against the upstream archive.

    Responsibilities
    - Own the upstream HTTP client
    - Decide the candidate window for each request
    - Re-rank candidates and report upstream totals
    """

    def __init__(
        self,
        config: SearchConfig,
        client: Optional[ArchiveClient] = None,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        """Construct a search manager.

        Parameters
        - config: ``SearchConfig`` providing the upstream URL and window policy
        - client: Optional prebuilt ``ArchiveClient``; created in ``initialize``
          otherwise
        - metrics_collector: Optional collector for upstream/rerank metrics
        """
        self.config = config
        self.client = client
        self.metrics_collector = metrics_collector
        self.tracer = get_search_tracer("archive-search")

    async def initialize(self):
        """Create the upstream client if one was not injected."""
        if self.client is None:
            self.client = ArchiveClient(
                base_url=self.config.archive_upstream_base_url,
                timeout=self.config.archive_upstream_timeout
            )
        logger.info(
            "Search manager initialized",
            upstream=self.config.archive_upstream_base_url
        )

    async def cleanup(self):
        """Release the upstream client."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None
        logger.info("Search manager cleaned up")

    async def health_check(self) -> bool:
        """Report whether the manager can serve requests."""
        return self.client is not None

    def _record_upstream(self, operation: str, outcome: str):
        if self.metrics_collector is not None:
            self.metrics_collector.record_upstream_request(operation, outcome)

    async def search(
        self,
        query: str,
        rerank_query: Optional[str] = None,
        page: int = 1,
        rows: int = 10,
        rerank: bool = True
    ) -> SearchResult:
        """Search the archive and return one page of documents.

        ``rerank_query`` is an optional clean user query used only for
        re-ranking; upstream query strings may contain Lucene syntax that
        pollutes tokenization.

        ``total`` is the upstream match count, not the size of the re-ranked
        page.
        """
        if not query or not query.strip():
            logger.debug("Empty query, skipping upstream search")
            return SearchResult()

        start_time = time.time()
        start, fetch_rows = compute_fetch_window(
            page,
            rows,
            rerank,
            multiplier=self.config.archive_rerank_fetch_multiplier,
            max_rows=self.config.archive_rerank_max_fetch_rows
        )

        try:
            with self.tracer.trace_upstream_fetch("advanced_search", rows=fetch_rows, start=start):
                upstream = await self.client.advanced_search(query, rows=fetch_rows, start=start)
        except ArchiveUpstreamError as e:
            self._record_upstream("advanced_search", "error")
            logger.error("Upstream search failed", query=query, error=str(e))
            return SearchResult()
        self._record_upstream("advanced_search", "ok")

        docs = upstream.docs
        reranked = rerank and bool(docs)
        if reranked:
            ranking_query = (rerank_query if rerank_query is not None else query).strip()
            with self.tracer.trace_rerank(candidate_count=len(docs), page_size=rows):
                docs = rerank_candidates(docs, ranking_query, rows)
            if self.metrics_collector is not None:
                self.metrics_collector.record_rerank(len(upstream.docs))

        logger.info(
            "Search completed",
            query=query,
            page=page,
            rows=rows,
            fetched=len(upstream.docs),
            returned=len(docs),
            total=upstream.total,
            reranked=reranked,
            latency_ms=(time.time() - start_time) * 1000
        )

        return SearchResult(docs=docs, total=upstream.total)

    async def get_item(self, identifier: str) -> Optional[Dict[str, Any]]:
        """Fetch upstream metadata for one item, or ``None`` if unavailable.

        Raises ``ArchiveUpstreamError`` when the upstream cannot be reached.
        """
        try:
            with self.tracer.trace_upstream_fetch("metadata", identifier=identifier):
                item = await self.client.get_item_metadata(identifier)
        except ArchiveUpstreamError:
            self._record_upstream("metadata", "error")
            raise
        self._record_upstream("metadata", "ok")
        return item
