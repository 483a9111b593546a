"""HTTP client for the public archive.org APIs.

Only two endpoints are used: the keyed-field advanced search, which supplies
re-ranking candidates, and the per-item metadata lookup.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import structlog

logger = structlog.get_logger("archive_search.upstream")

SEARCH_FIELDS = (
    "identifier",
    "title",
    "creator",
    "mediatype",
    "date",
    "year",
    "description",
    "downloads",
    "subject",
    "collection",
)


class ArchiveUpstreamError(Exception):
    """Raised when the upstream archive API cannot be reached or parsed."""


@dataclass
class UpstreamPage:
    """Documents and total match count from one advanced search call."""
    docs: List[Dict[str, Any]]
    total: int


def parse_search_payload(payload: Any) -> UpstreamPage:
    """Extract ``docs`` and ``numFound`` from an advanced search response.

    Missing or malformed parts degrade to an empty list and ``len(docs)``.
    Entries of ``docs`` that are not objects are dropped.
    """
    response = payload.get("response") if isinstance(payload, dict) else None
    if not isinstance(response, dict):
        response = {}

    docs = response.get("docs")
    if not isinstance(docs, list):
        if docs is not None:
            logger.warning("Upstream docs is not a list", docs_type=type(docs).__name__)
        docs = []

    records = [doc for doc in docs if isinstance(doc, dict)]
    if len(records) != len(docs):
        logger.warning("Dropped non-object upstream docs", dropped=len(docs) - len(records))
    docs = records

    total = response.get("numFound")
    if not isinstance(total, int) or isinstance(total, bool):
        total = len(docs)

    return UpstreamPage(docs=docs, total=total)


class ArchiveClient:
    """Async client for archive.org search and metadata.

    Parameters
    - base_url: Archive root URL, e.g. ``https://archive.org``
    - timeout: Request timeout in seconds
    - http_client: Optional preconfigured ``httpx.AsyncClient`` (tests inject
      one backed by ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: str = "https://archive.org",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def advanced_search(self, query: str, rows: int, start: int = 0) -> UpstreamPage:
        """Run a keyed-field search and return one window of results."""
        params = [("q", query)]
        params.extend(("fl[]", name) for name in SEARCH_FIELDS)
        params.extend([
            ("rows", str(rows)),
            ("start", str(start)),
            ("output", "json"),
        ])

        try:
            response = await self.http_client.get(
                f"{self.base_url}/advancedsearch.php",
                params=params
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise ArchiveUpstreamError(f"Advanced search request failed: {e}") from e
        except ValueError as e:
            raise ArchiveUpstreamError(f"Advanced search returned invalid JSON: {e}") from e

        page = parse_search_payload(payload)
        logger.debug(
            "Advanced search fetched",
            rows=rows,
            start=start,
            docs_count=len(page.docs),
            total=page.total
        )
        return page

    async def get_item_metadata(self, identifier: str) -> Optional[Dict[str, Any]]:
        """Fetch the metadata document for one item.

        Returns ``None`` for non-2xx responses and for the empty object the
        API returns for unknown identifiers.
        """
        try:
            response = await self.http_client.get(f"{self.base_url}/metadata/{identifier}")
        except httpx.HTTPError as e:
            raise ArchiveUpstreamError(f"Metadata request failed: {e}") from e

        if not response.is_success:
            logger.info(
                "Item metadata unavailable",
                identifier=identifier,
                status_code=response.status_code
            )
            return None

        try:
            payload = response.json()
        except ValueError as e:
            raise ArchiveUpstreamError(f"Metadata returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or not payload:
            return None
        return payload

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.http_client.aclose()
