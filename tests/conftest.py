"""Shared fixtures for the archive search tests."""

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from archive_search.search.search_manager import SearchManager
from archive_search.upstream.archive_client import ArchiveClient
from libs.common.config import SearchConfig
from libs.common.metrics import MetricsCollector


def search_payload(docs: List[Dict[str, Any]], num_found: Optional[int] = None) -> Dict[str, Any]:
    """Build an advanced search response body."""
    response: Dict[str, Any] = {"docs": docs}
    if num_found is not None:
        response["numFound"] = num_found
    return {"responseHeader": {"status": 0}, "response": response}


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], ArchiveClient]:
    """Factory for an ``ArchiveClient`` backed by ``httpx.MockTransport``."""
    def factory(handler):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ArchiveClient(base_url="https://archive.test", http_client=http_client)
    return factory


@pytest.fixture
def metrics_collector() -> MetricsCollector:
    """Isolated metrics collector with its own registry."""
    return MetricsCollector("test-service")


@pytest.fixture
def make_manager(make_client, metrics_collector):
    """Factory for a ``SearchManager`` talking to a mocked upstream."""
    def factory(handler, **config_overrides):
        config = SearchConfig(**config_overrides)
        return SearchManager(
            config,
            client=make_client(handler),
            metrics_collector=metrics_collector
        )
    return factory


@pytest.fixture
def movie_docs() -> List[Dict[str, Any]]:
    """A small candidate batch in upstream order."""
    return [
        {
            "identifier": "cooking-with-gas",
            "title": "Cooking With Gas",
            "description": "A public domain cooking show",
            "mediatype": "movies",
            "downloads": 120,
        },
        {
            "identifier": "apollo-13-mission",
            "title": "Apollo 13 Mission",
            "subject": ["nasa", "space"],
            "description": "Mission audio from Apollo 13",
            "mediatype": "audio",
            "downloads": 5400,
        },
        {
            "identifier": "mission-impossible-1966",
            "title": "Mission Impossible",
            "creator": ["Bruce Geller"],
            "description": "Television pilot",
            "collection": ["classic_tv"],
            "mediatype": "movies",
        },
        {
            "identifier": "random-title",
            "title": "Random Title",
            "mediatype": "texts",
        },
    ]
