"""Rank fusion and truncation for upstream search candidates.

The upstream API returns an over-fetched candidate batch. This module scores
every candidate against the user's query, sums the signals from
``scorers.score_document`` into one score, stable-sorts by that score and
keeps the first ``page_size`` documents.

Re-ranking is pure post-processing: documents are returned as the same
objects, in a new order, and only the final truncation removes any.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

import structlog

from .scorers import ScoreBreakdown, score_document
from .text import (
    extract_sequel_number,
    normalize_user_query,
    sequel_variants,
    significant_tokens,
    tokenize,
)
from .vectorizer import (
    Vector,
    build_doc_tokens,
    build_query_tokens,
    compute_idf,
    to_vector,
    vector_norm,
)

logger = structlog.get_logger("archive_search.ranking")


@dataclass(frozen=True)
class QueryProfile:
    """Query-side features shared by every document in a batch."""
    normalized: str
    vector: Vector
    norm: float
    significant_tokens: List[str]
    sequel_variants: Optional[FrozenSet[str]]


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate with its upstream position and ranking signals."""
    position: int
    doc: Dict[str, Any]
    breakdown: ScoreBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.total


def build_query_profile(query: str, idf: Mapping[str, float]) -> QueryProfile:
    """Prepare a query for scoring against a batch with the given IDF table.

    The query is cleaned with ``normalize_user_query`` first, so callers may
    pass raw user input.
    """
    text = normalize_user_query(query)
    vector = to_vector(build_query_tokens(text), idf)
    all_tokens = tokenize(text)

    number = extract_sequel_number(all_tokens)
    variants = frozenset(sequel_variants(number)) if number is not None else None

    return QueryProfile(
        normalized=text,
        vector=vector,
        norm=vector_norm(vector),
        significant_tokens=significant_tokens(all_tokens),
        sequel_variants=variants,
    )


def score_candidates(candidates: List[Dict[str, Any]], query: str) -> List[ScoredCandidate]:
    """Score a candidate batch in upstream order."""
    doc_tokens = [build_doc_tokens(doc) for doc in candidates]
    idf = compute_idf(doc_tokens)
    profile = build_query_profile(query, idf)

    return [
        ScoredCandidate(
            position=position,
            doc=doc,
            breakdown=score_document(profile, doc, to_vector(tokens, idf)),
        )
        for position, (doc, tokens) in enumerate(zip(candidates, doc_tokens))
    ]


def rerank(candidates: Any, query: str, page_size: int) -> Any:
    """Re-order ``candidates`` by relevance to ``query`` and truncate.

    Returns ``candidates`` untouched when it is not a non-empty list. Equal
    scores keep their upstream order (``sorted`` is stable, including with
    ``reverse=True``).
    """
    if not isinstance(candidates, list) or not candidates:
        return candidates

    scored = score_candidates(candidates, query)
    ranked = sorted(scored, key=lambda candidate: candidate.score, reverse=True)
    page = [candidate.doc for candidate in ranked[:max(page_size, 0)]]

    logger.debug(
        "Candidates reranked",
        candidate_count=len(candidates),
        page_size=page_size,
        top_score=ranked[0].score,
    )

    return page
