"""Similarity and heuristic scoring for re-ranking candidates.

Signals:
    - vector: TF-IDF cosine similarity between query and document
    - phrase: normalized query found verbatim in the normalized title
    - overlap: Jaccard similarity of significant query tokens and title tokens
    - fuzzy: per query token, exact or near (edit distance) title matches
    - sequel: title contains a numeral/roman/word form of the query's number
    - coverage: penalty when a long query barely matches the title

Scores are not normalized; they are only compared within one batch.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from .constants import (
    COVERAGE_MAX_MATCHED,
    COVERAGE_MIN_QUERY_TOKENS,
    COVERAGE_PENALTY,
    FUZZY_EXACT_BONUS,
    FUZZY_LONG_MAX_DISTANCE,
    FUZZY_LONG_TOKEN_LENGTH,
    FUZZY_MAX_LENGTH_DIFF,
    FUZZY_NEAR_BONUS,
    FUZZY_SHORT_MAX_DISTANCE,
    PHRASE_IN_TITLE_BONUS,
    SEQUEL_BONUS,
    TOKEN_OVERLAP_WEIGHT,
)
from .text import normalize, tokenize
from .vectorizer import field_text, vector_norm

if TYPE_CHECKING:
    from .fusion import QueryProfile


@dataclass(frozen=True)
class ScoreBreakdown:
    """Individual ranking signals for one document."""
    vector: float = 0.0
    phrase: float = 0.0
    overlap: float = 0.0
    fuzzy: float = 0.0
    sequel: float = 0.0
    coverage: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.vector
            + self.phrase
            + self.overlap
            + self.fuzzy
            + self.sequel
            + self.coverage
        )


def cosine_similarity(
    query_vec: Mapping[str, float],
    doc_vec: Mapping[str, float],
    query_norm: float,
    doc_norm: Optional[float] = None,
) -> float:
    """Cosine similarity of two sparse vectors.

    ``query_norm`` is passed in because it is shared by the whole batch.
    Returns 0.0 when either vector has zero norm.
    """
    if doc_norm is None:
        doc_norm = vector_norm(doc_vec)
    if query_norm == 0 or doc_norm == 0:
        return 0.0

    if len(doc_vec) < len(query_vec):
        smaller, larger = doc_vec, query_vec
    else:
        smaller, larger = query_vec, doc_vec

    dot = 0.0
    for token, value in smaller.items():
        other = larger.get(token)
        if other is not None:
            dot += value * other

    return dot / (query_norm * doc_norm)


def jaccard_similarity(a_tokens: Sequence[str], b_tokens: Sequence[str]) -> float:
    """Intersection over union of two token sets; 0.0 if either is empty."""
    if not a_tokens or not b_tokens:
        return 0.0
    a, b = set(a_tokens), set(b_tokens)
    intersection = len(a & b)
    union = len(a) + len(b) - intersection
    return intersection / union if union else 0.0


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit cost insertions, deletions and substitutions."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        curr = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            curr[j] = min(prev[j] + 1, curr[j - 1] + 1, prev[j - 1] + cost)
        prev = curr
    return prev[-1]


def allowed_distance(token: str) -> int:
    """Maximum edit distance still counted as a match for ``token``."""
    if len(token) >= FUZZY_LONG_TOKEN_LENGTH:
        return FUZZY_LONG_MAX_DISTANCE
    return FUZZY_SHORT_MAX_DISTANCE


def best_title_distance(token: str, title_tokens: Sequence[str]) -> Optional[int]:
    """Smallest edit distance from ``token`` to a comparable title token.

    Title tokens whose length differs by more than ``FUZZY_MAX_LENGTH_DIFF``
    are skipped. Returns ``None`` when nothing was comparable.
    """
    best = None
    for title_token in title_tokens:
        if abs(len(token) - len(title_token)) > FUZZY_MAX_LENGTH_DIFF:
            continue
        distance = levenshtein(token, title_token)
        if best is None or distance < best:
            best = distance
        if best == 0:
            break
    return best


def fuzzy_title_match(
    query_tokens: Sequence[str],
    title_tokens: Sequence[str],
) -> Tuple[float, int]:
    """Fuzzy bonus and number of matched query tokens.

    Every query token is considered independently; the bonus is not capped.
    """
    bonus = 0.0
    matched = 0
    for token in query_tokens:
        best = best_title_distance(token, title_tokens)
        if best is None or best > allowed_distance(token):
            continue
        matched += 1
        bonus += FUZZY_EXACT_BONUS if best == 0 else FUZZY_NEAR_BONUS
    return bonus, matched


def score_document(
    query: "QueryProfile",
    doc: Mapping[str, Any],
    doc_vector: Mapping[str, float],
) -> ScoreBreakdown:
    """Score one candidate document against a prepared query profile."""
    title = field_text(doc.get("title"))
    title_norm = normalize(title)
    title_tokens = tokenize(title)

    vector = cosine_similarity(query.vector, doc_vector, query.norm)

    phrase = 0.0
    if query.normalized and query.normalized in title_norm:
        phrase = PHRASE_IN_TITLE_BONUS

    overlap = jaccard_similarity(query.significant_tokens, title_tokens) * TOKEN_OVERLAP_WEIGHT

    fuzzy, matched = fuzzy_title_match(query.significant_tokens, title_tokens)

    sequel = 0.0
    if query.sequel_variants and any(t in query.sequel_variants for t in title_tokens):
        sequel = SEQUEL_BONUS

    coverage = 0.0
    if (
        len(query.significant_tokens) >= COVERAGE_MIN_QUERY_TOKENS
        and matched <= COVERAGE_MAX_MATCHED
    ):
        coverage = COVERAGE_PENALTY

    return ScoreBreakdown(
        vector=vector,
        phrase=phrase,
        overlap=overlap,
        fuzzy=fuzzy,
        sequel=sequel,
        coverage=coverage,
    )
