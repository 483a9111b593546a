"""Token bags and batch-local TF-IDF vectors.

The IDF table is computed over the current candidate batch only. There is no
persistent index: each search builds its own corpus statistics from the
documents the upstream API returned and throws them away afterwards.
"""

import math
from collections import defaultdict
from typing import Any, Dict, Mapping, Sequence

from .constants import FIELD_WEIGHTS, QUERY_TOKEN_WEIGHT
from .text import tokenize

TokenBag = Dict[str, float]
Vector = Dict[str, float]


def field_text(value: Any) -> str:
    """Flatten a metadata field value into one string.

    Upstream fields may be missing, scalar, or lists of strings.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value if item is not None)
    return str(value)


def build_doc_tokens(doc: Mapping[str, Any]) -> TokenBag:
    """Build a weighted token bag from a document's metadata fields.

    Each token occurrence adds its field's weight, so a word in both title
    and subject scores ``3 + 2``.
    """
    tokens: TokenBag = defaultdict(float)
    for field, weight in FIELD_WEIGHTS:
        text = field_text(doc.get(field))
        if not text:
            continue
        for token in tokenize(text):
            tokens[token] += weight
    return dict(tokens)


def build_query_tokens(query: str) -> TokenBag:
    """Build the query token bag with a flat weight per occurrence."""
    tokens: TokenBag = defaultdict(float)
    for token in tokenize(query):
        tokens[token] += QUERY_TOKEN_WEIGHT
    return dict(tokens)


def compute_idf(bags: Sequence[Mapping[str, float]]) -> Vector:
    """Compute smoothed IDF weights over a batch of token bags.

    ``idf(t) = ln(1 + (N + 1) / (df(t) + 1))``

    An empty batch produces an empty table.
    """
    df: Dict[str, int] = defaultdict(int)
    for bag in bags:
        for token in bag:
            df[token] += 1

    n = len(bags)
    return {
        token: math.log(1 + (n + 1) / (freq + 1))
        for token, freq in df.items()
    }


def to_vector(bag: Mapping[str, float], idf: Mapping[str, float]) -> Vector:
    """Weight a token bag by IDF. Tokens unknown to the batch are dropped."""
    return {token: tf * idf[token] for token, tf in bag.items() if token in idf}


def vector_norm(vector: Mapping[str, float]) -> float:
    """Euclidean norm of a sparse vector."""
    return math.sqrt(sum(value * value for value in vector.values()))
