"""Text normalization for query re-ranking.

Queries and metadata fields go through the same transform: lowercase, every
run of non ``[a-z0-9]`` characters becomes one space. Non-ASCII letters are
treated as separators, matching how the upstream field values are compared.
"""

import re
from typing import Iterable, List, Optional

from .constants import (
    NUMBER_WORDS,
    ROMAN_NUMBER_LIMIT,
    ROMAN_NUMERALS,
    SEQUEL_NUMBER_MAX,
    SEQUEL_NUMBER_MIN,
    STOP_WORDS,
    TYPO_CORRECTIONS,
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_SEQUEL_TOKEN = re.compile(r"[0-9]{1,2}")
_TYPO_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(word) for word in TYPO_CORRECTIONS) + r")\b"
)


def normalize(raw: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to single spaces and trim."""
    return _NON_ALNUM.sub(" ", (raw or "").lower()).strip()


def tokenize(raw: str) -> List[str]:
    """Split ``raw`` into normalized tokens, dropping empty ones."""
    return [token for token in normalize(raw).split(" ") if token]


def normalize_user_query(raw: str) -> str:
    """Normalize a user query and fix a handful of known misspellings.

    >>> normalize_user_query("Imposible  Misison!")
    'impossible mission'
    """
    return _TYPO_PATTERN.sub(lambda m: TYPO_CORRECTIONS[m.group(1)], normalize(raw))


def significant_tokens(tokens: Iterable[str]) -> List[str]:
    """Tokens that may trigger heuristic bonuses.

    Single characters and stop words are dropped. Order and duplicates are
    kept because the coverage penalty counts positions, not distinct words.
    """
    return [t for t in tokens if len(t) > 1 and t not in STOP_WORDS]


def extract_sequel_number(tokens: Iterable[str]) -> Optional[int]:
    """Return the first one- or two-digit token in the sequel range, if any."""
    for token in tokens:
        if _SEQUEL_TOKEN.fullmatch(token):
            number = int(token)
            if SEQUEL_NUMBER_MIN <= number <= SEQUEL_NUMBER_MAX:
                return number
    return None


def to_roman(number: int) -> Optional[str]:
    """Lowercase subtractive roman numeral for 1..39, otherwise ``None``."""
    if number <= 0 or number >= ROMAN_NUMBER_LIMIT:
        return None
    remaining = int(number)
    out = []
    for value, symbol in ROMAN_NUMERALS:
        while remaining >= value:
            out.append(symbol)
            remaining -= value
    return "".join(out)


def number_to_word(number: int) -> Optional[str]:
    """English word for 0..20, otherwise ``None``."""
    return NUMBER_WORDS.get(number)


def sequel_variants(number: int) -> List[str]:
    """Arabic, roman and word spellings of ``number``, de-duplicated.

    >>> sequel_variants(2)
    ['2', 'ii', 'two']
    >>> sequel_variants(25)
    ['25', 'xxv']
    """
    variants = [str(number)]
    for variant in (to_roman(number), number_to_word(number)):
        if variant and variant not in variants:
            variants.append(variant)
    return variants
