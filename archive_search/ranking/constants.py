"""Ranking constants and static tables.

All weights and bonuses below were tuned by hand against real archive
queries. They are kept here, as plain constants, so that tuning stays in one
place.

Organization:
    1. Static text tables (stop words, typo corrections, number words)
    2. Field weights for token bags
    3. Heuristic bonuses and penalties
    4. Fuzzy matching thresholds
"""

# =============================================================================
# Static text tables
# =============================================================================

# Removed only from the heuristic token set; TF-IDF bags keep them.
STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "for",
    "from", "in", "is", "it", "of", "on", "or", "the", "to", "with",
})

# Whole-word replacements applied to the user query before ranking.
# Unknown typos are left to fuzzy matching.
TYPO_CORRECTIONS = {
    "imposible": "impossible",
    "impossibile": "impossible",
    "misison": "mission",
}

NUMBER_WORDS = {
    0: "zero",
    1: "one",
    2: "two",
    3: "three",
    4: "four",
    5: "five",
    6: "six",
    7: "seven",
    8: "eight",
    9: "nine",
    10: "ten",
    11: "eleven",
    12: "twelve",
    13: "thirteen",
    14: "fourteen",
    15: "fifteen",
    16: "sixteen",
    17: "seventeen",
    18: "eighteen",
    19: "nineteen",
    20: "twenty",
}

ROMAN_NUMERALS = (
    (10, "x"),
    (9, "ix"),
    (5, "v"),
    (4, "iv"),
    (1, "i"),
)

SEQUEL_NUMBER_MIN = 1
SEQUEL_NUMBER_MAX = 40
ROMAN_NUMBER_LIMIT = 40  # exclusive

# =============================================================================
# Token bag weights
# =============================================================================

FIELD_WEIGHTS = (
    ("title", 3.0),
    ("subject", 2.0),
    ("description", 1.5),
    ("creator", 1.5),
    ("collection", 1.0),
)

QUERY_TOKEN_WEIGHT = 3.0

# =============================================================================
# Heuristic signals
# =============================================================================

PHRASE_IN_TITLE_BONUS = 1.25
TOKEN_OVERLAP_WEIGHT = 0.9
FUZZY_EXACT_BONUS = 0.35
FUZZY_NEAR_BONUS = 0.20
SEQUEL_BONUS = 0.8

COVERAGE_PENALTY = -0.5
COVERAGE_MIN_QUERY_TOKENS = 3
COVERAGE_MAX_MATCHED = 1

# =============================================================================
# Fuzzy matching
# =============================================================================

FUZZY_MAX_LENGTH_DIFF = 2
FUZZY_LONG_TOKEN_LENGTH = 8
FUZZY_SHORT_MAX_DISTANCE = 1
FUZZY_LONG_MAX_DISTANCE = 2
