"""Search re-ranking components.

This package re-orders an upstream candidate batch using a lightweight IR
pipeline computed per request.

Contents
- ``constants``: tuned weights, bonuses and static text tables
- ``text``: normalization, tokenization and sequel-number helpers
- ``vectorizer``: weighted token bags and batch-local TF-IDF
- ``scorers``: cosine, overlap, fuzzy, sequel and coverage signals
- ``fusion``: score summation, stable sort and truncation
"""

from .fusion import rerank

__all__ = ["rerank"]
