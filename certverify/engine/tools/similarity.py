# Path: certverify/engine/tools/similarity.py
"""
String Similarity

Normalized Levenshtein similarity for comparing noisy OCR fields with
canonical records, backed by rapidfuzz.

Callers pass pre-normalized strings; normalize_text() provides the
normalization used by the record matcher (lowercase, collapsed
whitespace).
"""

import re

from rapidfuzz.distance import Levenshtein

_WHITESPACE = re.compile(r'\s+')


def normalize_text(value) -> str:
    """Lowercase, strip and collapse internal whitespace."""
    if value is None:
        return ''
    return _WHITESPACE.sub(' ', str(value)).strip().lower()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance (insertions, deletions, substitutions) from a to b."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Normalized similarity in [0, 1].

    1 - edit_distance(a, b) / max(len(a), len(b)); 1.0 when both are empty.
    Comparison is case-sensitive.

    Example:
        similarity('rahul kumar', 'rahul kumr')  # 0.909...
    """
    return Levenshtein.normalized_similarity(a, b)


__all__ = ['normalize_text', 'edit_distance', 'similarity']
