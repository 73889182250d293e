"""
Normalized string similarity used by duplicate detection.

Similarity is 1 - Levenshtein(a, b) / max(len(a), len(b)) over lowercased
strings, so it is symmetric, lies in [0, 1] and equals 1 for identical input.
"""

from typing import Iterable, Optional

from rapidfuzz.distance import Levenshtein


def calculate_similarity(a: Optional[str], b: Optional[str]) -> float:
    """
    Calculate normalized Levenshtein similarity of two strings.

    Args:
        a: First string (None treated as empty).
        b: Second string (None treated as empty).

    Returns:
        Similarity in [0, 1]. Two empty strings score 1.0.
    """
    a = (a or "").lower()
    b = (b or "").lower()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    distance = Levenshtein.distance(a, b)
    return (longest - distance) / longest


def weighted_similarity(pairs: Iterable[tuple[Optional[str], Optional[str], float]]) -> float:
    """
    Combine field-level similarities with weights.

    Args:
        pairs: (value_a, value_b, weight) per field. Weights should sum to 1.

    Returns:
        Weighted sum of field similarities.
    """
    return sum(calculate_similarity(a, b) * weight for a, b, weight in pairs)
