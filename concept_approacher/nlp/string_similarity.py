"""
Edit-distance based string similarity.

Distances are plain Levenshtein distances (unit cost for insert, delete and
substitute) computed by rapidfuzz, measured over Unicode code points.
"""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def edit_distance(a: str, b: str) -> int:
    """
    Levenshtein distance between two strings.
    """
    return Levenshtein.distance(a, b)


def string_similarity(a: str, b: str) -> float:
    """
    Similarity in [0, 1]: ``1 - edit_distance / max(len(a), len(b))``.

    Two empty strings are identical (1.0); an empty string against a
    non-empty one shares nothing (0.0).
    """
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0

    return 1.0 - edit_distance(a, b) / max(len(a), len(b))
