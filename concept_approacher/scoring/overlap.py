# concept_approacher/scoring/overlap.py

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

from concept_approacher.models.concept import MatchResult

LevelPair = Tuple[int, int]

MIN_LEVEL = 1
MAX_LEVEL = 5


def match_level(matched: int, total: int) -> int:
    """
    Bucket ``matched / total`` into five 20%-wide bands, rounding up:

        <=20% -> 1, <=40% -> 2, <=60% -> 3, <=80% -> 4, else 5

    Degenerate inputs (no features, nothing matched) land in level 1.
    """
    if total <= 0 or matched <= 0:
        return MIN_LEVEL

    # ceil(5 * matched / total) in integer arithmetic, so band edges are exact
    level = -(-MAX_LEVEL * matched // total)
    return min(MAX_LEVEL, max(MIN_LEVEL, level))


@dataclass
class OverlapAnalysis:
    """
    Concepts matched by both objects, bucketed by (level_a, level_b).
    """
    overlap_map: Dict[LevelPair, int] = field(default_factory=dict)
    total_matches: int = 0

    def mirrored(self) -> "OverlapAnalysis":
        return OverlapAnalysis(
            overlap_map=mirror_overlap(self.overlap_map),
            total_matches=self.total_matches,
        )


def analyze_overlap(
    matches_a: Sequence[MatchResult],
    matches_b: Sequence[MatchResult],
    total_a: int,
    total_b: int,
) -> OverlapAnalysis:
    """
    Cross-reference two match sets.

    Concepts matched by only one side are ignored.
    """
    by_id = {m.concept_id: m for m in matches_b}
    buckets: Counter = Counter()

    for ma in matches_a:
        mb = by_id.get(ma.concept_id)
        if mb is None:
            continue
        level_a = match_level(ma.match_count, total_a)
        level_b = match_level(mb.match_count, total_b)
        buckets[(level_a, level_b)] += 1

    return OverlapAnalysis(
        overlap_map=dict(buckets),
        total_matches=sum(buckets.values()),
    )


def mirror_overlap(overlap_map: Dict[LevelPair, int]) -> Dict[LevelPair, int]:
    """(a, b) -> n becomes (b, a) -> n."""
    return {(b, a): n for (a, b), n in overlap_map.items()}
