"""
Overlap-based similarity between two feature lists.

Both objects are matched against the corpus. Every concept matched by both
contributes the weight of its (level_a, level_b) pair, once from A's point
of view and once, mirrored, from B's. Each directional sum is normalised by
the number of concepts that side matched, and the two are combined by
geometric mean, which makes the score symmetric and zero whenever either
direction is zero.

Scores are not bounded by 1: with the default grid two identical objects
that fully match one concept score 2.0 (p55).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from concept_approacher.matching.matcher import ConceptMatcher
from concept_approacher.models.concept import Feature, MatchResult
from concept_approacher.scoring.overlap import LevelPair, OverlapAnalysis, analyze_overlap
from concept_approacher.scoring.params import ParameterTable, param_key


def partial_similarity(
    overlap_map: Dict[LevelPair, int],
    divisor: int,
    params: ParameterTable,
) -> float:
    """
    ``sum(count * params["p{a}{b}"]) / divisor``; 0.0 for a zero divisor.
    """
    if divisor == 0:
        return 0.0

    total = 0.0
    for (level_a, level_b), count in overlap_map.items():
        total += count * params[param_key(level_a, level_b)]

    return total / divisor


@dataclass
class SimilarityBreakdown:
    """
    Everything one score was computed from.
    """
    matches_a: List[MatchResult] = field(default_factory=list)
    matches_b: List[MatchResult] = field(default_factory=list)
    overlap: OverlapAnalysis = field(default_factory=OverlapAnalysis)
    partial_a: float = 0.0
    partial_b: float = 0.0
    similarity: float = 0.0


def score_matches(
    matches_a: Sequence[MatchResult],
    matches_b: Sequence[MatchResult],
    total_a: int,
    total_b: int,
    params: ParameterTable,
) -> SimilarityBreakdown:
    """
    Score two precomputed match sets.
    """
    overlap = analyze_overlap(matches_a, matches_b, total_a, total_b)
    breakdown = SimilarityBreakdown(
        matches_a=list(matches_a),
        matches_b=list(matches_b),
        overlap=overlap,
    )

    if overlap.total_matches == 0:
        return breakdown

    breakdown.partial_a = partial_similarity(overlap.overlap_map, len(matches_a), params)
    breakdown.partial_b = partial_similarity(
        overlap.mirrored().overlap_map, len(matches_b), params
    )
    # hand-edited tables may hold negative weights
    breakdown.similarity = math.sqrt(max(breakdown.partial_a * breakdown.partial_b, 0.0))
    return breakdown


def main_similarity(
    matcher: ConceptMatcher,
    features_a: Sequence[Feature],
    features_b: Sequence[Feature],
    params: ParameterTable,
) -> float:
    """
    Similarity of two feature lists using exact matching.
    """
    matches_a = matcher.find_matches(features_a)
    matches_b = matcher.find_matches(features_b)
    return score_matches(matches_a, matches_b, len(features_a), len(features_b), params).similarity
