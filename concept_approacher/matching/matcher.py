"""
Matching of input feature lists against stored concepts.

Three flavours:

- exact:     values (and keys, when given) must be identical;
- fuzzy:     best string similarity of a candidate value must reach a threshold;
- recursive: fuzzy, and when a concept has no direct match, input values are
             substituted with near-identical corpus values and the search is
             repeated one level deeper. Matches found that way are halved
             (floored at 1) per hop.

The recursive search is greedy: per input feature the first substitute that
yields any match is accepted, not the best one.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from concept_approacher.graph.store import ConceptStore
from concept_approacher.models.concept import Concept, Feature, MatchResult
from concept_approacher.nlp.string_similarity import string_similarity

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.6
DEFAULT_MAX_DEPTH = 2

FeatureTuple = Tuple[Feature, ...]


def _dedupe_by_concept(results: List[MatchResult]) -> List[MatchResult]:
    """
    Keep one result per concept id (the highest match_count), ordered by id.
    """
    best: Dict[int, MatchResult] = {}
    for r in results:
        current = best.get(r.concept_id)
        if current is None or r.match_count > current.match_count:
            best[r.concept_id] = r
    return [best[cid] for cid in sorted(best)]


class ConceptMatcher:
    """
    Runs feature lists against every concept of a ConceptStore.
    """

    def __init__(self, store: ConceptStore) -> None:
        self._store = store

    @property
    def store(self) -> ConceptStore:
        return self._store

    # ------------------------------------------------------------------
    # Single-concept matching
    # ------------------------------------------------------------------

    def match_exact(self, features: Sequence[Feature], concept: Concept) -> MatchResult:
        """
        Unkeyed features match any identical concept value; keyed features
        need an identical (key, value) pair. Each input feature counts once.
        """
        result = MatchResult(concept_id=concept.id)
        values = concept.feature_values

        for i, feature in enumerate(features):
            if feature.is_keyed:
                matched = any(
                    cf.key == feature.key and cf.value == feature.value
                    for cf in concept.features
                )
            else:
                matched = feature.value in values

            if matched:
                result.match_count += 1
                result.matched_indices.add(i)

        return result

    def match_fuzzy(
        self,
        features: Sequence[Feature],
        concept: Concept,
        threshold: float = DEFAULT_FUZZY_THRESHOLD,
    ) -> MatchResult:
        """
        A feature matches when its best similarity to a candidate value is
        at least `threshold`. Candidates are all concept values for unkeyed
        features, or the values under the same key for keyed ones.
        """
        result = MatchResult(concept_id=concept.id)

        for i, feature in enumerate(features):
            if feature.is_keyed:
                candidates = [cf.value for cf in concept.features if cf.key == feature.key]
            else:
                candidates = list(concept.feature_values)

            best: Optional[float] = None
            for candidate in candidates:
                similarity = string_similarity(feature.value, candidate)
                if best is None or similarity > best:
                    best = similarity

            if best is not None and best >= threshold:
                result.match_count += 1
                result.matched_indices.add(i)

        return result

    # ------------------------------------------------------------------
    # Corpus-wide helpers
    # ------------------------------------------------------------------

    def find_similar_values(
        self,
        value: str,
        min_similarity: float = DEFAULT_FUZZY_THRESHOLD,
    ) -> List[Tuple[str, float]]:
        """
        Distinct corpus values with similarity >= `min_similarity` to `value`,
        most similar first.
        """
        similar = []
        for candidate in self._store.distinct_values():
            similarity = string_similarity(value, candidate)
            if similarity >= min_similarity:
                similar.append((candidate, similarity))

        similar.sort(key=lambda pair: pair[1], reverse=True)
        return similar

    def find_matches(
        self,
        features: Sequence[Feature],
        use_fuzzy: bool = False,
        threshold: float = DEFAULT_FUZZY_THRESHOLD,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> List[MatchResult]:
        """
        Match `features` against every stored concept.

        Only concepts with at least one matched feature are returned,
        ordered by concept id.
        """
        if use_fuzzy and max_depth > 1:
            return self.recursive_match(features, max_depth=max_depth, threshold=threshold)

        results: List[MatchResult] = []
        for concept in self._store.get_all():
            if use_fuzzy:
                match = self.match_fuzzy(features, concept, threshold)
            else:
                match = self.match_exact(features, concept)

            if match.match_count > 0:
                results.append(match)

        return results

    # ------------------------------------------------------------------
    # Recursive fuzzy matching
    # ------------------------------------------------------------------

    def recursive_match(
        self,
        features: Sequence[Feature],
        max_depth: int = DEFAULT_MAX_DEPTH,
        threshold: float = DEFAULT_FUZZY_THRESHOLD,
    ) -> List[MatchResult]:
        """
        Depth-limited fuzzy matching with value substitution.

        For each concept the direct fuzzy match is tried first. A concept
        with no direct match triggers the substitution search (while depth
        remains): the first substitute value whose deeper search finds
        anything wins, and every result it returns is folded in with
        ``match_count = max(1, match_count // 2)``. Results are deduplicated
        by concept id, keeping the higher count.

        ``max_depth == 1`` is plain fuzzy matching.
        """
        memo: Dict[Tuple[FeatureTuple, int], List[MatchResult]] = {}
        similar_cache: Dict[str, List[Tuple[str, float]]] = {}
        return self._recursive_match(tuple(features), max_depth, threshold, memo, similar_cache)

    def _similar_values_cached(
        self,
        value: str,
        threshold: float,
        similar_cache: Dict[str, List[Tuple[str, float]]],
    ) -> List[Tuple[str, float]]:
        if value not in similar_cache:
            similar_cache[value] = self.find_similar_values(value, threshold)
        return similar_cache[value]

    def _recursive_match(
        self,
        features: FeatureTuple,
        depth: int,
        threshold: float,
        memo: Dict[Tuple[FeatureTuple, int], List[MatchResult]],
        similar_cache: Dict[str, List[Tuple[str, float]]],
    ) -> List[MatchResult]:
        # Results depend only on (features, depth) for a fixed store and
        # threshold, so repeated sub-searches are answered from the memo.
        key = (features, depth)
        if key in memo:
            return [r.copy() for r in memo[key]]

        results: List[MatchResult] = []
        substituted: Optional[List[MatchResult]] = None

        for concept in self._store.get_all():
            direct = self.match_fuzzy(features, concept, threshold)
            if direct.match_count > 0:
                results.append(direct)
                continue

            if depth <= 1:
                continue

            # The substitution search is corpus-wide and does not depend on
            # the concept that triggered it.
            if substituted is None:
                substituted = self._substitution_search(
                    features, depth, threshold, memo, similar_cache
                )
            results.extend(r.copy() for r in substituted)

        deduped = _dedupe_by_concept(results)
        memo[key] = deduped
        return [r.copy() for r in deduped]

    def _substitution_search(
        self,
        features: FeatureTuple,
        depth: int,
        threshold: float,
        memo: Dict[Tuple[FeatureTuple, int], List[MatchResult]],
        similar_cache: Dict[str, List[Tuple[str, float]]],
    ) -> List[MatchResult]:
        for feature in features:
            original = feature.value
            for substitute, similarity in self._similar_values_cached(original, threshold, similar_cache):
                modified = tuple(
                    f.with_value(substitute) if f.value == original else f
                    for f in features
                )

                nested = self._recursive_match(modified, depth - 1, threshold, memo, similar_cache)
                if nested:
                    logger.debug(
                        "Substituted %r -> %r (similarity %.3f) at depth %d: %d matches",
                        original,
                        substitute,
                        similarity,
                        depth,
                        len(nested),
                    )
                    for r in nested:
                        r.match_count = max(1, r.match_count // 2)
                    return nested

        return []
