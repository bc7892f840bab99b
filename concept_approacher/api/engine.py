"""
In-process facade over store, matcher, scorer and learner.

One engine owns one store, one parameter table and one training set. The
matcher, scorer and learner all work on those same instances. Scoring,
loading and optimization run under a single re-entrant lock, so a training
run never interleaves with a comparison.
"""

from __future__ import annotations

import logging
import pickle
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from concept_approacher.api.models import MatchSummary, OverlapBucket, SimilarityReport
from concept_approacher.config.settings import Settings, get_settings
from concept_approacher.graph.io import load_store, save_store
from concept_approacher.graph.store import ConceptStore, StoreInitializationError
from concept_approacher.ingest.corpus_loader import CorpusLoadReport, load_corpus_file
from concept_approacher.learning.optimizer import OptimizationResult, ParameterLearner
from concept_approacher.learning.samples import TrainingSet, load_training_samples
from concept_approacher.matching.matcher import ConceptMatcher
from concept_approacher.models.concept import Concept, Feature, MatchResult, TrainingSample
from concept_approacher.nlp.features import format_features
from concept_approacher.scoring import params_io
from concept_approacher.scoring.params import ParameterTable
from concept_approacher.scoring.similarity import main_similarity, score_matches

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ApproacherEngine:
    def __init__(
        self,
        store: Optional[ConceptStore] = None,
        params: Optional[ParameterTable] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.params = params if params is not None else ParameterTable.defaults()
        self.training_set = TrainingSet()
        self._lock = threading.RLock()
        self._attach_store(store if store is not None else ConceptStore())

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        params_path: Optional[PathLike] = None,
    ) -> "ApproacherEngine":
        """
        Build an engine with default weights, overwritten by the parameter
        file (`params_path`, else settings.params_path) when it exists. The
        store starts empty; call ``initialize_store`` to populate it.
        """
        settings = settings or get_settings()
        engine = cls(settings=settings)

        source = Path(params_path) if params_path is not None else settings.params_path
        if source.exists():
            engine.load_parameters(source)
        else:
            logger.info("No parameter file at %s, using default weights", source)

        return engine

    def _attach_store(self, store: ConceptStore) -> None:
        self.store = store
        self.matcher = ConceptMatcher(store)
        self.learner = ParameterLearner(
            self.matcher,
            self.training_set,
            self.params,
            epsilon=self.settings.GRADIENT_EPSILON,
            param_min=self.settings.PARAM_MIN,
            param_max=self.settings.PARAM_MAX,
            progress_every=self.settings.PROGRESS_EVERY,
        )

    # ------------------------------------------------------------------
    # Store population
    # ------------------------------------------------------------------

    def load_corpus(self, path: Optional[PathLike] = None) -> CorpusLoadReport:
        """
        Append the concepts of a corpus file to the store.

        Raises StoreInitializationError when the file cannot be read or the
        store is still empty afterwards.
        """
        corpus_path = Path(path) if path is not None else self.settings.corpus_path

        with self._lock:
            try:
                report = load_corpus_file(corpus_path, self.store)
            except OSError as exc:
                raise StoreInitializationError(f"Cannot read corpus {corpus_path}: {exc}") from exc

            if self.store.count() == 0:
                raise StoreInitializationError(f"No concepts loaded from {corpus_path}")

            return report

    def load_snapshot(self, path: PathLike) -> int:
        """
        Replace the store with a pickled snapshot; returns the concept count.
        """
        with self._lock:
            try:
                store = load_store(path)
            except (
                OSError,
                EOFError,
                TypeError,
                AttributeError,
                ImportError,
                pickle.UnpicklingError,
            ) as exc:
                raise StoreInitializationError(f"Cannot load store snapshot {path}: {exc}") from exc

            if store.count() == 0:
                raise StoreInitializationError(f"Store snapshot {path} holds no concepts")

            self._attach_store(store)
            logger.info("Loaded %d concepts from snapshot %s", store.count(), path)
            return store.count()

    def save_snapshot(self, path: PathLike, overwrite: bool = True) -> Path:
        with self._lock:
            return save_store(self.store, path, overwrite=overwrite)

    def initialize_store(
        self,
        corpus_path: Optional[PathLike] = None,
        snapshot_path: Optional[PathLike] = None,
    ) -> int:
        """
        Populate the store from a snapshot when one is given (or configured)
        and present, otherwise from the corpus file.
        """
        snapshot = snapshot_path if snapshot_path is not None else self.settings.STORE_SNAPSHOT
        if snapshot is not None and Path(snapshot).exists():
            return self.load_snapshot(snapshot)

        return self.load_corpus(corpus_path).loaded

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def lookup(self, value: str, key: Optional[str] = None) -> List[Concept]:
        with self._lock:
            if key:
                return self.store.find_by_key_value(key, value)
            return self.store.find_by_value(value)

    def statistics(self) -> Dict[str, int]:
        with self._lock:
            return self.store.statistics()

    # ------------------------------------------------------------------
    # Matching and scoring
    # ------------------------------------------------------------------

    def find_matches(
        self,
        features: Sequence[Feature],
        use_fuzzy: Optional[bool] = None,
        threshold: Optional[float] = None,
        max_depth: Optional[int] = None,
    ) -> List[MatchResult]:
        use_fuzzy = self.settings.USE_FUZZY_MATCHING if use_fuzzy is None else use_fuzzy
        threshold = self.settings.FUZZY_THRESHOLD if threshold is None else threshold
        max_depth = self.settings.RECURSIVE_DEPTH if max_depth is None else max_depth

        with self._lock:
            return self.matcher.find_matches(
                features,
                use_fuzzy=use_fuzzy,
                threshold=threshold,
                max_depth=max_depth,
            )

    def summarize_matches(self, matches: Sequence[MatchResult]) -> List[MatchSummary]:
        summaries: List[MatchSummary] = []
        for m in matches:
            concept = self.store.get_by_id(m.concept_id)
            summaries.append(
                MatchSummary(
                    concept_id=m.concept_id,
                    match_count=m.match_count,
                    matched_indices=sorted(m.matched_indices),
                    features=format_features(concept.features) if concept else "",
                )
            )
        return summaries

    def main_similarity(self, features_a: Sequence[Feature], features_b: Sequence[Feature]) -> float:
        """
        Exact-matching similarity with the live parameter table.
        """
        with self._lock:
            return main_similarity(self.matcher, features_a, features_b, self.params)

    def compare(
        self,
        features_a: Sequence[Feature],
        features_b: Sequence[Feature],
        use_fuzzy: Optional[bool] = None,
        threshold: Optional[float] = None,
        max_depth: Optional[int] = None,
    ) -> SimilarityReport:
        """
        Score two feature lists and report every intermediate figure.
        """
        use_fuzzy = self.settings.USE_FUZZY_MATCHING if use_fuzzy is None else use_fuzzy
        threshold = self.settings.FUZZY_THRESHOLD if threshold is None else threshold
        max_depth = self.settings.RECURSIVE_DEPTH if max_depth is None else max_depth

        with self._lock:
            matches_a = self.find_matches(features_a, use_fuzzy, threshold, max_depth)
            matches_b = self.find_matches(features_b, use_fuzzy, threshold, max_depth)
            breakdown = score_matches(
                matches_a,
                matches_b,
                len(features_a),
                len(features_b),
                self.params,
            )

            buckets = [
                OverlapBucket(
                    level_a=level_a,
                    level_b=level_b,
                    count=count,
                    weight=self.params.weight(level_a, level_b),
                )
                for (level_a, level_b), count in sorted(breakdown.overlap.overlap_map.items())
            ]

        return SimilarityReport(
            features_a=format_features(features_a),
            features_b=format_features(features_b),
            fuzzy=use_fuzzy,
            threshold=threshold,
            max_depth=max_depth if use_fuzzy else 1,
            matches_a=len(matches_a),
            matches_b=len(matches_b),
            shared_matches=breakdown.overlap.total_matches,
            overlap=buckets,
            partial_a_to_b=breakdown.partial_a,
            partial_b_to_a=breakdown.partial_b,
            similarity=breakdown.similarity,
        )

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def add_training_sample(
        self,
        features_a: Sequence[Feature],
        features_b: Sequence[Feature],
        expected_similarity: float,
        confidence: float = 1.0,
    ) -> TrainingSample:
        with self._lock:
            return self.training_set.add(features_a, features_b, expected_similarity, confidence)

    def load_training_samples(self, path: PathLike) -> int:
        samples = load_training_samples(path)
        with self._lock:
            self.training_set.extend(samples)
        return len(samples)

    def clear_training_samples(self) -> None:
        with self._lock:
            self.training_set.clear()

    def evaluate(self, params: Optional[ParameterTable] = None) -> float:
        with self._lock:
            return self.learner.evaluate(params)

    def optimize(
        self,
        max_iterations: Optional[int] = None,
        learning_rate: Optional[float] = None,
    ) -> OptimizationResult:
        iterations = self.settings.OPTIMIZER_ITERATIONS if max_iterations is None else max_iterations
        rate = self.settings.LEARNING_RATE if learning_rate is None else learning_rate

        with self._lock:
            return self.learner.optimize(max_iterations=iterations, learning_rate=rate)

    # ------------------------------------------------------------------
    # Parameter persistence
    # ------------------------------------------------------------------

    def save_parameters(self, path: Optional[PathLike] = None) -> Path:
        target = Path(path) if path is not None else self.settings.params_path
        with self._lock:
            return params_io.save_parameters(self.params, target)

    def load_parameters(self, path: Optional[PathLike] = None) -> int:
        source = Path(path) if path is not None else self.settings.params_path
        with self._lock:
            return params_io.load_parameters(source, self.params)
