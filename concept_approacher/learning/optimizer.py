"""
Tuning of the weight table against labeled samples.

The fitness of a table is ``1 / (1 + e)`` where ``e`` is the
confidence-weighted mean absolute error between computed and expected
similarity over all samples; 1.0 means a perfect fit.

``optimize`` runs sequential coordinate ascent: within a round each of the
25 weights in turn is nudged along its central-difference gradient and
clamped, and the next weight already sees that update. The best table
seen at the end of any round (or the starting table, if no round beats
it) is what the live table holds afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from concept_approacher.learning.samples import TrainingSet
from concept_approacher.matching.matcher import ConceptMatcher
from concept_approacher.models.concept import MatchResult, TrainingSample
from concept_approacher.scoring.params import PARAM_KEYS, ParameterTable
from concept_approacher.scoring.similarity import score_matches

logger = logging.getLogger(__name__)

EPSILON = 0.001
PARAM_MIN = 0.1
PARAM_MAX = 5.0
PROGRESS_EVERY = 10

MatchedSample = Tuple[TrainingSample, List[MatchResult], List[MatchResult]]


@dataclass
class OptimizationResult:
    iterations: int = 0
    initial_score: float = 1.0
    best_score: float = 1.0
    round_scores: List[float] = field(default_factory=list)
    parameters: Dict[str, float] = field(default_factory=dict)

    @property
    def improved(self) -> bool:
        return self.best_score > self.initial_score


class ParameterLearner:
    """
    Evaluates and tunes a ParameterTable in place.

    The learner shares the table, the matcher and the training set with its
    owner; it holds no copies of its own except the best-so-far table
    during ``optimize``.
    """

    def __init__(
        self,
        matcher: ConceptMatcher,
        training_set: TrainingSet,
        params: ParameterTable,
        epsilon: float = EPSILON,
        param_min: float = PARAM_MIN,
        param_max: float = PARAM_MAX,
        progress_every: int = PROGRESS_EVERY,
    ) -> None:
        if param_min > param_max:
            raise ValueError(f"param_min ({param_min}) is greater than param_max ({param_max})")

        self.matcher = matcher
        self.training_set = training_set
        self.params = params
        self.epsilon = epsilon
        self.param_min = param_min
        self.param_max = param_max
        self.progress_every = max(1, progress_every)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def _match_samples(self) -> List[MatchedSample]:
        # Match sets do not depend on the weights, so one scan per sample
        # serves every evaluation of a call.
        return [
            (
                sample,
                self.matcher.find_matches(sample.features_a),
                self.matcher.find_matches(sample.features_b),
            )
            for sample in self.training_set
        ]

    def _evaluate(self, params: ParameterTable, matched: List[MatchedSample]) -> float:
        if not matched:
            return 1.0

        total_error = 0.0
        total_confidence = 0.0
        for sample, matches_a, matches_b in matched:
            computed = score_matches(
                matches_a,
                matches_b,
                len(sample.features_a),
                len(sample.features_b),
                params,
            ).similarity
            total_error += abs(computed - sample.expected_similarity) * sample.confidence
            total_confidence += sample.confidence

        mean_error = total_error / total_confidence if total_confidence > 0 else 1.0
        return 1.0 / (1.0 + mean_error)

    def evaluate(self, params: Optional[ParameterTable] = None) -> float:
        """
        Fitness of `params` (default: the live table) over all samples.
        No samples -> 1.0.
        """
        table = self.params if params is None else params
        return self._evaluate(table, self._match_samples())

    # ------------------------------------------------------------------
    # Optimization
    # ------------------------------------------------------------------

    def _clamp(self, value: float) -> float:
        return min(self.param_max, max(self.param_min, value))

    def optimize(self, max_iterations: int = 100, learning_rate: float = 0.01) -> OptimizationResult:
        if len(self.training_set) == 0:
            logger.warning("No training samples, nothing to optimize")
            return OptimizationResult(parameters=self.params.snapshot())

        matched = self._match_samples()
        initial_score = self._evaluate(self.params, matched)
        best_score = initial_score
        best_table = self.params.copy()
        round_scores: List[float] = []

        logger.info(
            "Optimizing %d parameters on %d samples (initial score %.6f)",
            len(PARAM_KEYS),
            len(matched),
            initial_score,
        )

        for iteration in range(1, max_iterations + 1):
            for key in PARAM_KEYS:
                original = self.params[key]

                self.params[key] = original + self.epsilon
                score_plus = self._evaluate(self.params, matched)
                self.params[key] = original - self.epsilon
                score_minus = self._evaluate(self.params, matched)

                gradient = (score_plus - score_minus) / (2 * self.epsilon)
                self.params[key] = self._clamp(original + learning_rate * gradient)

            score = self._evaluate(self.params, matched)
            round_scores.append(score)

            if score > best_score:
                best_score = score
                best_table = self.params.copy()

            if iteration % self.progress_every == 0:
                logger.info("Round %d: score %.6f (best %.6f)", iteration, score, best_score)

        self.params.replace(best_table)
        logger.info("Optimization finished: %.6f -> %.6f", initial_score, best_score)

        return OptimizationResult(
            iterations=max_iterations,
            initial_score=initial_score,
            best_score=best_score,
            round_scores=round_scores,
            parameters=self.params.snapshot(),
        )
