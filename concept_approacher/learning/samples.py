# concept_approacher/learning/samples.py

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, List, Sequence, Union

from pydantic import BaseModel, Field, ValidationError

from concept_approacher.models.concept import Feature, TrainingSample
from concept_approacher.nlp.features import parse_features

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class TrainingSet:
    """
    Ordered, append-only list of labeled samples. Never deduplicated.
    """

    def __init__(self) -> None:
        self._samples: List[TrainingSample] = []

    def add(
        self,
        features_a: Sequence[Feature],
        features_b: Sequence[Feature],
        expected_similarity: float,
        confidence: float = 1.0,
    ) -> TrainingSample:
        sample = TrainingSample(
            features_a=tuple(features_a),
            features_b=tuple(features_b),
            expected_similarity=expected_similarity,
            confidence=confidence,
        )
        self._samples.append(sample)
        return sample

    def extend(self, samples: Sequence[TrainingSample]) -> None:
        self._samples.extend(samples)

    def clear(self) -> None:
        self._samples.clear()

    @property
    def samples(self) -> List[TrainingSample]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[TrainingSample]:
        return iter(list(self._samples))


class TrainingRecord(BaseModel):
    """
    One entry of a training-sample JSON file.

    `a` and `b` use the comma-separated feature text format
    ("color:red, fruit").
    """

    a: str
    b: str
    expected: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    def to_sample(self) -> TrainingSample:
        return TrainingSample(
            features_a=tuple(parse_features(self.a)),
            features_b=tuple(parse_features(self.b)),
            expected_similarity=self.expected,
            confidence=self.confidence,
        )


def load_training_samples(path: PathLike) -> List[TrainingSample]:
    """
    Read a JSON list of ``{"a", "b", "expected", "confidence"}`` objects.

    Invalid records are logged and skipped. A missing file raises
    FileNotFoundError; a file that is not a JSON list raises ValueError.
    """
    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list of training samples in {p}")

    samples: List[TrainingSample] = []
    for idx, raw in enumerate(data):
        try:
            record = TrainingRecord.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Sample %d in %s is invalid, skipping: %s", idx, p, exc.errors())
            continue
        samples.append(record.to_sample())

    logger.info("Loaded %d training samples from %s", len(samples), p)
    return samples
