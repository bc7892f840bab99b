# concept_approacher/models/concept.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Feature(BaseModel):
    """
    A single (key, value) descriptor of an object or a stored concept.

    Fields
    ------
    key:
        Feature name. Empty means "unkeyed": only the value takes part
        in matching.
    value:
        Feature text.
    """

    model_config = ConfigDict(frozen=True)

    key: str = ""
    value: str

    @field_validator("key", mode="before")
    @classmethod
    def _none_key_is_unkeyed(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @property
    def is_keyed(self) -> bool:
        return bool(self.key)

    def with_value(self, value: str) -> "Feature":
        return Feature(key=self.key, value=value)

    def __str__(self) -> str:
        return f"{self.key}:{self.value}" if self.key else self.value


class Concept(BaseModel):
    """
    A stored reference entity described by an ordered list of features.

    Concepts are immutable once created; the store hands out these values
    instead of references into its own graph.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    features: Tuple[Feature, ...]

    @property
    def feature_keys(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.features)

    @property
    def feature_values(self) -> Tuple[str, ...]:
        return tuple(f.value for f in self.features)


@dataclass
class MatchResult:
    """
    Outcome of matching one input feature list against one concept.
    """
    concept_id: int
    match_count: int = 0
    matched_indices: Set[int] = field(default_factory=set)

    def copy(self) -> "MatchResult":
        return MatchResult(
            concept_id=self.concept_id,
            match_count=self.match_count,
            matched_indices=set(self.matched_indices),
        )


class TrainingSample(BaseModel):
    """
    A labeled pair of objects used to tune the parameter table.
    """

    model_config = ConfigDict(frozen=True)

    features_a: Tuple[Feature, ...]
    features_b: Tuple[Feature, ...]
    expected_similarity: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
