# concept_approacher/api/models.py

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class MatchSummary(BaseModel):
    """
    One concept matched by an input feature list.
    """
    concept_id: int = Field(..., description="Store id of the matched concept.")
    match_count: int = Field(..., ge=0, description="Number of input features that matched.")
    matched_indices: List[int] = Field(
        default_factory=list,
        description="Sorted positions of the matching input features.",
    )
    features: str = Field("", description="The concept's features, rendered as text.")


class OverlapBucket(BaseModel):
    """
    Number of co-matched concepts at one (level_a, level_b) pair.
    """
    level_a: int = Field(..., ge=1, le=5)
    level_b: int = Field(..., ge=1, le=5)
    count: int = Field(..., ge=0)
    weight: float = Field(..., description="Parameter weight for this pair (A's view).")


class SimilarityReport(BaseModel):
    """
    Full breakdown of one comparison. Every figure comes from the same two
    match sets, so partial scores and buckets always agree with `similarity`.
    """
    features_a: str
    features_b: str
    fuzzy: bool = Field(False, description="Whether fuzzy/recursive matching was used.")
    threshold: float = Field(0.6, description="Fuzzy threshold in effect.")
    max_depth: int = Field(1, description="Recursion depth in effect.")
    matches_a: int = Field(0, description="Concepts matched by A.")
    matches_b: int = Field(0, description="Concepts matched by B.")
    shared_matches: int = Field(0, description="Concepts matched by both.")
    overlap: List[OverlapBucket] = Field(default_factory=list)
    partial_a_to_b: float = 0.0
    partial_b_to_a: float = 0.0
    similarity: float = 0.0
