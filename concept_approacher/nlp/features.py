# concept_approacher/nlp/features.py

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from concept_approacher.models.concept import Feature

logger = logging.getLogger(__name__)


def parse_comma_input(text: str) -> List[str]:
    """
    Split a comma-separated line into trimmed, non-empty items.

        "red, apple ,,"  ->  ["red", "apple"]
    """
    items: List[str] = []
    for raw in (text or "").split(","):
        item = raw.strip(" \t")
        if item:
            items.append(item)
    return items


def parse_feature_list(items: Iterable[str]) -> List[Feature]:
    """
    Turn raw items into Features.

    - "key:value" (split at the first colon) -> keyed feature
    - anything else                          -> unkeyed feature

    Items whose value ends up empty (e.g. "color:") are skipped, since a
    feature with no value can never match.
    """
    features: List[Feature] = []
    for item in items:
        key, sep, value = item.partition(":")
        if sep:
            key, value = key.strip(), value.strip()
        else:
            key, value = "", item.strip()

        if not value:
            logger.warning("Skipping feature with empty value: %r", item)
            continue

        features.append(Feature(key=key, value=value))

    return features


def parse_features(text: str) -> List[Feature]:
    """
    Convenience wrapper: comma-separated text -> Features.
    """
    return parse_feature_list(parse_comma_input(text))


def format_features(features: Sequence[Feature]) -> str:
    """Render features as "[a,key:b,...]"."""
    return "[" + ",".join(str(f) for f in features) + "]"
