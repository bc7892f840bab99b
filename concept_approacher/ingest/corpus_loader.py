from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Union

from concept_approacher.graph.store import ConceptStore
from concept_approacher.models.concept import Feature

logger = logging.getLogger(__name__)


class MalformedCorpusLineError(ValueError):
    """A corpus line that does not follow ``ID.[key:value,...]``."""


# -----------------------------------------------------------------------------
# Result types
# -----------------------------------------------------------------------------

@dataclass
class ParsedConcept:
    """
    One parsed corpus line.

    `source_id` is the id written in the file. The store assigns its own
    ids on insert, so this is only kept for diagnostics.
    """
    source_id: int
    features: List[Feature]


@dataclass
class CorpusLoadReport:
    loaded: int = 0
    skipped_lines: int = 0
    dropped_empty: int = 0


# -----------------------------------------------------------------------------
# Line parsing
# -----------------------------------------------------------------------------

def _parse_feature_items(features_str: str, line_number: int) -> List[Feature]:
    features: List[Feature] = []

    for raw in features_str.split(","):
        item = raw.strip(" \t")
        if not item:
            continue

        key, sep, value = item.partition(":")
        if not sep:
            logger.warning("Line %d: malformed feature %r, skipping", line_number, item)
            continue

        key, value = key.strip(" \t"), value.strip(" \t")
        if key and value:
            features.append(Feature(key=key, value=value))

    return features


def parse_corpus_line(line: str, line_number: int = 0) -> ParsedConcept:
    """
    Parse ``ID.[key1:value1,key2:value2,...]``.

    Raises MalformedCorpusLineError when the id delimiter, the id itself or
    the brackets are missing. Individual malformed features are skipped.
    """
    dot_pos = line.find(".")
    if dot_pos == -1:
        raise MalformedCorpusLineError(f"missing '.' after concept id: {line!r}")

    try:
        source_id = int(line[:dot_pos].strip())
    except ValueError:
        raise MalformedCorpusLineError(f"bad concept id: {line!r}") from None

    bracket_start = line.find("[", dot_pos)
    bracket_end = line.find("]", bracket_start) if bracket_start != -1 else -1
    if bracket_start == -1 or bracket_end == -1:
        raise MalformedCorpusLineError(f"missing brackets: {line!r}")

    features = _parse_feature_items(line[bracket_start + 1:bracket_end], line_number)
    return ParsedConcept(source_id=source_id, features=features)


# -----------------------------------------------------------------------------
# Loading into a store
# -----------------------------------------------------------------------------

def load_corpus(lines: Iterable[str], store: ConceptStore) -> CorpusLoadReport:
    """
    Parse corpus lines and insert every concept that has features.

    Malformed lines are logged and skipped; they never abort the load.
    """
    report = CorpusLoadReport()

    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue

        try:
            parsed = parse_corpus_line(line, line_number)
        except MalformedCorpusLineError as exc:
            logger.warning("Line %d: %s, skipping", line_number, exc)
            report.skipped_lines += 1
            continue

        if not parsed.features:
            logger.warning("Line %d: concept %d has no features, dropping", line_number, parsed.source_id)
            report.dropped_empty += 1
            continue

        store.insert(parsed.features)
        report.loaded += 1

    return report


def load_corpus_file(path: Union[str, Path], store: ConceptStore) -> CorpusLoadReport:
    """
    Load a corpus file into `store`. A missing file raises FileNotFoundError.
    """
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        report = load_corpus(f, store)

    logger.info("Loaded %d concepts from %s", report.loaded, p)
    return report
