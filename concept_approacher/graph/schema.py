# concept_approacher/graph/schema.py

from enum import Enum


class NodeType(str, Enum):
    CONCEPT = "concept"
    VALUE = "value"


class EdgeType(str, Enum):
    # Concept -> value edges, one per (key, value) feature of the concept
    CONCEPT_HAS_FEATURE = "CONCEPT_HAS_FEATURE"


def concept_node_id(concept_id: int) -> str:
    return f"concept:{concept_id}"


def value_node_id(value: str) -> str:
    return f"value:{value}"
