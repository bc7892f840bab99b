"""
In-memory concept store backed by a networkx MultiDiGraph.

Layout:

- one ``concept`` node per concept (``concept:{id}``) holding the ordered
  (key, value) pairs of the concept;
- one ``value`` node per distinct feature value (``value:{text}``);
- one ``CONCEPT_HAS_FEATURE`` edge per feature, carrying the feature key
  and its position inside the concept.

Concepts go in through ``insert`` and come out as immutable ``Concept``
values, so callers never hold references into the graph.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx

from concept_approacher.graph.schema import (
    EdgeType,
    NodeType,
    concept_node_id,
    value_node_id,
)
from concept_approacher.models.concept import Concept, Feature

logger = logging.getLogger(__name__)


class StoreInitializationError(RuntimeError):
    """Raised when the concept store cannot be populated from its source."""


class ConceptStore:
    """
    Concept store: insert, get-by-id, get-all plus a few value lookups.
    """

    def __init__(self, graph: Optional[nx.MultiDiGraph] = None) -> None:
        self._graph: nx.MultiDiGraph = graph if graph is not None else nx.MultiDiGraph()

        ids = [
            attrs["concept_id"]
            for _, attrs in self._graph.nodes(data=True)
            if attrs.get("type") == NodeType.CONCEPT.value
        ]
        self._next_id = max(ids, default=0) + 1

        self._concepts_cache: Optional[Tuple[Concept, ...]] = None
        self._values_cache: Optional[Tuple[str, ...]] = None

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._graph

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, features: Sequence[Feature]) -> int:
        """
        Store a new concept and return its id.

        Concepts without features are never stored.
        """
        if not features:
            raise ValueError("A concept needs at least one feature")

        concept_id = self._next_id
        self._next_id += 1

        node = concept_node_id(concept_id)
        self._graph.add_node(
            node,
            type=NodeType.CONCEPT.value,
            concept_id=concept_id,
            features=[(f.key, f.value) for f in features],
        )

        for position, feature in enumerate(features):
            v_node = value_node_id(feature.value)
            if v_node not in self._graph:
                self._graph.add_node(v_node, type=NodeType.VALUE.value, label=feature.value)
            self._graph.add_edge(
                node,
                v_node,
                type=EdgeType.CONCEPT_HAS_FEATURE.value,
                feature_key=feature.key,
                position=position,
            )

        self._concepts_cache = None
        self._values_cache = None
        logger.debug("Stored concept %d with %d features", concept_id, len(features))
        return concept_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _concept_from_node(self, attrs: Dict) -> Concept:
        return Concept(
            id=attrs["concept_id"],
            features=tuple(Feature(key=k, value=v) for k, v in attrs["features"]),
        )

    def get_by_id(self, concept_id: int) -> Optional[Concept]:
        node = concept_node_id(concept_id)
        if node not in self._graph:
            return None
        return self._concept_from_node(self._graph.nodes[node])

    def get_all(self) -> List[Concept]:
        """
        All concepts ordered by id.
        """
        if self._concepts_cache is None:
            concepts = [
                self._concept_from_node(attrs)
                for _, attrs in self._graph.nodes(data=True)
                if attrs.get("type") == NodeType.CONCEPT.value
            ]
            concepts.sort(key=lambda c: c.id)
            self._concepts_cache = tuple(concepts)

        return list(self._concepts_cache)

    def distinct_values(self) -> List[str]:
        """
        Every distinct feature value in the corpus, sorted.
        """
        if self._values_cache is None:
            values = [
                attrs["label"]
                for _, attrs in self._graph.nodes(data=True)
                if attrs.get("type") == NodeType.VALUE.value
            ]
            self._values_cache = tuple(sorted(values))

        return list(self._values_cache)

    def find_by_value(self, value: str) -> List[Concept]:
        """
        Concepts having ``value`` under any key.
        """
        v_node = value_node_id(value)
        if v_node not in self._graph:
            return []

        concept_nodes = set(self._graph.predecessors(v_node))
        return [c for c in self.get_all() if concept_node_id(c.id) in concept_nodes]

    def find_by_key_value(self, key: str, value: str) -> List[Concept]:
        """
        Concepts having exactly the feature ``key:value``.
        """
        v_node = value_node_id(value)
        if v_node not in self._graph:
            return []

        concept_nodes = {
            u
            for u, _, data in self._graph.in_edges(v_node, data=True)
            if data.get("type") == EdgeType.CONCEPT_HAS_FEATURE.value
            and data.get("feature_key") == key
        }
        return [c for c in self.get_all() if concept_node_id(c.id) in concept_nodes]

    def count(self) -> int:
        return len(self.get_all())

    def statistics(self) -> Dict[str, int]:
        concepts = self.get_all()
        return {
            "concepts": len(concepts),
            "features": sum(len(c.features) for c in concepts),
            "distinct_values": len(self.distinct_values()),
        }

    def __len__(self) -> int:
        return self.count()
