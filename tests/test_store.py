# tests/test_store.py

from typing import List, Sequence

import pytest
from pydantic import ValidationError

from concept_approacher.graph.schema import NodeType, concept_node_id, value_node_id
from concept_approacher.graph.store import ConceptStore
from concept_approacher.models.concept import Feature


def feats(*items: str) -> List[Feature]:
    """
    feats("color:red", "fruit") -> [Feature(color, red), Feature("", fruit)]
    """
    out: List[Feature] = []
    for item in items:
        key, sep, value = item.partition(":")
        out.append(Feature(key=key, value=value) if sep else Feature(value=item))
    return out


def build_store(*concepts: Sequence[str]) -> ConceptStore:
    store = ConceptStore()
    for items in concepts:
        store.insert(feats(*items))
    return store


def test_insert_assigns_sequential_ids():
    store = ConceptStore()

    assert store.insert(feats("color:red")) == 1
    assert store.insert(feats("color:blue")) == 2
    assert store.count() == 2
    assert len(store) == 2


def test_insert_without_features_raises():
    store = ConceptStore()
    with pytest.raises(ValueError):
        store.insert([])


def test_get_by_id_preserves_feature_order():
    store = build_store(["kind:fruit", "color:red", "taste:sweet"])

    concept = store.get_by_id(1)
    assert concept is not None
    assert concept.feature_keys == ("kind", "color", "taste")
    assert concept.feature_values == ("fruit", "red", "sweet")
    assert store.get_by_id(99) is None


def test_get_all_is_ordered_by_id():
    store = build_store(["a:x"], ["b:y"], ["c:z"])
    assert [c.id for c in store.get_all()] == [1, 2, 3]


def test_concepts_are_immutable_values():
    store = build_store(["color:red"])
    concept = store.get_by_id(1)

    with pytest.raises(ValidationError):
        concept.id = 5

    # the store still hands out the original concept
    assert store.get_by_id(1).id == 1


def test_graph_layout():
    store = build_store(["color:red", "kind:fruit"], ["color:red"])
    G = store.graph

    assert G.nodes[concept_node_id(1)]["type"] == NodeType.CONCEPT.value
    assert G.nodes[value_node_id("red")]["type"] == NodeType.VALUE.value
    # "red" is shared by both concepts
    assert set(G.predecessors(value_node_id("red"))) == {concept_node_id(1), concept_node_id(2)}


def test_distinct_values_sorted_and_refreshed_after_insert():
    store = build_store(["color:red", "kind:fruit"], ["color:red"])
    assert store.distinct_values() == ["fruit", "red"]

    store.insert(feats("color:blue"))
    assert store.distinct_values() == ["blue", "fruit", "red"]


def test_find_by_value_and_key_value():
    store = build_store(["color:red", "kind:fruit"], ["shade:red"], ["color:blue"])

    assert [c.id for c in store.find_by_value("red")] == [1, 2]
    assert [c.id for c in store.find_by_key_value("color", "red")] == [1]
    assert store.find_by_key_value("kind", "red") == []
    assert store.find_by_value("missing") == []


def test_statistics():
    store = build_store(["color:red", "kind:fruit"], ["color:red"])
    assert store.statistics() == {"concepts": 2, "features": 3, "distinct_values": 2}
