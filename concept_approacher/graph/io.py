# concept_approacher/graph/io.py

"""
Concept store snapshots.

A snapshot is the store's concept graph pickled as-is, so loading one
skips corpus parsing entirely. Concept ids survive the round trip and a
loaded store keeps numbering new concepts after the highest stored id.
"""

from __future__ import annotations

import pickle
from pathlib import Path
from typing import Union

import networkx as nx

from concept_approacher.graph.store import ConceptStore

PathLike = Union[str, Path]

SNAPSHOT_SUFFIX = ".gpickle"


def save_store(
    store: ConceptStore,
    path: PathLike,
    overwrite: bool = True,
) -> Path:
    """
    Write a snapshot of `store` and return the path actually written.

    A path without a suffix gets ``.gpickle``. Refuses to replace an
    existing snapshot when `overwrite` is False (FileExistsError).
    """
    snapshot_path = Path(path)
    if not snapshot_path.suffix:
        snapshot_path = snapshot_path.with_suffix(SNAPSHOT_SUFFIX)

    if snapshot_path.exists() and not overwrite:
        raise FileExistsError(f"Store snapshot already exists: {snapshot_path}")

    snapshot_path.parent.mkdir(parents=True, exist_ok=True)
    with snapshot_path.open("wb") as f:
        pickle.dump(store.graph, f, protocol=pickle.HIGHEST_PROTOCOL)

    return snapshot_path


def load_store(path: PathLike) -> ConceptStore:
    """
    Rebuild a ConceptStore from a snapshot written by ``save_store``.

    Raises TypeError when the file unpickles to anything other than a
    concept graph. Unreadable or truncated files raise whatever pickle
    raises for them (EOFError, UnpicklingError, ...).
    """
    snapshot_path = Path(path)
    with snapshot_path.open("rb") as f:
        graph = pickle.load(f)

    if not isinstance(graph, nx.MultiDiGraph):
        raise TypeError(f"Not a concept store snapshot: {snapshot_path}")

    return ConceptStore(graph)
