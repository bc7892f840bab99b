"""
Weight table for overlap-level pairs.

Keys are ``p{a}{b}`` with a, b in 1..5: the weight given to one concept
matched at level ``a`` by the scoring side and level ``b`` by the other.
The default grid favours concepts both sides match strongly (p55) and
penalises lopsided pairs (p15, p51).
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Dict, Iterator, List, Mapping, Optional

LEVELS = range(1, 6)

MISSING_WEIGHT = 1.0


def param_key(level_a: int, level_b: int) -> str:
    return f"p{level_a}{level_b}"


PARAM_KEYS: List[str] = [param_key(a, b) for a in LEVELS for b in LEVELS]

DEFAULT_PARAMS: Dict[str, float] = {
    "p11": 1.0, "p12": 0.9, "p13": 0.8, "p14": 0.7, "p15": 0.6,
    "p21": 0.9, "p22": 1.2, "p23": 1.1, "p24": 1.0, "p25": 0.9,
    "p31": 0.8, "p32": 1.1, "p33": 1.5, "p34": 1.4, "p35": 1.3,
    "p41": 0.7, "p42": 1.0, "p43": 1.4, "p44": 1.8, "p45": 1.7,
    "p51": 0.6, "p52": 0.9, "p53": 1.3, "p54": 1.7, "p55": 2.0,
}


class ParameterTable(MutableMapping):
    """
    Mutable name -> weight mapping shared by reference between the scorer
    and the learner.

    Lookups of unknown names never fail: ``table["p99"]`` is 1.0. Arbitrary
    names can be stored (a loaded file may carry extra entries), but only
    the 25 ``PARAM_KEYS`` take part in scoring.
    """

    def __init__(self, values: Optional[Mapping[str, float]] = None) -> None:
        self._values: Dict[str, float] = {}
        if values:
            self.replace(values)

    @classmethod
    def defaults(cls) -> "ParameterTable":
        return cls(DEFAULT_PARAMS)

    def __getitem__(self, name: str) -> float:
        return self._values.get(name, MISSING_WEIGHT)

    def __setitem__(self, name: str, value: float) -> None:
        self._values[name] = float(value)

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __repr__(self) -> str:
        return f"ParameterTable({self._values!r})"

    def weight(self, level_a: int, level_b: int) -> float:
        return self[param_key(level_a, level_b)]

    def copy(self) -> "ParameterTable":
        return ParameterTable(self._values)

    def replace(self, values: Mapping[str, float]) -> None:
        """Overwrite the whole table in place."""
        self._values = {name: float(v) for name, v in values.items()}

    def snapshot(self) -> Dict[str, float]:
        """Plain dict of the scoring weights (all 25 keys, missing ones as 1.0)."""
        return {key: self[key] for key in PARAM_KEYS}
