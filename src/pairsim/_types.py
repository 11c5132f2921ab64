"""Data structures for pairsim."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable


@dataclass(slots=True, frozen=True)
class PairRecord:
    unit_a: Hashable
    unit_b: Hashable
    value: float


@dataclass(slots=True, frozen=True)
class MergeNode:
    node_id: int    # N + merge step
    left: int       # child node id, leaves are 0..N-1
    right: int
    height: float   # dissimilarity at merge, not forced monotone
    size: int       # original leaves subsumed
