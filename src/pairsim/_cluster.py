"""Agglomerative clustering over a dissimilarity matrix."""

from __future__ import annotations

import logging
from typing import Any, Hashable, Iterable

import numpy as np

from ._errors import InsufficientUnitsError
from ._pairwise import PairwiseMatrix
from ._types import MergeNode

logger = logging.getLogger(__name__)

LINKAGES = ("single", "complete", "average", "weighted")


def _linkage_update(
    linkage: str,
    d_ik: np.ndarray,
    d_jk: np.ndarray,
    size_i: int,
    size_j: int,
) -> np.ndarray:
    """Distance from the merge of clusters i and j to every other cluster."""
    if linkage == "complete":
        return np.maximum(d_ik, d_jk)
    if linkage == "single":
        return np.minimum(d_ik, d_jk)
    if linkage == "average":
        return (size_i * d_ik + size_j * d_jk) / (size_i + size_j)
    # weighted (WPGMA)
    return (d_ik + d_jk) / 2.0


class Dendrogram:
    """Binary merge tree over N labeled leaves.

    Leaf ``i`` is ``labels[i]``; the k-th merge is node ``N + k``; the
    root is the last merge. Heights are recorded as merged, with no
    monotonicity correction.
    """

    __slots__ = ("_labels", "_merges")

    def __init__(
        self, labels: Iterable[Hashable], merges: Iterable[MergeNode]
    ) -> None:
        self._labels = tuple(labels)
        self._merges = tuple(merges)
        if len(self._merges) != len(self._labels) - 1:
            raise ValueError(
                f"{len(self._labels)} leaves need {len(self._labels) - 1} "
                f"merges, got {len(self._merges)}"
            )

    @property
    def labels(self) -> tuple[Hashable, ...]:
        return self._labels

    @property
    def merges(self) -> tuple[MergeNode, ...]:
        return self._merges

    @property
    def n_leaves(self) -> int:
        return len(self._labels)

    @property
    def root(self) -> int:
        return self._merges[-1].node_id

    def is_leaf(self, node_id: int) -> bool:
        self._check_node(node_id)
        return node_id < len(self._labels)

    def node(self, node_id: int) -> MergeNode:
        """Merge record of an internal node."""
        if self.is_leaf(node_id):
            raise ValueError(f"node {node_id} is a leaf")
        return self._merges[node_id - len(self._labels)]

    def children(self, node_id: int) -> tuple[int, int] | None:
        if self.is_leaf(node_id):
            return None
        m = self.node(node_id)
        return m.left, m.right

    def height(self, node_id: int) -> float:
        return 0.0 if self.is_leaf(node_id) else self.node(node_id).height

    def size(self, node_id: int) -> int:
        return 1 if self.is_leaf(node_id) else self.node(node_id).size

    def label(self, node_id: int) -> Hashable:
        if not self.is_leaf(node_id):
            raise ValueError(f"node {node_id} is not a leaf")
        return self._labels[node_id]

    def leaves(self, node_id: int | None = None) -> list[Hashable]:
        """Leaf labels under ``node_id`` (default root), left to right."""
        n = len(self._labels)
        stack = [self.root if node_id is None else node_id]
        self._check_node(stack[0])
        out: list[Hashable] = []
        while stack:
            nid = stack.pop()
            if nid < n:
                out.append(self._labels[nid])
            else:
                m = self._merges[nid - n]
                stack.append(m.right)
                stack.append(m.left)
        return out

    def to_linkage_matrix(self) -> np.ndarray:
        """SciPy ``Z`` array: rows of ``[left, right, height, size]``.

        Suitable for ``scipy.cluster.hierarchy.dendrogram``.
        """
        return np.array(
            [[m.left, m.right, m.height, m.size] for m in self._merges],
            dtype=np.float64,
        )

    def to_dict(self, node_id: int | None = None) -> dict[str, Any]:
        """Nested dict tree for renderers.

        Leaves carry ``label``; internal nodes carry ``size`` and
        ``children`` (left, right). Every node has ``id`` and ``height``.
        """
        nid = self.root if node_id is None else node_id
        if self.is_leaf(nid):
            return {"id": nid, "label": self._labels[nid], "height": 0.0}
        m = self.node(nid)
        return {
            "id": nid,
            "height": m.height,
            "size": m.size,
            "children": [self.to_dict(m.left), self.to_dict(m.right)],
        }

    def cut(self, n_clusters: int) -> dict[Hashable, int]:
        """Assign each label a 0-based cluster id, stopping at ``n_clusters``.

        Replays merges in order until ``n_clusters`` clusters remain.
        Cluster ids are numbered by first appearance in label order.
        """
        n = len(self._labels)
        if not 1 <= n_clusters <= n:
            raise ValueError(f"n_clusters must be in [1, {n}], got {n_clusters}")

        parent = list(range(2 * n - 1))

        def find(x: int) -> int:
            while parent[x] != x:
                parent[x] = parent[parent[x]]
                x = parent[x]
            return x

        for m in self._merges[: n - n_clusters]:
            parent[find(m.left)] = m.node_id
            parent[find(m.right)] = m.node_id

        ids: dict[int, int] = {}
        out: dict[Hashable, int] = {}
        for i, label in enumerate(self._labels):
            root = find(i)
            if root not in ids:
                ids[root] = len(ids)
            out[label] = ids[root]
        return out

    def _check_node(self, node_id: int) -> None:
        if node_id < 0 or node_id >= 2 * len(self._labels) - 1:
            raise ValueError(
                f"node id {node_id} out of range "
                f"[0, {2 * len(self._labels) - 2}]"
            )

    def __len__(self) -> int:
        return len(self._merges)

    def __repr__(self) -> str:
        return f"Dendrogram({len(self._labels)} leaves, {len(self._merges)} merges)"


def _validate_dissimilarity(
    matrix: PairwiseMatrix | np.ndarray,
    labels: Iterable[Hashable] | None,
) -> tuple[np.ndarray, tuple[Hashable, ...]]:
    if isinstance(matrix, PairwiseMatrix):
        if matrix.kind != "distance":
            raise ValueError(
                f"clustering needs a dissimilarity matrix, got a "
                f"{matrix.kind} ({matrix.metric}); convert it first"
            )
        values = np.array(matrix.values, dtype=np.float64)
        if labels is None:
            labels = matrix.labels
    else:
        values = np.array(matrix, dtype=np.float64)

    if values.ndim != 2 or values.shape[0] != values.shape[1]:
        raise ValueError(f"expected a square matrix, got shape {values.shape}")
    n = values.shape[0]
    labels = tuple(range(n)) if labels is None else tuple(labels)
    if len(labels) != n:
        raise ValueError(f"{len(labels)} labels for a {n} x {n} matrix")
    if len(set(labels)) != n:
        raise ValueError("labels must be unique")
    if n < 2:
        raise InsufficientUnitsError(f"clustering needs at least 2 units, got {n}")
    if not np.isfinite(values).all():
        raise ValueError("dissimilarities must be finite")
    if not np.array_equal(values, values.T):
        raise ValueError("dissimilarity matrix must be symmetric")
    return values, labels


def cluster_hierarchical(
    matrix: PairwiseMatrix | np.ndarray,
    labels: Iterable[Hashable] | None = None,
    *,
    linkage: str = "complete",
) -> Dendrogram:
    """Agglomerative clustering of a symmetric dissimilarity matrix.

    Each step merges the closest pair of live clusters. Ties go to the
    lexicographically smallest pair of slots, where a cluster's slot is
    the lowest original index it contains.

    Args:
        matrix: A distance-kind PairwiseMatrix or an N x N array.
        labels: Leaf labels. Taken from ``matrix`` when it is a
            PairwiseMatrix, else defaults to ``0..N-1``.
        linkage: One of ``single``, ``complete``, ``average``, ``weighted``.
    """
    if linkage not in LINKAGES:
        raise ValueError(f"unknown linkage {linkage!r}, expected one of {LINKAGES}")
    d, labels = _validate_dissimilarity(matrix, labels)
    n = len(labels)

    # Slot s holds the live cluster whose lowest leaf index is s
    node_of = list(range(n))
    sizes = [1] * n
    active = np.ones(n, dtype=bool)
    # Only the strict upper triangle of live slots is ever searched
    search = np.where(np.triu(np.ones((n, n), dtype=bool), k=1), d, np.inf)

    merges: list[MergeNode] = []
    for step in range(n - 1):
        # argmin scans row-major, so the first minimum is the smallest (i, j)
        flat = int(np.argmin(search))
        i, j = divmod(flat, n)
        height = float(d[i, j])
        node_id = n + step
        size = sizes[i] + sizes[j]
        merges.append(MergeNode(
            node_id=node_id,
            left=node_of[i],
            right=node_of[j],
            height=height,
            size=size,
        ))

        updated = _linkage_update(linkage, d[i], d[j], sizes[i], sizes[j])
        d[i, :] = updated
        d[:, i] = updated
        d[i, i] = 0.0
        node_of[i] = node_id
        sizes[i] = size
        active[j] = False

        search[j, :] = np.inf
        search[:, j] = np.inf
        live = np.flatnonzero(active)
        search[i, live[live > i]] = updated[live[live > i]]
        search[live[live < i], i] = updated[live[live < i]]

    dendrogram = Dendrogram(labels, merges)
    logger.debug("clustered %d units with %s linkage", n, linkage)
    return dendrogram
