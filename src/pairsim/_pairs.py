"""Flatten a symmetric matrix into one record per unordered pair."""

from __future__ import annotations

from typing import Callable, Hashable, Iterable

import numpy as np

from ._pairwise import PairwiseMatrix
from ._types import PairRecord


def extract_pairs(
    matrix: PairwiseMatrix | np.ndarray,
    labels: Iterable[Hashable] | None = None,
) -> list[PairRecord]:
    """One record per (i, j) with i < j, row-major.

    Yields N(N-1)/2 records: no diagonal, no reversed duplicates.
    """
    if isinstance(matrix, PairwiseMatrix):
        values = matrix.values
        if labels is None:
            labels = matrix.labels
    else:
        values = np.asarray(matrix, dtype=np.float64)
        if values.ndim != 2 or values.shape[0] != values.shape[1]:
            raise ValueError(f"expected a square matrix, got shape {values.shape}")
    n = values.shape[0]
    labels = tuple(range(n)) if labels is None else tuple(labels)
    if len(labels) != n:
        raise ValueError(f"{len(labels)} labels for a {n} x {n} matrix")

    iu, ju = np.triu_indices(n, k=1)
    return [
        PairRecord(labels[i], labels[j], float(values[i, j]))
        for i, j in zip(iu.tolist(), ju.tolist())
    ]


def partition_pairs(
    records: Iterable[PairRecord],
    key_fn: Callable[[Hashable], Hashable],
) -> tuple[list[float], list[float]]:
    """Split pair values into (within-group, between-group) samples.

    A pair is within-group when both units map to the same key. The two
    lists feed a two-sample comparison such as ``scipy.stats.ttest_ind``.
    """
    within: list[float] = []
    between: list[float] = []
    for rec in records:
        if key_fn(rec.unit_a) == key_fn(rec.unit_b):
            within.append(rec.value)
        else:
            between.append(rec.value)
    return within, between
