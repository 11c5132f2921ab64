"""Pairwise distance/similarity between the rows of a DFM."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Hashable, Iterable

import numpy as np
from scipy import sparse
from scipy.spatial.distance import pdist, squareform

from ._errors import EmptyFeatureSpaceError

if TYPE_CHECKING:
    from ._dfm import DocumentFeatureMatrix

logger = logging.getLogger(__name__)

_KINDS = ("distance", "similarity")


@dataclass(slots=True, frozen=True)
class Metric:
    """A pairwise metric over count rows.

    ``compute`` maps the CSR count matrix to a dense N x N array; only its
    strict upper triangle is used. ``diagonal`` gives the self-values.
    """
    name: str
    kind: str   # "distance" | "similarity"
    compute: Callable[[sparse.csr_matrix], np.ndarray]
    diagonal: Callable[[sparse.csr_matrix], np.ndarray]


# -- Built-in metrics --

def _gram(x: sparse.csr_matrix) -> np.ndarray:
    # Integer products are exact; convert once afterwards
    return (x @ x.T).toarray().astype(np.float64)


def _zero_diagonal(x: sparse.csr_matrix) -> np.ndarray:
    return np.zeros(x.shape[0])


def _nonempty_diagonal(x: sparse.csr_matrix) -> np.ndarray:
    return (np.diff(x.indptr) > 0).astype(np.float64)


def _euclidean(x: sparse.csr_matrix) -> np.ndarray:
    gram = _gram(x)
    sq = np.diag(gram)
    d2 = sq[:, None] + sq[None, :] - 2.0 * gram
    np.maximum(d2, 0.0, out=d2)
    return np.sqrt(d2)


def _manhattan(x: sparse.csr_matrix) -> np.ndarray:
    return squareform(pdist(x.toarray().astype(np.float64), "cityblock"))


def _primitive_rows(x: sparse.csr_matrix) -> sparse.csr_matrix:
    """Divide each row by the GCD of its counts.

    A row and any integer multiple of it reduce to the same vector, so
    scale-invariant metrics come out bit-identical for both.
    """
    x = x.copy()
    lengths = np.diff(x.indptr)
    nonempty = lengths > 0
    if nonempty.any():
        gcd = np.gcd.reduceat(x.data, x.indptr[:-1][nonempty])
        x.data //= np.repeat(gcd, lengths[nonempty])
    return x


def _cosine(x: sparse.csr_matrix) -> np.ndarray:
    gram = _gram(_primitive_rows(x))
    norms = np.sqrt(np.diag(gram))
    denom = np.outer(norms, norms)
    # Zero-norm rows score 0 against everything
    sim = np.divide(gram, denom, out=np.zeros_like(gram), where=denom > 0.0)
    # Counts are non-negative; only rounding can push past 1
    return np.minimum(sim, 1.0)


def _jaccard(x: sparse.csr_matrix) -> np.ndarray:
    present = (x > 0).astype(np.int64)
    inter = _gram(present)
    sizes = np.diag(inter)
    union = sizes[:, None] + sizes[None, :] - inter
    return np.divide(inter, union, out=np.zeros_like(inter), where=union > 0.0)


_METRICS: dict[str, Metric] = {}


def register_metric(metric: Metric) -> None:
    """Make ``metric`` available to :func:`compute_pairwise` by name."""
    if metric.kind not in _KINDS:
        raise ValueError(f"metric kind must be one of {_KINDS}, got {metric.kind!r}")
    _METRICS[metric.name] = metric


def get_metric(name: str) -> Metric:
    try:
        return _METRICS[name]
    except KeyError:
        raise ValueError(
            f"unknown metric {name!r}, expected one of {sorted(_METRICS)}"
        ) from None


for _m in (
    Metric("euclidean", "distance", _euclidean, _zero_diagonal),
    Metric("manhattan", "distance", _manhattan, _zero_diagonal),
    Metric("cosine", "similarity", _cosine, _nonempty_diagonal),
    Metric("jaccard", "similarity", _jaccard, _nonempty_diagonal),
):
    register_metric(_m)
del _m


class PairwiseMatrix:
    """Labeled symmetric N x N matrix of metric values.

    The value array is read-only; transforms go through :meth:`map`,
    which returns a new matrix.
    """

    __slots__ = ("_labels", "_index", "_values", "_metric", "_kind")

    def __init__(
        self,
        labels: Iterable[Hashable],
        values: np.ndarray,
        *,
        metric: str,
        kind: str,
    ) -> None:
        labels = tuple(labels)
        values = np.array(values, dtype=np.float64)
        n = len(labels)
        if values.shape != (n, n):
            raise ValueError(
                f"values shape {values.shape} does not match {n} labels"
            )
        if kind not in _KINDS:
            raise ValueError(f"kind must be one of {_KINDS}, got {kind!r}")
        if not np.isfinite(values).all():
            raise ValueError("pairwise values must be finite")
        if not np.array_equal(values, values.T):
            raise ValueError("pairwise values must be symmetric")
        index = {label: i for i, label in enumerate(labels)}
        if len(index) != n:
            raise ValueError("labels must be unique")
        values.setflags(write=False)
        self._labels = labels
        self._index = index
        self._values = values
        self._metric = metric
        self._kind = kind

    @property
    def labels(self) -> tuple[Hashable, ...]:
        return self._labels

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def metric(self) -> str:
        return self._metric

    @property
    def kind(self) -> str:
        return self._kind

    def index_of(self, label: Hashable) -> int:
        try:
            return self._index[label]
        except KeyError:
            raise KeyError(f"unknown unit {label!r}") from None

    def value(self, a: Hashable, b: Hashable) -> float:
        return float(self._values[self.index_of(a), self.index_of(b)])

    def __getitem__(self, key: tuple[Hashable, Hashable]) -> float:
        a, b = key
        return self.value(a, b)

    def row(self, label: Hashable) -> dict[Hashable, float]:
        """Values from ``label`` to every unit, self included."""
        i = self.index_of(label)
        return {
            other: float(v) for other, v in zip(self._labels, self._values[i])
        }

    def map(
        self,
        fn: Callable[[np.ndarray], np.ndarray],
        *,
        metric: str | None = None,
        kind: str | None = None,
    ) -> PairwiseMatrix:
        """Apply an elementwise ``fn`` and return a new matrix.

        ``fn`` receives the upper triangle (diagonal included) as a 1-D
        array and must return an array of the same shape. The lower
        triangle is mirrored from the result, so symmetry holds for any
        ``fn``.
        """
        n = len(self._labels)
        iu = np.triu_indices(n)
        mapped = np.asarray(fn(self._values[iu]), dtype=np.float64)
        if mapped.shape != iu[0].shape:
            raise ValueError(
                f"map function returned shape {mapped.shape}, "
                f"expected {iu[0].shape}"
            )
        upper = np.zeros((n, n))
        upper[iu] = mapped
        return PairwiseMatrix(
            self._labels,
            upper + np.triu(upper, k=1).T,
            metric=self._metric if metric is None else metric,
            kind=self._kind if kind is None else kind,
        )

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return (
            f"PairwiseMatrix({self._metric!r} {self._kind}, "
            f"{len(self._labels)} units)"
        )


def compute_pairwise(
    dfm: DocumentFeatureMatrix,
    metric: str | Metric = "euclidean",
) -> PairwiseMatrix:
    """Compute ``metric`` between every pair of DFM rows.

    Each unordered pair is taken once from the upper triangle and mirrored
    into the lower one; the diagonal is the metric's self-value.
    """
    m = metric if isinstance(metric, Metric) else get_metric(metric)
    if dfm.n_terms == 0:
        raise EmptyFeatureSpaceError(
            f"cannot compute {m.name!r} over a matrix with no terms"
        )
    x = dfm.tocsr()
    n = dfm.n_units
    full = np.asarray(m.compute(x), dtype=np.float64)
    if full.shape != (n, n):
        raise ValueError(
            f"metric {m.name!r} returned shape {full.shape}, expected {(n, n)}"
        )
    upper = np.triu(full, k=1)
    values = upper + upper.T
    np.fill_diagonal(values, m.diagonal(x))
    result = PairwiseMatrix(dfm.units, values, metric=m.name, kind=m.kind)
    logger.debug("computed %r", result)
    return result


def to_dissimilarity(matrix: PairwiseMatrix) -> PairwiseMatrix:
    """``1 - value`` for every cell of a similarity matrix."""
    if matrix.kind != "similarity":
        raise ValueError(
            f"expected a similarity matrix, got {matrix.kind!r} ({matrix.metric})"
        )
    return matrix.map(
        lambda v: 1.0 - v,
        metric=f"{matrix.metric}_dissimilarity",
        kind="distance",
    )


def cosine_dissimilarity(matrix: PairwiseMatrix) -> PairwiseMatrix:
    """Cosine distance (``1 - cosine similarity``) from a cosine matrix."""
    if matrix.metric != "cosine":
        raise ValueError(f"expected a cosine matrix, got {matrix.metric!r}")
    return to_dissimilarity(matrix)
