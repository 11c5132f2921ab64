"""Document-feature matrix: build, group, trim and align."""

from __future__ import annotations

import logging
import numbers
from typing import Callable, Hashable, Iterable, Mapping

import numpy as np
from scipy import sparse

from ._errors import (
    DuplicateUnitError,
    EmptyCorpusError,
    InvalidGroupingError,
)
from ._features import FeatureSpace

logger = logging.getLogger(__name__)


class DocumentFeatureMatrix:
    """Term counts per unit over one frozen FeatureSpace.

    Rows follow ``units`` order, columns follow ``space`` index order.
    Instances are never modified after construction; every operation
    returns a new matrix.
    """

    __slots__ = ("_units", "_unit_index", "_space", "_counts")

    def __init__(
        self,
        units: Iterable[Hashable],
        space: FeatureSpace,
        counts: sparse.spmatrix,
    ) -> None:
        self._units = tuple(units)
        self._space = space.frozen()
        counts = sparse.csr_matrix(counts, dtype=np.int64, copy=True)
        counts.sum_duplicates()
        counts.eliminate_zeros()
        if counts.data.size and counts.data.min() < 0:
            raise ValueError("counts must be non-negative")
        if counts.shape != (len(self._units), len(self._space)):
            raise ValueError(
                f"counts shape {counts.shape} does not match "
                f"{len(self._units)} units x {len(self._space)} terms"
            )
        self._unit_index: dict[Hashable, int] = {}
        for i, unit in enumerate(self._units):
            if unit in self._unit_index:
                raise DuplicateUnitError(f"duplicate unit id {unit!r}")
            self._unit_index[unit] = i
        for buf in (counts.data, counts.indices, counts.indptr):
            buf.flags.writeable = False
        self._counts = counts

    # -- Shape and labels --

    @property
    def units(self) -> tuple[Hashable, ...]:
        return self._units

    @property
    def space(self) -> FeatureSpace:
        return self._space

    @property
    def shape(self) -> tuple[int, int]:
        return self._counts.shape

    @property
    def n_units(self) -> int:
        return len(self._units)

    @property
    def n_terms(self) -> int:
        return len(self._space)

    def unit_position(self, unit_id: Hashable) -> int:
        try:
            return self._unit_index[unit_id]
        except KeyError:
            raise KeyError(f"unknown unit {unit_id!r}") from None

    # -- Cell and row access --

    def count(self, unit_id: Hashable, term: str | int) -> int:
        """Count of ``term`` (string or column index) in ``unit_id``."""
        row = self.unit_position(unit_id)
        if isinstance(term, str):
            col = self._space.index_of(term)
            if col is None:
                raise KeyError(f"unknown term {term!r}")
        else:
            if isinstance(term, bool) or not isinstance(term, numbers.Integral):
                raise TypeError(
                    f"term must be a string or an integer index, got {term!r}"
                )
            col = int(term)
            if col < 0 or col >= self.n_terms:
                raise KeyError(f"term index {col} out of range")
        return int(self._counts[row, col])

    def row(self, unit_id: Hashable) -> np.ndarray:
        """Dense count vector of one unit."""
        return self._counts[self.unit_position(unit_id)].toarray().ravel()

    def unit_totals(self) -> np.ndarray:
        """Token total per unit, in row order."""
        return np.asarray(self._counts.sum(axis=1), dtype=np.int64).ravel()

    def term_totals(self) -> np.ndarray:
        """Corpus-wide count per term, in column order."""
        return np.asarray(self._counts.sum(axis=0), dtype=np.int64).ravel()

    def doc_freq(self) -> np.ndarray:
        """Number of units with a non-zero count, per term."""
        return np.bincount(self._counts.indices, minlength=self.n_terms)

    def tocsr(self) -> sparse.csr_matrix:
        return self._counts.copy()

    def to_dense(self) -> np.ndarray:
        return self._counts.toarray()

    def to_dict(self) -> dict[Hashable, dict[str, int]]:
        """Non-zero cells as ``{unit: {term: count}}``."""
        terms = self._space.terms
        out: dict[Hashable, dict[str, int]] = {}
        indptr, indices, data = (
            self._counts.indptr, self._counts.indices, self._counts.data,
        )
        for i, unit in enumerate(self._units):
            lo, hi = indptr[i], indptr[i + 1]
            out[unit] = {
                terms[j]: int(c) for j, c in zip(indices[lo:hi], data[lo:hi])
            }
        return out

    def __repr__(self) -> str:
        return (
            f"DocumentFeatureMatrix({self.n_units} units x {self.n_terms} terms, "
            f"{self._counts.nnz} non-zero)"
        )


def _check_count(unit_id: Hashable, term: str, count: object) -> int:
    if (
        isinstance(count, bool)
        or not isinstance(count, numbers.Real)
        or not float(count).is_integer()
        or count < 0
    ):
        raise ValueError(
            f"count for {term!r} in unit {unit_id!r} must be a "
            f"non-negative integer, got {count!r}"
        )
    return int(count)


def build_dfm(
    units: Iterable[tuple[Hashable, Mapping[str, int]]],
    space: FeatureSpace | None = None,
) -> DocumentFeatureMatrix:
    """Build a DFM from ``(unit_id, {term: count})`` pairs.

    Terms are interned into ``space`` (a fresh one if None) in input
    order before the matrix is materialized. The caller's space keeps
    growing; the returned matrix holds a frozen snapshot of it.
    """
    if space is None:
        space = FeatureSpace()

    unit_ids: list[Hashable] = []
    seen: set[Hashable] = set()
    rows: list[int] = []
    cols: list[int] = []
    data: list[int] = []

    # Validate everything before touching the caller's space
    staged: list[tuple[Hashable, list[tuple[str, int]]]] = []
    for unit_id, counts in units:
        if unit_id in seen:
            raise DuplicateUnitError(f"duplicate unit id {unit_id!r}")
        seen.add(unit_id)
        staged.append((
            unit_id,
            [(term, _check_count(unit_id, term, c)) for term, c in counts.items()],
        ))

    if not staged:
        raise EmptyCorpusError("cannot build a matrix from zero units")

    scratch = space.copy() if not space.is_frozen else space
    for row, (unit_id, items) in enumerate(staged):
        unit_ids.append(unit_id)
        for term, c in items:
            col = scratch.intern(term)
            if c:
                rows.append(row)
                cols.append(col)
                data.append(c)

    # All terms valid: commit interning to the caller's space
    if scratch is not space:
        space.merge(scratch)

    counts = sparse.csr_matrix(
        (np.asarray(data, dtype=np.int64), (rows, cols)),
        shape=(len(unit_ids), len(scratch)),
        dtype=np.int64,
    )
    dfm = DocumentFeatureMatrix(unit_ids, scratch, counts)
    logger.debug("built %r", dfm)
    return dfm


def group_dfm(
    dfm: DocumentFeatureMatrix,
    key_fn: Callable[[Hashable], Hashable | None],
) -> DocumentFeatureMatrix:
    """Sum unit rows that share ``key_fn(unit_id)``.

    Units mapped to None join no group. Group keys become the new unit
    ids, sorted so row order is reproducible.
    """
    members: dict[Hashable, list[int]] = {}
    for i, unit in enumerate(dfm.units):
        key = key_fn(unit)
        if key is None:
            continue
        members.setdefault(key, []).append(i)

    if not members:
        raise InvalidGroupingError("key function assigned no unit to a group")
    try:
        keys = sorted(members)
    except TypeError as e:
        raise InvalidGroupingError(f"group keys are not mutually orderable: {e}") from e

    rows: list[int] = []
    cols: list[int] = []
    for g, key in enumerate(keys):
        rows.extend([g] * len(members[key]))
        cols.extend(members[key])
    indicator = sparse.csr_matrix(
        (np.ones(len(rows), dtype=np.int64), (rows, cols)),
        shape=(len(keys), dfm.n_units),
    )
    grouped = DocumentFeatureMatrix(keys, dfm.space, indicator @ dfm.tocsr())
    logger.debug("grouped %d units into %r", dfm.n_units, grouped)
    return grouped


def trim_dfm(
    dfm: DocumentFeatureMatrix,
    *,
    min_term_freq: int = 1,
    min_doc_freq: int = 1,
) -> DocumentFeatureMatrix:
    """Drop rare terms; never drops units.

    A term is dropped when its corpus total is below ``min_term_freq`` or
    it occurs in fewer than ``min_doc_freq`` units. Surviving terms keep
    their relative order in a new feature space.
    """
    if min_term_freq < 0:
        raise ValueError(f"min_term_freq must be >= 0, got {min_term_freq}")
    if min_doc_freq < 0:
        raise ValueError(f"min_doc_freq must be >= 0, got {min_doc_freq}")

    keep = (dfm.term_totals() >= min_term_freq) & (dfm.doc_freq() >= min_doc_freq)
    kept = np.flatnonzero(keep)
    terms = dfm.space.terms
    space = FeatureSpace(terms[j] for j in kept)
    trimmed = DocumentFeatureMatrix(dfm.units, space, dfm.tocsr()[:, kept])
    logger.debug(
        "trimmed %d of %d terms (min_term_freq=%d, min_doc_freq=%d)",
        dfm.n_terms - len(kept), dfm.n_terms, min_term_freq, min_doc_freq,
    )
    return trimmed


def align_dfm(
    dfm: DocumentFeatureMatrix, space: FeatureSpace
) -> DocumentFeatureMatrix:
    """Re-express ``dfm`` over ``space``, interning its terms there first.

    Two matrices built independently become comparable once both are
    aligned to the same space.
    """
    remap = space.merge(dfm.space)
    target = space.frozen()
    counts = dfm.tocsr().tocoo()
    cols = np.asarray(remap, dtype=np.int64)[counts.col]
    aligned = DocumentFeatureMatrix(
        dfm.units,
        target,
        sparse.csr_matrix(
            (counts.data, (counts.row, cols)),
            shape=(dfm.n_units, len(target)),
        ),
    )
    logger.debug("aligned %r onto %r", dfm, target)
    return aligned
