"""FeatureSpace: stable term -> column index mapping."""

from __future__ import annotations

from typing import Iterable, Iterator

from ._errors import FrozenFeatureSpaceError, InvalidTermError


class FeatureSpace:
    """Vocabulary shared by the rows of a document-feature matrix.

    Indices are handed out in first-seen order and never reassigned, so the
    space only grows. A frozen space (see :meth:`frozen`) still answers
    lookups and idempotent interns but refuses new terms.
    """

    __slots__ = ("_index", "_terms", "_frozen")

    def __init__(self, terms: Iterable[str] = ()) -> None:
        self._index: dict[str, int] = {}
        self._terms: list[str] = []
        self._frozen = False
        for term in terms:
            self.intern(term)

    def intern(self, term: str) -> int:
        """Return the index of ``term``, assigning the next one if unseen."""
        idx = self._index.get(term) if isinstance(term, str) else None
        if idx is not None:
            return idx
        if not isinstance(term, str) or not term:
            raise InvalidTermError(f"term must be a non-empty string, got {term!r}")
        if self._frozen:
            raise FrozenFeatureSpaceError(
                f"cannot intern {term!r}: feature space is frozen"
            )
        idx = len(self._terms)
        self._index[term] = idx
        self._terms.append(term)
        return idx

    def index_of(self, term: str) -> int | None:
        return self._index.get(term)

    def term(self, index: int) -> str:
        if index < 0 or index >= len(self._terms):
            raise IndexError(
                f"term index {index} out of range [0, {len(self._terms) - 1}]"
            )
        return self._terms[index]

    @property
    def terms(self) -> tuple[str, ...]:
        return tuple(self._terms)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def copy(self) -> FeatureSpace:
        """Mutable copy with the same index assignment."""
        space = FeatureSpace()
        space._index = dict(self._index)
        space._terms = list(self._terms)
        return space

    def frozen(self) -> FeatureSpace:
        """Immutable snapshot. Returns ``self`` if already frozen."""
        if self._frozen:
            return self
        space = self.copy()
        space._frozen = True
        return space

    def merge(self, other: FeatureSpace) -> list[int]:
        """Intern every term of ``other`` and return its index remap.

        Terms are visited in ``other``'s index order, so merging is
        deterministic. ``remap[i]`` is the index in this space of
        ``other.term(i)``.
        """
        return [self.intern(term) for term in other._terms]

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, term: object) -> bool:
        return term in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._terms)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureSpace):
            return NotImplemented
        return self._terms == other._terms

    def __repr__(self) -> str:
        state = ", frozen" if self._frozen else ""
        return f"FeatureSpace({len(self._terms)} terms{state})"
