"""Compound scan (Aho-Corasick) and tokenize/stem pipeline producing term counts."""

from __future__ import annotations

import re
from collections import Counter
from typing import Hashable, Iterable, Iterator, Mapping

import ahocorasick
import Stemmer

from ._stop_words import STOP_WORDS

_WORD_RE = re.compile(r"[a-z]+")


def _is_boundary(text: str, pos: int) -> bool:
    return pos <= 0 or pos >= len(text) or not text[pos].isalnum()


class Tokenizer:
    """Turns raw text into term counts for :func:`build_dfm`.

    Caller-supplied multi-word compounds are matched first and counted as
    single terms joined with ``_``; the remaining words are lowercased,
    filtered against ``stop_words`` and stemmed.
    """

    __slots__ = ("_compound_ac", "_compound_strings", "_stemmer", "_stop_words")

    def __init__(
        self,
        *,
        compounds: Iterable[str] = (),
        stem: bool = True,
        stop_words: Iterable[str] | None = STOP_WORDS,
        language: str = "english",
    ) -> None:
        self._compound_strings: list[str] = []
        self._compound_ac: ahocorasick.Automaton | None = None
        seen: set[str] = set()
        for compound in compounds:
            normalized = " ".join(compound.lower().split())
            if not normalized:
                raise ValueError("compound must not be empty")
            if normalized not in seen:
                seen.add(normalized)
                self._compound_strings.append(normalized)
        if self._compound_strings:
            ac = ahocorasick.Automaton()
            for idx, compound_str in enumerate(self._compound_strings):
                ac.add_word(compound_str, idx)
            ac.make_automaton()
            self._compound_ac = ac
        self._stemmer = Stemmer.Stemmer(language) if stem else None
        self._stop_words = frozenset(stop_words) if stop_words else frozenset()

    @property
    def compounds(self) -> tuple[str, ...]:
        return tuple(self._compound_strings)

    def scan_compounds(self, text_lower: str) -> list[tuple[int, int, str]]:
        """Phase 1: Aho-Corasick compound scan.

        Returns ``(start, end, term)`` for leftmost-longest non-overlapping
        matches that start and end on word boundaries.
        """
        if self._compound_ac is None:
            return []

        raw_matches: list[tuple[int, int, int]] = []  # (start, end, idx)
        for end_inclusive, idx in self._compound_ac.iter(text_lower):
            end = end_inclusive + 1
            start = end - len(self._compound_strings[idx])
            if _is_boundary(text_lower, start - 1) and _is_boundary(text_lower, end):
                raw_matches.append((start, end, idx))

        # Sort by start position, then by length descending (longest first)
        raw_matches.sort(key=lambda m: (m[0], -(m[1] - m[0])))

        selected: list[tuple[int, int, str]] = []
        last_end = -1
        for start, end, idx in raw_matches:
            if start >= last_end:
                term = self._compound_strings[idx].replace(" ", "_")
                selected.append((start, end, term))
                last_end = end
        return selected

    def tokens(self, text: str) -> list[str]:
        """Terms of ``text`` in reading order."""
        text_lower = text.lower()
        compounds = self.scan_compounds(text_lower)
        positioned: list[tuple[int, str]] = [(s, term) for s, _, term in compounds]

        # Phase 2: words outside compound spans
        span = 0
        for m in _WORD_RE.finditer(text_lower):
            tok_start, tok_end = m.start(), m.end()
            while span < len(compounds) and compounds[span][1] <= tok_start:
                span += 1
            if span < len(compounds) and compounds[span][0] <= tok_start < compounds[span][1]:
                continue
            token = m.group()
            if token in self._stop_words:
                continue
            if self._stemmer is not None:
                token = self._stemmer.stemWord(token)
            positioned.append((tok_start, token))

        positioned.sort(key=lambda p: p[0])
        return [term for _, term in positioned]

    def count(self, text: str) -> Counter[str]:
        """Term counts, keyed in first-seen order."""
        return Counter(self.tokens(text))

    def count_many(
        self,
        items: Mapping[Hashable, str] | Iterable[tuple[Hashable, str]],
    ) -> Iterator[tuple[Hashable, Counter[str]]]:
        """Yield ``(unit_id, counts)`` for each ``(unit_id, text)``."""
        pairs = items.items() if isinstance(items, Mapping) else items
        for unit_id, text in pairs:
            yield unit_id, self.count(text)
