"""Homophone / near-homophone alternates accepted in flexible matching.

Speech recognisers routinely pick the wrong spelling of a word that sounds
right ("their" for "there"), so a reader who said the word correctly should
still get credit for it.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from readalong.services.word_alignment import normalise

logger = logging.getLogger(__name__)

# Maps expected word -> spellings the recogniser may produce instead.
DEFAULT_CONFUSIONS: dict[str, list[str]] = {
    "fun": ["fan"],
    "fan": ["fun"],
    "aloud": ["allowed"],
    "allowed": ["aloud"],
    "there": ["their", "they're"],
    "their": ["there", "they're"],
    "they're": ["there", "their"],
    "to": ["too", "two"],
    "too": ["to", "two"],
    "two": ["to", "too"],
    "write": ["right"],
    "right": ["write"],
    "here": ["hear"],
    "hear": ["here"],
    "tree": ["three"],
    "three": ["tree"],
}


class ConfusionTable:
    """Authored word -> alternates mapping, normalised on construction.

    Not forced to be symmetric: an entry only says what may stand in for
    its key.
    """

    def __init__(self, entries: Mapping[str, Iterable[str]] | None = None):
        if entries is None:
            entries = DEFAULT_CONFUSIONS
        self._table: dict[str, tuple[str, ...]] = {}
        for word, alternates in entries.items():
            key = normalise(word)
            if not key:
                continue
            alts = [a for a in (normalise(x) for x in alternates) if a and a != key]
            existing = self._table.get(key, ())
            self._table[key] = tuple(dict.fromkeys([*existing, *alts]))
        logger.debug("Confusion table loaded with %d entries", len(self._table))

    def confusions(self, word: str) -> list[str]:
        """Alternates for *word*; empty for unknown words."""
        return list(self._table.get(word, ()))

    def is_confusion(self, expected: str, spoken: str) -> bool:
        return spoken in self._table.get(expected, ())

    def __contains__(self, word: str) -> bool:
        return word in self._table

    def __len__(self) -> int:
        return len(self._table)


default_table = ConfusionTable()
