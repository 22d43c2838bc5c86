"""Text normalisation, tokenisation and edit distance for read-aloud tracking.

The reference passage and every spoken transcript go through the same
``normalise`` pass, so word comparisons downstream are plain string
equality on lower-case ASCII.
"""

from __future__ import annotations

import logging
import re

from readalong.models import Word, WordStatus

logger = logging.getLogger(__name__)

PUNCTUATION_CHARS = ".!?,"

_UNSUPPORTED = re.compile(r"[^a-z0-9\s.!?,]")
_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION_ONLY = re.compile(r"^[.!?,]+$")
# leading punctuation run, word body, trailing punctuation run
_PIECE = re.compile(r"^([.!?,]*)(.*?)([.!?,]*)$")


def normalise(text: str | None) -> str:
    """Lower-case, drop everything but ``[a-z0-9 .!?,]``, collapse whitespace."""
    if not text:
        return ""
    text = _UNSUPPORTED.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def is_punctuation(token: str) -> bool:
    """True when the token is made only of ``. ! ? ,`` characters."""
    return bool(_PUNCTUATION_ONLY.match(token.strip()))


def _split_piece(piece: str) -> list[str]:
    """Peel punctuation runs off both ends of a space-separated piece.

    "hello," -> ["hello", ","]; "3.5" stays whole.
    """
    if is_punctuation(piece):
        return [piece]
    lead, body, trail = _PIECE.match(piece).groups()
    return [p for p in (lead, body, trail) if p]


def tokenize(normalised_text: str) -> list[Word]:
    """Build a fresh word sequence from already-normalised text.

    Every word starts ``waiting`` with confidence 0, except the first
    non-punctuation word which is marked ``current``.
    """
    words: list[Word] = []
    if not normalised_text:
        return words

    for piece in normalised_text.split(" "):
        for token in _split_piece(piece):
            words.append(Word(text=token, is_punctuation=is_punctuation(token)))

    for word in words:
        if not word.is_punctuation:
            word.status = WordStatus.CURRENT
            break

    logger.debug(
        "Tokenised %d words (%d punctuation)",
        len(words),
        sum(1 for w in words if w.is_punctuation),
    )
    return words


def last_spoken_word(transcript: str | None) -> str:
    """Return the trailing word of a transcript, stripped of punctuation.

    An empty string means there is nothing to match.
    """
    clean = normalise(transcript)
    if not clean:
        return ""
    return clean.split(" ")[-1].strip(PUNCTUATION_CHARS)


def edit_distance(a: str, b: str) -> int:
    """Simple Levenshtein distance."""
    if len(a) < len(b):
        return edit_distance(b, a)
    if len(b) == 0:
        return len(a)
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a):
        curr = [i + 1]
        for j, cb in enumerate(b):
            cost = 0 if ca == cb else 1
            curr.append(min(curr[j] + 1, prev[j + 1] + 1, prev[j] + cost))
        prev = curr
    return prev[len(b)]
