"""Reference passages to read aloud, grouped by difficulty."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol, Sequence

from readalong.models import Difficulty

logger = logging.getLogger(__name__)

DEFAULT_TEXTS: dict[Difficulty, list[str]] = {
    Difficulty.BEGINNER: [
        "The cat sat on the mat.",
        "I see a red ball.",
        "We like to run and play.",
        "The sun is hot today.",
    ],
    Difficulty.LEARNING: [
        "My dog likes to play in the park. He runs fast!",
        "There are two birds in the tree. They sing all day.",
        "Can you hear the rain? It taps on the window.",
        "We read a book aloud at school, and it was fun.",
    ],
    Difficulty.EXPERT: [
        "The elephant walked slowly through the tall grass, looking for water.",
        "Reading aloud every day helps you become a confident, fluent reader.",
        "Three friends went on an adventure to find the hidden treasure.",
        "When the stars come out at night, the sky looks like a sparkling blanket.",
    ],
}


class TextProvider(Protocol):
    def get_text(self, difficulty: Difficulty, index: int) -> str: ...

    def text_count(self, difficulty: Difficulty) -> int: ...


class LibraryTextProvider:
    """Serves passages from an in-memory library; the index wraps around."""

    def __init__(self, library: Mapping[Difficulty, Sequence[str]] | None = None):
        self.library = {
            Difficulty.parse(k): list(v)
            for k, v in (library if library is not None else DEFAULT_TEXTS).items()
        }

    def text_count(self, difficulty: Difficulty) -> int:
        return len(self.library.get(difficulty, []))

    def get_text(self, difficulty: Difficulty, index: int) -> str:
        texts = self.library.get(difficulty, [])
        if not texts:
            logger.debug("No texts for difficulty %s", difficulty.value)
            return ""
        return texts[index % len(texts)]
