"""Data model for the read-aloud tracker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Difficulty
# ---------------------------------------------------------------------------


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    LEARNING = "learning"
    EXPERT = "expert"

    @classmethod
    def parse(cls, value: "str | Difficulty") -> "Difficulty":
        """Accept an enum member or its name, case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(d.value for d in cls)
            raise ValueError(f"Unknown difficulty {value!r} (expected one of: {valid})") from None


# ---------------------------------------------------------------------------
# Words
# ---------------------------------------------------------------------------


class WordStatus(str, Enum):
    WAITING = "waiting"
    CURRENT = "current"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass
class Word:
    """One word or punctuation unit of the reference text.

    Only ``status`` and ``confidence`` change after creation; the tracker
    owns every ``Word`` it builds and never hands them out directly.
    """

    text: str
    is_punctuation: bool
    status: WordStatus = WordStatus.WAITING
    confidence: float = 0.0

    def view(self) -> "WordView":
        return WordView(
            text=self.text,
            status=self.status,
            confidence=self.confidence,
            is_punctuation=self.is_punctuation,
        )


@dataclass(frozen=True)
class WordView:
    """Read-only copy of a ``Word`` handed to the presentation layer."""

    text: str
    status: WordStatus
    confidence: float
    is_punctuation: bool

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "status": self.status.value,
            "confidence": round(self.confidence, 2),
            "is_punctuation": self.is_punctuation,
        }


# ---------------------------------------------------------------------------
# Feedback + snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Feedback:
    message: str
    positive: bool
    shown_at: float  # seconds, from the selector's clock
    expires_at: float

    def is_visible(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class TrackerSnapshot:
    words: tuple[WordView, ...]
    cursor: int
    progress: float
    streak: int
    finished: bool
    difficulty: Difficulty
    text_index: int
    feedback_message: Optional[str] = None
    feedback_visible: bool = False

    @property
    def current_word(self) -> Optional[WordView]:
        if 0 <= self.cursor < len(self.words):
            return self.words[self.cursor]
        return None

    def to_dict(self) -> dict:
        return {
            "words": [w.to_dict() for w in self.words],
            "cursor": self.cursor,
            "progress": self.progress,
            "progress_pct": round(self.progress * 100),
            "streak": self.streak,
            "finished": self.finished,
            "difficulty": self.difficulty.value,
            "text_index": self.text_index,
            "feedback": {
                "message": self.feedback_message,
                "visible": self.feedback_visible,
            },
        }
