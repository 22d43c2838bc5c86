"""Progress and end-of-session summary for a read-aloud passage.

Progress only counts real words: punctuation is resolved automatically
and would otherwise inflate the figure.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol

from readalong.models import WordStatus


class _WordLike(Protocol):
    status: WordStatus
    confidence: float
    is_punctuation: bool


def compute_progress(words: Iterable[_WordLike]) -> float:
    """Fraction of non-punctuation words marked correct (0 when there are none)."""
    total = 0
    correct = 0
    for w in words:
        if w.is_punctuation:
            continue
        total += 1
        if w.status == WordStatus.CORRECT:
            correct += 1
    return correct / total if total else 0.0


def summarise_session(words: Iterable[_WordLike]) -> dict[str, Any]:
    """
    Summarise a session over its word sequence.

    Returns:
      {
        "total_words": int,
        "correct": int,
        "incorrect": int,
        "remaining": int,
        "progress": float,
        "progress_pct": int,
        "avg_confidence": float,
        "encouragement": str,
      }
    """
    spoken = [w for w in words if not w.is_punctuation]
    if not spoken:
        return _empty_summary()

    correct = sum(1 for w in spoken if w.status == WordStatus.CORRECT)
    incorrect = sum(1 for w in spoken if w.status == WordStatus.INCORRECT)
    resolved = [w.confidence for w in spoken if w.status in (WordStatus.CORRECT, WordStatus.INCORRECT)]
    progress = correct / len(spoken)

    return {
        "total_words": len(spoken),
        "correct": correct,
        "incorrect": incorrect,
        "remaining": len(spoken) - correct - incorrect,
        "progress": progress,
        "progress_pct": round(progress * 100),
        "avg_confidence": round(sum(resolved) / len(resolved), 1) if resolved else 0.0,
        "encouragement": _pick_encouragement(progress),
    }


def _pick_encouragement(progress: float) -> str:
    if progress >= 1.0:
        return "You read the whole passage! You're a reading superstar! 🌟"
    if progress >= 0.75:
        return "Wow, you read so much! Almost finished! 📚"
    if progress >= 0.50:
        return "Great effort! You're more than halfway through! 💪"
    if progress >= 0.25:
        return "Good start! Keep reading! 🎉"
    return "Nice try! Every word you read helps you grow! 📖"


def _empty_summary() -> dict[str, Any]:
    return {
        "total_words": 0,
        "correct": 0,
        "incorrect": 0,
        "remaining": 0,
        "progress": 0.0,
        "progress_pct": 0,
        "avg_confidence": 0.0,
        "encouragement": "Let's try reading together! 📖",
    }
