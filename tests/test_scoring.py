from readalong.models import Word, WordStatus
from readalong.services.scoring import compute_progress, summarise_session


def _words(*specs):
    return [
        Word(text=text, is_punctuation=punct, status=status, confidence=conf)
        for text, punct, status, conf in specs
    ]


def test_progress_ignores_punctuation():
    words = _words(
        ("one", False, WordStatus.CORRECT, 100),
        (",", True, WordStatus.CORRECT, 100),
        ("two", False, WordStatus.CORRECT, 66.67),
        ("three", False, WordStatus.CORRECT, 100),
        ("four", False, WordStatus.CURRENT, 0),
        ("!", True, WordStatus.WAITING, 0),
    )
    assert compute_progress(words) == 0.75


def test_progress_without_words_is_zero():
    assert compute_progress([]) == 0
    assert compute_progress(_words(("?", True, WordStatus.WAITING, 0))) == 0


def test_summary_counts():
    words = _words(
        ("the", False, WordStatus.CORRECT, 100),
        ("cat", False, WordStatus.INCORRECT, 0),
        ("sat", False, WordStatus.WAITING, 0),
        (".", True, WordStatus.WAITING, 0),
    )
    summary = summarise_session(words)
    assert summary["total_words"] == 3
    assert summary["correct"] == 1
    assert summary["incorrect"] == 1
    assert summary["remaining"] == 1
    assert summary["progress_pct"] == 33
    assert summary["avg_confidence"] == 50.0
    assert "Good start" in summary["encouragement"]


def test_summary_finished_passage():
    words = _words(("hi", False, WordStatus.CORRECT, 100), (".", True, WordStatus.CORRECT, 100))
    summary = summarise_session(words)
    assert summary["progress"] == 1.0
    assert "whole passage" in summary["encouragement"]


def test_summary_empty():
    summary = summarise_session([])
    assert summary["total_words"] == 0
    assert summary["progress_pct"] == 0
