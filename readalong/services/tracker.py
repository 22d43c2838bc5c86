"""Live read-aloud tracker.

Holds the word sequence for the active passage and advances it as spoken
transcript updates arrive. The tracker is the single owner of its words;
callers only ever see immutable ``TrackerSnapshot`` values, either as the
return value of each operation or through ``subscribe``.

Rules per transcript update:
  - Only the trailing word of the transcript is judged, and an update equal
    to the previous one is ignored.
  - The word at the cursor is judged by the policy for the current
    difficulty (see ``matching``). Accepting it moves the cursor past any
    punctuation to the next real word.
  - A miss marks the word incorrect and breaks the streak. The cursor stays
    put, and by default an incorrect word is not re-judged until the
    passage is reset.
"""

from __future__ import annotations

import logging
from typing import Callable

from readalong.config import Settings, settings as default_settings
from readalong.models import Difficulty, Feedback, TrackerSnapshot, Word, WordStatus
from readalong.services.confusions import ConfusionTable
from readalong.services.feedback import FeedbackSelector
from readalong.services.matching import MatchOutcome, MatchPolicy, policy_for
from readalong.services.scoring import compute_progress, summarise_session
from readalong.services.texts import TextProvider
from readalong.services.word_alignment import last_spoken_word, normalise, tokenize

logger = logging.getLogger(__name__)

Listener = Callable[[TrackerSnapshot], None]


class ReadingTracker:
    def __init__(
        self,
        provider: TextProvider | None = None,
        difficulty: Difficulty | str | None = None,
        text_index: int = 0,
        config: Settings = default_settings,
        confusions: ConfusionTable | None = None,
        feedback: FeedbackSelector | None = None,
    ):
        self.config = config
        self.provider = provider
        self.confusions = confusions
        self.difficulty = Difficulty.parse(difficulty or config.default_difficulty)
        self.policy: MatchPolicy = policy_for(self.difficulty, config, confusions)
        self.text_index = text_index
        self.feedback_selector = feedback or FeedbackSelector(
            duration_ms=config.feedback_duration_ms
        )

        self.reference_text = ""
        self.words: list[Word] = []
        self.cursor = 0
        self.streak = 0
        self.progress = 0.0
        self.feedback: Feedback | None = None
        self._last_processed = ""
        self._listeners: list[Listener] = []

        if provider is not None:
            self._rebuild(provider.get_text(self.difficulty, self.text_index))

    # ---- Subscriptions ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with a fresh snapshot after every state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> TrackerSnapshot:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
        return snap

    # ---- Read side ----

    @property
    def finished(self) -> bool:
        return bool(self.words) and self.cursor >= len(self.words)

    def feedback_visible(self) -> bool:
        if self.feedback is None:
            return False
        return self.feedback.is_visible(self.feedback_selector.clock())

    def snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(
            words=tuple(w.view() for w in self.words),
            cursor=self.cursor,
            progress=self.progress,
            streak=self.streak,
            finished=self.finished,
            difficulty=self.difficulty,
            text_index=self.text_index,
            feedback_message=self.feedback.message if self.feedback else None,
            feedback_visible=self.feedback_visible(),
        )

    def summary(self) -> dict:
        return summarise_session(self.words)

    # ---- Reference text ----

    def _rebuild(self, text: str | None) -> None:
        self.reference_text = text or ""
        self.words = tokenize(normalise(self.reference_text))
        first = next((i for i, w in enumerate(self.words) if not w.is_punctuation), None)
        self.cursor = first if first is not None else 0
        self.streak = 0
        self.progress = 0.0
        self.feedback = None
        self._last_processed = ""
        logger.info(
            "Sequence rebuilt: %d words, difficulty=%s, text_index=%d",
            len(self.words),
            self.difficulty.value,
            self.text_index,
        )

    def apply_reference_text(self, text: str | None) -> TrackerSnapshot:
        """Replace the passage and start over."""
        self._rebuild(text)
        return self._publish()

    def reset(self) -> TrackerSnapshot:
        """Rebuild the current passage, clearing streak and progress."""
        if self.provider is not None:
            self._rebuild(self.provider.get_text(self.difficulty, self.text_index))
        else:
            self._rebuild(self.reference_text)
        return self._publish()

    def advance_reference(self) -> TrackerSnapshot:
        """Move to the next passage in rotation for the current difficulty."""
        if self.provider is None:
            logger.debug("No text provider; advance_reference resets the current passage")
            return self.reset()
        count = self.provider.text_count(self.difficulty)
        if count:
            self.text_index = (self.text_index + 1) % count
        return self.reset()

    def set_difficulty(self, difficulty: Difficulty | str) -> TrackerSnapshot:
        self.difficulty = Difficulty.parse(difficulty)
        self.policy = policy_for(self.difficulty, self.config, self.confusions)
        return self.reset()

    # ---- Spoken transcript ----

    def apply_transcript(self, transcript: str | None, listening: bool = True) -> TrackerSnapshot:
        """Judge the trailing word of *transcript* against the word at the cursor."""
        if not self.words or not transcript or not listening:
            return self.snapshot()
        if transcript == self._last_processed:
            return self.snapshot()
        self._last_processed = transcript

        spoken = last_spoken_word(transcript)
        if not spoken:
            logger.debug("Transcript %r has no trailing word", transcript)
            return self.snapshot()

        if not self._match(spoken):
            return self.snapshot()

        self.progress = compute_progress(self.words)
        return self._publish()

    def _match(self, spoken: str) -> bool:
        if self.cursor >= len(self.words):
            logger.debug("Passage finished; ignoring %r", spoken)
            return False
        target = self.words[self.cursor]
        if target.status == WordStatus.CORRECT or target.is_punctuation:
            return False
        if target.status == WordStatus.INCORRECT and not self.config.retry_incorrect_words:
            return False

        result = self.policy.evaluate(target.text, spoken)
        logger.debug(
            "Matched %r against %r at %d: %s (distance=%d, confidence=%.2f)",
            spoken,
            target.text,
            self.cursor,
            result.outcome.value,
            result.distance,
            result.confidence,
        )

        if result.outcome is MatchOutcome.ACCEPT:
            target.status = WordStatus.CORRECT
            target.confidence = result.confidence
            self._advance()
            previous = self.streak
            self.streak += 1
            if previous >= self.config.streak_feedback_threshold:
                self.feedback = self.feedback_selector.pick(positive=True)
        elif result.outcome is MatchOutcome.REJECT:
            target.status = WordStatus.INCORRECT
            target.confidence = result.confidence
            self.streak = 0
            self.feedback = self.feedback_selector.pick(positive=False)
        else:
            target.status = WordStatus.CURRENT
            target.confidence = result.confidence
        return True

    def _advance(self) -> None:
        """Step past the accepted word, auto-resolving punctuation on the way."""
        index = self.cursor + 1
        while index < len(self.words) and self.words[index].is_punctuation:
            self.words[index].status = WordStatus.CORRECT
            self.words[index].confidence = 100.0
            index += 1
        if index < len(self.words):
            self.words[index].status = WordStatus.CURRENT
        self.cursor = index
        if self.finished:
            logger.info("Passage finished at text_index=%d", self.text_index)
