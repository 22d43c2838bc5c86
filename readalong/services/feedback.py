"""Short feedback banners shown on correct streaks and misses."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Sequence

from readalong.config import settings
from readalong.models import Feedback

logger = logging.getLogger(__name__)

POSITIVE_MESSAGES = (
    "Great job! 🌟",
    "You're on fire! 🔥",
    "Awesome reading! 📚",
    "Super star! ⭐",
    "Keep it up! 🚀",
    "Fantastic! 🎉",
)

# Shown on a miss, so kept encouraging rather than corrective.
NEGATIVE_MESSAGES = (
    "Good try! 💪",
    "Almost there! 🌈",
    "Keep going! 👍",
    "You can do it! ✨",
    "Nice effort! 😊",
)


class FeedbackSelector:
    """Picks a random message and stamps when it should disappear.

    ``rng`` and ``clock`` are injectable so tests can pin the choice and
    the time.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        duration_ms: int | None = None,
        positive: Sequence[str] = POSITIVE_MESSAGES,
        negative: Sequence[str] = NEGATIVE_MESSAGES,
    ):
        self.rng = rng or random.Random()
        self.clock = clock
        self.duration_ms = settings.feedback_duration_ms if duration_ms is None else duration_ms
        self.positive = tuple(positive)
        self.negative = tuple(negative)

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000

    def pick(self, positive: bool) -> Feedback:
        pool = self.positive if positive else self.negative
        message = self.rng.choice(pool)
        now = self.clock()
        logger.debug("Feedback (%s): %s", "positive" if positive else "negative", message)
        return Feedback(
            message=message,
            positive=positive,
            shown_at=now,
            expires_at=now + self.duration_seconds,
        )
