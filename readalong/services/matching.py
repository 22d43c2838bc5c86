"""Word matching policies: how a spoken word is judged against the target.

Two variants, picked by difficulty:

* ``StrictPolicy``: exact match only, confidence is 100 or 0, and any
  other word is a miss straight away.
* ``FlexiblePolicy``: accepts a word within a small edit distance or a
  known homophone, and lets a short partial utterance keep the word open
  instead of failing it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from readalong.config import Settings, settings as default_settings
from readalong.models import Difficulty
from readalong.services.confusions import ConfusionTable, default_table
from readalong.services.word_alignment import edit_distance

logger = logging.getLogger(__name__)


class MatchOutcome(str, Enum):
    ACCEPT = "accept"    # word read correctly, move on
    REJECT = "reject"    # reader committed to a wrong word
    PARTIAL = "partial"  # still mid-word, keep listening


@dataclass(frozen=True)
class MatchResult:
    outcome: MatchOutcome
    confidence: float
    distance: int
    via_confusion: bool = False


@dataclass(frozen=True)
class StrictPolicy:
    name: str = "strict"

    def evaluate(self, target: str, spoken: str) -> MatchResult:
        if target == spoken:
            return MatchResult(MatchOutcome.ACCEPT, 100.0, 0)
        return MatchResult(MatchOutcome.REJECT, 0.0, edit_distance(target, spoken))


@dataclass(frozen=True)
class FlexiblePolicy:
    table: ConfusionTable = default_table
    max_distance: int = 1
    confidence_step: float = 33.33
    name: str = "flexible"

    def confidence_for(self, distance: int) -> float:
        return min(100.0, max(0.0, 100.0 - distance * self.confidence_step))

    def evaluate(self, target: str, spoken: str) -> MatchResult:
        distance = edit_distance(target, spoken)
        confidence = self.confidence_for(distance)
        via_confusion = self.table.is_confusion(target, spoken)

        if via_confusion:
            return MatchResult(MatchOutcome.ACCEPT, 100.0, distance, via_confusion=True)
        if distance <= self.max_distance:
            return MatchResult(MatchOutcome.ACCEPT, confidence, distance)
        # A spoken word at least as long as the target is a finished (wrong)
        # attempt; anything shorter may still be growing.
        if len(spoken) >= len(target):
            return MatchResult(MatchOutcome.REJECT, confidence, distance)
        return MatchResult(MatchOutcome.PARTIAL, confidence, distance)


MatchPolicy = StrictPolicy | FlexiblePolicy


def policy_for(
    difficulty: Difficulty,
    config: Settings = default_settings,
    table: ConfusionTable | None = None,
) -> MatchPolicy:
    """Pick the matching policy configured for *difficulty*."""
    if difficulty.value in config.strict_difficulties:
        logger.debug("Difficulty %s uses strict matching", difficulty.value)
        return StrictPolicy()
    logger.debug("Difficulty %s uses flexible matching", difficulty.value)
    return FlexiblePolicy(
        table=table if table is not None else default_table,
        max_distance=config.max_accept_distance,
        confidence_step=config.confidence_step,
    )
