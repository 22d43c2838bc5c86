"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    # --- Difficulty ---
    default_difficulty: str = os.getenv("READALONG_DEFAULT_DIFFICULTY", "expert")
    # levels that demand an exact word match; everything else is flexible
    strict_difficulties: frozenset[str] = field(default_factory=lambda: frozenset(
        d.strip().lower()
        for d in os.getenv("READALONG_STRICT_DIFFICULTIES", "beginner").split(",")
        if d.strip()
    ))

    # --- Matching ---
    max_accept_distance: int = int(os.getenv("READALONG_MAX_ACCEPT_DISTANCE", "1"))
    confidence_step: float = float(os.getenv("READALONG_CONFIDENCE_STEP", "33.33"))
    retry_incorrect_words: bool = _env_bool("READALONG_RETRY_INCORRECT", "false")

    # --- Feedback banner ---
    streak_feedback_threshold: int = int(
        os.getenv("READALONG_STREAK_FEEDBACK_THRESHOLD", "2")
    )
    feedback_duration_ms: int = int(os.getenv("READALONG_FEEDBACK_DURATION_MS", "2000"))

    # --- Sessions ---
    # sessions untouched for this long are dropped when a new one is created
    session_idle_seconds: float = float(os.getenv("READALONG_SESSION_IDLE_SECONDS", "1800"))

    # --- Logging ---
    log_level: str = os.getenv("READALONG_LOG_LEVEL", "INFO").upper()


settings = Settings()
