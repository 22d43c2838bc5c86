# tests/conftest.py
import random

import pytest
from fastapi.testclient import TestClient

from readalong.config import Settings
from readalong.models import Difficulty
from readalong.services.feedback import FeedbackSelector
from readalong.services.tracker import ReadingTracker


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingFeedback(FeedbackSelector):
    """Feedback selector that remembers every banner it picked."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.picked = []

    def pick(self, positive):
        fb = super().pick(positive)
        self.picked.append(fb)
        return fb


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def feedback(clock):
    return RecordingFeedback(rng=random.Random(7), clock=clock, duration_ms=2000)


@pytest.fixture()
def make_tracker(feedback):
    def _make(text, difficulty=Difficulty.EXPERT, **overrides):
        config = Settings(**overrides)
        tracker = ReadingTracker(difficulty=difficulty, config=config, feedback=feedback)
        tracker.apply_reference_text(text)
        return tracker

    return _make


@pytest.fixture()
def app_client():
    from main import app

    with TestClient(app) as client:
        yield client
