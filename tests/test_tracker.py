import pytest

from readalong.config import Settings
from readalong.models import Difficulty, WordStatus
from readalong.services.texts import LibraryTextProvider
from readalong.services.tracker import ReadingTracker


def statuses(snapshot):
    return [w.status for w in snapshot.words]


# ---- Punctuation + cursor ----

def test_punctuation_is_resolved_when_preceding_word_is_correct(make_tracker):
    tracker = make_tracker("Hello, world.")
    snap = tracker.apply_transcript("hello")

    assert [w.text for w in snap.words] == ["hello", ",", "world", "."]
    assert snap.words[0].status == WordStatus.CORRECT
    assert snap.words[1].status == WordStatus.CORRECT
    assert snap.words[1].confidence == 100
    assert snap.words[2].status == WordStatus.CURRENT
    assert snap.cursor == 2


def test_finishing_the_passage(make_tracker):
    tracker = make_tracker("Hello, world.")
    tracker.apply_transcript("hello")
    snap = tracker.apply_transcript("hello world")

    assert snap.finished
    assert snap.cursor == len(snap.words)
    assert snap.current_word is None
    assert all(s == WordStatus.CORRECT for s in statuses(snap))
    assert snap.progress == 1.0

    # further speech changes nothing
    assert tracker.apply_transcript("hello world again") == snap


def test_exactly_one_current_word_while_reading(make_tracker):
    tracker = make_tracker("The cat sat on the mat.")
    for transcript in ["the", "the cat", "the cat sat"]:
        snap = tracker.apply_transcript(transcript)
        assert statuses(snap).count(WordStatus.CURRENT) == 1
        assert snap.words[snap.cursor].status == WordStatus.CURRENT


# ---- Idempotence + gating ----

def test_same_transcript_twice_is_processed_once(make_tracker, feedback):
    tracker = make_tracker("cat dog bird", difficulty=Difficulty.BEGINNER)
    first = tracker.apply_transcript("cow")
    second = tracker.apply_transcript("cow")

    assert first == second
    assert len(feedback.picked) == 1


def test_updates_ignored_when_not_listening(make_tracker):
    tracker = make_tracker("cat dog")
    snap = tracker.apply_transcript("cat", listening=False)
    assert snap.words[0].status == WordStatus.CURRENT

    # not recorded by the duplicate guard, so it counts once listening
    snap = tracker.apply_transcript("cat", listening=True)
    assert snap.words[0].status == WordStatus.CORRECT


def test_empty_trailing_word_is_ignored(make_tracker):
    tracker = make_tracker("cat dog")
    snap = tracker.apply_transcript("cat .")
    assert snap.words[0].status == WordStatus.CURRENT
    assert snap.words[0].confidence == 0


def test_empty_reference_is_inert(make_tracker):
    tracker = make_tracker("")
    snap = tracker.apply_transcript("hello")
    assert snap.words == ()
    assert snap.progress == 0
    assert not snap.finished


def test_punctuation_only_reference_is_inert(make_tracker):
    tracker = make_tracker("?!")
    snap = tracker.apply_transcript("hello")
    assert statuses(snap) == [WordStatus.WAITING]
    assert snap.progress == 0


# ---- Strict vs flexible ----

def test_strict_mode_miss_is_final_with_zero_confidence(make_tracker):
    tracker = make_tracker("cat", difficulty=Difficulty.BEGINNER)
    snap = tracker.apply_transcript("cot")
    assert snap.words[0].status == WordStatus.INCORRECT
    assert snap.words[0].confidence == 0


def test_strict_mode_has_no_partial_state(make_tracker):
    tracker = make_tracker("elephant", difficulty=Difficulty.BEGINNER)
    snap = tracker.apply_transcript("el")
    assert snap.words[0].status == WordStatus.INCORRECT


def test_flexible_partial_then_close_enough(make_tracker):
    tracker = make_tracker("elephant")
    snap = tracker.apply_transcript("el")
    assert snap.words[0].status == WordStatus.CURRENT
    assert snap.streak == 0

    snap = tracker.apply_transcript("elephent")
    assert snap.words[0].status == WordStatus.CORRECT
    assert snap.words[0].confidence == pytest.approx(66.67)
    assert snap.streak == 1


def test_flexible_homophone_counts_as_exact(make_tracker):
    tracker = make_tracker("over there", difficulty=Difficulty.LEARNING)
    tracker.apply_transcript("over")
    snap = tracker.apply_transcript("over their")
    assert snap.words[1].status == WordStatus.CORRECT
    assert snap.words[1].confidence == 100


def test_confidence_always_in_bounds(make_tracker):
    tracker = make_tracker("a quick brown fox jumps", retry_incorrect_words=True)
    for transcript in ["a", "a quack", "a quick", "a quick xxxxxxxxxxxx", "b", "brown"]:
        snap = tracker.apply_transcript(transcript)
        assert all(0 <= w.confidence <= 100 for w in snap.words)


# ---- Incorrect words ----

def test_incorrect_word_stays_incorrect_until_reset(make_tracker, feedback):
    tracker = make_tracker("the cat")
    tracker.apply_transcript("the")
    snap = tracker.apply_transcript("the dog")
    assert snap.words[1].status == WordStatus.INCORRECT
    assert snap.streak == 0
    assert feedback.picked[-1].positive is False

    snap = tracker.apply_transcript("the dog cat")
    assert snap.words[1].status == WordStatus.INCORRECT
    assert snap.cursor == 1

    snap = tracker.reset()
    assert snap.words[1].status == WordStatus.WAITING


def test_incorrect_word_can_be_retried_when_enabled(make_tracker):
    tracker = make_tracker("the cat", retry_incorrect_words=True)
    tracker.apply_transcript("the")
    tracker.apply_transcript("the dog")
    snap = tracker.apply_transcript("the dog cat")
    assert snap.words[1].status == WordStatus.CORRECT
    assert snap.finished


# ---- Streak + feedback ----

def test_positive_feedback_on_third_consecutive_word(make_tracker, feedback):
    tracker = make_tracker("the cat sat on the mat")

    tracker.apply_transcript("the")
    tracker.apply_transcript("the cat")
    assert feedback.picked == []

    snap = tracker.apply_transcript("the cat sat")
    assert snap.streak == 3
    assert len(feedback.picked) == 1
    assert feedback.picked[0].positive
    assert snap.feedback_message == feedback.picked[0].message


def test_feedback_banner_expires(make_tracker, clock):
    tracker = make_tracker("cat dog", difficulty=Difficulty.BEGINNER)
    snap = tracker.apply_transcript("cow")
    assert snap.feedback_visible

    clock.advance(1.9)
    assert tracker.snapshot().feedback_visible
    clock.advance(0.2)
    assert not tracker.snapshot().feedback_visible


def test_miss_resets_streak(make_tracker):
    tracker = make_tracker("one two three four")
    tracker.apply_transcript("one")
    tracker.apply_transcript("one two")
    assert tracker.streak == 2
    tracker.apply_transcript("one two seven")
    assert tracker.streak == 0


# ---- Progress + reset ----

def test_progress_counts_only_words(make_tracker):
    tracker = make_tracker("one, two. three four!")
    for transcript in ["one", "one two", "one two three"]:
        snap = tracker.apply_transcript(transcript)
    assert snap.progress == 0.75


def test_reset_clears_session_state(make_tracker):
    tracker = make_tracker("Well, the cat sat.")
    for transcript in ["well", "well the", "well the cat"]:
        tracker.apply_transcript(transcript)
    assert tracker.streak == 3

    snap = tracker.reset()
    assert snap.streak == 0
    assert snap.progress == 0
    assert snap.cursor == 0
    assert snap.words[0].status == WordStatus.CURRENT
    assert all(s == WordStatus.WAITING for s in statuses(snap)[1:])
    assert snap.feedback_message is None

    # the duplicate guard starts over too
    snap = tracker.apply_transcript("well")
    assert snap.words[0].status == WordStatus.CORRECT


# ---- Text provider ----

@pytest.fixture()
def provider():
    return LibraryTextProvider({
        "beginner": ["cat dog", "sun hat"],
        "expert": ["elephant walks", "the stars shine", "quiet river"],
    })


def test_advance_reference_rotates_texts(provider, feedback):
    tracker = ReadingTracker(provider=provider, difficulty="beginner", feedback=feedback)
    assert [w.text for w in tracker.snapshot().words] == ["cat", "dog"]

    tracker.apply_transcript("cat")
    snap = tracker.advance_reference()
    assert snap.text_index == 1
    assert [w.text for w in snap.words] == ["sun", "hat"]
    assert snap.progress == 0

    snap = tracker.advance_reference()
    assert snap.text_index == 0


def test_set_difficulty_rebuilds_with_new_policy(provider, feedback):
    tracker = ReadingTracker(provider=provider, difficulty="beginner", text_index=1, feedback=feedback)
    snap = tracker.set_difficulty(Difficulty.EXPERT)
    assert snap.difficulty == Difficulty.EXPERT
    assert [w.text for w in snap.words] == ["the", "stars", "shine"]

    # flexible now: one edit is fine
    snap = tracker.apply_transcript("thi")
    assert snap.words[0].status == WordStatus.CORRECT


def test_missing_difficulty_gives_empty_sequence(provider, feedback):
    tracker = ReadingTracker(provider=provider, difficulty="learning", feedback=feedback)
    assert tracker.snapshot().words == ()


def test_unknown_difficulty_raises(provider):
    with pytest.raises(ValueError):
        ReadingTracker(provider=provider, difficulty="wizard")


# ---- Subscriptions ----

def test_subscribers_receive_each_change(make_tracker):
    tracker = make_tracker("cat dog")
    seen = []
    unsubscribe = tracker.subscribe(seen.append)

    tracker.apply_transcript("cat")
    tracker.apply_transcript("cat")  # duplicate, no publish
    assert len(seen) == 1
    assert seen[0].words[0].status == WordStatus.CORRECT

    tracker.reset()
    assert len(seen) == 2

    unsubscribe()
    tracker.apply_transcript("cat")
    assert len(seen) == 2


def test_snapshots_are_not_mutated_by_later_updates(make_tracker):
    tracker = make_tracker("cat dog")
    before = tracker.snapshot()
    tracker.apply_transcript("cat")
    assert before.words[0].status == WordStatus.CURRENT


def test_config_threshold_changes_when_praise_starts(make_tracker, feedback):
    tracker = make_tracker("a b c", streak_feedback_threshold=0)
    tracker.apply_transcript("a")
    assert len(feedback.picked) == 1


def test_default_settings_are_flexible_expert():
    config = Settings()
    tracker = ReadingTracker(config=config)
    assert tracker.difficulty == Difficulty(config.default_difficulty)
    assert tracker.snapshot().words == ()
