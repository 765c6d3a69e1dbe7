"""Tests for accuracy and mastery."""
import pytest

from wordfarm.models.farm_models import PassthroughEntry, Plot, WordEntry
from wordfarm.services.mastery import (
    WordStatus,
    accuracy,
    is_accurate,
    is_mastered,
    word_status,
)


def word(word_id: int, correct: int, total: int) -> WordEntry:
    return WordEntry(
        id=word_id, word=f"word{word_id}", meaning=f"meaning{word_id}",
        learned=True, correct_count=correct, total_attempts=total,
    )


def test_budget_example() -> None:
    """Test that 7 of 10 sits exactly on the threshold and counts as accurate."""
    assert accuracy(word(1, 7, 10)) == pytest.approx(0.7)
    assert is_accurate(word(1, 7, 10))
    assert not is_accurate(word(1, 1, 2))
    assert not is_accurate(word(1, 0, 0))


def test_is_mastered_requires_every_word() -> None:
    """Test that a single weak word keeps the plot unmastered."""
    entries = [word(1, 3, 3), word(2, 7, 10), word(3, 1, 3)]
    assert is_mastered(Plot(id=1, is_planted=True, word_ids=[1, 2]), entries)
    assert not is_mastered(Plot(id=1, is_planted=True, word_ids=[1, 2, 3]), entries)


def test_is_mastered_empty_plot() -> None:
    """Test that an empty plot is never mastered."""
    assert not is_mastered(Plot(id=1), [word(1, 1, 1)])


def test_is_mastered_unattempted_word() -> None:
    """Test that a word never attempted blocks mastery."""
    assert not is_mastered(Plot(id=1, is_planted=True, word_ids=[1]), [word(1, 0, 0)])


def test_is_mastered_missing_word() -> None:
    """Test that an id with no word behind it blocks mastery."""
    entries = [PassthroughEntry(raw_row=["# note"]), word(1, 1, 1)]
    assert not is_mastered(Plot(id=1, is_planted=True, word_ids=[1, 99]), entries)


def test_is_mastered_follows_progress() -> None:
    """Test that mastery is recomputed from current counters on every call."""
    entry = word(1, 0, 1)
    plot = Plot(id=1, is_planted=True, word_ids=[1])
    assert not is_mastered(plot, [entry])

    entry.correct_count, entry.total_attempts = 3, 4
    assert is_mastered(plot, [entry])


@pytest.mark.parametrize("correct,total,expected", [
    (0, 0, WordStatus.NEW),
    (4, 4, WordStatus.PERFECT),
    (1, 3, WordStatus.PROBLEM),
    (3, 4, WordStatus.IN_PROGRESS),
])
def test_word_status(correct: int, total: int, expected: WordStatus) -> None:
    """Test the review overview classification."""
    assert word_status(word(1, correct, total)) == expected
