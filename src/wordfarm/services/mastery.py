"""Accuracy and mastery calculations."""
from enum import Enum
from typing import List, Optional

from wordfarm.config import settings
from wordfarm.models.farm_models import Entry, Plot, WordEntry


class WordStatus(Enum):
    """Review status of a single word."""
    NEW = "new"  # never attempted
    PROBLEM = "problem"  # below the mastery threshold
    IN_PROGRESS = "in_progress"
    PERFECT = "perfect"  # every attempt correct


def accuracy(word: WordEntry) -> float:
    """Share of perfect attempts, 0 for an unattempted word."""
    if word.total_attempts <= 0:
        return 0.0
    return word.correct_count / word.total_attempts


def is_accurate(word: WordEntry, threshold: Optional[float] = None) -> bool:
    """Check whether a word has been attempted and meets the threshold."""
    if threshold is None:
        threshold = settings.farm.mastery_threshold
    return word.total_attempts > 0 and accuracy(word) >= threshold


def is_mastered(plot: Plot, entries: List[Entry], threshold: Optional[float] = None) -> bool:
    """Check whether every word on the plot is accurate.

    An empty plot, or one referencing a word that no longer exists, is
    never mastered.
    """
    if not plot.word_ids:
        return False
    words = {entry.id: entry for entry in entries if isinstance(entry, WordEntry)}
    for word_id in plot.word_ids:
        word = words.get(word_id)
        if word is None or not is_accurate(word, threshold):
            return False
    return True


def word_status(word: WordEntry, threshold: Optional[float] = None) -> WordStatus:
    """Classify a word for the review overview."""
    if threshold is None:
        threshold = settings.farm.mastery_threshold
    if word.total_attempts == 0:
        return WordStatus.NEW
    if word.correct_count == word.total_attempts:
        return WordStatus.PERFECT
    if accuracy(word) < threshold:
        return WordStatus.PROBLEM
    return WordStatus.IN_PROGRESS
