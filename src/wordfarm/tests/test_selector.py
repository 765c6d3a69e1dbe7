"""Tests for batch selection."""
import random
from typing import List

import pytest
from faker import Faker

from wordfarm.models.farm_models import PassthroughEntry, WordEntry
from wordfarm.services.selector import choose_batch, eligible_words, is_eligible

fake = Faker()


def make_words(count: int, **progress) -> List[WordEntry]:
    """Create distinct words with the same progress."""
    texts = set()
    while len(texts) < count:
        texts.add(fake.unique.word())
    return [
        WordEntry(id=index + 1, word=text, meaning=f"meaning {index}", **progress)
        for index, text in enumerate(sorted(texts))
    ]


@pytest.mark.parametrize("learned,correct,total,expected", [
    (False, 0, 0, True),  # never planted
    (False, 5, 5, True),  # rolled back after attempts
    (True, 0, 0, False),  # planted, not yet assessed
    (True, 0, 2, False),  # too few attempts to judge
    (True, 1, 3, True),  # struggling
    (True, 2, 3, True),  # 0.67 is below the threshold
    (True, 7, 10, False),  # exactly at the threshold
    (True, 3, 3, False),
])
def test_is_eligible(learned: bool, correct: int, total: int, expected: bool) -> None:
    """Test the eligibility predicate."""
    word = WordEntry(
        id=1, word="budget", meaning="n.預算",
        learned=learned, correct_count=correct, total_attempts=total,
    )
    assert is_eligible(word) is expected


def test_eligible_words_skips_passthrough() -> None:
    """Test that comment rows are never selected."""
    entries = [PassthroughEntry(raw_row=["# note"])] + make_words(2)
    assert [word.id for word in eligible_words(entries)] == [1, 2]


def test_choose_batch_bound() -> None:
    """Test that at most ten distinct eligible ids are chosen."""
    words = make_words(25)
    for word in words[:5]:
        word.learned = True
        word.total_attempts = 1
        word.correct_count = 1

    batch = choose_batch(words, 10, random.Random(1))
    eligible_ids = {word.id for word in words[5:]}

    assert len(batch) == 10
    assert len(set(batch)) == 10
    assert set(batch) <= eligible_ids


def test_choose_batch_takes_all_when_short() -> None:
    """Test that fewer eligible words than the batch size are all taken."""
    words = make_words(4)
    batch = choose_batch(words, 10, random.Random(2))
    assert sorted(batch) == [1, 2, 3, 4]


def test_choose_batch_no_seeds() -> None:
    """Test that no eligible words gives an empty batch."""
    words = make_words(3, learned=True)
    assert choose_batch(words, 10) == []


def test_choose_batch_is_random() -> None:
    """Test that different seeds give different orders."""
    words = make_words(20)
    first = choose_batch(words, 10, random.Random(3))
    second = choose_batch(words, 10, random.Random(4))
    assert first != second
