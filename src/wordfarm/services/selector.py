"""Selection of words for the next batch."""
import logging
import random
from typing import List, Optional

from wordfarm.config import settings
from wordfarm.models.farm_models import Entry, WordEntry
from wordfarm.services.mastery import accuracy

logger = logging.getLogger(__name__)


def is_eligible(word: WordEntry) -> bool:
    """A word is eligible if it is new or has been struggling after a few attempts."""
    if not word.learned:
        return True
    return (
        word.total_attempts >= settings.farm.review_min_attempts
        and accuracy(word) < settings.farm.mastery_threshold
    )


def eligible_words(entries: List[Entry]) -> List[WordEntry]:
    """Get WORD entries that may be planted."""
    return [
        entry for entry in entries
        if isinstance(entry, WordEntry) and is_eligible(entry)
    ]


def choose_batch(
    entries: List[Entry],
    size: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Choose up to `size` random eligible word ids.

    An empty result means there are no seeds left to plant.
    """
    if size is None:
        size = settings.farm.batch_size
    rng = rng or random
    candidates = eligible_words(entries)
    chosen = rng.sample(candidates, min(size, len(candidates)))
    logger.info(f"Chose {len(chosen)} of {len(candidates)} eligible words")
    return [word.id for word in chosen]
