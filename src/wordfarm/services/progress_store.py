"""Service for merging, loading and saving learner progress."""
import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wordfarm.config import settings
from wordfarm.models.farm_models import (
    Entry,
    EntryKind,
    FarmState,
    FarmStatistics,
    PassthroughEntry,
    Plot,
    SourceRow,
    WordEntry,
    entry_from_dict,
)
from wordfarm.models.models import FARM_STATE_RECORD, WORD_DB_RECORD, ProgressRecord
from wordfarm.services.mastery import is_mastered
from wordfarm import monitoring

logger = logging.getLogger(__name__)


def default_plots(count: Optional[int] = None) -> List[Plot]:
    """Create the default collection of empty plots."""
    if count is None:
        count = settings.farm.plot_count
    return [Plot(id=index + 1) for index in range(count)]


def build_entries(fresh_rows: List[SourceRow]) -> List[Entry]:
    """Turn parsed rows into entries, numbering WORD rows from 1."""
    entries: List[Entry] = []
    next_id = 1
    for row in fresh_rows:
        if row.kind == EntryKind.WORD:
            entries.append(WordEntry(
                id=next_id,
                word=row.word,
                meaning=row.meaning,
                raw_row=list(row.columns),
            ))
            next_id += 1
        else:
            entries.append(PassthroughEntry(raw_row=[row.text]))
    return entries


def merge(fresh_rows: List[SourceRow], stored_entries: Optional[List[Entry]] = None) -> List[Entry]:
    """Merge a fresh source with stored progress.

    Words are matched on their exact text. Matched words keep the fresh id,
    meaning and row but take the stored progress; stored words missing from
    the source are dropped.
    """
    entries = build_entries(fresh_rows)
    if not stored_entries:
        return entries

    stored_by_word: Dict[str, WordEntry] = {}
    for stored in stored_entries:
        if isinstance(stored, WordEntry) and stored.word not in stored_by_word:
            stored_by_word[stored.word] = stored

    kept = 0
    for entry in entries:
        if not isinstance(entry, WordEntry):
            continue
        stored = stored_by_word.get(entry.word)
        if stored is None:
            continue
        entry.learned = stored.learned
        entry.correct_count = stored.correct_count
        entry.total_attempts = stored.total_attempts
        kept += 1

    logger.info(f"Merged source with stored progress: {kept} words kept progress")
    return entries


def normalize_plots(plots: List[Plot], count: Optional[int] = None) -> List[Plot]:
    """Pad the stored plots up to the configured count."""
    if count is None:
        count = settings.farm.plot_count
    by_id = {plot.id: plot for plot in plots}
    return [by_id.get(index + 1, Plot(id=index + 1)) for index in range(count)]


class ProgressStore:
    """Service owning the persisted word database and plot state."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def _get_record(self, name: str) -> Optional[ProgressRecord]:
        return self.db.query(ProgressRecord).filter(ProgressRecord.name == name).first()

    def _read_payload(self, name: str) -> Optional[Any]:
        """Read and decode a record, treating corrupt JSON as missing."""
        record = self._get_record(name)
        if record is None:
            return None
        try:
            return json.loads(record.payload)
        except (TypeError, ValueError) as e:
            logger.warning(f"Stored {name} is not valid JSON, using defaults: {e}")
            monitoring.store_errors.labels(error_type="corrupt").inc()
            return None

    def load_stored_entries(self) -> Optional[List[Entry]]:
        """Get the stored word database, or None if absent or malformed."""
        payload = self._read_payload(WORD_DB_RECORD)
        if payload is None:
            return None
        try:
            return [entry_from_dict(item) for item in payload]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Stored word database is malformed, using defaults: {e}")
            monitoring.store_errors.labels(error_type="malformed").inc()
            return None

    def load_stored_plots(self) -> Optional[List[Plot]]:
        """Get the stored plots, or None if absent or malformed."""
        payload = self._read_payload(FARM_STATE_RECORD)
        if payload is None:
            return None
        try:
            return [Plot.from_dict(item) for item in payload]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Stored farm state is malformed, using defaults: {e}")
            monitoring.store_errors.labels(error_type="malformed").inc()
            return None

    def load(self, fresh_rows: List[SourceRow]) -> FarmState:
        """Build the active state from a fresh source and stored progress.

        The two records are only used as a pair; if either is missing or
        unreadable the learner starts from empty progress.
        """
        stored_entries = self.load_stored_entries()
        stored_plots = self.load_stored_plots()
        if stored_entries is None or stored_plots is None:
            if stored_entries is not None or stored_plots is not None:
                logger.warning("Stored progress is incomplete, starting fresh")
            stored_entries, stored_plots = None, None

        entries = merge(fresh_rows, stored_entries)
        plots = normalize_plots(stored_plots) if stored_plots is not None else default_plots()

        state = FarmState(entries=entries, plots=plots)
        monitoring.planted_plots.set(sum(1 for plot in plots if plot.is_planted))
        logger.info(
            f"Loaded farm: {len(state.word_entries())} words, "
            f"{sum(1 for word in state.word_entries() if word.learned)} learned"
        )
        return state

    def save(self, state: FarmState) -> None:
        """Write the word database and plots together as one snapshot."""
        words_payload = json.dumps([entry.to_dict() for entry in state.entries], ensure_ascii=False)
        plots_payload = json.dumps([plot.to_dict() for plot in state.plots], ensure_ascii=False)
        try:
            for name, payload in ((WORD_DB_RECORD, words_payload), (FARM_STATE_RECORD, plots_payload)):
                record = self._get_record(name)
                if record is None:
                    self.db.add(ProgressRecord(name=name, payload=payload))
                else:
                    record.payload = payload
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save progress: {e}")
            monitoring.store_errors.labels(error_type="write").inc()
            raise
        monitoring.planted_plots.set(sum(1 for plot in state.plots if plot.is_planted))
        logger.debug("Progress saved")

    def reset(self) -> None:
        """Delete all stored progress."""
        self.db.query(ProgressRecord).filter(
            ProgressRecord.name.in_([WORD_DB_RECORD, FARM_STATE_RECORD])
        ).delete(synchronize_session=False)
        self.db.commit()
        logger.info("Stored progress cleared")

    @staticmethod
    def statistics(state: FarmState) -> FarmStatistics:
        """Summarize learner progress."""
        words = state.word_entries()
        learned = sum(1 for word in words if word.learned)
        return FarmStatistics(
            total_words=len(words),
            learned_words=learned,
            unlearned_words=len(words) - learned,
            review_words=sum(
                1 for word in words
                if word.learned and word.total_attempts > 0 and word.correct_count < word.total_attempts
            ),
            planted_plots=sum(1 for plot in state.plots if plot.is_planted),
            mastered_plots=sum(1 for plot in state.plots if is_mastered(plot, state.entries)),
        )
