"""Main application entry point."""
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from wordfarm.exceptions import FarmNotStarted, NoActiveSession, SessionAlreadyOpen
from wordfarm.models.base import init_db, SessionLocal
from wordfarm.models.farm_models import (
    AssessmentResult,
    ExamSession,
    FarmState,
    FarmStatistics,
)
from wordfarm.services.assessment_service import AssessmentEngine
from wordfarm.services.export_service import ExportService
from wordfarm.services.mastery import WordStatus, accuracy, is_mastered, word_status
from wordfarm.services.progress_store import ProgressStore
from wordfarm.services.source_parser import SourceLoader


class WordFarm:
    """One learner's farm: the session surface used by the presentation layer.

    Only one assessment session may be open at a time.
    """

    def __init__(self, loader: Optional[SourceLoader] = None, db=None):
        """Initialize the application."""
        self.loader = loader or SourceLoader()
        self.db = db
        self._owns_db = db is None
        self.store: Optional[ProgressStore] = None
        self.engine: Optional[AssessmentEngine] = None
        self.exporter = ExportService()
        self.state: Optional[FarmState] = None
        self.session: Optional[ExamSession] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    async def start(self) -> None:
        """Load the word source and merge it with stored progress."""
        if self.running:
            return

        try:
            if self.db is None:
                init_db()
                self.db = SessionLocal()
                self.logger.info("Database initialized")

            self.store = ProgressStore(self.db)
            self.engine = AssessmentEngine(self.store)

            rows = await self.loader.load()
            self.state = self.store.load(rows)
            if not self.state.word_entries():
                self.logger.warning("No words available from the word source")

            self.running = True
            self.logger.info("Word farm started")

        except Exception as e:
            self.logger.error("Failed to start word farm: %s", str(e))
            await self.stop()
            raise

    async def stop(self) -> None:
        """Close the database session."""
        if self.db is not None and self._owns_db:
            self.db.close()
            self.db = None
            self.logger.info("Database session closed")
        self.session = None
        self.running = False

    def _require_started(self) -> FarmState:
        if not self.running or self.state is None:
            raise FarmNotStarted("Start the farm before using it")
        return self.state

    def _require_session(self) -> ExamSession:
        self._require_started()
        if self.session is None:
            raise NoActiveSession("No assessment session is open")
        return self.session

    def _require_no_session(self) -> None:
        self._require_started()
        if self.session is not None:
            raise SessionAlreadyOpen("Finish or abandon the open session first")

    def plant_batch(self, plot_id: int) -> ExamSession:
        """Plant a fresh batch on an empty plot and start learning it."""
        self._require_no_session()
        self.session = self.engine.plant_batch(self.state, plot_id)
        return self.session

    def open_review(self, plot_id: int) -> ExamSession:
        """Start reviewing a planted plot."""
        self._require_no_session()
        self.session = self.engine.open_review(self.state, plot_id)
        return self.session

    def submit_multiple_choice(self, answers: Dict[int, str]) -> ExamSession:
        """Submit the chosen meaning per word id."""
        self.session = self.engine.submit_multiple_choice(self.state, self._require_session(), answers)
        return self.session

    def submit_fill_in_blank(self, answers: Dict[int, str]) -> AssessmentResult:
        """Submit the typed term per word id and score the session."""
        _, result = self.engine.submit_fill_in_blank(self.state, self._require_session(), answers)
        self.session = None
        return result

    def abandon_session(self) -> None:
        """Close the open session, rolling back an unscored planting."""
        if self.session is None:
            return
        self.engine.abandon_session(self.state, self.session)
        self.session = None

    def request_export(self, selected_ids: Iterable[int]) -> str:
        """Render the word list as CSV, archiving the selected words."""
        return self.exporter.export(selected_ids, self._require_started().entries)

    def write_export(self, selected_ids: Iterable[int], directory: Optional[Path] = None) -> Path:
        """Write the CSV export to a dated file."""
        return self.exporter.write_export(selected_ids, self._require_started().entries, directory)

    def statistics(self) -> FarmStatistics:
        """Summarize learner progress."""
        return ProgressStore.statistics(self._require_started())

    def plot_overview(self) -> List[Tuple[int, bool, bool]]:
        """Get (plot id, planted, mastered) for every plot."""
        state = self._require_started()
        return [
            (plot.id, plot.is_planted, is_mastered(plot, state.entries))
            for plot in state.plots
        ]

    def review_overview(self, plot_id: int) -> List[Tuple[str, str, float, WordStatus]]:
        """Get (word, meaning, accuracy, status) for each word on a plot."""
        state = self._require_started()
        plot = state.get_plot(plot_id)
        if plot is None:
            return []
        return [
            (word.word, word.meaning, accuracy(word), word_status(word))
            for word in state.resolve(plot.word_ids)
        ]

    async def reset_progress(self) -> None:
        """Clear all stored progress and reload the word source."""
        self._require_no_session()
        self.store.reset()
        rows = await self.loader.load()
        self.state = self.store.load(rows)
        self.logger.info("Progress reset")
