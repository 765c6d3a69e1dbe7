"""Two-phase assessment of a planted or reviewed batch."""
import logging
import random
from dataclasses import replace
from datetime import datetime, UTC
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from wordfarm.config import settings
from wordfarm.exceptions import (
    BatchDataUnavailable,
    InvalidSessionPhase,
    NothingToReview,
    NoSeedsAvailable,
    PlotAlreadyPlanted,
    PlotNotFound,
    PlotNotPlanted,
)
from wordfarm.models.farm_models import (
    AssessmentMode,
    AssessmentResult,
    ExamSession,
    FarmState,
    FillInBlankQuestion,
    MultipleChoiceQuestion,
    Plot,
    SessionPhase,
    WordEntry,
    WordResult,
)
from wordfarm.services.progress_store import ProgressStore
from wordfarm.services.selector import choose_batch
from wordfarm import monitoring

logger = logging.getLogger(__name__)


def normalize_answer(text: Optional[str]) -> str:
    """Trim, lowercase and collapse internal whitespace."""
    if not text:
        return ""
    return " ".join(text.lower().split())


def needs_review(word: WordEntry) -> bool:
    """Words already answered perfectly every time are skipped in review."""
    return word.total_attempts == 0 or word.correct_count != word.total_attempts


class AssessmentEngine:
    """Runs the multiple-choice then fill-in-blank assessment.

    Every operation takes the current session and returns the next one.
    Progress counters are only touched when a session is scored.
    """

    def __init__(self, store: ProgressStore, rng: Optional[random.Random] = None):
        """Initialize the engine with the store used for persistence."""
        self.store = store
        self.rng = rng or random.Random()

    def _get_plot(self, state: FarmState, plot_id: int) -> Plot:
        plot = state.get_plot(plot_id)
        if plot is None:
            raise PlotNotFound(f"Plot {plot_id} not found")
        return plot

    def _require_phase(self, session: ExamSession, phase: SessionPhase) -> None:
        if session.phase != phase:
            raise InvalidSessionPhase(
                f"Expected session in {phase.value}, got {session.phase.value}"
            )

    def _session_words(self, state: FarmState, session: ExamSession) -> List[WordEntry]:
        return state.resolve(session.word_ids)

    def build_multiple_choice(
        self, state: FarmState, words: List[WordEntry]
    ) -> List[MultipleChoiceQuestion]:
        """Create one question per word: its meaning plus random distractors."""
        all_meanings = list(dict.fromkeys(word.meaning for word in state.word_entries()))
        questions = []
        for word in words:
            pool = [meaning for meaning in all_meanings if meaning != word.meaning]
            distractors = self.rng.sample(pool, min(settings.farm.distractor_count, len(pool)))
            options = [word.meaning] + distractors
            self.rng.shuffle(options)
            questions.append(MultipleChoiceQuestion(word_id=word.id, term=word.word, options=options))
        return questions

    def plant_batch(self, state: FarmState, plot_id: int) -> ExamSession:
        """Plant a new batch on an empty plot and open its learning session.

        The words and plot are marked optimistically and saved at once; an
        abandoned session rolls this back.
        """
        plot = self._get_plot(state, plot_id)
        if plot.is_planted:
            raise PlotAlreadyPlanted(f"Plot {plot_id} is already planted")

        word_ids = choose_batch(state.entries, settings.farm.batch_size, self.rng)
        if not word_ids:
            raise NoSeedsAvailable("No seeds available: every word has been planted")

        words = state.resolve(word_ids)
        previously_learned = {word.id: word.learned for word in words}
        for word in words:
            word.learned = True
        plot.is_planted = True
        plot.word_ids = list(word_ids)
        plot.plant_date = datetime.now(UTC).isoformat()
        try:
            self.store.save(state)
        except SQLAlchemyError:
            for word in words:
                word.learned = previously_learned[word.id]
            plot.clear()
            logger.error(f"Planting on plot {plot_id} was not saved, plot left empty")
            raise

        monitoring.batches_planted.inc()
        logger.info(f"Planted {len(word_ids)} words on plot {plot_id}")
        return ExamSession(
            mode=AssessmentMode.LEARNING,
            word_ids=list(word_ids),
            plot_id=plot_id,
            phase=SessionPhase.MULTIPLE_CHOICE,
            pending=True,
            multiple_choice=self.build_multiple_choice(state, words),
        )

    def open_review(self, state: FarmState, plot_id: int) -> ExamSession:
        """Open a review session over the plot's words that are not yet perfect."""
        plot = self._get_plot(state, plot_id)
        if not plot.is_planted:
            raise PlotNotPlanted(f"Plot {plot_id} has nothing planted")

        words = state.resolve(plot.word_ids)
        if not words:
            raise BatchDataUnavailable(f"Batch data unavailable for plot {plot_id}")

        words = [word for word in words if needs_review(word)]
        if not words:
            raise NothingToReview(f"Every word on plot {plot_id} is already perfect")

        logger.info(f"Opened review of {len(words)} words on plot {plot_id}")
        return ExamSession(
            mode=AssessmentMode.REVIEW,
            word_ids=[word.id for word in words],
            plot_id=plot_id,
            phase=SessionPhase.MULTIPLE_CHOICE,
            multiple_choice=self.build_multiple_choice(state, words),
        )

    def submit_multiple_choice(
        self, state: FarmState, session: ExamSession, answers: Dict[int, str]
    ) -> ExamSession:
        """Record which meanings were picked correctly and move to fill-in-blank.

        Results stay in the session; nothing is saved yet.
        """
        self._require_phase(session, SessionPhase.MULTIPLE_CHOICE)
        words = self._session_words(state, session)
        if not words:
            raise BatchDataUnavailable("Batch data unavailable")

        meaning_results = {
            word.id: answers.get(word.id) == word.meaning
            for word in words
        }
        return replace(
            session,
            phase=SessionPhase.FILL_IN_BLANK,
            meaning_results=meaning_results,
            fill_in_blank=[FillInBlankQuestion(word_id=word.id, meaning=word.meaning) for word in words],
        )

    def submit_fill_in_blank(
        self, state: FarmState, session: ExamSession, answers: Dict[int, str]
    ) -> Tuple[ExamSession, AssessmentResult]:
        """Score the batch and save it.

        Every word gains one attempt; only words right in both phases gain a
        correct answer.
        """
        self._require_phase(session, SessionPhase.FILL_IN_BLANK)
        words = self._session_words(state, session)
        if not words:
            raise BatchDataUnavailable("Batch data unavailable")

        previous_counts = {word.id: (word.correct_count, word.total_attempts) for word in words}
        result = AssessmentResult(mode=session.mode)
        for word in words:
            submitted = normalize_answer(answers.get(word.id))
            word_result = WordResult(
                word_id=word.id,
                word=word.word,
                meaning=word.meaning,
                meaning_correct=session.meaning_results.get(word.id) is True,
                spelling_correct=submitted == normalize_answer(word.word),
                submitted=submitted,
            )
            word.total_attempts += 1
            if word_result.perfect:
                word.correct_count += 1
            result.results.append(word_result)

        try:
            self.store.save(state)
        except SQLAlchemyError:
            for word in words:
                word.correct_count, word.total_attempts = previous_counts[word.id]
            logger.error("Scores were not saved, counters restored")
            raise

        for word_result in result.results:
            monitoring.words_scored.labels(
                outcome="perfect" if word_result.perfect else "imperfect"
            ).inc()

        monitoring.assessments_completed.labels(mode=session.mode.value).inc()
        logger.info(
            f"Scored {session.mode.value} session: {result.perfect_count}/{result.total} perfect"
        )
        return replace(session, phase=SessionPhase.SCORED, pending=False), result

    def abandon_session(self, state: FarmState, session: ExamSession) -> ExamSession:
        """Close a session before scoring without changing any counters.

        A freshly planted batch is rolled back: its words become unlearned
        and the plot is emptied again.
        """
        if session.phase == SessionPhase.SCORED:
            return replace(session, phase=SessionPhase.IDLE)

        if session.pending and session.plot_id is not None:
            for word in state.resolve(session.word_ids):
                word.learned = False
            plot = state.get_plot(session.plot_id)
            if plot is not None:
                plot.clear()
            self.store.save(state)
            logger.info(f"Learning session abandoned, plot {session.plot_id} reset")

        monitoring.sessions_abandoned.labels(mode=session.mode.value).inc()
        return replace(
            session,
            phase=SessionPhase.IDLE,
            pending=False,
            meaning_results={},
        )
