"""Models for farm, word and assessment data structures."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class EntryKind(Enum):
    """Classification of a source row."""
    WORD = "word"
    COMMENT = "comment"  # blank, comment or incomplete row kept verbatim


class AssessmentMode(Enum):
    """Why an assessment was opened."""
    LEARNING = "learning"  # freshly planted plot
    REVIEW = "review"  # plot planted earlier


class SessionPhase(Enum):
    """Assessment state machine phases."""
    IDLE = "idle"
    MULTIPLE_CHOICE = "multiple_choice"
    FILL_IN_BLANK = "fill_in_blank"
    SCORED = "scored"


@dataclass
class SourceRow:
    """One classified data row of the word source."""
    kind: EntryKind
    text: str  # original line, untouched
    columns: List[str] = field(default_factory=list)

    @property
    def word(self) -> str:
        return self.columns[0] if self.columns else ""

    @property
    def meaning(self) -> str:
        return self.columns[1] if len(self.columns) > 1 else ""


@dataclass
class WordEntry:
    """A word with the learner's progress on it."""
    id: int
    word: str
    meaning: str
    learned: bool = False
    correct_count: int = 0
    total_attempts: int = 0
    raw_row: List[str] = field(default_factory=list)

    kind = EntryKind.WORD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "word": self.word,
            "meaning": self.meaning,
            "learned": self.learned,
            "correct_count": self.correct_count,
            "total_attempts": self.total_attempts,
            "raw_row": list(self.raw_row),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordEntry":
        """Build an entry from its stored form, clamping bad counters."""
        total = max(int(data.get("total_attempts") or 0), 0)
        correct = min(max(int(data.get("correct_count") or 0), 0), total)
        return cls(
            id=int(data["id"]),
            word=str(data["word"]),
            meaning=str(data["meaning"]),
            learned=bool(data.get("learned", False)),
            correct_count=correct,
            total_attempts=total,
            raw_row=[str(column) for column in data.get("raw_row") or []],
        )


@dataclass
class PassthroughEntry:
    """A non-word source row kept for lossless export."""
    raw_row: List[str]

    kind = EntryKind.COMMENT

    @property
    def text(self) -> str:
        return self.raw_row[0] if self.raw_row else ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "raw_row": list(self.raw_row)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PassthroughEntry":
        return cls(raw_row=[str(column) for column in data.get("raw_row") or [""]])


Entry = Union[WordEntry, PassthroughEntry]


def entry_from_dict(data: Dict[str, Any]) -> Entry:
    """Restore a stored entry of either kind."""
    if data.get("kind") == EntryKind.COMMENT.value:
        return PassthroughEntry.from_dict(data)
    return WordEntry.from_dict(data)


@dataclass
class Plot:
    """A farm plot holding one batch of words."""
    id: int
    is_planted: bool = False
    word_ids: List[int] = field(default_factory=list)
    plant_date: Optional[str] = None  # ISO format datetime string

    def clear(self) -> None:
        """Return the plot to its unplanted state."""
        self.is_planted = False
        self.word_ids = []
        self.plant_date = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "is_planted": self.is_planted,
            "word_ids": list(self.word_ids),
            "plant_date": self.plant_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Plot":
        plot = cls(
            id=int(data["id"]),
            is_planted=bool(data.get("is_planted", False)),
            word_ids=[int(word_id) for word_id in data.get("word_ids") or []],
            plant_date=data.get("plant_date"),
        )
        if not plot.is_planted:
            plot.clear()
        return plot


@dataclass
class FarmState:
    """The active word database and plot collection."""
    entries: List[Entry] = field(default_factory=list)
    plots: List[Plot] = field(default_factory=list)

    def word_entries(self) -> List[WordEntry]:
        """Get WORD entries only, in source order."""
        return [entry for entry in self.entries if isinstance(entry, WordEntry)]

    def get_word(self, word_id: int) -> Optional[WordEntry]:
        """Get a word by its ID."""
        for entry in self.entries:
            if isinstance(entry, WordEntry) and entry.id == word_id:
                return entry
        return None

    def get_plot(self, plot_id: int) -> Optional[Plot]:
        """Get a plot by its ID."""
        for plot in self.plots:
            if plot.id == plot_id:
                return plot
        return None

    def resolve(self, word_ids: List[int]) -> List[WordEntry]:
        """Map ids to words, silently dropping ids that no longer exist."""
        words = []
        for word_id in word_ids:
            word = self.get_word(word_id)
            if word is not None:
                words.append(word)
        return words


@dataclass
class MultipleChoiceQuestion:
    """Pick the meaning of a term."""
    word_id: int
    term: str
    options: List[str]


@dataclass
class FillInBlankQuestion:
    """Type the term for a meaning."""
    word_id: int
    meaning: str


@dataclass
class WordResult:
    """Outcome of one word in a scored assessment."""
    word_id: int
    word: str
    meaning: str
    meaning_correct: bool
    spelling_correct: bool
    submitted: str = ""

    @property
    def perfect(self) -> bool:
        return self.meaning_correct and self.spelling_correct


@dataclass
class AssessmentResult:
    """Outcome of a scored assessment."""
    mode: AssessmentMode
    results: List[WordResult] = field(default_factory=list)

    @property
    def perfect_count(self) -> int:
        return sum(1 for result in self.results if result.perfect)

    @property
    def total(self) -> int:
        return len(self.results)


@dataclass
class ExamSession:
    """Explicit context of the one open assessment."""
    mode: AssessmentMode
    word_ids: List[int]
    plot_id: Optional[int] = None
    phase: SessionPhase = SessionPhase.IDLE
    pending: bool = False  # planted optimistically, not yet scored
    meaning_results: Dict[int, bool] = field(default_factory=dict)
    multiple_choice: List[MultipleChoiceQuestion] = field(default_factory=list)
    fill_in_blank: List[FillInBlankQuestion] = field(default_factory=list)


@dataclass
class FarmStatistics:
    """Summary counters for the learner."""
    total_words: int = 0
    learned_words: int = 0
    unlearned_words: int = 0
    review_words: int = 0
    planted_plots: int = 0
    mastered_plots: int = 0
