"""Service for writing the word list back to CSV."""
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from wordfarm.config import settings
from wordfarm.models.farm_models import Entry, PassthroughEntry, WordEntry

logger = logging.getLogger(__name__)

BOM = "\ufeff"
LINE_END = "\r\n"
EMPTY_QUOTED = '""'


def quote_column(column: str) -> str:
    """Quote a column only if it contains a comma."""
    if "," in column:
        return f'"{column}"'
    return column


def archive_row(word: WordEntry, marker: str) -> List[str]:
    """Blank the word columns and move marker, term and meaning to the first free slot."""
    row = list(word.raw_row)
    while len(row) < 2:
        row.append("")
    row[0] = ""
    row[1] = ""

    slot = len(row)
    for index in range(2, len(row)):
        if row[index] == "" or row[index] == EMPTY_QUOTED:
            slot = index
            break

    for offset, value in enumerate((marker, word.word, word.meaning)):
        position = slot + offset
        if position < len(row):
            row[position] = value
        else:
            row.append(value)
    return row


class ExportService:
    """Re-serializes the word database, archiving graduated words."""

    def __init__(self, marker: Optional[str] = None, header: Optional[str] = None):
        """Initialize the service with the archive marker and CSV header."""
        self.marker = marker if marker is not None else settings.farm.export_marker
        self.header = header if header is not None else settings.farm.export_header

    def export_line(self, entry: Entry, selected_ids: set) -> str:
        """Render one entry as a CSV line."""
        if isinstance(entry, PassthroughEntry):
            return entry.text
        if entry.id in selected_ids:
            row = archive_row(entry, self.marker)
        else:
            row = entry.raw_row
        return ",".join(quote_column(column) for column in row)

    def export(self, selected_ids: Iterable[int], entries: List[Entry]) -> str:
        """Render the whole database as CSV text with BOM and CRLF line endings."""
        selected = set(selected_ids)
        lines = [self.header] + [self.export_line(entry, selected) for entry in entries]
        archived = sum(1 for entry in entries if isinstance(entry, WordEntry) and entry.id in selected)
        logger.info(f"Exported {len(entries)} rows, {archived} archived")
        return BOM + LINE_END.join(lines)

    @staticmethod
    def export_filename(now: Optional[datetime] = None) -> str:
        """Get the export file name for the given day."""
        now = now or datetime.now()
        return f"vocab_{now:%m%d}.csv"

    def write_export(
        self,
        selected_ids: Iterable[int],
        entries: List[Entry],
        directory: Optional[Path] = None,
        now: Optional[datetime] = None,
    ) -> Path:
        """Export to a dated file in the export directory."""
        directory = Path(directory or settings.paths.export_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.export_filename(now)
        # newline="" keeps the CRLF line endings as written
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(self.export(selected_ids, entries))
        logger.info(f"Export written to {path}")
        return path
