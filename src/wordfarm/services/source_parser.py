"""Parsing and loading of the external word list."""
import logging
import re
from pathlib import Path
from typing import List, Optional

import httpx

from wordfarm.config import settings
from wordfarm.models.farm_models import EntryKind, SourceRow
from wordfarm import monitoring

logger = logging.getLogger(__name__)

BOM = "\ufeff"

# Commas outside double-quoted fields
_COLUMN_SPLIT = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')

# Only LF and CRLF end a line; other Unicode breaks belong to the column text
_LINE_SPLIT = re.compile(r"\r?\n")


def split_columns(line: str) -> List[str]:
    """Split a CSV line and clean each column."""
    columns = []
    for column in _COLUMN_SPLIT.split(line):
        column = column.strip()
        if len(column) >= 2 and column[0] == '"' and column[-1] == '"':
            column = column[1:-1]
        columns.append(column.strip())
    return columns


def classify_line(line: str) -> SourceRow:
    """Classify one data line as a WORD or COMMENT row."""
    stripped = line.strip()
    if stripped.startswith('"'):
        stripped = stripped[1:]
    if not stripped or stripped.startswith("#"):
        return SourceRow(EntryKind.COMMENT, line)

    columns = split_columns(line)
    row = SourceRow(EntryKind.WORD, line, columns)
    if not row.word or not row.meaning:
        return SourceRow(EntryKind.COMMENT, line)
    return row


def parse_source(text: str) -> List[SourceRow]:
    """Parse CSV text into classified rows, skipping the header line."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    if not text:
        return []
    lines = _LINE_SPLIT.split(text)
    if lines[-1] == "":
        lines.pop()
    return [classify_line(line) for line in lines[1:]]


class SourceLoader:
    """Fetch the word list from a URL or a local file."""

    def __init__(
        self,
        url: Optional[str] = None,
        path: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the loader, defaulting to the configured source."""
        self.url = url if url is not None else settings.source.url
        self.path = path if path is not None else settings.source.path
        self.timeout = timeout or settings.source.timeout
        self.client = client

    async def fetch_text(self) -> Optional[str]:
        """Get the raw source text, or None if it cannot be obtained."""
        if self.url:
            return await self._fetch_url(self.url)
        if self.path:
            return self._read_file(Path(self.path))
        logger.warning("No word source configured")
        return None

    async def load(self) -> List[SourceRow]:
        """Load and parse the source; failures yield no rows."""
        text = await self.fetch_text()
        if text is None:
            return []
        rows = parse_source(text)
        words = sum(1 for row in rows if row.kind == EntryKind.WORD)
        logger.info(f"Parsed {len(rows)} source rows ({words} words)")
        return rows

    async def _fetch_url(self, url: str) -> Optional[str]:
        client = self.client or httpx.AsyncClient(timeout=self.timeout)
        try:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
        except httpx.HTTPStatusError as e:
            logger.warning(f"Word source returned {e.response.status_code}: {url}")
            monitoring.source_fetch_errors.labels(error_type="status").inc()
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Could not fetch word source {url}: {e}")
            monitoring.source_fetch_errors.labels(error_type="transport").inc()
            return None
        finally:
            if self.client is None:
                await client.aclose()

    def _read_file(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read word source {path}: {e}")
            monitoring.source_fetch_errors.labels(error_type="file").inc()
            return None
