"""Tests for the CSV export."""
from datetime import datetime

from wordfarm.models.farm_models import FarmState, PassthroughEntry, WordEntry
from wordfarm.services.export_service import ExportService, archive_row, quote_column
from wordfarm.services.source_parser import parse_source

HEADER = "English,Chinese,Note/Archive"


def export_lines(text: str):
    assert text.startswith("\ufeff")
    return text[1:].split("\r\n")


def test_quote_column() -> None:
    """Test that only columns with commas are quoted."""
    assert quote_column("plain") == "plain"
    assert quote_column("a, b") == '"a, b"'
    assert quote_column("") == ""


def test_export_without_selection(state: FarmState) -> None:
    """Test that an export with nothing selected reproduces the source rows."""
    lines = export_lines(ExportService(marker="ARCHIVED").export([], state.entries))

    assert lines == [
        HEADER,
        "budget,n.預算,",
        "audit,n.審計；查帳,finance",
        "# finance words",
        "fiscal,adj.會計的；財政的,",
        ",orphan meaning,",
        'deficit,n.赤字；不足額,"note, with comma"',
        "",
        "inflation,n.通貨膨脹,",
        "asset,n.資產,",
        "alma mater,n.母校,",
    ]


def test_export_archives_selected_words(state: FarmState) -> None:
    """Test that selected words move to the first free extension column."""
    lines = export_lines(ExportService(marker="ARCHIVED").export([1, 2, 4], state.entries))

    assert lines[1] == ",,ARCHIVED,budget,n.預算"
    assert lines[2] == ",,finance,ARCHIVED,audit,n.審計；查帳"
    assert lines[6] == ',,"note, with comma",ARCHIVED,deficit,n.赤字；不足額'
    assert lines[4] == "fiscal,adj.會計的；財政的,"


def test_archived_rows_reload_as_comments(state: FarmState) -> None:
    """Test that an archived word is passed through on the next import."""
    text = ExportService(marker="ARCHIVED").export([1], state.entries)
    rows = parse_source(text)
    words = [row.word for row in rows if row.columns]
    assert "budget" not in words
    assert rows[0].text == ",,ARCHIVED,budget,n.預算"


def test_archive_row_uses_empty_quote_slot() -> None:
    """Test that a literal empty-quote column counts as free."""
    word = WordEntry(id=1, word="edge", meaning="n.優勢", raw_row=["edge", "n.優勢", "x", '""', "tail"])
    assert archive_row(word, "ARCHIVED") == ["", "", "x", "ARCHIVED", "edge", "n.優勢"]


def test_archive_row_appends_when_full() -> None:
    """Test that a row without a free slot is extended."""
    word = WordEntry(id=1, word="edge", meaning="n.優勢", raw_row=["edge", "n.優勢", "note"])
    assert archive_row(word, "ARCHIVED") == ["", "", "note", "ARCHIVED", "edge", "n.優勢"]


def test_export_filename() -> None:
    """Test the dated export file name."""
    assert ExportService.export_filename(datetime(2026, 3, 7)) == "vocab_0307.csv"


def test_write_export(tmp_path, state: FarmState) -> None:
    """Test that the written file keeps BOM and CRLF line endings."""
    service = ExportService(marker="ARCHIVED")
    path = service.write_export([1], state.entries, tmp_path, datetime(2026, 10, 19))

    assert path == tmp_path / "vocab_1019.csv"
    data = path.read_bytes()
    assert data.startswith("\ufeff".encode("utf-8"))
    assert b"\r\n,,ARCHIVED,budget," in data
    assert b"\n" not in data.replace(b"\r\n", b"")


def test_export_keeps_unicode_breaks_in_notes() -> None:
    """Test that a note holding a Unicode line separator is written back unchanged."""
    source = "English,Chinese,Note\r\nbudget,n.預算,note\u2028second part\r\n# end"
    rows = parse_source(source)
    state = FarmState(entries=[
        WordEntry(id=1, word=rows[0].word, meaning=rows[0].meaning, raw_row=rows[0].columns),
        PassthroughEntry(raw_row=[rows[1].text]),
    ])

    lines = export_lines(ExportService(marker="ARCHIVED").export([], state.entries))
    assert lines[1:] == ["budget,n.預算,note\u2028second part", "# end"]
