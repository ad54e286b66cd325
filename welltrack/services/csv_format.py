"""The WellTrack CSV export format.

A file is a sequence of sections. Each section is a label line, a header
line and data rows; sections are separated by one blank line::

    Symptom Logs
    date,symptom_name,category,severity,notes
    2024-03-01,Headache,Neurological,6,"after lunch, mild"

    Mood Logs
    ...

Reading goes through ``csv.reader`` first, so quoted fields that span lines
arrive as one record, and then through ``SectionScanner``.
"""

import csv
import io
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

SYMPTOM_LOGS = "Symptom Logs"
MOOD_LOGS = "Mood Logs"
MEDICATION_LOGS = "Medication Logs"
HABIT_LOGS = "Habit Logs"

# Export order
SECTION_HEADERS: dict[str, tuple[str, ...]] = {
    SYMPTOM_LOGS: ("date", "symptom_name", "category", "severity", "notes"),
    MOOD_LOGS: ("date", "mood_score", "energy_level", "stress_level", "notes"),
    MEDICATION_LOGS: ("date", "medication_name", "dosage", "taken", "notes"),
    HABIT_LOGS: ("date", "habit_name", "tracking_type", "value", "unit", "notes"),
}

_FORMULA_PREFIX = re.compile(r"^[=+\-@\t\r]+")

Cell = str | int | float | bool | None


def format_row(values: Iterable[Cell]) -> str:
    """One record with minimal quoting; ``None`` becomes an empty field."""
    buf = io.StringIO()
    csv.writer(buf).writerow(values)
    return buf.getvalue().removesuffix("\r\n")


def render_sections(sections: Iterable[tuple[str, Iterable[Iterable[Cell]]]]) -> str:
    """Render labelled sections, one blank line apart, joined with ``\\n``."""
    blocks = []
    for label, rows in sections:
        lines = [label, format_row(SECTION_HEADERS[label])]
        lines.extend(format_row(row) for row in rows)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def sanitize_field(value: str) -> str:
    """Strip leading characters spreadsheets would evaluate as a formula."""
    return _FORMULA_PREFIX.sub("", value)


def clean_notes(value: str | None) -> str | None:
    """Imported notes: trimmed, formula prefix removed, empty becomes ``None``."""
    cleaned = sanitize_field((value or "").strip())
    return cleaned or None


class ScanState(Enum):
    SEEKING_SECTION = "seeking_section"
    READING_HEADER = "reading_header"
    READING_ROWS = "reading_rows"


@dataclass
class Section:
    name: str
    header: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)


class SectionScanner:
    """
    Finite-state reader turning CSV records into sections.

    * ``SEEKING_SECTION``: records are ignored until a known section label.
    * ``READING_HEADER``: the next record names the columns. A blank record
      or another label here closes the section with no rows.
    * ``READING_ROWS``: records become ``{column: value}`` rows until a blank
      record or another section label.
    """

    def __init__(self, labels: Iterable[str] = SECTION_HEADERS):
        self.labels = set(labels)
        self.state = ScanState.SEEKING_SECTION
        self.sections: list[Section] = []
        self._current: Section | None = None

    @staticmethod
    def is_blank(record: list[str]) -> bool:
        return all(not cell.strip() for cell in record)

    def label_of(self, record: list[str]) -> str | None:
        if not record or any(cell.strip() for cell in record[1:]):
            return None
        label = record[0].strip()
        return label if label in self.labels else None

    def feed(self, record: list[str]) -> None:
        label = self.label_of(record)

        if self.state is ScanState.SEEKING_SECTION:
            if label:
                self._open(label)
            return

        if label:
            self._close()
            self._open(label)
            return

        if self.is_blank(record):
            self._close()
            return

        assert self._current is not None
        if self.state is ScanState.READING_HEADER:
            self._current.header = [cell.strip() for cell in record]
            self.state = ScanState.READING_ROWS
        else:
            header = self._current.header
            self._current.rows.append(
                {name: record[i] if i < len(record) else "" for i, name in enumerate(header)}
            )

    def finish(self) -> list[Section]:
        self._close()
        return self.sections

    def _open(self, label: str) -> None:
        self._current = Section(name=label)
        self.state = ScanState.READING_HEADER

    def _close(self) -> None:
        if self._current is not None:
            self.sections.append(self._current)
        self._current = None
        self.state = ScanState.SEEKING_SECTION


def read_records(text: str) -> Iterator[list[str]]:
    """Tokenise CSV text; quoted fields may contain commas, quotes and newlines."""
    return csv.reader(io.StringIO(text, newline=""))


def scan_sections(text: str) -> list[Section]:
    scanner = SectionScanner()
    for record in read_records(text):
        scanner.feed(record)
    return scanner.finish()
