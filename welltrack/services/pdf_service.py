"""PDF rendering of an export with PyMuPDF."""

from datetime import UTC, date, datetime

import fitz

from welltrack.services.csv_format import HABIT_LOGS, MEDICATION_LOGS, MOOD_LOGS, SYMPTOM_LOGS, Cell
from welltrack.services.export_service import ExportData

PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size("a4")
MARGIN = 50

REGULAR = "helv"
BOLD = "hebo"

TEAL = (0.05, 0.58, 0.53)
GREY = (0.42, 0.45, 0.50)
INK = (0.07, 0.09, 0.15)
RULE = (0.82, 0.98, 0.90)

EMPTY_SECTION = "No entries in this period."

# Section label -> (column titles, column widths in points)
TABLES: dict[str, tuple[tuple[str, ...], tuple[int, ...]]] = {
    SYMPTOM_LOGS: (("Date", "Symptom", "Category", "Severity", "Notes"), (75, 105, 85, 55, 175)),
    MOOD_LOGS: (("Date", "Mood", "Energy", "Stress", "Notes"), (75, 55, 55, 55, 255)),
    MEDICATION_LOGS: (("Date", "Medication", "Dosage", "Taken", "Notes"), (75, 115, 80, 50, 175)),
    HABIT_LOGS: (("Date", "Habit", "Type", "Value", "Unit", "Notes"), (75, 100, 65, 55, 55, 145)),
}


def _fit(text: str, width: float, fontname: str, fontsize: float) -> str:
    """Truncate ``text`` so it fits in ``width`` points."""
    if fitz.get_text_length(text, fontname=fontname, fontsize=fontsize) <= width:
        return text
    while text and fitz.get_text_length(text + "...", fontname=fontname, fontsize=fontsize) > width:
        text = text[:-1]
    return text + "..."


class PdfWriter:
    """Top-to-bottom text layout across as many A4 pages as needed."""

    def __init__(self) -> None:
        self.doc = fitz.open()
        self.page: fitz.Page | None = None
        self.y = 0.0
        self._new_page()

    def _new_page(self) -> None:
        self.page = self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        self.y = MARGIN

    def _reserve(self, height: float) -> None:
        if self.y + height > PAGE_HEIGHT - MARGIN:
            self._new_page()

    def text(
        self,
        value: str,
        fontsize: float = 10,
        fontname: str = REGULAR,
        color: tuple[float, float, float] = INK,
        center: bool = False,
        x: float = MARGIN,
    ) -> None:
        line_height = fontsize * 1.4
        self._reserve(line_height)
        if center:
            width = fitz.get_text_length(value, fontname=fontname, fontsize=fontsize)
            x = (PAGE_WIDTH - width) / 2
        self.page.insert_text(
            fitz.Point(x, self.y + fontsize),
            value,
            fontsize=fontsize,
            fontname=fontname,
            color=color,
        )
        self.y += line_height

    def space(self, points: float) -> None:
        self.y += points

    def rule(self) -> None:
        self._reserve(6)
        self.page.draw_line(
            fitz.Point(MARGIN, self.y),
            fitz.Point(PAGE_WIDTH - MARGIN, self.y),
            color=RULE,
            width=1,
        )
        self.y += 6

    def table_row(self, cells: list[Cell] | tuple[str, ...], widths: tuple[int, ...], header: bool = False) -> None:
        fontsize = 9
        fontname = BOLD if header else REGULAR
        line_height = fontsize * 1.6
        self._reserve(line_height)
        x = float(MARGIN)
        for cell, width in zip(cells, widths):
            value = "" if cell is None else " ".join(str(cell).split())
            self.page.insert_text(
                fitz.Point(x, self.y + fontsize),
                _fit(value, width - 4, fontname, fontsize),
                fontsize=fontsize,
                fontname=fontname,
                color=INK,
            )
            x += width
        self.y += line_height

    def to_bytes(self) -> bytes:
        data = self.doc.tobytes(garbage=3, deflate=True)
        self.doc.close()
        return data


def render_pdf(
    data: ExportData,
    account_name: str,
    start: datetime | None = None,
    end: datetime | None = None,
    exported_on: date | None = None,
) -> bytes:
    """
    Render an export as an A4 report.

    Args:
        data: Rows per section, as produced for the CSV export
        account_name: Display name, or email when the user has none
        start: Optional lower bound shown in the header
        end: Optional upper bound shown in the header
        exported_on: Date printed as the export date (defaults to today, UTC)

    Returns:
        The PDF document
    """
    exported_on = exported_on or datetime.now(UTC).date()
    writer = PdfWriter()

    writer.text("WellTrack Health Report", fontsize=20, fontname=BOLD, color=TEAL, center=True)
    writer.space(4)
    writer.text(f"Exported on {exported_on.isoformat()}", color=GREY, center=True)
    writer.text(f"Account: {account_name}", color=GREY, center=True)
    if start or end:
        bounds = [moment.astimezone(UTC).date().isoformat() for moment in (start, end) if moment]
        writer.text(f"Date range: {' to '.join(bounds)}", color=GREY, center=True)
    writer.space(14)

    for label, rows in data.sections():
        titles, widths = TABLES[label]
        writer.space(6)
        writer.text(f"{label} ({len(rows)})", fontsize=13, fontname=BOLD, color=TEAL)
        writer.rule()
        if not rows:
            writer.text(EMPTY_SECTION)
            continue
        writer.table_row(titles, widths, header=True)
        for row in rows:
            writer.table_row(row, widths)

    return writer.to_bytes()
