"""Tests for the PDF export."""

from datetime import UTC, date, datetime

import fitz
import pytest
from httpx import AsyncClient

from welltrack.services.export_service import ExportData
from welltrack.services.pdf_service import EMPTY_SECTION, render_pdf


def pdf_text(content: bytes) -> str:
    with fitz.open(stream=content, filetype="pdf") as doc:
        return "\n".join(page.get_text() for page in doc)


def test_render_pdf_header_and_sections() -> None:
    """Test rendering a PDF report."""
    data = ExportData(mood_logs=[["2026-03-02", 4, None, 2, "calm"]])

    content = render_pdf(
        data,
        "Alex",
        start=datetime(2026, 3, 1, tzinfo=UTC),
        end=datetime(2026, 3, 31, 23, 59, tzinfo=UTC),
        exported_on=date(2026, 4, 1),
    )

    assert content.startswith(b"%PDF")
    text = pdf_text(content)
    assert "WellTrack Health Report" in text
    assert "Exported on 2026-04-01" in text
    assert "Account: Alex" in text
    assert "Date range: 2026-03-01 to 2026-03-31" in text
    assert "Mood Logs (1)" in text
    assert "calm" in text
    assert "Symptom Logs (0)" in text
    assert text.count(EMPTY_SECTION) == 3


def test_render_pdf_paginates_long_exports() -> None:
    """Test PDF pagination."""
    rows = [["2026-03-01", "Headache", "Pain", 5, f"entry {i}"] for i in range(200)]

    content = render_pdf(ExportData(symptom_logs=rows), "alex@example.com")

    with fitz.open(stream=content, filetype="pdf") as doc:
        assert doc.page_count > 1
        first_page = doc[0].rect
    assert (round(first_page.width), round(first_page.height)) == (595, 842)
    assert "entry 199" in pdf_text(content)


@pytest.mark.asyncio
async def test_export_pdf_endpoint(client: AsyncClient, auth_headers: dict, system_symptom: dict) -> None:
    """Test exporting logs as PDF."""
    await client.post(
        "/api/symptom-logs",
        json={"symptomId": system_symptom["id"], "severity": 6, "loggedAt": "2026-03-01T09:00:00Z"},
        headers=auth_headers,
    )

    response = await client.get("/api/export/pdf", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"].endswith('.pdf"')
    text = pdf_text(response.content)
    assert "Account: Alex" in text
    assert "Symptom Logs (1)" in text
    assert "Headache" in text
    assert "Date range" not in text
