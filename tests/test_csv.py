"""Tests for the CSV format, export and import."""

import pytest
from httpx import AsyncClient

from welltrack.core.exceptions import BadRequestException
from welltrack.services.csv_format import (
    ScanState,
    SectionScanner,
    clean_notes,
    format_row,
    read_records,
    render_sections,
    scan_sections,
)
from welltrack.services.import_service import read_upload

EXPORT_HEADER = "date,symptom_name,category,severity,notes"


def upload(text: str, content_type: str = "text/csv") -> dict:
    return {"file": ("export.csv", text.encode("utf-8"), content_type)}


@pytest.mark.parametrize(
    "row,expected",
    [
        (["2026-03-01", "plain", 7], "2026-03-01,plain,7"),
        (["a, b", None], '"a, b",'),
        (['say "hi"', 6.5], '"say ""hi""",6.5'),
        (["two\nlines", "cr\rhere"], '"two\nlines","cr\rhere"'),
        ([None, None, None], ",,"),
    ],
)
def test_format_row(row, expected) -> None:
    """Test writing a single record."""
    assert format_row(row) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("  note ", "note"), ("=SUM(A1)", "SUM(A1)"), ("+-@cmd", "cmd"), ("   ", None), (None, None)],
)
def test_clean_notes(raw, expected) -> None:
    """Test cleaning imported notes."""
    assert clean_notes(raw) == expected


def test_render_sections_layout() -> None:
    """Test the layout of rendered sections."""
    text = render_sections([("Symptom Logs", [["2026-03-01", "Headache", "Pain", 6, None]]), ("Mood Logs", [])])

    assert text == (
        "Symptom Logs\n"
        f"{EXPORT_HEADER}\n"
        "2026-03-01,Headache,Pain,6,\n"
        "\n"
        "Mood Logs\n"
        "date,mood_score,energy_level,stress_level,notes"
    )


def test_scanner_ignores_unknown_text_and_keeps_multiline_notes() -> None:
    """Test scanning a file with stray text and multiline notes."""
    text = (
        "WellTrack export\n"
        "random,stuff\n"
        "Symptom Logs\n"
        f"{EXPORT_HEADER}\n"
        '2026-03-01,Headache,Pain,6,"line one\nline two"\n'
        "\n"
        "\n"
        "Mood Logs\n"
        "date,mood_score,energy_level,stress_level,notes\n"
        "2026-03-02,4,,,\n"
    )

    sections = scan_sections(text)

    assert [s.name for s in sections] == ["Symptom Logs", "Mood Logs"]
    assert sections[0].rows == [
        {
            "date": "2026-03-01",
            "symptom_name": "Headache",
            "category": "Pain",
            "severity": "6",
            "notes": "line one\nline two",
        }
    ]
    assert sections[1].rows[0]["mood_score"] == "4"


def test_scanner_label_without_header_is_empty_section() -> None:
    """Test a section label with no header line."""
    sections = scan_sections("Habit Logs\n\nMood Logs\ndate,mood_score\n2026-03-02,3\n")

    assert [(s.name, s.rows) for s in sections] == [
        ("Habit Logs", []),
        ("Mood Logs", [{"date": "2026-03-02", "mood_score": "3"}]),
    ]


def test_scanner_label_ends_previous_section() -> None:
    """Test that a section label closes the previous section."""
    scanner = SectionScanner()
    for record in read_records("Mood Logs\ndate,mood_score\n2026-03-02,3\nHabit Logs\n"):
        scanner.feed(record)

    assert scanner.state is ScanState.READING_HEADER
    sections = scanner.finish()
    assert [(s.name, len(s.rows)) for s in sections] == [("Mood Logs", 1), ("Habit Logs", 0)]
    assert scanner.state is ScanState.SEEKING_SECTION


def test_scanner_trailing_blank_lines() -> None:
    """Test scanning a file that ends in blank lines."""
    sections = scan_sections("Mood Logs\ndate,mood_score\n2026-03-02,3\n\n\n\n")

    assert len(sections) == 1
    assert len(sections[0].rows) == 1


@pytest.mark.asyncio
async def test_export_csv(client: AsyncClient, auth_headers: dict, system_symptom: dict) -> None:
    """Test exporting logs as CSV."""
    await client.post(
        "/api/symptom-logs",
        json={
            "symptomId": system_symptom["id"],
            "severity": 6,
            "notes": 'after lunch, "mild"',
            "loggedAt": "2026-03-01T23:30:00Z",
        },
        headers=auth_headers,
    )
    await client.post(
        "/api/mood-logs",
        json={"moodScore": 4, "stressLevel": 2, "loggedAt": "2026-03-02T08:00:00Z"},
        headers=auth_headers,
    )

    response = await client.get("/api/export/csv", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="welltrack-export-')
    assert disposition.endswith('.csv"')

    sections = response.text.split("\n\n")
    assert sections[0] == (
        f"Symptom Logs\n{EXPORT_HEADER}\n" '2026-03-01,Headache,Pain,6,"after lunch, ""mild"""'
    )
    assert sections[1] == (
        "Mood Logs\ndate,mood_score,energy_level,stress_level,notes\n2026-03-02,4,,2,"
    )
    assert sections[2] == "Medication Logs\ndate,medication_name,dosage,taken,notes"
    assert sections[3] == "Habit Logs\ndate,habit_name,tracking_type,value,unit,notes"


@pytest.mark.asyncio
async def test_export_csv_date_filter(client: AsyncClient, auth_headers: dict) -> None:
    """Test exporting logs within a date range."""
    for day in ("2026-03-01", "2026-03-02", "2026-03-03"):
        await client.post(
            "/api/mood-logs",
            json={"moodScore": 3, "loggedAt": f"{day}T12:00:00Z"},
            headers=auth_headers,
        )

    response = await client.get(
        "/api/export/csv",
        params={"startDate": "2026-03-02", "endDate": "2026-03-02"},
        headers=auth_headers,
    )

    mood = response.text.split("\n\n")[1].split("\n")
    assert mood[2:] == ["2026-03-02,3,,,"]

    bad = await client.get("/api/export/csv", params={"endDate": "03/02/2026"}, headers=auth_headers)
    assert bad.status_code == 422
    assert bad.json() == {"error": "Invalid endDate"}


@pytest.mark.asyncio
async def test_import_partial_failure(client: AsyncClient, auth_headers: dict, system_symptom: dict) -> None:
    """Test that valid rows are imported when others fail."""
    text = (
        "Symptom Logs\n"
        f"{EXPORT_HEADER}\n"
        "2026-03-01,headache,Pain,6,=cmd()\n"
        "2026-02-30,Headache,Pain,6,\n"
        "2026-03-02,Unknown,,3,\n"
    )

    response = await client.post("/api/import/csv", files=upload(text), headers=auth_headers)

    assert response.status_code == 200
    result = response.json()
    assert result["imported"] == {"symptomLogs": 1, "moodLogs": 0, "medicationLogs": 0, "habitLogs": 0}
    assert result["skipped"]["symptomLogs"] == 2
    assert result["errors"] == [
        'Symptom Logs row 2: invalid date "2026-02-30"',
        'Symptom Logs row 3: symptom "Unknown" not found',
    ]

    logs = (await client.get("/api/symptom-logs", headers=auth_headers)).json()
    assert len(logs) == 1
    assert logs[0]["notes"] == "cmd()"
    assert logs[0]["symptom"]["id"] == system_symptom["id"]


@pytest.mark.asyncio
async def test_import_all_sections(client: AsyncClient, auth_headers: dict, system_habits: dict) -> None:
    """Test importing every section."""
    await client.post("/api/medications", json={"name": "Ibuprofen", "dosage": "200mg"}, headers=auth_headers)
    text = (
        "Mood Logs\n"
        "date,mood_score,energy_level,stress_level,notes\n"
        "2026-03-01,4,3,,good day\n"
        "2026-03-02,9,,,\n"
        "\n"
        "Medication Logs\n"
        "date,medication_name,dosage,taken,notes\n"
        "2026-03-01,IBUPROFEN,200mg,yes,\n"
        "2026-03-02,Ibuprofen,200mg,maybe,\n"
        "\n"
        "Habit Logs\n"
        "date,habit_name,tracking_type,value,unit,notes\n"
        "2026-03-01,Exercise,boolean,yes,,\n"
        "2026-03-01,Water Intake,numeric,6.5,glasses,\n"
        "2026-03-01,Sleep Duration,duration,abc,hours,\n"
    )

    result = (await client.post("/api/import/csv", files=upload(text), headers=auth_headers)).json()

    assert result["imported"] == {"symptomLogs": 0, "moodLogs": 1, "medicationLogs": 1, "habitLogs": 2}
    assert result["skipped"] == {"symptomLogs": 0, "moodLogs": 1, "medicationLogs": 1, "habitLogs": 1}
    assert result["errors"] == [
        'Mood Logs row 2: invalid mood_score "9"',
        'Medication Logs row 2: invalid taken "maybe"; expected "yes" or "no"',
        'Habit Logs row 3: invalid duration value "abc"',
    ]

    medication_logs = (await client.get("/api/medication-logs", headers=auth_headers)).json()
    assert medication_logs[0]["takenAt"].startswith("2026-03-01")
    assert medication_logs[0]["createdAt"].startswith("2026-03-01")


@pytest.mark.asyncio
async def test_export_import_round_trip(
    client: AsyncClient,
    auth_headers: dict,
    other_headers: dict,
    system_symptom: dict,
    system_habits: dict,
) -> None:
    """Test importing an export into another account."""
    medication = {"name": "Ibuprofen", "dosage": "200mg"}
    own = (await client.post("/api/medications", json=medication, headers=auth_headers)).json()
    await client.post("/api/medications", json=medication, headers=other_headers)

    entries = [
        (
            "/api/symptom-logs",
            {
                "symptomId": system_symptom["id"],
                "severity": 7,
                "notes": 'line one\nline two, with "comma"',
                "loggedAt": "2026-03-01T10:00:00Z",
            },
        ),
        ("/api/mood-logs", {"moodScore": 3, "loggedAt": "2026-03-01T09:00:00Z"}),
        (
            "/api/mood-logs",
            {"moodScore": 5, "energyLevel": 4, "stressLevel": 1, "notes": "rested", "loggedAt": "2026-03-02T09:00:00Z"},
        ),
        ("/api/medication-logs", {"medicationId": own["id"], "taken": True, "notes": "with food"}),
        (
            "/api/habit-logs",
            {"habitId": system_habits["numeric"]["id"], "valueNumeric": 6.5, "loggedAt": "2026-03-01T10:00:00Z"},
        ),
        (
            "/api/habit-logs",
            {"habitId": system_habits["boolean"]["id"], "valueBoolean": False, "loggedAt": "2026-03-02T10:00:00Z"},
        ),
        (
            "/api/habit-logs",
            {"habitId": system_habits["duration"]["id"], "valueDuration": 480, "loggedAt": "2026-03-03T10:00:00Z"},
        ),
    ]
    for path, payload in entries:
        response = await client.post(path, json=payload, headers=auth_headers)
        assert response.status_code == 201
    exported = (await client.get("/api/export/csv", headers=auth_headers)).text

    assert ",,,\n" in exported
    assert ",Ibuprofen,200mg,yes,with food" in exported
    assert "Exercise,boolean,no," in exported

    result = (await client.post("/api/import/csv", files=upload(exported), headers=other_headers)).json()

    assert result["errors"] == []
    assert result["imported"] == {"symptomLogs": 1, "moodLogs": 2, "medicationLogs": 1, "habitLogs": 3}
    reexported = (await client.get("/api/export/csv", headers=other_headers)).text
    assert reexported == exported


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "files,message",
    [
        (None, "No file uploaded"),
        ({"file": ("export.csv", b"", "text/csv")}, "No file uploaded"),
        ({"file": ("export.pdf", b"%PDF-1.7", "application/pdf")}, "Only CSV files are accepted"),
        ({"file": ("export.csv", b"\xff\xfe\x00bad", "text/csv")}, "File must be UTF-8 encoded text"),
    ],
)
async def test_import_rejects_bad_uploads(client: AsyncClient, auth_headers: dict, files, message: str) -> None:
    """Test importing invalid uploads."""
    response = await client.post("/api/import/csv", files=files, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": message}


@pytest.mark.asyncio
async def test_import_rejects_oversized_upload(client: AsyncClient, auth_headers: dict, monkeypatch) -> None:
    """Test importing a file over the size limit."""
    from welltrack.config import settings

    monkeypatch.setattr(settings, "import_max_bytes", 10)

    response = await client.post("/api/import/csv", files=upload("Mood Logs\n" * 5), headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "File too large"}


class RecordingUpload:
    content_type = "text/csv"

    def __init__(self, content: bytes):
        self.content = content
        self.sizes: list[int] = []

    async def read(self, size: int = -1) -> bytes:
        self.sizes.append(size)
        return self.content if size < 0 else self.content[:size]


@pytest.mark.asyncio
async def test_read_upload_stops_at_size_limit(monkeypatch) -> None:
    """Test that uploads are read only up to the size limit."""
    from welltrack.config import settings

    monkeypatch.setattr(settings, "import_max_bytes", 10)
    oversized = RecordingUpload(b"Mood Logs\n" * 1000)
    small = RecordingUpload(b"Mood Logs\n")

    with pytest.raises(BadRequestException, match="File too large"):
        await read_upload(oversized)

    assert oversized.sizes == [11]
    assert await read_upload(small) == "Mood Logs\n"
