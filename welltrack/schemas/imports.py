"""CSV import result schema."""

from pydantic import Field

from welltrack.schemas.common import CamelModel


class SectionCounts(CamelModel):
    symptom_logs: int = 0
    mood_logs: int = 0
    medication_logs: int = 0
    habit_logs: int = 0


class ImportResult(CamelModel):
    imported: SectionCounts = Field(default_factory=SectionCounts)
    skipped: SectionCounts = Field(default_factory=SectionCounts)
    errors: list[str] = Field(default_factory=list)
