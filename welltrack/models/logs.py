"""Log entry tables, one per log kind."""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    Table,
    Text,
    Uuid,
    true,
)

from welltrack.models.base import UTCDateTime, metadata, utc_now


def _owner() -> Column:
    return Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


symptom_logs = Table(
    "symptom_logs",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    _owner(),
    Column("symptom_id", Uuid, ForeignKey("symptoms.id", ondelete="CASCADE"), nullable=False),
    Column("severity", Integer, nullable=False),
    Column("notes", Text),
    Column("logged_at", UTCDateTime, nullable=False, default=utc_now),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
    CheckConstraint("severity BETWEEN 1 AND 10", name="severity_range"),
    Index("ix_symptom_logs_user_logged_at", "user_id", "logged_at"),
)

mood_logs = Table(
    "mood_logs",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    _owner(),
    Column("mood_score", Integer, nullable=False),
    Column("energy_level", Integer),
    Column("stress_level", Integer),
    Column("notes", Text),
    Column("logged_at", UTCDateTime, nullable=False, default=utc_now),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
    CheckConstraint("mood_score BETWEEN 1 AND 5", name="mood_score_range"),
    CheckConstraint("energy_level BETWEEN 1 AND 5", name="energy_level_range"),
    CheckConstraint("stress_level BETWEEN 1 AND 5", name="stress_level_range"),
    Index("ix_mood_logs_user_logged_at", "user_id", "logged_at"),
)

# Medication logs have no logged_at; created_at is their point in time
medication_logs = Table(
    "medication_logs",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    _owner(),
    Column(
        "medication_id",
        Uuid,
        ForeignKey("medications.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("taken", Boolean, nullable=False, default=True, server_default=true()),
    Column("taken_at", UTCDateTime),
    Column("notes", Text),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
    Index("ix_medication_logs_user_created_at", "user_id", "created_at"),
)

habit_logs = Table(
    "habit_logs",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    _owner(),
    Column("habit_id", Uuid, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False),
    Column("value_boolean", Boolean),
    Column("value_numeric", Float),
    Column("value_duration", Integer),
    Column("notes", Text),
    Column("logged_at", UTCDateTime, nullable=False, default=utc_now),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
    CheckConstraint("value_duration >= 0", name="value_duration_non_negative"),
    Index("ix_habit_logs_user_logged_at", "user_id", "logged_at"),
)
