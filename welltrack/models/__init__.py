"""Database models."""

from welltrack.models.audit_logs import AUDIT_ACTIONS, audit_logs
from welltrack.models.auth_tokens import password_reset_tokens, refresh_tokens
from welltrack.models.base import UTCDateTime, metadata
from welltrack.models.logs import habit_logs, medication_logs, mood_logs, symptom_logs
from welltrack.models.trackables import habits, medications, symptoms
from welltrack.models.users import users

__all__ = [
    "AUDIT_ACTIONS",
    "UTCDateTime",
    "audit_logs",
    "habit_logs",
    "habits",
    "medication_logs",
    "medications",
    "metadata",
    "mood_logs",
    "password_reset_tokens",
    "refresh_tokens",
    "symptom_logs",
    "symptoms",
    "users",
]
