"""Append-only audit trail of security-relevant account events."""

import uuid

from sqlalchemy import JSON, CheckConstraint, Column, ForeignKey, Table, Text, Uuid

from welltrack.models.base import UTCDateTime, metadata, utc_now

AUDIT_ACTIONS = ("login", "password_change", "email_change")

audit_logs = Table(
    "audit_logs",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("action", Text, nullable=False),
    Column("metadata", JSON),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
    CheckConstraint(
        "action IN ('login', 'password_change', 'email_change')",
        name="action",
    ),
)
