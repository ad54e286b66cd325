"""Trackable definitions: symptoms, habits and medications.

Symptoms and habits with a NULL ``user_id`` are system-owned, visible to
everyone and read-only.
"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Table,
    Text,
    Uuid,
    true,
)

from welltrack.models.base import UTCDateTime, metadata, utc_now

symptoms = Table(
    "symptoms",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True),
    Column("name", Text, nullable=False),
    Column("category", Text),
    Column("is_active", Boolean, nullable=False, default=True, server_default=true()),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
)

habits = Table(
    "habits",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True),
    Column("name", Text, nullable=False),
    Column("tracking_type", Text, nullable=False),
    Column("unit", Text),
    Column("is_active", Boolean, nullable=False, default=True, server_default=true()),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
    CheckConstraint(
        "tracking_type IN ('boolean', 'numeric', 'duration')",
        name="tracking_type",
    ),
)

medications = Table(
    "medications",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("name", Text, nullable=False),
    Column("dosage", Text),
    Column("frequency", Text),
    Column("is_active", Boolean, nullable=False, default=True, server_default=true()),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
)
