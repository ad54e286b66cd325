"""User model definition using SQLAlchemy Core."""

import uuid

from sqlalchemy import Boolean, Column, String, Table, Text, Uuid, false

from welltrack.models.base import UTCDateTime, metadata, utc_now

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    # Stored lower-cased
    Column("email", String(320), nullable=False, unique=True, index=True),
    Column("password_hash", Text, nullable=False),
    # Profile
    Column("display_name", Text),
    Column("pronouns", Text),
    Column("phone_number", String(32)),
    Column("timezone", Text, nullable=False, default="UTC", server_default="UTC"),
    # Weekly digest
    Column("weekly_digest_opt_in", Boolean, nullable=False, default=False, server_default=false()),
    Column("weekly_digest_token", String(64), unique=True),
    # Audit
    Column("last_login_at", UTCDateTime),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
    Column("updated_at", UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now),
)
