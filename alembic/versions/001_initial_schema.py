"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TIMESTAMP = sa.DateTime(timezone=True)


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), nullable=False)


def _owner(table: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        "user_id",
        sa.Uuid(),
        sa.ForeignKey("users.id", name=f"fk_{table}_user_id_users", ondelete="CASCADE"),
        nullable=nullable,
    )


def _created_at() -> sa.Column:
    return sa.Column("created_at", TIMESTAMP, nullable=False)


def upgrade() -> None:
    """Create users, tokens, trackables, logs and the audit trail."""
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("pronouns", sa.Text(), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("timezone", sa.Text(), nullable=False, server_default="UTC"),
        sa.Column("weekly_digest_opt_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("weekly_digest_token", sa.String(64), nullable=True),
        sa.Column("last_login_at", TIMESTAMP, nullable=True),
        _created_at(),
        sa.Column("updated_at", TIMESTAMP, nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("weekly_digest_token", name="uq_users_weekly_digest_token"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "refresh_tokens",
        _id(),
        _owner("refresh_tokens"),
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column("expires_at", TIMESTAMP, nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_refresh_tokens"),
        sa.UniqueConstraint("token", name="uq_refresh_tokens_token"),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])

    op.create_table(
        "password_reset_tokens",
        _id(),
        _owner("password_reset_tokens"),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("expires_at", TIMESTAMP, nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_password_reset_tokens"),
        sa.UniqueConstraint("token_hash", name="uq_password_reset_tokens_token_hash"),
    )
    op.create_index("ix_password_reset_tokens_user_id", "password_reset_tokens", ["user_id"])

    # System symptoms and habits have no owner
    op.create_table(
        "symptoms",
        _id(),
        _owner("symptoms", nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_symptoms"),
    )
    op.create_index("ix_symptoms_user_id", "symptoms", ["user_id"])

    op.create_table(
        "habits",
        _id(),
        _owner("habits", nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("tracking_type", sa.Text(), nullable=False),
        sa.Column("unit", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_habits"),
        sa.CheckConstraint(
            "tracking_type IN ('boolean', 'numeric', 'duration')",
            name="ck_habits_tracking_type",
        ),
    )
    op.create_index("ix_habits_user_id", "habits", ["user_id"])

    op.create_table(
        "medications",
        _id(),
        _owner("medications"),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("dosage", sa.Text(), nullable=True),
        sa.Column("frequency", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_medications"),
    )
    op.create_index("ix_medications_user_id", "medications", ["user_id"])

    op.create_table(
        "symptom_logs",
        _id(),
        _owner("symptom_logs"),
        sa.Column(
            "symptom_id",
            sa.Uuid(),
            sa.ForeignKey("symptoms.id", name="fk_symptom_logs_symptom_id_symptoms", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("severity", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("logged_at", TIMESTAMP, nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_symptom_logs"),
        sa.CheckConstraint("severity BETWEEN 1 AND 10", name="ck_symptom_logs_severity_range"),
    )
    op.create_index("ix_symptom_logs_user_logged_at", "symptom_logs", ["user_id", "logged_at"])

    op.create_table(
        "mood_logs",
        _id(),
        _owner("mood_logs"),
        sa.Column("mood_score", sa.Integer(), nullable=False),
        sa.Column("energy_level", sa.Integer(), nullable=True),
        sa.Column("stress_level", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("logged_at", TIMESTAMP, nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_mood_logs"),
        sa.CheckConstraint("mood_score BETWEEN 1 AND 5", name="ck_mood_logs_mood_score_range"),
        sa.CheckConstraint("energy_level BETWEEN 1 AND 5", name="ck_mood_logs_energy_level_range"),
        sa.CheckConstraint("stress_level BETWEEN 1 AND 5", name="ck_mood_logs_stress_level_range"),
    )
    op.create_index("ix_mood_logs_user_logged_at", "mood_logs", ["user_id", "logged_at"])

    op.create_table(
        "medication_logs",
        _id(),
        _owner("medication_logs"),
        sa.Column(
            "medication_id",
            sa.Uuid(),
            sa.ForeignKey(
                "medications.id",
                name="fk_medication_logs_medication_id_medications",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("taken", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("taken_at", TIMESTAMP, nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_medication_logs"),
    )
    op.create_index(
        "ix_medication_logs_user_created_at", "medication_logs", ["user_id", "created_at"]
    )

    op.create_table(
        "habit_logs",
        _id(),
        _owner("habit_logs"),
        sa.Column(
            "habit_id",
            sa.Uuid(),
            sa.ForeignKey("habits.id", name="fk_habit_logs_habit_id_habits", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("value_boolean", sa.Boolean(), nullable=True),
        sa.Column("value_numeric", sa.Float(), nullable=True),
        sa.Column("value_duration", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("logged_at", TIMESTAMP, nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_habit_logs"),
        sa.CheckConstraint(
            "value_duration >= 0", name="ck_habit_logs_value_duration_non_negative"
        ),
    )
    op.create_index("ix_habit_logs_user_logged_at", "habit_logs", ["user_id", "logged_at"])

    op.create_table(
        "audit_logs",
        _id(),
        _owner("audit_logs"),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
        sa.CheckConstraint(
            "action IN ('login', 'password_change', 'email_change')",
            name="ck_audit_logs_action",
        ),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    for table in (
        "audit_logs",
        "habit_logs",
        "medication_logs",
        "mood_logs",
        "symptom_logs",
        "medications",
        "habits",
        "symptoms",
        "password_reset_tokens",
        "refresh_tokens",
        "users",
    ):
        op.drop_table(table)
