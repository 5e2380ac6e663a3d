"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

This migration creates:
1. users (single-table inheritance on role, with the teacher/student
   subject reference sets as uuid[] columns)
2. subjects, with a partial unique index on the live offering
3. activities and grades
4. holidays and events
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUMS = {
    "user_role": ("Admin", "Teacher", "Student"),
    "user_status": ("active", "inactive", "suspended", "pending", "archived"),
    "quarter": ("First Quarter", "Second Quarter", "3rd Quarter", "4th Quarter"),
    "holiday_type": ("regular", "special"),
    "event_priority": ("high", "medium", "low"),
    "target_audience": ("all", "students", "teachers", "admins"),
    "event_type": ("academic", "administrative", "holiday", "meeting", "deadline", "other"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _base_columns() -> list[sa.Column]:
    """Primary key and timestamps (from BaseModel)."""
    return [
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create all tables, enum types and indexes."""
    bind = op.get_bind()
    for name in ENUMS:
        postgresql.ENUM(*ENUMS[name], name=name).create(bind, checkfirst=True)

    # Users
    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("user_code", sa.String(length=50), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("middle_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("sex", sa.String(length=10), nullable=True),
        sa.Column("phone_number", sa.String(length=30), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("profile_picture", sa.Text(), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("status", _enum("user_status"), nullable=False, server_default="pending"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        # Teacher variant
        sa.Column(
            "assigned_subjects",
            postgresql.ARRAY(postgresql.UUID(as_uuid=False)),
            nullable=True,
            server_default=sa.text("'{}'"),
        ),
        # Student variant
        sa.Column(
            "enrolled_subjects",
            postgresql.ARRAY(postgresql.UUID(as_uuid=False)),
            nullable=True,
            server_default=sa.text("'{}'"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_user_code"), "users", ["user_code"], unique=True)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    # Subjects
    op.create_table(
        "subjects",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("grade_level", sa.String(length=50), nullable=True),
        sa.Column("section", sa.String(length=100), nullable=True),
        sa.Column("school_year", sa.String(length=20), nullable=False),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column(
            "students",
            postgresql.ARRAY(postgresql.UUID(as_uuid=False)),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_by", postgresql.UUID(as_uuid=False), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["teacher_id"], ["users.id"], name="fk_subjects_teacher_id", ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["archived_by"], ["users.id"], name="fk_subjects_archived_by", ondelete="SET NULL"
        ),
    )
    op.create_index(op.f("ix_subjects_teacher_id"), "subjects", ["teacher_id"], unique=False)
    op.create_index(
        "ix_subjects_teacher_archived", "subjects", ["teacher_id", "is_archived"], unique=False
    )
    op.create_index(
        "uq_subjects_offering_active",
        "subjects",
        ["name", "grade_level", "section", "school_year"],
        unique=True,
        postgresql_where=sa.text("is_archived = false"),
    )

    # Coursework
    op.create_table(
        "activities",
        *_base_columns(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("visible_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("quarter", _enum("quarter"), nullable=False),
        sa.Column("points", sa.Float(), nullable=True),
        sa.Column(
            "allow_late_submissions", sa.Boolean(), nullable=False, server_default="true"
        ),
        sa.Column("attachment_path", sa.Text(), nullable=True),
        sa.Column("subject_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("created_by", postgresql.UUID(as_uuid=False), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], name="fk_activities_subject_id"),
        sa.ForeignKeyConstraint(
            ["created_by"], ["users.id"], name="fk_activities_created_by", ondelete="CASCADE"
        ),
    )
    op.create_index(op.f("ix_activities_subject_id"), "activities", ["subject_id"], unique=False)

    op.create_table(
        "grades",
        *_base_columns(),
        sa.Column("student_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("activity_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("subject_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("quarter", _enum("quarter"), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("bonus_points", sa.Float(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("graded_by", postgresql.UUID(as_uuid=False), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["student_id"], ["users.id"], name="fk_grades_student_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["activity_id"], ["activities.id"], name="fk_grades_activity_id"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], name="fk_grades_subject_id"),
        sa.ForeignKeyConstraint(
            ["graded_by"], ["users.id"], name="fk_grades_graded_by", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("student_id", "activity_id", name="uq_grades_student_activity"),
    )
    op.create_index("ix_grades_subject_id", "grades", ["subject_id"], unique=False)

    # Holidays
    op.create_table(
        "holidays",
        *_base_columns(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("month", sa.SmallInteger(), nullable=False),
        sa.Column("day", sa.SmallInteger(), nullable=False),
        sa.Column("type", _enum("holiday_type"), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_holidays_month"),
        sa.CheckConstraint("day BETWEEN 1 AND 31", name="ck_holidays_day"),
    )
    op.create_index("ix_holidays_month_day", "holidays", ["month", "day"], unique=False)

    # Events
    op.create_table(
        "events",
        *_base_columns(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("header", sa.String(length=300), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column(
            "images",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_all_day", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("priority", _enum("event_priority"), nullable=False, server_default="medium"),
        sa.Column("target_audience", _enum("target_audience"), nullable=False, server_default="all"),
        sa.Column("event_type", _enum("event_type"), nullable=False, server_default="other"),
        sa.Column("created_by", postgresql.UUID(as_uuid=False), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["created_by"], ["users.id"], name="fk_events_created_by", ondelete="CASCADE"
        ),
    )
    op.create_index(op.f("ix_events_created_by"), "events", ["created_by"], unique=False)
    op.create_index("ix_events_dates", "events", ["start_date", "end_date"], unique=False)
    op.create_index("ix_events_priority", "events", ["priority"], unique=False)
    op.create_index("ix_events_target_audience", "events", ["target_audience"], unique=False)
    op.create_index("ix_events_event_type", "events", ["event_type"], unique=False)


def downgrade() -> None:
    """Drop everything created by upgrade."""
    op.drop_table("events")
    op.drop_table("holidays")
    op.drop_table("grades")
    op.drop_table("activities")
    op.drop_index("uq_subjects_offering_active", table_name="subjects")
    op.drop_table("subjects")
    op.drop_table("users")

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
