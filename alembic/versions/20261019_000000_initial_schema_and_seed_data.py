"""Initial schema and seed data for TutorConnect

Revision ID: 20261019_000000
Revises: None
Create Date: 2026-10-19 00:00:00.000000

This is the initial migration that creates all tables of the TutorConnect
marketplace and seeds default data. This includes:
- Accounts (users, tutor and student profiles, password reset tokens)
- Catalogue (subjects, tutor subjects)
- Scheduling (tutoring sessions, availability slots)
- Communication (messages, notifications)
- Follow-up (session reviews, payments, tasks)
- Platform settings and study assistant chats
- Starter subjects and default platform settings

Revision format: YYYYMMDD_HHMMSS_description

"""

import uuid
from datetime import datetime, timezone
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID = sa.String(36)


def _timestamps(with_updated: bool = True):
    columns = [sa.Column("created_at", sa.DateTime(), nullable=False)]
    if with_updated:
        columns.append(sa.Column("updated_at", sa.DateTime(), nullable=False))
    return columns


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", ID, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="student"),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("pincode", sa.String(16), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_picture_url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('student', 'tutor', 'admin')", name="ck_users_role"),
        sa.Index("ix_users_email", "email", unique=True),
        sa.Index("ix_users_role", "role"),
        sa.Index("ix_users_created_at", "created_at"),
    )

    # Create tutor_profiles table
    op.create_table(
        "tutor_profiles",
        sa.Column("id", ID, nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("hourly_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("years_of_experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("education", sa.Text(), nullable=True),
        sa.Column("certifications", sa.JSON(), nullable=True),
        sa.Column("languages", sa.JSON(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_sessions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_reviews", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("hourly_rate >= 0", name="ck_tutor_profiles_hourly_rate"),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="ck_tutor_profiles_rating"),
        sa.Index("ix_tutor_profiles_user_id", "user_id", unique=True),
    )

    # Create student_profiles table
    op.create_table(
        "student_profiles",
        sa.Column("id", ID, nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("academic_level", sa.String(64), nullable=True),
        sa.Column("school", sa.String(255), nullable=True),
        sa.Column("learning_goals", sa.Text(), nullable=True),
        sa.Column("learning_style", sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_student_profiles_user_id", "user_id", unique=True),
    )

    # Create password_reset_tokens table
    op.create_table(
        "password_reset_tokens",
        sa.Column("id", ID, nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_password_reset_tokens_user_id", "user_id", unique=True),
        sa.Index("ix_password_reset_tokens_token_hash", "token_hash"),
    )

    # Create subjects table
    op.create_table(
        "subjects",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_subjects_name", "name", unique=True),
        sa.Index("ix_subjects_category", "category"),
    )

    # Create tutor_subjects table
    op.create_table(
        "tutor_subjects",
        sa.Column("id", ID, nullable=False),
        sa.Column("tutor_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", ID, sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("proficiency_level", sa.String(32), nullable=True),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tutor_id", "subject_id", name="uq_tutor_subjects_tutor_subject"),
        sa.Index("ix_tutor_subjects_tutor_id", "tutor_id"),
        sa.Index("ix_tutor_subjects_subject_id", "subject_id"),
    )

    # Create tutoring_sessions table
    op.create_table(
        "tutoring_sessions",
        sa.Column("id", ID, nullable=False),
        sa.Column("student_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("tutor_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("subject_id", ID, sa.ForeignKey("subjects.id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("session_type", sa.String(16), nullable=False, server_default="online"),
        sa.Column("status", sa.String(16), nullable=False, server_default="scheduled"),
        sa.Column("scheduled_start", sa.DateTime(), nullable=False),
        sa.Column("scheduled_end", sa.DateTime(), nullable=False),
        sa.Column("hourly_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("meeting_link", sa.String(500), nullable=True),
        sa.Column("meeting_room", sa.String(255), nullable=True),
        sa.Column("student_rating", sa.Integer(), nullable=True),
        sa.Column("tutor_rating", sa.Integer(), nullable=True),
        sa.Column("student_feedback", sa.Text(), nullable=True),
        sa.Column("tutor_feedback", sa.Text(), nullable=True),
        sa.Column("session_notes", sa.Text(), nullable=True),
        sa.Column("payment_status", sa.String(16), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("scheduled_end > scheduled_start", name="ck_tutoring_sessions_interval"),
        sa.Index("ix_tutoring_sessions_student_id", "student_id"),
        sa.Index("ix_tutoring_sessions_tutor_id", "tutor_id"),
        sa.Index("ix_tutoring_sessions_status", "status"),
        sa.Index("ix_tutoring_sessions_scheduled_start", "scheduled_start"),
        sa.Index("ix_tutoring_sessions_created_at", "created_at"),
    )

    # Create tutor_availability_slots table
    op.create_table(
        "tutor_availability_slots",
        sa.Column("id", ID, nullable=False),
        sa.Column("tutor_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("specific_date", sa.Date(), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day_of_week"),
        sa.CheckConstraint("end_time > start_time", name="ck_availability_window"),
        sa.Index("ix_tutor_availability_slots_tutor_id", "tutor_id"),
        sa.Index("ix_tutor_availability_slots_specific_date", "specific_date"),
    )

    # Create messages table
    op.create_table(
        "messages",
        sa.Column("id", ID, nullable=False),
        sa.Column("sender_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("recipient_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("session_id", ID, sa.ForeignKey("tutoring_sessions.id"), nullable=True),
        sa.Column("subject", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("message_type", sa.String(16), nullable=False, server_default="direct"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_messages_sender_id", "sender_id"),
        sa.Index("ix_messages_recipient_id", "recipient_id"),
        sa.Index("ix_messages_is_read", "is_read"),
        sa.Index("ix_messages_created_at", "created_at"),
    )

    # Create session_reviews table
    op.create_table(
        "session_reviews",
        sa.Column("id", ID, nullable=False),
        sa.Column("session_id", ID, sa.ForeignKey("tutoring_sessions.id"), nullable=False),
        sa.Column("reviewer_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reviewee_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reviewer_type", sa.String(16), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_id", "reviewer_id", name="uq_session_reviews_session_reviewer"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_session_reviews_rating"),
        sa.Index("ix_session_reviews_session_id", "session_id"),
        sa.Index("ix_session_reviews_reviewer_id", "reviewer_id"),
        sa.Index("ix_session_reviews_reviewee_id", "reviewee_id"),
        sa.Index("ix_session_reviews_created_at", "created_at"),
    )

    # Create payments table
    op.create_table(
        "payments",
        sa.Column("id", ID, nullable=False),
        sa.Column("session_id", ID, sa.ForeignKey("tutoring_sessions.id"), nullable=False),
        sa.Column("payer_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("recipient_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("payment_method", sa.String(16), nullable=False, server_default="mock"),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount"),
        sa.Index("ix_payments_session_id", "session_id"),
        sa.Index("ix_payments_payer_id", "payer_id"),
        sa.Index("ix_payments_recipient_id", "recipient_id"),
        sa.Index("ix_payments_status", "status"),
        sa.Index("ix_payments_created_at", "created_at"),
    )

    # Create tasks table
    op.create_table(
        "tasks",
        sa.Column("id", ID, nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", ID, sa.ForeignKey("subjects.id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("progress BETWEEN 0 AND 100", name="ck_tasks_progress"),
        sa.Index("ix_tasks_user_id", "user_id"),
        sa.Index("ix_tasks_status", "status"),
        sa.Index("ix_tasks_due_date", "due_date"),
    )

    # Create notifications table
    op.create_table(
        "notifications",
        sa.Column("id", ID, nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_by", ID, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("type", sa.String(32), nullable=False, server_default="announcement"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_notifications_user_id", "user_id"),
        sa.Index("ix_notifications_created_at", "created_at"),
    )

    # Create settings table
    op.create_table(
        "settings",
        sa.Column("id", ID, nullable=False),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("category", sa.String(64), nullable=False, server_default="general"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("data_type", sa.String(16), nullable=False, server_default="string"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("data_type IN ('string', 'number', 'boolean', 'json')", name="ck_settings_data_type"),
        sa.Index("ix_settings_key", "key", unique=True),
        sa.Index("ix_settings_category", "category"),
    )

    # Create ai_chat_sessions table
    op.create_table(
        "ai_chat_sessions",
        sa.Column("id", ID, nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False, server_default="New Chat"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_ai_chat_sessions_user_id", "user_id"),
        sa.Index("ix_ai_chat_sessions_created_at", "created_at"),
    )

    # Create ai_chat_messages table
    op.create_table(
        "ai_chat_messages",
        sa.Column("id", ID, nullable=False),
        sa.Column("session_id", ID, sa.ForeignKey("ai_chat_sessions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("message_type", sa.String(16), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("model_used", sa.String(100), nullable=True),
        sa.Column("tokens_used", sa.Integer(), nullable=True),
        sa.Column("response_time_ms", sa.Integer(), nullable=True),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("message_type IN ('user', 'assistant')", name="ck_ai_chat_messages_type"),
        sa.Index("ix_ai_chat_messages_session_id", "session_id"),
        sa.Index("ix_ai_chat_messages_user_id", "user_id"),
        sa.Index("ix_ai_chat_messages_created_at", "created_at"),
    )

    # =====================================================================
    # Seed Data
    # =====================================================================

    now = datetime.now(timezone.utc).replace(tzinfo=None)

    subjects_table = sa.table(
        "subjects",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("description", sa.Text),
        sa.column("category", sa.String),
        sa.column("is_active", sa.Boolean),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    default_subjects = [
        ("Mathematics", "Basic to advanced mathematics including algebra, calculus, and statistics", "academics"),
        ("Physics", "Physics concepts from basic mechanics to advanced quantum physics", "science"),
        ("Chemistry", "General, organic and physical chemistry", "science"),
        ("Biology", "Cell biology, genetics, ecology and human anatomy", "science"),
        ("Computer Science", "Programming, algorithms, data structures, and software development", "technology"),
        ("English", "Grammar, writing, reading comprehension and literature", "languages"),
    ]
    op.bulk_insert(
        subjects_table,
        [
            {
                "id": str(uuid.uuid4()),
                "name": name,
                "description": description,
                "category": category,
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            }
            for name, description, category in default_subjects
        ],
    )

    settings_table = sa.table(
        "settings",
        sa.column("id", sa.String),
        sa.column("key", sa.String),
        sa.column("value", sa.Text),
        sa.column("category", sa.String),
        sa.column("description", sa.Text),
        sa.column("data_type", sa.String),
        sa.column("is_public", sa.Boolean),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    # (key, value, category, data_type, is_public, description)
    default_settings = [
        ("site_name", "TutorConnect", "general", "string", True, "Platform name"),
        ("site_description", "Connect with expert tutors for personalized learning", "general", "string", True, "Platform description"),
        ("contact_email", "admin@tutorconnect.com", "general", "string", True, "Contact email"),
        ("support_email", "support@tutorconnect.com", "general", "string", True, "Support email"),
        ("timezone", "UTC", "general", "string", True, "Default timezone"),
        ("language", "en", "general", "string", True, "Default language"),
        ("require_email_verification", "true", "security", "boolean", False, "Require email verification for new users"),
        ("session_timeout", "24", "security", "number", False, "Session timeout in hours"),
        ("max_login_attempts", "5", "security", "number", False, "Maximum login attempts"),
        ("password_min_length", "8", "security", "number", True, "Minimum password length"),
        ("commission_rate", "15", "payment", "number", False, "Platform commission rate in percentage"),
        ("minimum_payout", "50", "payment", "number", False, "Minimum payout amount"),
        ("payout_schedule", "weekly", "payment", "string", False, "Payout schedule"),
        ("require_tutor_verification", "true", "user_management", "boolean", False, "Require tutor verification"),
        ("max_students_per_tutor", "50", "user_management", "number", False, "Maximum students per tutor"),
        ("allow_public_profiles", "true", "user_management", "boolean", True, "Allow public tutor profiles"),
    ]
    op.bulk_insert(
        settings_table,
        [
            {
                "id": str(uuid.uuid4()),
                "key": key,
                "value": value,
                "category": category,
                "description": description,
                "data_type": data_type,
                "is_public": is_public,
                "created_at": now,
                "updated_at": now,
            }
            for key, value, category, data_type, is_public, description in default_settings
        ],
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("ai_chat_messages")
    op.drop_table("ai_chat_sessions")
    op.drop_table("settings")
    op.drop_table("notifications")
    op.drop_table("tasks")
    op.drop_table("payments")
    op.drop_table("session_reviews")
    op.drop_table("messages")
    op.drop_table("tutor_availability_slots")
    op.drop_table("tutoring_sessions")
    op.drop_table("tutor_subjects")
    op.drop_table("subjects")
    op.drop_table("password_reset_tokens")
    op.drop_table("student_profiles")
    op.drop_table("tutor_profiles")
    op.drop_table("users")
