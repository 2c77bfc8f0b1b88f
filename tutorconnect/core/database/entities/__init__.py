"""
Database entity models.

This package contains all database entity models organized by business domain.
Importing it registers every table on ``Base.metadata``.

Modules:
- users: Accounts plus tutor and student profiles
- subjects: Subject catalogue and tutor/subject links
- tutoring_sessions: Booked tutoring sessions
- availability: Recurring and date-specific tutor availability
- messages: Direct messages between users
- reviews: Session reviews
- tasks: Personal tasks
- payments: Session payments
- notifications: Per-user notifications
- settings: Admin-managed platform settings
- ai_chat: Study assistant conversations
- password_resets: Password reset tokens
"""

from . import (
    ai_chat,
    availability,
    messages,
    notifications,
    password_resets,
    payments,
    reviews,
    settings,
    subjects,
    tasks,
    tutoring_sessions,
    users,
)

__all__ = [
    "ai_chat",
    "availability",
    "messages",
    "notifications",
    "password_resets",
    "payments",
    "reviews",
    "settings",
    "subjects",
    "tasks",
    "tutoring_sessions",
    "users",
]
