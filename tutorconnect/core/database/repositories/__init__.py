"""
Repository layer.

Each repository wraps an ``AsyncSession`` and exposes CRUD plus the domain
queries of one table or business area.
"""

from .ai_chat import AIChatRepository
from .availability import AvailabilityRepository
from .base import BaseRepository
from .messages import MessageRepository
from .reviews import ReviewRepository
from .tutoring_sessions import TutoringSessionRepository
from .users import UserRepository

__all__ = [
    "AIChatRepository",
    "AvailabilityRepository",
    "BaseRepository",
    "MessageRepository",
    "ReviewRepository",
    "TutoringSessionRepository",
    "UserRepository",
]
