"""
Password reset token entity.

At most one outstanding token per user; a new request overwrites the previous
one. Only the sha256 of the token is stored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class PasswordResetToken(Base, table=True):
    """Outstanding password reset request.

    Table: password_reset_tokens
    """

    __tablename__ = "password_reset_tokens"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, max_length=36)
    token_hash: str = Field(max_length=64, index=True)
    expires_at: datetime
    used_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
