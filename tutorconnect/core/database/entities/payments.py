"""
Payment entity models.

Payments move money from the student (payer) to the tutor (recipient) for one
session. Processing is simulated; a row is written directly as ``completed``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class PaymentMethod(str, Enum):
    MOCK = "mock"
    PLATFORM = "platform"


class PaymentState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Payment(Base, table=True):
    """Payment for a tutoring session.

    Table: payments
    """

    __tablename__ = "payments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    session_id: str = Field(foreign_key="tutoring_sessions.id", index=True, max_length=36)
    payer_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    recipient_id: str = Field(foreign_key="users.id", index=True, max_length=36)

    amount: float = Field(gt=0)
    currency: str = Field(default="USD", max_length=3)
    payment_method: str = Field(default=PaymentMethod.MOCK.value, max_length=16)
    status: str = Field(default=PaymentState.PENDING.value, max_length=16, index=True)
    description: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
