"""
Payment I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import APIModel, Pagination


class PaymentCreate(APIModel):
    amount: float = Field(gt=0)
    description: Optional[str] = Field(default=None, max_length=500)


class PaymentRead(APIModel):
    id: str
    session_id: str
    payer_id: str
    recipient_id: str
    amount: float
    currency: str
    payment_method: str
    status: str
    description: Optional[str] = None
    created_at: datetime


class PaymentList(APIModel):
    payments: List[PaymentRead]
    pagination: Pagination


class PaymentTotals(APIModel):
    count: int
    total: float


class PaymentStats(APIModel):
    payments_sent: PaymentTotals
    payments_received: PaymentTotals
    completed_payments: int
    pending_payments: int
