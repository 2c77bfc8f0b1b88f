"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts. Every model renders
camelCase keys on the wire.

Modules:
- common: Base model, pagination blocks and acknowledgements
- users: Accounts, profiles and authentication payloads
- tutors, subjects: Public catalogue
- sessions, availability: Booking and scheduling
- messages, notifications: User communication
- reviews, tasks, payments: Session follow-up and personal tools
- settings, admin: Admin-managed platform settings and console views
- ai_chat: Study assistant conversations
- analytics, calendar: Reporting views
"""

from .common import APIModel, MessageResponse, PagePagination, Pagination

__all__ = [
    "APIModel",
    "MessageResponse",
    "PagePagination",
    "Pagination",
]
