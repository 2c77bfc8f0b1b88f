"""
Platform setting entity models.

Settings are admin-managed key/value pairs. ``value`` is always stored as text
and interpreted according to ``data_type``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class SettingDataType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"


class PlatformSetting(Base, table=True):
    """Admin-managed configuration value.

    Table: settings
    """

    __tablename__ = "settings"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    key: str = Field(max_length=100, unique=True, index=True)
    value: str
    category: str = Field(default="general", max_length=64, index=True)
    description: Optional[str] = Field(default=None)
    data_type: str = Field(default=SettingDataType.STRING.value, max_length=16)
    is_public: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
