"""
Platform setting I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from tutorconnect.core.database.entities.settings import SettingDataType

from .common import APIModel


class SettingCreate(APIModel):
    key: str = Field(min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_.\-]+$")
    value: Any
    category: str = Field(default="general", max_length=64)
    description: Optional[str] = None
    data_type: SettingDataType = SettingDataType.STRING
    is_public: bool = False


class SettingUpdate(APIModel):
    value: Optional[Any] = None
    category: Optional[str] = Field(default=None, max_length=64)
    description: Optional[str] = None
    data_type: Optional[SettingDataType] = None
    is_public: Optional[bool] = None


class SettingRead(APIModel):
    id: str
    key: str
    value: Any
    category: str
    description: Optional[str] = None
    data_type: str
    is_public: bool
    updated_at: datetime


class SettingsByCategory(APIModel):
    settings: Dict[str, List[SettingRead]]


class PublicSettings(APIModel):
    settings: Dict[str, Any]
