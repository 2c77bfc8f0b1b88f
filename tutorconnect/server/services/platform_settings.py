"""
Typed platform settings.

Setting values are stored as text. These helpers convert between the stored
text and the typed value declared by ``data_type``.
"""

import json
from typing import Any

from tutorconnect.core.database.entities.settings import SettingDataType

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


def serialize_value(value: Any, data_type: str) -> str:
    """
    Validate ``value`` against ``data_type`` and render it for storage.

    Raises:
        ValueError: When the value does not match the declared type
    """
    kind = SettingDataType(data_type)
    if kind == SettingDataType.NUMBER:
        if isinstance(value, bool):
            raise ValueError("Value must be a number")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError("Value must be a number")
        return str(int(number)) if number.is_integer() else str(number)
    if kind == SettingDataType.BOOLEAN:
        if isinstance(value, bool):
            return "true" if value else "false"
        text = str(value).strip().lower()
        if text in TRUE_VALUES:
            return "true"
        if text in FALSE_VALUES:
            return "false"
        raise ValueError("Value must be a boolean")
    if kind == SettingDataType.JSON:
        if isinstance(value, str):
            try:
                json.loads(value)
            except json.JSONDecodeError:
                raise ValueError("Value must be valid JSON")
            return value
        return json.dumps(value)
    if value is None:
        raise ValueError("Value is required")
    return str(value)


def parse_value(raw: str, data_type: str) -> Any:
    """Typed value of a stored setting; unparseable text is returned unchanged."""
    kind = SettingDataType(data_type)
    try:
        if kind == SettingDataType.NUMBER:
            number = float(raw)
            return int(number) if number.is_integer() else number
        if kind == SettingDataType.BOOLEAN:
            return raw.strip().lower() in TRUE_VALUES
        if kind == SettingDataType.JSON:
            return json.loads(raw)
    except (TypeError, ValueError):
        return raw
    return raw
