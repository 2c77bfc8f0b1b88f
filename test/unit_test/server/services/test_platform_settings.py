"""Unit tests for typed platform setting values."""

import pytest

from tutorconnect.server.services.platform_settings import parse_value, serialize_value


class TestSerializeValue:
    @pytest.mark.parametrize(
        "value,data_type,expected",
        [
            (15, "number", "15"),
            ("15.0", "number", "15"),
            (2.5, "number", "2.5"),
            (True, "boolean", "true"),
            ("off", "boolean", "false"),
            ({"a": 1}, "json", '{"a": 1}'),
            ('["x"]', "json", '["x"]'),
            ("TutorConnect", "string", "TutorConnect"),
        ],
    )
    def test_valid_values(self, value, data_type, expected):
        assert serialize_value(value, data_type) == expected

    @pytest.mark.parametrize(
        "value,data_type,message",
        [
            ("abc", "number", "number"),
            (True, "number", "number"),
            ("maybe", "boolean", "boolean"),
            ("{not json", "json", "JSON"),
            (None, "string", "required"),
        ],
    )
    def test_invalid_values(self, value, data_type, message):
        with pytest.raises(ValueError, match=message):
            serialize_value(value, data_type)

    def test_unknown_data_type(self):
        with pytest.raises(ValueError):
            serialize_value("x", "date")


class TestParseValue:
    @pytest.mark.parametrize(
        "raw,data_type,expected",
        [
            ("24", "number", 24),
            ("0.5", "number", 0.5),
            ("true", "boolean", True),
            ("no", "boolean", False),
            ('{"a": [1]}', "json", {"a": [1]}),
            ("hello", "string", "hello"),
        ],
    )
    def test_typed_values(self, raw, data_type, expected):
        assert parse_value(raw, data_type) == expected

    def test_unparseable_number_returned_unchanged(self):
        assert parse_value("lots", "number") == "lots"

    def test_unparseable_json_returned_unchanged(self):
        assert parse_value("{oops", "json") == "{oops"
