"""Unit tests for database helper functions."""

import pytest

from tutorconnect.core.database.utils import contains_pattern, normalize_url


class TestContainsPattern:
    @pytest.mark.parametrize(
        "term,expected",
        [
            ("Math", "%math%"),
            ("%", r"%\%%"),
            ("a_b", r"%a\_b%"),
            ("50\\%", r"%50\\\%%"),
        ],
    )
    def test_wildcards_escaped(self, term, expected):
        assert contains_pattern(term) == expected


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "url",
        ["postgres://u:p@db/tc", "postgresql://u:p@db/tc", "postgresql+psycopg2://u:p@db/tc"],
    )
    def test_postgres_urls_use_asyncpg(self, url):
        assert normalize_url(url) == "postgresql+asyncpg://u:p@db/tc"

    def test_sqlite_untouched(self):
        assert normalize_url("sqlite+aiosqlite:///:memory:") == "sqlite+aiosqlite:///:memory:"
