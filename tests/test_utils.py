"""Tests for the small helpers under taskhub.utils."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy.pool import StaticPool

from taskhub.utils.dates import add_months, ensure_utc, utc_now
from taskhub.utils.db_compat import (
    DbDialect,
    detect_dialect,
    engine_options,
    requires_static_pool,
    uses_sync_driver,
)
from taskhub.utils.security import hash_password, verify_password
from taskhub.utils.validation import emails_match, normalize_email, validate_email


class TestEmailValidation:

    @pytest.mark.parametrize(
        "email",
        ["user@example.com", "first.last+tag@sub.example.co.uk", "A_B@x-y.io"],
    )
    def test_valid(self, email: str) -> None:
        assert validate_email(email)

    @pytest.mark.parametrize(
        "email",
        ["", "plain", "no-at.example.com", "a@b", "a@@b.com", "a b@c.com", "x" * 250 + "@a.com"],
    )
    def test_invalid(self, email: str) -> None:
        assert not validate_email(email)

    def test_normalize(self) -> None:
        assert normalize_email("  Bob@Example.COM ") == "bob@example.com"

    def test_emails_match_is_case_insensitive(self) -> None:
        assert emails_match("Bob@Example.com", "bob@example.com")
        assert not emails_match("bob@example.com", "rob@example.com")


class TestPasswords:

    def test_hash_roundtrip(self) -> None:
        stored = hash_password("s3cret!")
        assert stored != "s3cret!"
        assert verify_password(stored, "s3cret!")
        assert not verify_password(stored, "wrong")

    def test_hashes_are_salted(self) -> None:
        assert hash_password("same") != hash_password("same")

    def test_empty_hash_never_matches(self) -> None:
        assert not verify_password("", "anything")


class TestDates:

    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None

    def test_ensure_utc_naive(self) -> None:
        value = ensure_utc(datetime(2024, 5, 1, 12, 0))
        assert value.tzinfo == UTC
        assert value.hour == 12

    def test_ensure_utc_converts_offset(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        value = ensure_utc(datetime(2024, 5, 1, 12, 0, tzinfo=plus_two))
        assert value.hour == 10

    def test_add_months_clamps_day(self) -> None:
        assert add_months(datetime(2024, 1, 31, tzinfo=UTC), 1) == datetime(
            2024, 2, 29, tzinfo=UTC
        )
        assert add_months(datetime(2023, 1, 31, tzinfo=UTC), 1).day == 28

    def test_add_months_crosses_year(self) -> None:
        result = add_months(datetime(2024, 11, 15, 9, 30, tzinfo=UTC), 3)
        assert (result.year, result.month, result.day, result.hour) == (2025, 2, 15, 9)

    def test_add_twelve_months(self) -> None:
        assert add_months(datetime(2024, 6, 1, tzinfo=UTC), 12).year == 2025


class TestDbCompat:

    @pytest.mark.parametrize(
        ("url", "dialect"),
        [
            ("postgresql+asyncpg://u:p@h/db", DbDialect.POSTGRESQL),
            ("sqlite+aiosqlite:///:memory:", DbDialect.SQLITE),
            ("mysql+aiomysql://u:p@h/db", DbDialect.MYSQL),
            ("oracle://u:p@h/db", DbDialect.UNKNOWN),
            ("not a url", DbDialect.UNKNOWN),
        ],
    )
    def test_detect(self, url: str, dialect: DbDialect) -> None:
        assert detect_dialect(url) == dialect

    def test_static_pool_only_for_sqlite(self) -> None:
        assert requires_static_pool(DbDialect.SQLITE)
        assert not requires_static_pool(DbDialect.POSTGRESQL)

    @pytest.mark.parametrize(
        ("url", "sync"),
        [
            ("sqlite:///./x.db", True),
            ("postgresql://u:p@h/db", True),
            ("sqlite+aiosqlite:///./x.db", False),
            ("postgresql+asyncpg://u:p@h/db", False),
            ("oracle+oracledb://u:p@h/db", False),
        ],
    )
    def test_sync_driver(self, url: str, sync: bool) -> None:
        assert uses_sync_driver(url) is sync

    def test_sqlite_engine_shares_one_connection(self) -> None:
        options = engine_options("sqlite+aiosqlite:///:memory:", pool_size=5, max_overflow=1)
        assert options["poolclass"] is StaticPool
        assert "pool_size" not in options

    def test_pooled_engine_options(self) -> None:
        options = engine_options(
            "postgresql+asyncpg://u:p@h/db", pool_size=5, max_overflow=1, echo=True
        )
        assert options["pool_size"] == 5
        assert options["max_overflow"] == 1
        assert options["pool_pre_ping"]
        assert options["echo"]
