"""Tests for UTC / RFC 3339 helpers."""

from datetime import UTC, datetime, timedelta, timezone

from keeper.core.timestamps import ensure_utc, from_rfc3339, to_rfc3339


def test_ensure_utc_naive():
    assert ensure_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=UTC)


def test_ensure_utc_converts_offset():
    plus_two = timezone(timedelta(hours=2))
    assert ensure_utc(datetime(2024, 1, 1, 12, tzinfo=plus_two)).hour == 10


def test_to_rfc3339_z_suffix():
    dt = datetime(2024, 1, 2, 3, 4, 5, 6, tzinfo=UTC)
    assert to_rfc3339(dt) == "2024-01-02T03:04:05.000006Z"


def test_from_rfc3339():
    assert from_rfc3339("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert from_rfc3339("2024-01-02T05:04:05+02:00") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
