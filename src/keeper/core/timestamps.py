"""
UTC timestamp utilities (stdlib-only).

Every ``updated_at`` written or compared by keeper is a timezone-aware UTC
datetime. Textual timestamps crossing the record boundary use RFC 3339 with a
``Z`` suffix.

Tags:
    timestamps, utc, rfc3339, keeper, stdlib-only
"""

from datetime import UTC, datetime


def ensure_utc(dt: datetime) -> datetime:
    """Return *dt* as an aware UTC datetime.

    Naive datetimes are interpreted as already being in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_rfc3339(dt: datetime) -> str:
    """Format a datetime as RFC 3339 in UTC (``2024-01-02T03:04:05.000001Z``)."""
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


def from_rfc3339(s: str) -> datetime:
    """Parse an RFC 3339 / ISO 8601 string into an aware UTC datetime."""
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(s))
