from datetime import datetime, timezone

TIMEZONE_INFO = timezone.utc
RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_now() -> datetime:
    return datetime.now(TIMEZONE_INFO)


def format_rfc3339(dt: datetime) -> str:
    """Format as UTC RFC 3339 with seconds precision, e.g. 2025-01-31T12:00:00Z"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=TIMEZONE_INFO)
    return dt.astimezone(TIMEZONE_INFO).strftime(RFC3339_FORMAT)
