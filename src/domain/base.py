from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp, the representation stored in DateTime columns"""
    return datetime.now(UTC).replace(tzinfo=None)
