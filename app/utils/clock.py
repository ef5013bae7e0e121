from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    Naive so it compares with the values SQLite hands back from DateTime columns.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
