"""Wall-clock helpers.

All timestamps are naive UTC so they compare cleanly with values read back
from SQLite, which drops timezone information.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utcnow_iso() -> str:
    return utcnow().isoformat()
