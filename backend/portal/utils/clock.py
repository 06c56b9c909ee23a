"""
Clock — Naive UTC timestamps, as stored in the student tables.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
