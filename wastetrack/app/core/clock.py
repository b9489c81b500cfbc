"""
Time source for the collection core.

Components take a zero-argument callable returning an aware UTC datetime so
tests can pin time.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
