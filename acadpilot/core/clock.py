from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current UTC time without tzinfo, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
