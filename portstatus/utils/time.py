from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)
