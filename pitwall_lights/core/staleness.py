from datetime import datetime, timedelta
from typing import Iterable, Optional

from pitwall_lights.core.config import STALENESS_THRESHOLD_MINUTES
from pitwall_lights.core.errors import NoPositionData
from pitwall_lights.data.models import Position, ensure_utc


def latest_timestamp(
    positions: Iterable[Position], session_key: Optional[str] = None
) -> datetime:
    """Most recent position timestamp across all drivers.

    Raises:
        NoPositionData: if the feed returned no records
    """
    dates = [position.date for position in positions]
    if not dates:
        raise NoPositionData(session_key)
    return max(dates)


def is_fresh(
    latest: datetime,
    now: datetime,
    threshold_minutes: int = STALENESS_THRESHOLD_MINUTES,
) -> bool:
    """Whether data last updated at ``latest`` is still worth acting on at ``now``."""
    return ensure_utc(now) - ensure_utc(latest) < timedelta(minutes=threshold_minutes)
