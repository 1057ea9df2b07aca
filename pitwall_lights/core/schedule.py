import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, Optional, Set

from loguru import logger
from pydantic import BaseModel, Field, field_validator

from pitwall_lights.core.config import ACTIVE_WEEKDAYS, POLL_INTERVAL_SECONDS
from pitwall_lights.core.utils import run_with_errorhandling


class Schedule(BaseModel):
    """
    When the trigger loop fires a run.

    Equivalent to a cron line that fires every ``interval_seconds`` on the
    listed weekdays (Python numbering, Monday=0).
    """

    interval_seconds: float = Field(default=POLL_INTERVAL_SECONDS, gt=0)
    active_weekdays: frozenset[int] = ACTIVE_WEEKDAYS

    @field_validator("active_weekdays", mode="before")
    @classmethod
    def _weekdays_in_range(cls, value: Iterable[int]) -> frozenset[int]:
        days = frozenset(value)
        if not days or not days <= set(range(7)):
            raise ValueError("active_weekdays must be a non-empty subset of 0-6")
        return days

    def is_active(self, now: datetime) -> bool:
        return now.weekday() in self.active_weekdays


async def run_on_schedule(
    job: Callable[[], Awaitable[Any]],
    schedule: Schedule,
    clock: Callable[[], datetime],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    max_ticks: Optional[int] = None,
) -> int:
    """Fire ``job`` on every active tick without waiting for it to finish.

    Runs are started as tasks, the way a cron trigger fires regardless of
    the previous invocation, so the job itself must guard against overlap.

    Returns:
        The number of runs started
    """
    pending: Set[asyncio.Task] = set()
    started = 0
    ticks = 0
    try:
        while max_ticks is None or ticks < max_ticks:
            ticks += 1
            if schedule.is_active(clock()):
                task = asyncio.create_task(
                    run_with_errorhandling(job(), "Position update failed")
                )
                pending.add(task)
                task.add_done_callback(pending.discard)
                started += 1
            else:
                logger.debug("Outside active weekdays, not triggering")
            await sleep(schedule.interval_seconds)
        if pending:
            await asyncio.gather(*pending)
    finally:
        for task in list(pending):
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
    return started
