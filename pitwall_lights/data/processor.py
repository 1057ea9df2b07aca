import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from loguru import logger

from pitwall_lights.core.config import (
    PACING_INTERVAL_MS,
    RECONCILE_POLICY,
    STALENESS_THRESHOLD_MINUTES,
)
from pitwall_lights.core.errors import PitwallError
from pitwall_lights.core.staleness import is_fresh, latest_timestamp
from pitwall_lights.core.utils import SingleRunGuard
from pitwall_lights.data.models import ReconcilePolicy, RunOutcome, RunResult
from pitwall_lights.data.openf1 import OpenF1Client
from pitwall_lights.data.reconciler import reconcile
from pitwall_lights.lights.govee import GoveeClient
from pitwall_lights.lights.sequencer import apply_assignments


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PositionLightsJob:
    """One poll of the race order pushed onto the LED strip"""

    def __init__(
        self,
        feed: Optional[OpenF1Client] = None,
        lights_factory: Callable[[], GoveeClient] = GoveeClient,
        policy: ReconcilePolicy = ReconcilePolicy(RECONCILE_POLICY),
        threshold_minutes: int = STALENESS_THRESHOLD_MINUTES,
        pacing_seconds: float = PACING_INTERVAL_MS / 1000,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.feed = feed or OpenF1Client()
        self.lights_factory = lights_factory
        self.policy = policy
        self.threshold_minutes = threshold_minutes
        self.pacing_seconds = pacing_seconds
        self.clock = clock
        self.sleep = sleep
        self.guard = SingleRunGuard(name="positions")
        self.runs_completed = 0

    async def run(self) -> RunResult:
        """Run once, or skip if the previous run has not finished yet."""
        if not self.guard.try_acquire():
            logger.warning("Previous run still in progress, skipping this trigger")
            return RunResult(outcome=RunOutcome.SKIPPED_BUSY)
        try:
            return await self._run()
        except PitwallError as e:
            logger.error(f"Run failed [{e.kind.value}]: {e}")
            raise
        finally:
            self.guard.release()

    async def _run(self) -> RunResult:
        positions = await asyncio.to_thread(self.feed.get_positions)
        latest = latest_timestamp(positions, self.feed.session_key)

        if not is_fresh(latest, self.clock(), self.threshold_minutes):
            logger.warning(
                f"Latest position is from {latest.isoformat()}, older than "
                f"{self.threshold_minutes} minutes, skipping update"
            )
            return RunResult(outcome=RunOutcome.SKIPPED_STALE, latest_position_at=latest)

        drivers = await asyncio.to_thread(self.feed.get_drivers)
        assignments = reconcile(positions, drivers, self.policy)

        lights = self.lights_factory()
        applied = await apply_assignments(
            assignments, lights, self.pacing_seconds, sleep=self.sleep
        )

        self.runs_completed += 1
        logger.info(
            f"Updated {len(applied)} segment groups from positions at {latest.isoformat()}"
        )
        return RunResult(
            outcome=RunOutcome.COMPLETED,
            assignments=applied,
            latest_position_at=latest,
        )
