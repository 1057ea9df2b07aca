import asyncio
import signal
import sys
from contextlib import AsyncExitStack

from loguru import logger

from pitwall_lights.core.config import LOG_LEVEL, RUN_ONCE
from pitwall_lights.core.errors import PitwallError
from pitwall_lights.core.schedule import Schedule, run_on_schedule
from pitwall_lights.core.utils import TaskManager
from pitwall_lights.data.processor import PositionLightsJob, utc_now


def configure_logging(level: str = LOG_LEVEL) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


async def run_once(job: PositionLightsJob) -> int:
    """Single run for external schedulers. Returns the process exit code."""
    try:
        result = await job.run()
    except PitwallError:
        return 1
    logger.info(f"Run finished: {result.outcome.value}")
    return 0


async def main() -> int:
    job = PositionLightsJob()

    if RUN_ONCE:
        return await run_once(job)

    schedule = Schedule()
    logger.info(
        f"Polling every {schedule.interval_seconds}s on weekdays "
        f"{sorted(schedule.active_weekdays)}"
    )

    async with AsyncExitStack() as exit_stack:
        shutdown_requested = asyncio.Event()
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, shutdown_requested.set)

        trigger = TaskManager(
            lambda: run_on_schedule(job.run, schedule, utc_now),
            name="PositionTrigger",
            timeout=2.0,
        )
        await exit_stack.enter_async_context(trigger)

        await shutdown_requested.wait()
        logger.info("Shutdown signal received")

    logger.info(f"Completed {job.runs_completed} runs")
    return 0


def run() -> None:
    configure_logging()
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
