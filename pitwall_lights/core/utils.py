import asyncio
from types import TracebackType
from typing import Awaitable, Callable, Optional, Type, TypeVar

from loguru import logger

from pitwall_lights.core.errors import PitwallError

T = TypeVar("T")


class TaskManager:
    """
    Context manager that runs a coroutine factory as a background task.
    The task is cancelled and awaited (up to ``timeout``) on exit.
    """

    def __init__(
        self,
        coro: Callable[[], Awaitable[T]],
        name: Optional[str] = None,
        timeout: float = 0.5,
    ):
        self.coro_factory = coro
        self.name = name or "Task"
        self.task: Optional[asyncio.Task] = None
        self.timeout = timeout
        self.result: Optional[T] = None
        self.error: Optional[BaseException] = None

    async def __aenter__(self) -> "TaskManager":
        self.task = asyncio.create_task(self.coro_factory(), name=self.name)
        logger.debug(f"Started task {self.name}")
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if not self.task:
            return

        if self.task.done() and not self.task.cancelled():
            self.error = self.task.exception()
            if self.error is None:
                self.result = self.task.result()
            else:
                logger.error(f"Task {self.name} failed: {self.error}")

        if not self.task.done():
            self.task.cancel()
            # Shield so cleanup survives a cancellation of the exiting scope
            await asyncio.shield(asyncio.wait([self.task], timeout=self.timeout))
            logger.debug(f"Cancelled task {self.name}")

    @property
    def done(self) -> bool:
        return self.task is not None and self.task.done()


class SingleRunGuard:
    """
    Non-reentrant guard around one job run.

    ``try_acquire`` never waits: a trigger that fires while a run is
    still in progress is told to skip instead of queueing behind it.
    """

    def __init__(self, name: str = "run"):
        self.name = name
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def try_acquire(self) -> bool:
        if self._running:
            return False
        self._running = True
        return True

    def release(self) -> None:
        self._running = False


async def run_with_errorhandling(
    coro: Awaitable[T], error_message: str = "Operation failed"
) -> Optional[T]:
    """
    Await a coroutine, logging and swallowing any failure.

    Only the outermost trigger loop uses this; everything below it lets
    errors propagate so a run stops at the first failure.

    Args:
        coro: The coroutine to run
        error_message: Prefix for the logged error

    Returns:
        The result of the coroutine or None if it failed
    """
    try:
        return await coro
    except asyncio.CancelledError:
        raise
    except PitwallError as e:
        logger.error(f"{error_message} [{e.kind.value}]: {e}")
        return None
    except Exception as e:
        logger.exception(f"{error_message}: {e}")
        return None
