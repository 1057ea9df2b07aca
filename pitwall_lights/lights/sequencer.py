import asyncio
from typing import Awaitable, Callable, List, Sequence

import aiohttp
from loguru import logger

from pitwall_lights.core.config import PACING_INTERVAL_MS
from pitwall_lights.data.models import ColorAssignment
from pitwall_lights.lights.colors import hex_to_color
from pitwall_lights.lights.govee import GoveeClient


async def apply_assignments(
    assignments: Sequence[ColorAssignment],
    client: GoveeClient,
    pacing_seconds: float = PACING_INTERVAL_MS / 1000,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> List[ColorAssignment]:
    """Push assignments to the strip one at a time, in the order given.

    Calls never overlap and ``pacing_seconds`` passes between consecutive
    calls. The first failure propagates and nothing after it is sent.

    Returns:
        The assignments that were applied
    """
    applied: List[ColorAssignment] = []
    if not assignments:
        return applied

    # One shared session for the whole sequence
    async with aiohttp.ClientSession() as session:
        for index, assignment in enumerate(assignments):
            if index:
                await sleep(pacing_seconds)
            color = hex_to_color(assignment.color)
            await client.set_segment_color(assignment.segments, color, session)
            applied.append(assignment)
            logger.info(f"Set segments {assignment.segments} to {assignment.color}")

    return applied
