"""Turn position records and the driver roster into lighting commands.

Two policies are available:

- ``group_by_colour`` batches drivers sharing a colour into one command,
  so two team-mates in the top ten cost one API call.
- ``per_driver`` emits one single-segment command per driver, ordered
  from P10 up to the leader.

Segment indices are ``10 - rank`` in both, so P1 lights segment 9 and
P10 lights segment 0.
"""

from typing import Dict, Iterable, List, Sequence

from loguru import logger

from pitwall_lights.core.errors import DriverNotFound, UnresolvableColor
from pitwall_lights.data.models import (
    ColorAssignment,
    Driver,
    Position,
    ReconcilePolicy,
)
from pitwall_lights.lights.colors import FALLBACK_COLOURS, normalize_hex

TOP_N = 10


def segment_for_rank(rank: int) -> int:
    return TOP_N - rank


def latest_positions(positions: Iterable[Position]) -> List[Position]:
    """Keep only the newest record per driver, newest first.

    ``sorted`` is stable, so among records with equal dates the one seen
    first in the feed wins.
    """
    newest_first = sorted(positions, key=lambda p: p.date, reverse=True)
    latest: Dict[int, Position] = {}
    for position in newest_first:
        latest.setdefault(position.driver_number, position)
    return list(latest.values())


def driver_lookup(drivers: Iterable[Driver]) -> Dict[int, Driver]:
    return {driver.driver_number: driver for driver in drivers}


def find_driver(lookup: Dict[int, Driver], driver_number: int) -> Driver:
    driver = lookup.get(driver_number)
    if driver is None:
        raise DriverNotFound(driver_number)
    return driver


def resolve_colour(driver: Driver) -> str:
    """Team colour, or the fallback for the driver's acronym, as ``#RRGGBB``."""
    colour = (driver.team_colour or "").strip() or FALLBACK_COLOURS.get(
        driver.name_acronym
    )
    if not colour:
        raise UnresolvableColor(driver.driver_number, driver.name_acronym)
    return normalize_hex(colour)


def group_by_colour(
    positions: Sequence[Position], drivers: Sequence[Driver]
) -> List[ColorAssignment]:
    lookup = driver_lookup(drivers)
    groups: Dict[str, List[int]] = {}

    for position in latest_positions(positions):
        if not 1 <= position.position <= TOP_N:
            continue
        driver = find_driver(lookup, position.driver_number)
        colour = resolve_colour(driver)
        groups.setdefault(colour, []).append(segment_for_rank(position.position))

    return [
        ColorAssignment(color=colour, segments=segments)
        for colour, segments in groups.items()
    ]


def per_driver(
    positions: Sequence[Position], drivers: Sequence[Driver]
) -> List[ColorAssignment]:
    lookup = driver_lookup(drivers)
    joined = [
        (position, find_driver(lookup, position.driver_number))
        for position in latest_positions(positions)
    ]
    joined.sort(key=lambda pair: pair[0].position, reverse=True)

    assignments = []
    for position, driver in joined[-TOP_N:]:
        # Gaps in the order push the tail of the ten past the last segment
        if position.position > TOP_N:
            logger.debug(
                f"Skipping driver {driver.driver_number} at P{position.position}, no segment"
            )
            continue
        assignments.append(
            ColorAssignment(
                color=resolve_colour(driver),
                segments=[segment_for_rank(position.position)],
            )
        )
    return assignments


def reconcile(
    positions: Sequence[Position],
    drivers: Sequence[Driver],
    policy: ReconcilePolicy = ReconcilePolicy.GROUP_BY_COLOUR,
) -> List[ColorAssignment]:
    if policy == ReconcilePolicy.PER_DRIVER:
        assignments = per_driver(positions, drivers)
    else:
        assignments = group_by_colour(positions, drivers)
    logger.debug(f"Built {len(assignments)} assignments using {policy.value}")
    return assignments
