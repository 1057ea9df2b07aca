from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, Field, TypeAdapter


def ensure_utc(moment: datetime) -> datetime:
    """Read naive timestamps as UTC so they compare with aware ones"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class Position(BaseModel):
    """One driver's race position at one moment, as served by OpenF1 /position"""

    session_key: int
    meeting_key: int
    driver_number: int
    date: Annotated[datetime, AfterValidator(ensure_utc)]
    position: int


class Driver(BaseModel):
    """A roster entry from OpenF1 /drivers"""

    driver_number: int
    broadcast_name: Optional[str] = None
    full_name: Annotated[str, AfterValidator(lambda x: x.title())]
    name_acronym: str
    team_name: Optional[str] = None
    team_colour: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    country_code: Optional[str] = None
    headshot_url: Optional[str] = None
    session_key: Optional[int] = None
    meeting_key: Optional[int] = None


positions_adapter = TypeAdapter(list[Position])
drivers_adapter = TypeAdapter(list[Driver])


class ColorAssignment(BaseModel):
    """
    A single lighting command built for one run.

    ``color`` is a canonical ``#RRGGBB`` string and ``segments`` are the
    LED segment indices (``10 - rank``) that should show it.
    """

    color: str
    segments: List[int] = Field(default_factory=list)


class ReconcilePolicy(str, Enum):
    GROUP_BY_COLOUR = "group_by_colour"
    PER_DRIVER = "per_driver"


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    SKIPPED_STALE = "skipped_stale"
    SKIPPED_BUSY = "skipped_busy"


class RunResult(BaseModel):
    outcome: RunOutcome
    assignments: List[ColorAssignment] = Field(default_factory=list)
    latest_position_at: Optional[datetime] = None


class SegmentColorValue(BaseModel):
    segment: List[int]
    rgb: int = Field(ge=0, le=0xFFFFFF)


class Capability(BaseModel):
    """Govee segment colour capability"""

    type: str = "devices.capabilities.segment_color_setting"
    instance: str = "segmentedColorRgb"
    value: SegmentColorValue


class ControlPayload(BaseModel):
    sku: str
    device: str
    capability: Capability


class ControlRequest(BaseModel):
    """Body of a Govee device control POST"""

    requestId: str
    payload: ControlPayload


class ControlResponse(BaseModel):
    code: int
    message: Optional[str] = None
