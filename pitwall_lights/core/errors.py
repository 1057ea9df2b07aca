from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    InvalidColorFormat = "InvalidColorFormat"
    NoPositionData = "NoPositionData"
    UnresolvableColor = "UnresolvableColor"
    DriverNotFound = "DriverNotFound"
    MissingCredential = "MissingCredential"
    ActuationFailed = "ActuationFailed"
    UpstreamFetchFailed = "UpstreamFetchFailed"


class PitwallError(Exception):
    """
    Base class for every error that ends a run.

    Each subclass pins its ErrorKind so callers can branch on
    ``error.kind`` without an isinstance ladder.
    """

    kind: ErrorKind


class InvalidColorFormat(PitwallError, ValueError):
    kind = ErrorKind.InvalidColorFormat

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid hex color format: {value!r}")


class NoPositionData(PitwallError):
    kind = ErrorKind.NoPositionData

    def __init__(self, session_key: Optional[str] = None):
        self.session_key = session_key
        super().__init__(f"No position data for session {session_key or 'unknown'}")


class UnresolvableColor(PitwallError):
    kind = ErrorKind.UnresolvableColor

    def __init__(self, driver_number: int, name_acronym: Optional[str] = None):
        self.driver_number = driver_number
        self.name_acronym = name_acronym
        super().__init__(
            f"No team colour or fallback colour for driver {driver_number} ({name_acronym})"
        )


class DriverNotFound(PitwallError, LookupError):
    kind = ErrorKind.DriverNotFound

    def __init__(self, driver_number: int):
        self.driver_number = driver_number
        super().__init__(f"Driver not found for driver number: {driver_number}")


class MissingCredential(PitwallError):
    kind = ErrorKind.MissingCredential

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} environment variable is not set")


class ActuationFailed(PitwallError):
    kind = ErrorKind.ActuationFailed

    def __init__(self, segments, message: str, status: Optional[int] = None):
        self.segments = list(segments)
        self.status = status
        super().__init__(
            f"Error calling Govee API for segments {self.segments}"
            f" (status {status}): {message}"
        )


class UpstreamFetchFailed(PitwallError):
    kind = ErrorKind.UpstreamFetchFailed

    def __init__(self, url: str, message: str, status: Optional[int] = None):
        self.url = url
        self.status = status
        super().__init__(f"Error fetching {url} (status {status}): {message}")
