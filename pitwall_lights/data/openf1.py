from typing import Any, List

import requests
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from pitwall_lights.core.config import (
    OPENF1_BASE_URL,
    OPENF1_SESSION_KEY,
    REQUEST_TIMEOUT_SECONDS,
)
from pitwall_lights.core.errors import UpstreamFetchFailed
from pitwall_lights.data.models import (
    Driver,
    Position,
    drivers_adapter,
    positions_adapter,
)


class OpenF1Client:
    """Read-only client for the OpenF1 REST API"""

    def __init__(
        self,
        base_url: str = OPENF1_BASE_URL,
        session_key: str = OPENF1_SESSION_KEY,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.session_key = session_key
        self.timeout = timeout

    def _get(self, resource: str, adapter: TypeAdapter) -> List[Any]:
        url = f"{self.base_url}/{resource}"
        try:
            response = requests.get(
                url, params={"session_key": self.session_key}, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise UpstreamFetchFailed(url, str(e)) from e

        if not response.ok:
            raise UpstreamFetchFailed(url, response.reason, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamFetchFailed(url, "response is not JSON", response.status_code) from e

        if not isinstance(data, list):
            raise UpstreamFetchFailed(url, "expected a JSON array", response.status_code)

        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise UpstreamFetchFailed(
                url, f"invalid records: {e.error_count()} errors", response.status_code
            ) from e

    def get_positions(self) -> List[Position]:
        """Fetch every position record of the selected session.

        Returns:
            List[Position]: Raw records, possibly several per driver
        """
        positions = self._get("position", positions_adapter)
        logger.debug(f"Fetched {len(positions)} position records")
        return positions

    def get_drivers(self) -> List[Driver]:
        """Fetch the driver roster of the selected session."""
        drivers = self._get("drivers", drivers_adapter)
        logger.debug(f"Fetched {len(drivers)} drivers")
        return drivers
