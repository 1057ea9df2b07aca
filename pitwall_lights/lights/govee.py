import asyncio
import uuid
from typing import Any, Dict, List, Optional

import aiohttp
from loguru import logger
from pydantic import ValidationError

from pitwall_lights.core.config import (
    GOVEE_API_KEY,
    GOVEE_API_URL,
    GOVEE_DEVICE_ID,
    GOVEE_SKU,
    REQUEST_TIMEOUT_SECONDS,
)
from pitwall_lights.core.errors import ActuationFailed, MissingCredential
from pitwall_lights.data.models import (
    Capability,
    ControlPayload,
    ControlRequest,
    ControlResponse,
    SegmentColorValue,
)
from pitwall_lights.lights.colors import color_to_hex


def create_control_request(
    segments: List[int], color: int, device: str, sku: str = GOVEE_SKU
) -> ControlRequest:
    return ControlRequest(
        requestId=str(uuid.uuid4()),
        payload=ControlPayload(
            sku=sku,
            device=device,
            capability=Capability(
                value=SegmentColorValue(segment=list(segments), rgb=color)
            ),
        ),
    )


class GoveeClient:
    """
    Minimal client for the Govee device control endpoint.

    Credentials are checked when the client is built, so a missing key
    fails the run before any request goes out.
    """

    def __init__(
        self,
        api_key: Optional[str] = GOVEE_API_KEY,
        device_id: Optional[str] = GOVEE_DEVICE_ID,
        sku: str = GOVEE_SKU,
        url: str = GOVEE_API_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        if not api_key:
            raise MissingCredential("GOVEE_API_KEY")
        if not device_id:
            raise MissingCredential("GOVEE_DEVICE_ID")
        self.api_key = api_key
        self.device_id = device_id
        self.sku = sku
        self.url = url
        self.timeout = timeout

    @property
    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "Govee-API-Key": self.api_key}

    async def set_segment_color(
        self,
        segments: List[int],
        color: int,
        session: aiohttp.ClientSession = None,
    ) -> Dict[str, Any]:
        """Set a list of segments to one RGB colour.

        Args:
            segments: Segment indices on the strip
            color: 24-bit RGB integer
            session: Optional aiohttp session to reuse

        Returns:
            Dict[str, Any]: Decoded response body

        Raises:
            ActuationFailed: on a non-200 status, an unreadable body or
                a response code other than 200
        """
        request = create_control_request(segments, color, self.device_id, self.sku)
        logger.debug(
            f"Setting color for segments: {segments} to {color_to_hex(color)}"
        )

        should_close_session = False
        if session is None:
            session = aiohttp.ClientSession()
            should_close_session = True

        try:
            async with session.post(
                self.url,
                headers=self.headers,
                json=request.model_dump(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise ActuationFailed(segments, response.reason, response.status)
                try:
                    data = await response.json()
                    result = ControlResponse.model_validate(data)
                except (aiohttp.ContentTypeError, ValueError, ValidationError) as e:
                    raise ActuationFailed(
                        segments, f"malformed response: {e}", response.status
                    ) from e
        except asyncio.TimeoutError as e:
            raise ActuationFailed(segments, f"timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise ActuationFailed(segments, str(e)) from e
        finally:
            if should_close_session:
                await session.close()

        if result.code != 200:
            raise ActuationFailed(segments, result.message or "unknown error", result.code)

        logger.debug(
            f"Successfully set color for segments: {segments} to {color_to_hex(color)}"
        )
        return data
