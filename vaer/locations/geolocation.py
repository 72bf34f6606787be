"""
Find out roughly where the widget is running.

There is no browser to ask, so the position is looked up from the public IP
address. The lookup is a single request that either yields coordinates or
fails with GeolocationError.
"""

import os
from typing import Protocol

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from ..exceptions import GeolocationError
from .types import GeoCoordinates

logger = structlog.get_logger()

IP_LOOKUP_URL = "https://ipapi.co/json/"
TIMEOUT_SECONDS = 10.0


class Geolocator(Protocol):
    async def locate(self) -> GeoCoordinates: ...


class IPLookupResponse(BaseModel):
    error: bool = False
    reason: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class IPGeolocator:
    def __init__(
        self,
        *,
        url: str = IP_LOOKUP_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.transport = transport

    async def locate(self) -> GeoCoordinates:
        async with httpx.AsyncClient(
            transport=self.transport, timeout=TIMEOUT_SECONDS
        ) as client:
            try:
                response = await client.get(self.url)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise GeolocationError(f"IP lookup failed: {exc}") from exc

        try:
            result = IPLookupResponse.model_validate_json(response.text)
        except ValidationError as exc:
            raise GeolocationError("Unexpected response from IP lookup") from exc

        if result.error or result.latitude is None or result.longitude is None:
            raise GeolocationError(
                f"Position unavailable: {result.reason or 'no coordinates'}"
            )

        try:
            coordinates = GeoCoordinates(
                latitude=result.latitude, longitude=result.longitude
            )
        except ValidationError as exc:
            raise GeolocationError(
                f"Position out of range: {result.latitude},{result.longitude}"
            ) from exc

        logger.debug(
            "Located by IP address",
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
        )
        return coordinates


def get_geolocator() -> Geolocator | None:
    """
    The configured geolocation capability, or None when it is turned off
    with VAER_GEOLOCATION=off.
    """

    mode = os.getenv("VAER_GEOLOCATION", "ip").lower()
    if mode == "off":
        return None
    if mode == "ip":
        return IPGeolocator()

    raise ValueError(f"Unknown geolocation mode: {mode}")
