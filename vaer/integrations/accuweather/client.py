import os
from typing import Any, Self

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from ..common import getenv, with_retry
from .exceptions import AccuWeatherAPIError, InvalidAPIKey, RateLimitExceeded
from .types import (
    CurrentConditions,
    ErrorResponse,
    FiveDayForecast,
    HourlyForecast,
    Location,
    LocationInfo,
)

logger = structlog.get_logger()

API_URL = "https://dataservice.accuweather.com"
DEFAULT_LANGUAGE = "en-us"
TIMEOUT_SECONDS = 10.0

LOCATION = TypeAdapter(Location)
LOCATION_INFO = TypeAdapter(LocationInfo)
LOCATION_LIST = TypeAdapter(list[Location])
FIVE_DAY_FORECAST = TypeAdapter(FiveDayForecast)
CURRENT_CONDITIONS_LIST = TypeAdapter(list[CurrentConditions])
HOURLY_FORECAST_LIST = TypeAdapter(list[HourlyForecast])


class AccuWeatherClient:
    """
    A client for communicating with the AccuWeather API.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or getenv("ACCUWEATHER_API_KEY")
        self.language = language or os.getenv("ACCUWEATHER_LANGUAGE", DEFAULT_LANGUAGE)
        self.transport = transport
        self.client: httpx.AsyncClient | None = None

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    #############
    # Locations #
    #############

    async def geolocate(self, *, latitude: float, longitude: float) -> Location:
        """
        Find the city closest to the given coordinate.
        """
        return await self._get(
            "/locations/v1/cities/geoposition/search",
            params={"q": f"{latitude},{longitude}"},
            response_type=LOCATION,
        )

    async def location_info(self, key: str) -> LocationInfo:
        return await self._get(f"/locations/v1/{key}", response_type=LOCATION_INFO)

    async def city_search(self, query: str) -> list[Location]:
        """
        Autocomplete city names, used by the location picker.
        """
        return await self._get(
            "/locations/v1/cities/autocomplete",
            params={"q": query},
            response_type=LOCATION_LIST,
        )

    #############
    # Forecasts #
    #############

    async def five_day_forecast(self, key: str) -> FiveDayForecast:
        return await self._get(
            f"/forecasts/v1/daily/5day/{key}",
            params={"metric": "true"},
            response_type=FIVE_DAY_FORECAST,
        )

    async def current_day_forecast(self, key: str) -> list[CurrentConditions]:
        return await self._get(
            f"/currentconditions/v1/{key}", response_type=CURRENT_CONDITIONS_LIST
        )

    async def hourly_forecast(self, key: str) -> list[HourlyForecast]:
        return await self._get(
            f"/forecasts/v1/hourly/12hour/{key}",
            params={"metric": "true"},
            response_type=HOURLY_FORECAST_LIST,
        )

    ###################
    # Context manager #
    ###################

    async def __aenter__(self) -> Self:
        self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    ####################
    # Internal helpers #
    ####################

    def _get_client(self) -> httpx.AsyncClient:
        if not self.client:
            self.client = httpx.AsyncClient(
                base_url=API_URL, transport=self.transport, timeout=TIMEOUT_SECONDS
            )
        return self.client

    async def _get[T](
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
        response_type: TypeAdapter[T],
    ) -> T:
        client = self._get_client()
        request_params = {
            "apikey": self.api_key,
            "language": self.language,
            **(params or {}),
        }

        async def send() -> T:
            response = await client.get(path, params=request_params)
            return self._check_response(response, response_type)

        return await with_retry(send, operation_name=path)

    def _check_response[T](
        self, response: httpx.Response, response_type: TypeAdapter[T]
    ) -> T:
        if response.status_code == 401:
            raise InvalidAPIKey("AccuWeather rejected the API key")

        if response.status_code == 503 and _is_rate_limited(response):
            raise RateLimitExceeded("AccuWeather request allowance exceeded")

        if response.status_code >= 500:
            # Raises httpx.HTTPStatusError, which is retried
            response.raise_for_status()

        if response.status_code >= 400:
            error = _parse_error(response)
            logger.error(
                "AccuWeather request failed",
                status_code=response.status_code,
                code=error.code,
                message=error.message,
            )
            raise AccuWeatherAPIError(
                f"AccuWeather request failed: {response.status_code} "
                f"{error.message or ''}".strip()
            )

        try:
            return response_type.validate_json(response.text)
        except ValidationError as exc:
            raise AccuWeatherAPIError(
                f"Unexpected response from AccuWeather: {exc.error_count()} errors"
            ) from exc


def _parse_error(response: httpx.Response) -> ErrorResponse:
    try:
        return ErrorResponse.model_validate_json(response.text)
    except ValidationError:
        return ErrorResponse(Message=response.text[:200])


def _is_rate_limited(response: httpx.Response) -> bool:
    message = _parse_error(response).message or ""
    return "allowed number of requests has been exceeded" in message
