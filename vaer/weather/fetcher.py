import asyncio
from typing import Protocol

import httpx
import structlog
from pydantic import ValidationError

from ..exceptions import FetchFailure
from ..integrations.accuweather.types import (
    CurrentConditions,
    FiveDayForecast,
    HourlyForecast,
    LocationInfo,
)
from ..integrations.common import IntegrationAPIError
from ..utils import timed
from .types import WeatherSnapshot

logger = structlog.get_logger()

RETRIEVAL_ERRORS = (IntegrationAPIError, httpx.HTTPError)


class ForecastService(Protocol):
    async def five_day_forecast(self, key: str) -> FiveDayForecast: ...

    async def current_day_forecast(self, key: str) -> list[CurrentConditions]: ...

    async def location_info(self, key: str) -> LocationInfo: ...

    async def hourly_forecast(self, key: str) -> list[HourlyForecast]: ...


class WeatherDataFetcher:
    def __init__(self, service: ForecastService) -> None:
        self.service = service

    async def fetch(self, location_key: str) -> WeatherSnapshot:
        """
        Fetch all four parts of the snapshot concurrently. If any of them
        fails the others are cancelled and FetchFailure is raised, nothing
        is returned for the parts that did succeed.
        """

        try:
            with timed("Fetched weather snapshot", key=location_key):
                async with asyncio.TaskGroup() as tg:
                    five_day = tg.create_task(
                        self.service.five_day_forecast(location_key)
                    )
                    current_day = tg.create_task(
                        self.service.current_day_forecast(location_key)
                    )
                    location_info = tg.create_task(
                        self.service.location_info(location_key)
                    )
                    hourly = tg.create_task(self.service.hourly_forecast(location_key))
        except ExceptionGroup as group:
            matched, rest = group.split(RETRIEVAL_ERRORS)
            if rest is not None or matched is None:
                raise
            error = matched.exceptions[0]
            reason = str(error) or type(error).__name__
            logger.warning("Weather retrieval failed", key=location_key, error=reason)
            raise FetchFailure(location_key, reason) from group

        try:
            return WeatherSnapshot(
                five_day=five_day.result(),
                current_day=current_day.result(),
                location_info=location_info.result(),
                hourly=hourly.result(),
            )
        except ValidationError as exc:
            logger.warning("Incomplete weather data", key=location_key, error=str(exc))
            raise FetchFailure(location_key, "incomplete weather data") from exc
