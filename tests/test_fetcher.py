import httpx
import pytest

from vaer.exceptions import FetchFailure
from vaer.integrations.accuweather.exceptions import (
    AccuWeatherAPIError,
    RateLimitExceeded,
)
from vaer.weather.fetcher import WeatherDataFetcher

pytestmark = pytest.mark.asyncio

OPERATIONS = [
    "five_day_forecast",
    "current_day_forecast",
    "location_info",
    "hourly_forecast",
]


async def test_fetch(service) -> None:
    snapshot = await WeatherDataFetcher(service).fetch("274663")

    assert sorted(operation for operation, _ in service.calls) == sorted(OPERATIONS)
    assert {key for _, key in service.calls} == {"274663"}
    assert snapshot.location_info.localized_name == "Warsaw"
    assert snapshot.headline == "Rain on Tuesday"
    assert snapshot.current_temperature == 5.5
    assert len(snapshot.days) == 5
    assert len(snapshot.hourly_samples) == 8


@pytest.mark.parametrize("operation", OPERATIONS)
async def test_any_failure_fails_the_fetch(service, operation: str) -> None:
    service.failures[operation] = AccuWeatherAPIError("Service unavailable")

    with pytest.raises(FetchFailure) as exc_info:
        await WeatherDataFetcher(service).fetch("274663")

    assert exc_info.value.location_key == "274663"
    assert exc_info.value.reason == "Service unavailable"


async def test_transport_error(service) -> None:
    service.failures["location_info"] = httpx.ConnectError("Connection refused")

    with pytest.raises(FetchFailure, match="Connection refused"):
        await WeatherDataFetcher(service).fetch("274663")


async def test_rate_limited(service) -> None:
    service.failures["hourly_forecast"] = RateLimitExceeded()

    with pytest.raises(FetchFailure) as exc_info:
        await WeatherDataFetcher(service).fetch("274663")

    assert exc_info.value.reason


async def test_short_hourly_forecast(service) -> None:
    service.hourly_hours = 7

    with pytest.raises(FetchFailure, match="incomplete weather data"):
        await WeatherDataFetcher(service).fetch("274663")


async def test_unexpected_errors_propagate(service) -> None:
    service.failures["five_day_forecast"] = KeyError("oops")

    with pytest.raises(ExceptionGroup) as exc_info:
        await WeatherDataFetcher(service).fetch("274663")

    assert exc_info.group_contains(KeyError)
