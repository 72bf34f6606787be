from dataclasses import dataclass
from datetime import datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, model_validator

from ..integrations.accuweather.types import (
    CurrentConditions,
    FiveDayForecast,
    HourlyForecast,
    LocationInfo,
)

# The hourly strip shows every other hour of the first eight
HOURLY_INDICES = (1, 3, 5, 7)


@dataclass(frozen=True)
class ForecastDay:
    date: datetime
    icon: int
    max_temp: float
    min_temp: float


@dataclass(frozen=True)
class HourlySample:
    date_time: datetime
    temperature: float


class WeatherSnapshot(BaseModel):
    """
    The four payloads the widget renders. They are always fetched together
    for the same location key.
    """

    model_config = ConfigDict(frozen=True)

    five_day: FiveDayForecast
    current_day: list[CurrentConditions]
    location_info: LocationInfo
    hourly: list[HourlyForecast]

    @model_validator(mode="after")
    def check_renderable(self) -> Self:
        if not self.five_day.daily_forecasts:
            raise ValueError("five day forecast has no days")
        if not self.current_day:
            raise ValueError("current conditions are empty")
        if len(self.hourly) <= max(HOURLY_INDICES):
            raise ValueError(
                f"hourly forecast needs at least {max(HOURLY_INDICES) + 1} "
                f"entries, got {len(self.hourly)}"
            )
        return self

    @property
    def headline(self) -> str:
        return self.five_day.headline.text

    @property
    def current_temperature(self) -> float:
        return self.current_day[0].temperature.metric.value

    @property
    def days(self) -> list[ForecastDay]:
        return [
            ForecastDay(
                date=forecast.date,
                icon=forecast.day.icon,
                max_temp=forecast.temperature.maximum.value,
                min_temp=forecast.temperature.minimum.value,
            )
            for forecast in self.five_day.daily_forecasts
        ]

    @property
    def hourly_samples(self) -> list[HourlySample]:
        return [
            HourlySample(date_time=hour.date_time, temperature=hour.temperature.value)
            for hour in self.hourly
        ]
