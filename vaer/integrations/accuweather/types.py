"""
Response models for the AccuWeather API.

Only the fields the widget reads are declared, everything else in the
payloads is ignored.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class NamedArea(BaseModel):
    localized_name: str = Field(alias="LocalizedName")


class Location(BaseModel):
    """A city, as returned from the geoposition and autocomplete endpoints."""

    key: str = Field(alias="Key")
    localized_name: str = Field(alias="LocalizedName")
    administrative_area: NamedArea = Field(alias="AdministrativeArea")
    country: NamedArea = Field(alias="Country")

    @property
    def label(self) -> str:
        return (
            f"{self.localized_name}, "
            f"{self.administrative_area.localized_name}, "
            f"{self.country.localized_name}"
        )


class LocationInfo(BaseModel):
    key: str | None = Field(default=None, alias="Key")
    localized_name: str = Field(alias="LocalizedName")


class Measurement(BaseModel):
    value: float = Field(alias="Value")
    unit: str | None = Field(default=None, alias="Unit")


class TemperatureRange(BaseModel):
    minimum: Measurement = Field(alias="Minimum")
    maximum: Measurement = Field(alias="Maximum")


class DayPart(BaseModel):
    icon: int = Field(alias="Icon")
    icon_phrase: str | None = Field(default=None, alias="IconPhrase")


class DailyForecast(BaseModel):
    date: datetime = Field(alias="Date")
    temperature: TemperatureRange = Field(alias="Temperature")
    day: DayPart = Field(alias="Day")


class Headline(BaseModel):
    text: str = Field(alias="Text")


class FiveDayForecast(BaseModel):
    headline: Headline = Field(alias="Headline")
    daily_forecasts: list[DailyForecast] = Field(alias="DailyForecasts")


class MetricTemperature(BaseModel):
    metric: Measurement = Field(alias="Metric")


class CurrentConditions(BaseModel):
    temperature: MetricTemperature = Field(alias="Temperature")
    weather_text: str | None = Field(default=None, alias="WeatherText")
    weather_icon: int | None = Field(default=None, alias="WeatherIcon")


class HourlyForecast(BaseModel):
    date_time: datetime = Field(alias="DateTime")
    temperature: Measurement = Field(alias="Temperature")
    weather_icon: int | None = Field(default=None, alias="WeatherIcon")


class ErrorResponse(BaseModel):
    code: str | None = Field(default=None, alias="Code")
    message: str | None = Field(default=None, alias="Message")
