from pydantic import BaseModel, ConfigDict, Field


class PersistedLocation(BaseModel):
    """The location the widget shows, as saved in the location store."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    label: str = Field(min_length=1)


class LocationCandidate(BaseModel):
    """One row of a city search result."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str


class GeoCoordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


DEFAULT_LOCATION = PersistedLocation(key="274663", label="Warsaw, Masovia, Poland")
