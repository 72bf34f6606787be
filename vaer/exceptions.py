"""
Errors raised by the weather widget core.

All of them are caught at the boundary of the operation that produced them
and turned into a user notification, see WeatherWidget and
SettingsController.
"""


class WeatherWidgetError(Exception):
    """Base exception for the weather widget."""

    pass


class GeolocationError(WeatherWidgetError):
    """The current position could not be determined."""

    pass


class FetchFailure(WeatherWidgetError):
    """One of the weather retrievals for a location failed."""

    def __init__(self, location_key: str, reason: str) -> None:
        super().__init__(f"Failed to fetch weather for {location_key}: {reason}")
        self.location_key = location_key
        self.reason = reason


class SearchFailure(WeatherWidgetError):
    """The city search lookup failed."""

    def __init__(self, query: str, reason: str) -> None:
        super().__init__(f"Failed to search for {query!r}: {reason}")
        self.query = query
        self.reason = reason


class InvalidLocationSelection(WeatherWidgetError):
    """The selected label does not match any search result."""

    def __init__(self, label: str) -> None:
        super().__init__(f"{label!r} does not match any location from the search")
        self.label = label
