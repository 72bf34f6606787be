from ..common.exceptions import IntegrationAPIError


class AccuWeatherAPIError(IntegrationAPIError):
    """AccuWeather-specific API error."""

    pass


class InvalidAPIKey(AccuWeatherAPIError):
    """The API key was rejected."""

    pass


class RateLimitExceeded(AccuWeatherAPIError):
    """The daily request allowance for the API key is used up."""

    pass
