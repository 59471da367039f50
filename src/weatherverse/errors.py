"""Exceptions raised along the location, fetch, and summary paths."""


class WeatherError(Exception):
    """Fetch-path failure. The message is shown to the user as-is."""


class ConfigurationError(WeatherError):
    """Required configuration (the OpenWeather API key) is missing."""


class ProviderError(WeatherError):
    """The weather provider answered with a non-success status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ProviderError):
    """The provider does not know the requested location."""


class NetworkError(WeatherError):
    """The request could not complete."""


class MalformedPayloadError(WeatherError):
    """The provider response is missing required fields or holds non-finite numbers."""


class GeolocationDenied(Exception):
    """The user or the browser refused to share a position."""


class GeolocationUnsupported(Exception):
    """No geolocation capability is available."""


class SummarizationUnavailable(Exception):
    """The summarization capability is not configured."""
