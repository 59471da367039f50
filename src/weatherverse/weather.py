"""OpenWeather current-weather client."""

import logging
from typing import Any

import httpx

from weatherverse.config import Settings
from weatherverse.errors import (
    ConfigurationError,
    MalformedPayloadError,
    NetworkError,
    NotFoundError,
    ProviderError,
)
from weatherverse.mapping import map_weather_payload
from weatherverse.messages import t
from weatherverse.models import CityQuery, CoordinatesQuery, LocationQuery, WeatherSnapshot

logger = logging.getLogger(__name__)

_CURRENT_WEATHER_PATH = "/data/2.5/weather"


def capitalize_first(message: str) -> str:
    """Upper-case the first character and leave the rest untouched."""
    return message[:1].upper() + message[1:]


def _error_message(response: httpx.Response) -> str:
    """Pull the provider's ``message`` out of an error body."""
    try:
        body = response.json()
    except ValueError:
        return t("city_not_found")
    message = body.get("message") if isinstance(body, dict) else None
    if not isinstance(message, str) or not message:
        return t("city_not_found")
    return capitalize_first(message)


def build_params(query: LocationQuery, api_key: str) -> dict[str, Any] | None:
    """Query parameters for a location, or None when there is nothing to look up."""
    params: dict[str, Any] = {"appid": api_key, "units": "metric"}
    if isinstance(query, CityQuery) and query.city:
        params["q"] = query.city
    elif (
        isinstance(query, CoordinatesQuery)
        and query.latitude is not None
        and query.longitude is not None
    ):
        params["lat"] = query.latitude
        params["lon"] = query.longitude
    else:
        return None
    return params


class WeatherClient:
    """Fetches current weather for a LocationQuery and maps it to a WeatherSnapshot."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.settings.openweather_base_url}{_CURRENT_WEATHER_PATH}"

    async def _get(self, params: dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.settings.timeout_s, transport=self._transport
        ) as client:
            return await client.get(self.url, params=params)

    async def fetch(self, query: LocationQuery) -> WeatherSnapshot | None:
        """Fetch and map current weather.

        Args:
            query: City name or coordinates. None is a no-op.

        Returns:
            The mapped snapshot, or None when the query names no location.

        Raises:
            ConfigurationError: OPENWEATHER_API_KEY is not set.
            NotFoundError: The provider answered 404.
            ProviderError: The provider answered with another non-success status.
            NetworkError: The request could not complete.
            MalformedPayloadError: The success body could not be mapped.
        """
        if not self.settings.openweather_api_key:
            raise ConfigurationError(t("missing_api_key"))

        params = build_params(query, self.settings.openweather_api_key)
        if params is None:
            logger.debug("No location to fetch, skipping")
            return None

        try:
            response = await self._get(params)
        except httpx.HTTPError as e:
            raise NetworkError(str(e) or t("fetch_error_generic")) from e

        if not response.is_success:
            message = _error_message(response)
            if response.status_code == 404:
                raise NotFoundError(message, response.status_code)
            raise ProviderError(message, response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedPayloadError(t("fetch_error_generic")) from e
        return map_weather_payload(payload)
