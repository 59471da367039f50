"""Provider payload → WeatherSnapshot conversion."""

import math
from typing import Any

from weatherverse.errors import MalformedPayloadError
from weatherverse.models import NOT_AVAILABLE, WeatherSnapshot

# m/s → km/h
_MS_TO_KMH = 3.6


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +inf (2.5 → 3, -2.5 → -2)."""
    return math.floor(value + 0.5)


def _number(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedPayloadError(f"Weather data field '{field}' is not a number")
    if not math.isfinite(value):
        raise MalformedPayloadError(f"Weather data field '{field}' is not finite")
    return value


def _optional_number(value: Any, field: str) -> float | None:
    return None if value is None else _number(value, field)


def _string(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise MalformedPayloadError(f"Weather data field '{field}' is not a string")
    return value


def _label(value: Any) -> str | None:
    """Optional display label. Anything but a non-empty string counts as absent."""
    return value if isinstance(value, str) and value else None


def map_weather_payload(payload: dict[str, Any]) -> WeatherSnapshot:
    """Convert an OpenWeather current-weather response into a WeatherSnapshot.

    Temperatures are rounded to whole degrees and wind speed is converted
    from m/s to km/h before rounding. Humidity, pressure, visibility and
    sunrise/sunset pass through unchanged. The condition label comes from
    the first ``weather`` entry and defaults to "N/A".

    Args:
        payload: Decoded JSON body of a successful response.

    Returns:
        The mapped snapshot.

    Raises:
        MalformedPayloadError: A required field is missing, or is not a finite
            number or a string where one is expected.
    """
    try:
        main = payload["main"]
        wind = payload["wind"]
        sys_ = payload["sys"]
        city = _string(payload["name"], "name")
        temperature = _number(main["temp"], "main.temp")
        feels_like = _number(main["feels_like"], "main.feels_like")
        temp_min = _number(main["temp_min"], "main.temp_min")
        temp_max = _number(main["temp_max"], "main.temp_max")
        humidity = _number(main["humidity"], "main.humidity")
        pressure = _number(main["pressure"], "main.pressure")
        wind_speed = _number(wind["speed"], "wind.speed")
        sunrise = _number(sys_["sunrise"], "sys.sunrise")
        sunset = _number(sys_["sunset"], "sys.sunset")
    except (KeyError, TypeError) as e:
        raise MalformedPayloadError(f"Weather data is missing {e}") from e

    weather = payload.get("weather")
    first = weather[0] if isinstance(weather, list) and weather else None
    if not isinstance(first, dict):
        first = {}
    timezone_offset = _optional_number(payload.get("timezone"), "timezone")

    return WeatherSnapshot(
        city=city,
        country=_label(sys_.get("country")),
        temperature=round_half_up(temperature),
        feels_like=round_half_up(feels_like),
        temp_min=round_half_up(temp_min),
        temp_max=round_half_up(temp_max),
        humidity=humidity,
        wind_speed=round_half_up(wind_speed * _MS_TO_KMH),
        pressure=pressure,
        visibility=_optional_number(payload.get("visibility"), "visibility"),
        sunrise=int(sunrise),
        sunset=int(sunset),
        conditions=_label(first.get("main")) or NOT_AVAILABLE,
        icon=_label(first.get("icon")),
        description=_label(first.get("description")),
        timezone_offset=None if timezone_offset is None else int(timezone_offset),
    )
