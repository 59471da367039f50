"""User-facing strings and notice builders."""

from weatherverse.models import Notice

_STRINGS: dict[str, str] = {
    "page_title": "WeatherVerse",
    "tagline": "Your universe of weather, summarized by AI",
    "search_placeholder": "Search for a city...",
    "btn_search": "Search",
    "placeholder": "Looking for your location...",
    "loading_weather": "Fetching weather",
    "loading_summary": "Asking the forecaster",
    "summary_heading": "AI Weather Summary",
    "summary_fallback": "Could not generate a weather summary at this time. Please try again later.",
    "location_found_title": "Location found!",
    "location_found_body": "Fetching your local weather.",
    "location_denied_title": "Location Access Denied",
    "location_denied_body": "Showing weather for {city}. Enable location or search for a city.",
    "location_unsupported_title": "Geolocation Not Supported",
    "location_unsupported_body": "Showing weather for {city}. Please search for a city.",
    "empty_search_title": "Empty search",
    "empty_search_body": "Please enter a city name.",
    "fetch_error_title": "Error fetching weather",
    "fetch_error_generic": "Could not retrieve weather data.",
    "city_not_found": "City not found",
    "missing_api_key": "OpenWeather API key not found.",
    "label_feels_like": "Feels like",
    "label_min_max": "Min / Max",
    "label_humidity": "Humidity",
    "label_wind": "Wind",
    "label_pressure": "Pressure",
    "label_visibility": "Visibility",
    "label_sunrise": "Sunrise",
    "label_sunset": "Sunset",
}


def t(key: str, **kwargs: object) -> str:
    """Return the string for key, formatted with kwargs.

    Falls back to the key itself if not found.
    """
    text = _STRINGS.get(key)
    if text is None:
        return key
    return text.format(**kwargs) if kwargs else text


def location_found() -> Notice:
    return Notice("info", t("location_found_title"), t("location_found_body"))


def location_denied(city: str) -> Notice:
    return Notice("info", t("location_denied_title"), t("location_denied_body", city=city))


def location_unsupported(city: str) -> Notice:
    return Notice(
        "info", t("location_unsupported_title"), t("location_unsupported_body", city=city)
    )


def empty_search() -> Notice:
    return Notice("error", t("empty_search_title"), t("empty_search_body"))


def fetch_error(reason: str) -> Notice:
    return Notice("error", t("fetch_error_title"), reason or t("fetch_error_generic"))
