"""Data model definitions: explicit boundaries between the location, fetch, summary and view layers."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class CityQuery:
    """Look up weather by city name."""

    city: str  # Free-form city name ("London", "Paris,FR")


@dataclass(frozen=True)
class CoordinatesQuery:
    """Look up weather by device position."""

    latitude: float  # Decimal degrees
    longitude: float  # Decimal degrees


# None means "nothing to fetch".
LocationQuery = CityQuery | CoordinatesQuery | None


@dataclass(frozen=True)
class WeatherSnapshot:
    """Normalized current weather for one location. Replaced whole, never mutated."""

    city: str
    country: str | None  # ISO country code from sys.country
    temperature: int  # °C, rounded
    feels_like: int  # °C, rounded
    temp_min: int  # °C, rounded
    temp_max: int  # °C, rounded
    humidity: float  # %
    wind_speed: int  # km/h, converted from m/s and rounded
    pressure: float  # hPa
    visibility: float | None  # Meters; upstream omits it for some stations
    sunrise: int  # Unix seconds
    sunset: int  # Unix seconds
    conditions: str = NOT_AVAILABLE  # Condition group ("Clouds", "Rain")
    icon: str | None = None  # Provider icon code ("04d")
    description: str | None = None  # Condition detail ("overcast clouds")
    timezone_offset: int | None = None  # Seconds east of UTC

    @property
    def icon_url(self) -> str | None:
        if not self.icon:
            return None
        return f"https://openweathermap.org/img/wn/{self.icon}@2x.png"


@dataclass(frozen=True)
class SummaryRequest:
    """Input to the summarization capability. Identity is the four-field tuple."""

    temperature: float  # °C
    humidity: float  # %
    wind_speed: float  # km/h
    conditions: str

    @classmethod
    def from_snapshot(cls, snapshot: WeatherSnapshot) -> "SummaryRequest":
        return cls(
            temperature=snapshot.temperature,
            humidity=snapshot.humidity,
            wind_speed=snapshot.wind_speed,
            conditions=snapshot.conditions,
        )


@dataclass(frozen=True)
class SummaryResult:
    summary: str


@dataclass(frozen=True)
class Notice:
    """Fire-and-forget advisory for the user."""

    level: Literal["info", "error"]
    title: str
    description: str


Notify = Callable[[Notice], None]


@dataclass
class ViewState:
    """Everything the view layer renders. Owned by a single WeatherSession."""

    loading: bool = False
    loading_ai_summary: bool = False
    snapshot: WeatherSnapshot | None = None
    search_text: str = ""
    summary: str | None = None  # AI summary for the current snapshot
