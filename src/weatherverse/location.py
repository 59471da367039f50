"""Startup location resolution as an ordered chain of strategies.

Each strategy either produces a LocationResolution or returns None to hand
over to the next one. The default chain is:

1. device position (browser geolocation)
2. fallback city when geolocation was denied
3. fallback city when geolocation is unsupported
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from weatherverse import messages
from weatherverse.config import DENIED_FALLBACK_CITY, UNSUPPORTED_FALLBACK_CITY
from weatherverse.errors import GeolocationDenied, GeolocationUnsupported
from weatherverse.models import CityQuery, CoordinatesQuery, LocationQuery, Notice

logger = logging.getLogger(__name__)


class Geolocator(Protocol):
    """Device position capability."""

    @property
    def supported(self) -> bool: ...

    async def locate(self) -> CoordinatesQuery:
        """Return the current position.

        Raises:
            GeolocationDenied: Permission refused or position unavailable.
            GeolocationUnsupported: The capability disappeared mid-request.
        """
        ...


class BrowserGeolocator:
    """Geolocator over a result already read from the browser.

    ``position`` is what ``streamlit_js_eval.get_geolocation()`` returned:
    ``{"coords": {"latitude": ..., "longitude": ...}, ...}`` on success or
    ``{"error": {"code": ..., "message": ...}}`` on failure.
    """

    def __init__(self, supported: bool, position: dict | None = None) -> None:
        self._supported = supported
        self._position = position or {}

    @property
    def supported(self) -> bool:
        return self._supported

    async def locate(self) -> CoordinatesQuery:
        if not self._supported:
            raise GeolocationUnsupported("navigator.geolocation is unavailable")
        error = self._position.get("error")
        coords = self._position.get("coords")
        if error or not coords:
            message = error.get("message") if isinstance(error, dict) else None
            raise GeolocationDenied(message or "Position unavailable")
        try:
            return CoordinatesQuery(float(coords["latitude"]), float(coords["longitude"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeolocationDenied(f"Malformed position: {coords!r}") from e


class GeolocationStatus(Enum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


@dataclass
class ResolutionContext:
    """Shared between strategies of one resolution run."""

    geolocator: Geolocator | None
    geolocation: GeolocationStatus = GeolocationStatus.UNKNOWN


@dataclass(frozen=True)
class LocationResolution:
    query: LocationQuery
    notice: Notice | None = None


Strategy = Callable[[ResolutionContext], Awaitable[LocationResolution | None]]


async def device_position(ctx: ResolutionContext) -> LocationResolution | None:
    geolocator = ctx.geolocator
    if geolocator is None or not geolocator.supported:
        ctx.geolocation = GeolocationStatus.UNSUPPORTED
        return None
    try:
        position = await geolocator.locate()
    except GeolocationDenied as e:
        logger.warning("Geolocation error: %s", e)
        ctx.geolocation = GeolocationStatus.DENIED
        return None
    except GeolocationUnsupported:
        ctx.geolocation = GeolocationStatus.UNSUPPORTED
        return None
    ctx.geolocation = GeolocationStatus.GRANTED
    return LocationResolution(position, messages.location_found())


def fallback_city(city: str, when: GeolocationStatus, notice: Callable[[str], Notice]) -> Strategy:
    """Build a strategy that answers with city only when geolocation ended in `when`."""

    async def strategy(ctx: ResolutionContext) -> LocationResolution | None:
        if ctx.geolocation is not when:
            return None
        logger.info("Geolocation %s, falling back to %s", when.value, city)
        return LocationResolution(CityQuery(city), notice(city))

    strategy.__name__ = f"fallback_{when.value}"
    return strategy


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    device_position,
    fallback_city(DENIED_FALLBACK_CITY, GeolocationStatus.DENIED, messages.location_denied),
    fallback_city(
        UNSUPPORTED_FALLBACK_CITY, GeolocationStatus.UNSUPPORTED, messages.location_unsupported
    ),
)


async def resolve_location(
    geolocator: Geolocator | None,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
) -> LocationResolution:
    """Run strategies in order and return the first resolution.

    An exhausted chain yields a resolution with no query.
    """
    ctx = ResolutionContext(geolocator=geolocator)
    for strategy in strategies:
        resolution = await strategy(ctx)
        if resolution is not None:
            logger.debug("Location resolved by %s", getattr(strategy, "__name__", strategy))
            return resolution
    return LocationResolution(None)


def search_query(text: str) -> CityQuery | None:
    """Validate free-text search input. Blank input yields None."""
    city = text.strip()
    return CityQuery(city) if city else None
