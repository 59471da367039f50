"""Pytest configuration and fixtures."""

import asyncio
import copy
from typing import Any

import httpx
import pytest

from weatherverse.config import Settings
from weatherverse.models import Notice, SummaryRequest, SummaryResult

# Trimmed OpenWeather /data/2.5/weather response for London
LONDON_PAYLOAD: dict[str, Any] = {
    "coord": {"lon": -0.1257, "lat": 51.5085},
    "weather": [{"id": 804, "main": "Clouds", "description": "overcast clouds", "icon": "04d"}],
    "base": "stations",
    "main": {
        "temp": 14.62,
        "feels_like": 14.05,
        "temp_min": 13.38,
        "temp_max": 15.71,
        "pressure": 1012,
        "humidity": 77,
    },
    "visibility": 10000,
    "wind": {"speed": 4.12, "deg": 240},
    "clouds": {"all": 100},
    "dt": 1760860800,
    "sys": {"type": 2, "id": 2075535, "country": "GB", "sunrise": 1760855400, "sunset": 1760893200},
    "timezone": 3600,
    "id": 2643743,
    "name": "London",
    "cod": 200,
}


@pytest.fixture
def settings() -> Settings:
    """Settings with a dummy OpenWeather key and no Anthropic key."""
    return Settings(
        openweather_api_key="test-key",
        openweather_base_url="https://weather.test",
        timeout_s=1.0,
        anthropic_api_key=None,
    )


@pytest.fixture
def payload_factory():
    """Factory for provider payloads based on the London sample."""

    def create_payload(**overrides: Any) -> dict[str, Any]:
        payload = copy.deepcopy(LONDON_PAYLOAD)
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(payload.get(key), dict):
                payload[key].update(value)
            else:
                payload[key] = value
        return payload

    return create_payload


@pytest.fixture
def notices() -> list[Notice]:
    return []


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def transport_factory():
    """Build a RecordingTransport answering with a fixed status and JSON body."""

    def create_transport(status_code: int = 200, json: Any = None, **kwargs: Any):
        return RecordingTransport(
            lambda request: httpx.Response(status_code, json=json, **kwargs)
        )

    return create_transport


class GatedClient:
    """Stand-in WeatherClient whose fetches complete only when released."""

    def __init__(self) -> None:
        self._gates: dict[Any, asyncio.Event] = {}
        self._results: dict[Any, Any] = {}
        self.queries: list[Any] = []

    def _gate(self, query: Any) -> asyncio.Event:
        return self._gates.setdefault(query, asyncio.Event())

    def release(self, query: Any, result: Any) -> None:
        self._results[query] = result
        self._gate(query).set()

    async def fetch(self, query: Any):
        self.queries.append(query)
        await self._gate(query).wait()
        result = self._results[query]
        if isinstance(result, BaseException):
            raise result
        return result


class GatedSummarizer:
    """Summarizer whose replies complete only when released, keyed by conditions."""

    def __init__(self) -> None:
        self._gates: dict[str, asyncio.Event] = {}
        self.requests: list[SummaryRequest] = []

    def _gate(self, conditions: str) -> asyncio.Event:
        return self._gates.setdefault(conditions, asyncio.Event())

    def release(self, conditions: str) -> None:
        self._gate(conditions).set()

    async def summarize(self, request: SummaryRequest) -> SummaryResult:
        self.requests.append(request)
        await self._gate(request.conditions).wait()
        return SummaryResult(summary=f"Summary for {request.conditions}")


@pytest.fixture
def gated_client() -> GatedClient:
    return GatedClient()


@pytest.fixture
def gated_summarizer() -> GatedSummarizer:
    return GatedSummarizer()


@pytest.fixture
def handler_transport():
    """Build a RecordingTransport around a request handler."""
    return RecordingTransport
