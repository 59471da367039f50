"""Tests for fetch orchestration, view state, and summary fan-out."""

import asyncio
import dataclasses
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from weatherverse.errors import ConfigurationError, NetworkError, NotFoundError
from weatherverse.mapping import map_weather_payload
from weatherverse.models import CityQuery, CoordinatesQuery, SummaryResult
from weatherverse.session import WeatherSession
from weatherverse.summary import FALLBACK_SUMMARY, SummaryRequester
from weatherverse.weather import WeatherClient


def _summarizer(reply: str = "Cool and cloudy.", error: Exception | None = None) -> MagicMock:
    summarizer = MagicMock()
    summarizer.summarize = AsyncMock(return_value=SummaryResult(reply), side_effect=error)
    return summarizer


def _client(snapshot=None, error: Exception | None = None) -> MagicMock:
    client = MagicMock(spec=WeatherClient)
    client.fetch = AsyncMock(return_value=snapshot, side_effect=error)
    return client


@pytest.fixture
def london(payload_factory):
    return map_weather_payload(payload_factory())


@pytest.fixture
def paris(payload_factory):
    return map_weather_payload(
        payload_factory(name="Paris", sys={"country": "FR"}, weather=[{"main": "Rain", "icon": "10d"}])
    )


class TestLoad:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_replaces_snapshot_and_summarizes(self, london, notices):
        summarizer = _summarizer()
        session = WeatherSession(_client(london), SummaryRequester(summarizer), notices.append)

        await session.load(CityQuery("London"))

        assert session.state.snapshot is london
        assert session.state.loading is False
        assert session.state.loading_ai_summary is True

        await session.settle()

        assert session.state.summary == "Cool and cloudy."
        assert session.state.loading_ai_summary is False
        request = summarizer.summarize.await_args.args[0]
        assert (request.temperature, request.humidity, request.wind_speed, request.conditions) == (
            15,
            77,
            15,
            "Clouds",
        )
        assert notices == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetch_issue_and_completion_logged_at_debug(self, london, caplog):
        session = WeatherSession(_client(london), SummaryRequester(_summarizer()))

        with caplog.at_level(logging.DEBUG, logger="weatherverse.session"):
            await session.load(CityQuery("London"))
            await session.settle()

        debug = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert "Fetch #1 issued for CityQuery(city='London')" in debug
        assert "Fetch #1 completed for London" in debug

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_loading_is_true_while_in_flight(self, gated_client, london):
        session = WeatherSession(gated_client, SummaryRequester(_summarizer()))

        task = asyncio.create_task(session.load(CityQuery("London")))
        await asyncio.sleep(0)
        assert session.state.loading is True

        gated_client.release(CityQuery("London"), london)
        await task
        assert session.state.loading is False
        await session.settle()

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, message",
        [
            (NotFoundError("City not found", 404), "City not found"),
            (NetworkError("connection refused"), "connection refused"),
            (ConfigurationError("OpenWeather API key not found."), "OpenWeather API key not found."),
            (KeyError("surprise"), "Could not retrieve weather data."),
        ],
    )
    async def test_failure_notifies_and_clears_loading(self, notices, error, message):
        session = WeatherSession(_client(error=error), SummaryRequester(_summarizer()), notices.append)

        await session.load(CityQuery("Atlantis"))

        assert session.state.loading is False
        assert session.state.loading_ai_summary is False
        assert len(notices) == 1
        assert notices[0].level == "error"
        assert notices[0].title == "Error fetching weather"
        assert notices[0].description == message

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_keeps_previous_snapshot(self, london, notices):
        client = _client(london)
        session = WeatherSession(client, SummaryRequester(_summarizer()), notices.append)
        await session.load(CityQuery("London"))
        await session.settle()

        client.fetch.side_effect = NotFoundError("City not found", 404)
        await session.load(CityQuery("Atlantis"))

        assert session.state.snapshot is london
        assert session.state.summary == "Cool and cloudy."
        assert session.state.loading is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_query_is_a_noop(self, notices):
        client = _client(None)
        session = WeatherSession(client, SummaryRequester(_summarizer()), notices.append)

        await session.load(None)

        assert session.state.snapshot is None
        assert session.state.loading is False
        assert session.state.loading_ai_summary is False
        assert notices == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_fetch_result_is_discarded(self, gated_client, london, paris):
        session = WeatherSession(gated_client, SummaryRequester(_summarizer()))

        slow = asyncio.create_task(session.load(CityQuery("London")))
        fast = asyncio.create_task(session.load(CityQuery("Paris")))
        await asyncio.sleep(0)

        gated_client.release(CityQuery("Paris"), paris)
        await fast
        assert session.state.snapshot is paris
        assert session.state.loading is True  # London still in flight

        gated_client.release(CityQuery("London"), london)
        await slow
        assert session.state.snapshot is paris
        assert session.state.loading is False
        await session.settle()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_fetch_error_is_not_surfaced(self, gated_client, paris, notices):
        session = WeatherSession(gated_client, SummaryRequester(_summarizer()), notices.append)

        slow = asyncio.create_task(session.load(CityQuery("Atlantis")))
        fast = asyncio.create_task(session.load(CityQuery("Paris")))
        await asyncio.sleep(0)
        gated_client.release(CityQuery("Paris"), paris)
        await fast
        gated_client.release(CityQuery("Atlantis"), NotFoundError("City not found", 404))
        await slow
        await session.settle()

        assert notices == []
        assert session.state.snapshot is paris


class TestSummaryFanOut:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_summarizer_failure_yields_fallback(self, london):
        session = WeatherSession(
            _client(london), SummaryRequester(_summarizer(error=RuntimeError("rejected")))
        )

        await session.load(CityQuery("London"))
        await session.settle()

        assert session.state.summary == FALLBACK_SUMMARY
        assert session.state.loading_ai_summary is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_summary_arriving_last_is_discarded(self, london, paris, gated_summarizer):
        client = _client(london)
        session = WeatherSession(client, SummaryRequester(gated_summarizer))

        await session.load(CityQuery("London"))
        await asyncio.sleep(0)
        client.fetch.return_value = paris
        await session.load(CityQuery("Paris"))
        await asyncio.sleep(0)

        gated_summarizer.release("Rain")
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert session.state.summary == "Summary for Rain"
        assert session.state.loading_ai_summary is False

        gated_summarizer.release("Clouds")
        await session.settle()
        assert session.state.summary == "Summary for Rain"
        assert session.state.loading_ai_summary is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_summary_arriving_first_keeps_flag_set(self, london, paris, gated_summarizer):
        client = _client(london)
        session = WeatherSession(client, SummaryRequester(gated_summarizer))

        await session.load(CityQuery("London"))
        client.fetch.return_value = paris
        await session.load(CityQuery("Paris"))
        await asyncio.sleep(0)

        gated_summarizer.release("Clouds")
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert session.state.summary is None
        assert session.state.loading_ai_summary is True

        gated_summarizer.release("Rain")
        await session.settle()
        assert session.state.summary == "Summary for Rain"
        assert session.state.loading_ai_summary is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_replacement_with_equal_data_still_refreshes(self, london):
        summarizer = _summarizer()
        session = WeatherSession(_client(london), SummaryRequester(summarizer))

        await session.load(CityQuery("London"))
        await session.settle()
        await session.load(CityQuery("London"))
        await session.settle()

        assert session.state.snapshot == london
        assert session.state.summary == "Cool and cloudy."
        # Second request served from the memo
        assert summarizer.summarize.await_count == 1


class TestSearch:
    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   "])
    async def test_blank_search_does_not_fetch(self, notices, text):
        client = _client(None)
        session = WeatherSession(client, SummaryRequester(_summarizer()), notices.append)

        await session.search(text)

        client.fetch.assert_not_awaited()
        assert [n.title for n in notices] == ["Empty search"]
        assert notices[0].level == "error"
        assert session.state.loading is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_fetches_stripped_city(self, london):
        client = _client(london)
        session = WeatherSession(client, SummaryRequester(_summarizer()))

        await session.search("  London ")
        await session.settle()

        client.fetch.assert_awaited_once_with(CityQuery("London"))
        assert session.state.search_text == "  London "


class TestStart:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unsupported_geolocation_fetches_london(self, london, notices):
        client = _client(london)
        session = WeatherSession(client, SummaryRequester(_summarizer()), notices.append)

        await session.start(None)
        await session.settle()

        client.fetch.assert_awaited_once_with(CityQuery("London"))
        assert [n.title for n in notices] == ["Geolocation Not Supported"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_granted_geolocation_fetches_coordinates(self, london, notices):
        geolocator = MagicMock()
        geolocator.supported = True
        geolocator.locate = AsyncMock(return_value=CoordinatesQuery(51.5, -0.12))
        client = _client(london)
        session = WeatherSession(client, SummaryRequester(_summarizer()), notices.append)

        await session.start(geolocator)
        await session.settle()

        client.fetch.assert_awaited_once_with(CoordinatesQuery(51.5, -0.12))
        assert [n.title for n in notices] == ["Location found!"]
        assert dataclasses.asdict(session.state.snapshot) == dataclasses.asdict(london)
