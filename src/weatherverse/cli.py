"""CLI entry point: print current weather and its AI summary once.

    uv run python -m weatherverse.cli London
    uv run python -m weatherverse.cli --lat 25.2 --lon 55.3
"""

import argparse
import asyncio
import sys

from weatherverse.config import Settings
from weatherverse.logging_config import setup_logging
from weatherverse.models import CoordinatesQuery, Notice, WeatherSnapshot
from weatherverse.session import WeatherSession
from weatherverse.summary import AnthropicSummarizer, SummaryRequester
from weatherverse.theme import classify
from weatherverse.weather import WeatherClient


def _print_notice(notice: Notice) -> None:
    print(f"[{notice.level}] {notice.title}: {notice.description}", file=sys.stderr)


def format_snapshot(snapshot: WeatherSnapshot) -> str:
    place = snapshot.city + (f", {snapshot.country}" if snapshot.country else "")
    return "\n".join(
        [
            f"{place}: {snapshot.conditions} ({classify(snapshot).value})",
            f"  {snapshot.temperature}°C, feels like {snapshot.feels_like}°C"
            f" (min {snapshot.temp_min}° / max {snapshot.temp_max}°)",
            f"  humidity {snapshot.humidity:g}%, wind {snapshot.wind_speed} km/h,"
            f" pressure {snapshot.pressure:g} hPa",
        ]
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="weatherverse", description=__doc__.splitlines()[0])
    parser.add_argument("city", nargs="?", default="", help="City name to look up")
    parser.add_argument("--lat", type=float, help="Latitude (with --lon)")
    parser.add_argument("--lon", type=float, help="Longitude (with --lat)")
    args = parser.parse_args(argv)
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")
    return args


async def _main(args: argparse.Namespace, session: WeatherSession) -> int:
    if args.lat is not None:
        await session.load(CoordinatesQuery(args.lat, args.lon))
    else:
        await session.search(args.city)
    await session.settle()

    snapshot = session.state.snapshot
    if snapshot is None:
        return 1
    print(format_snapshot(snapshot))
    print()
    print(session.state.summary)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    session = WeatherSession(
        client=WeatherClient(settings),
        summaries=SummaryRequester(AnthropicSummarizer(settings)),
        notify=_print_notice,
    )
    return asyncio.run(_main(args, session))


if __name__ == "__main__":
    sys.exit(main())
