"""Weather fetch orchestration and AI summary fan-out for one view."""

import asyncio
import logging
from collections.abc import Sequence

from weatherverse import messages
from weatherverse.errors import WeatherError
from weatherverse.location import (
    DEFAULT_STRATEGIES,
    Geolocator,
    Strategy,
    resolve_location,
    search_query,
)
from weatherverse.models import (
    LocationQuery,
    Notice,
    Notify,
    SummaryRequest,
    ViewState,
    WeatherSnapshot,
)
from weatherverse.summary import SummaryRequester
from weatherverse.weather import WeatherClient

logger = logging.getLogger(__name__)


def _drop_notice(notice: Notice) -> None:
    logger.info("%s: %s", notice.title, notice.description)


class WeatherSession:
    """Owns a ViewState and drives every change to it.

    Fetch results are applied only when they belong to the most recently
    issued request. Summary results are applied only when they belong to the
    snapshot currently shown. Older results are dropped, whatever order they
    complete in.
    """

    def __init__(
        self,
        client: WeatherClient,
        summaries: SummaryRequester,
        notify: Notify = _drop_notice,
        state: ViewState | None = None,
    ) -> None:
        self.client = client
        self.summaries = summaries
        self.notify = notify
        self.state = state or ViewState()
        self._fetch_seq = 0
        self._in_flight = 0
        self._generation = 0
        self._summary_tasks: set[asyncio.Task[None]] = set()

    async def start(
        self,
        geolocator: Geolocator | None,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    ) -> None:
        """Resolve the initial location and load its weather."""
        resolution = await resolve_location(geolocator, strategies)
        if resolution.notice is not None:
            self.notify(resolution.notice)
        await self.load(resolution.query)

    async def search(self, text: str) -> None:
        """Load weather for user-entered text. Blank text is rejected without a fetch."""
        self.state.search_text = text
        query = search_query(text)
        if query is None:
            self.notify(messages.empty_search())
            return
        await self.load(query)

    async def load(self, query: LocationQuery) -> None:
        self._fetch_seq += 1
        seq = self._fetch_seq
        self._in_flight += 1
        self.state.loading = True
        logger.debug("Fetch #%d issued for %r", seq, query)
        try:
            snapshot = await self.client.fetch(query)
            if seq != self._fetch_seq:
                logger.info("Fetch #%d superseded by #%d, dropping result", seq, self._fetch_seq)
            elif snapshot is not None:
                logger.debug("Fetch #%d completed for %s", seq, snapshot.city)
                self._replace_snapshot(snapshot)
        except WeatherError as e:
            self._report(seq, str(e))
        except Exception:
            logger.exception("Failed to fetch weather")
            self._report(seq, messages.t("fetch_error_generic"))
        finally:
            self._in_flight -= 1
            self.state.loading = self._in_flight > 0

    def _report(self, seq: int, reason: str) -> None:
        if seq != self._fetch_seq:
            logger.info("Fetch #%d failed after being superseded: %s", seq, reason)
            return
        logger.warning("Failed to fetch weather: %s", reason)
        self.notify(messages.fetch_error(reason))

    def _replace_snapshot(self, snapshot: WeatherSnapshot) -> None:
        self._generation += 1
        self.state.snapshot = snapshot
        self.state.summary = None
        self.state.loading_ai_summary = True
        task = asyncio.create_task(self._summarize(self._generation, snapshot))
        self._summary_tasks.add(task)
        task.add_done_callback(self._summary_tasks.discard)

    async def _summarize(self, generation: int, snapshot: WeatherSnapshot) -> None:
        try:
            summary = await self.summaries.request(SummaryRequest.from_snapshot(snapshot))
            if generation == self._generation:
                self.state.summary = summary
            else:
                logger.debug("Dropping summary for replaced snapshot of %s", snapshot.city)
        finally:
            if generation == self._generation:
                self.state.loading_ai_summary = False

    async def settle(self) -> None:
        """Wait for every outstanding summary request."""
        while self._summary_tasks:
            await asyncio.gather(*list(self._summary_tasks))
