from typing import Any, Callable, Optional

from webscraper.core.config import ScraperSettings
from webscraper.core.logging import log
from webscraper.engine.aggregator import GroupAggregator
from webscraper.engine.browser import BrowserSession
from webscraper.engine.runner import ObserverRunner
from webscraper.model.config import ScrapeConfig
from webscraper.model.records import Snapshot
from webscraper.utils.file_io import atomic_write_json


class ScrapeCycleController:
    """
    Runs scrape cycles over a configuration and persists each snapshot.

    The browser session is acquired on the first cycle and kept for the
    following ones; it is released only by ``close``.
    """

    def __init__(
        self,
        settings: ScraperSettings,
        session_factory: Callable[[ScraperSettings], Any] = BrowserSession,
        aggregator: Optional[GroupAggregator] = None,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.aggregator = aggregator or GroupAggregator(ObserverRunner(settings))
        self.session = None

    async def acquire(self) -> Any:
        """Return the shared page, launching a session when none is usable."""
        if self.session is not None and not self.session.is_open:
            log("Browser session is no longer usable, relaunching", level="warning")
            await self.close()
        if self.session is None:
            session = self.session_factory(self.settings)
            await session.start()
            self.session = session
        return self.session.page

    async def run_cycle(self, config: ScrapeConfig) -> Snapshot:
        page = await self.acquire()

        snapshot = Snapshot()
        for group in config.groups:
            snapshot.groups.append(await self.aggregator.run(page, group))

        atomic_write_json(self.settings.output, snapshot.to_list())
        log(
            f"Saved {snapshot.item_count} items in {len(snapshot.groups)} groups to {self.settings.output}",
            level="debug",
            user=config.user,
        )
        return snapshot

    async def close(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None
