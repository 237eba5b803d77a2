import traceback
from typing import Any

from webscraper.core.errors import ScraperError
from webscraper.core.logging import log
from webscraper.engine.runner import ObserverRunner
from webscraper.model.config import ScrapeGroup
from webscraper.model.records import GroupRecord


class GroupAggregator:
    """Runs every observer of a group in declaration order."""

    def __init__(self, runner: ObserverRunner):
        self.runner = runner

    async def run(self, page: Any, group: ScrapeGroup) -> GroupRecord:
        record = GroupRecord(name=group.name)
        for observer in group.observers:
            try:
                record.items.append(await self.runner.run(page, group, observer))
            except ScraperError as e:
                record.failures += 1
                log(
                    f"Cannot get data - observer {observer.label} (group {group.name}): {e}",
                    level="warning",
                    group=group.name,
                    observer=observer.label,
                    error_type=type(e).__name__,
                )
            except Exception as e:
                # one broken page must not blank out the whole group
                record.failures += 1
                log(
                    f"Unexpected failure - observer {observer.label} (group {group.name}): {e}",
                    level="error",
                    group=group.name,
                    observer=observer.label,
                    error_type=type(e).__name__,
                )
                log(traceback.format_exc(), level="debug")
        return record
