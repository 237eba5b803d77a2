import re
from datetime import datetime
from typing import Any
from urllib.parse import urljoin

from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from webscraper.core.config import ScraperSettings
from webscraper.core.constants import NETWORK_IDLE_GRACE_TIMEOUT
from webscraper.core.errors import ExtractionError, NavigationError, NavigationTimeoutError, RenderTimeoutError
from webscraper.core.logging import log
from webscraper.engine.extractor import FieldExtractor
from webscraper.model.config import ScrapeGroup, ScrapeObserver, WaitTarget
from webscraper.model.records import ItemRecord


def resolve_url(group: ScrapeGroup, observer: ScrapeObserver) -> str:
    """Observer path resolved against its group domain."""
    return urljoin(group.domain, observer.path)


class ObserverRunner:
    """
    Loads one observer page on the shared page handle and reads its fields.
    """

    def __init__(self, settings: ScraperSettings, extractor: FieldExtractor = None):
        self.settings = settings
        self.extractor = extractor or FieldExtractor()

    async def run(self, page: Any, group: ScrapeGroup, observer: ScrapeObserver) -> ItemRecord:
        url = resolve_url(group, observer)
        log(f"Scraping {observer.label} ({url})", level="debug", group=group.name, url=url)

        try:
            await self._load(page, url, observer)
        except (NavigationError, RenderTimeoutError):
            await self._capture_error(page, observer)
            raise

        name = await self._optional_field(page, observer, "title")
        icon = await self._optional_field(page, observer, "image")
        price = await self.extractor.extract(page, observer.container, observer.price, "price")
        if not price:
            raise ExtractionError("price", "value", f"empty price in page {url}")

        return ItemRecord(name=name, icon=icon, price=price)

    async def _optional_field(self, page: Any, observer: ScrapeObserver, field: str) -> str:
        try:
            value = await self.extractor.extract(page, observer.container, getattr(observer, field), field)
        except ExtractionError as e:
            log(f"{e} of {observer.label}, using empty value", level="debug")
            return ""
        return value or ""

    async def _load(self, page: Any, url: str, observer: ScrapeObserver) -> None:
        """Navigate and wait for the price element, retrying on timeouts."""
        attempts = self.settings.timeout_attempts
        selector = observer.price.selector

        def on_retry(retry_state):
            log(
                f"Timeout when waiting for: {selector} [{retry_state.attempt_number}/{attempts}]",
                level="warning",
                url=url,
            )

        @retry(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(self.settings.retry_wait),
            retry=retry_if_exception_type((NavigationTimeoutError, RenderTimeoutError)),
            before_sleep=on_retry,
            reraise=True,
        )
        async def attempt():
            await self._navigate(page, url, observer.target)
            await self._wait_for_render(page, url, selector)

        await attempt()

    async def _navigate(self, page: Any, url: str, target: WaitTarget) -> None:
        try:
            await page.goto(url, wait_until=target.wait_until, timeout=self.settings.navigation_timeout * 1000)
        except PlaywrightTimeoutError:
            raise NavigationTimeoutError(url, f"timeout waiting for '{target.value}'")
        except PlaywrightError as e:
            raise NavigationError(url, str(e))

        if target.idle_grace:
            try:
                await page.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_GRACE_TIMEOUT * 1000)
            except PlaywrightTimeoutError:
                log(f"Network still busy on {url}, proceeding", level="debug")

    async def _wait_for_render(self, page: Any, url: str, selector: str) -> None:
        try:
            await page.wait_for_selector(selector, state="visible", timeout=self.settings.render_timeout * 1000)
        except PlaywrightTimeoutError:
            raise RenderTimeoutError(url, selector)
        except PlaywrightError as e:
            raise ExtractionError("price", "selector", str(e)) from e

    async def _capture_error(self, page: Any, observer: ScrapeObserver) -> None:
        captures_dir = self.settings.captures_dir
        if captures_dir is None:
            return
        stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S-%f")
        slug = re.sub(r"[^A-Za-z0-9]+", "-", observer.label).strip("-") or "observer"
        capture_path = captures_dir / f"error_{stamp}_{slug}.png"
        try:
            capture_path.parent.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(capture_path))
            log(f"Saved error screenshot of {observer.label} to {capture_path}", level="info")
        except (PlaywrightError, OSError) as e:
            log(f"Cannot save error screenshot: {e}", level="warning")
