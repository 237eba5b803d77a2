
from playwright.async_api import async_playwright, Error as PlaywrightError

from webscraper.core.config import ScraperSettings
from webscraper.core.constants import DEFAULT_VIEWPORT
from webscraper.core.errors import SessionError
from webscraper.core.logging import log


class BrowserSession:
    """
    One headless browser and a single page reused by every cycle of a scraper.
    """

    def __init__(self, settings: ScraperSettings):
        self.settings = settings
        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def is_open(self) -> bool:
        return self.page is not None and not self.page.is_closed()

    async def start(self) -> None:
        """Launch the browser; a failure leaves nothing running."""
        log("Initializing virtual browser", level="debug")
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(headless=self.settings.headless)
            self.context = await self.browser.new_context(
                user_agent=self.settings.user_agent,
                viewport=DEFAULT_VIEWPORT,
            )
            self.context.set_default_timeout(self.settings.render_timeout * 1000)
            self.context.set_default_navigation_timeout(self.settings.navigation_timeout * 1000)
            self.page = await self.context.new_page()
        except Exception as e:
            await self.close()
            raise SessionError(f"Cannot launch browser session: {e}") from e

    async def close(self) -> None:
        """Close the browser session."""
        for name in ("page", "context", "browser"):
            handle = getattr(self, name)
            if handle is None:
                continue
            try:
                await handle.close()
            except PlaywrightError as e:
                log(f"Stop issue while closing {name}: {e}", level="warning")
            setattr(self, name, None)
        if self.playwright:
            try:
                await self.playwright.stop()
            except PlaywrightError as e:
                log(f"Stop issue while stopping driver: {e}", level="warning")
            self.playwright = None
