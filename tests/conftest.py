import asyncio
import json
from pathlib import Path

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webscraper.core.config import ScraperSettings
from webscraper.core.errors import SessionError


class StubPage:
    """
    Minimal stand-in for a Playwright page.

    `sites` maps absolute URLs to {"containers": [...], "fields": {selector: {attribute: value}}}.
    """

    def __init__(self, sites=None, nav_errors=None, delay=0.0):
        self.sites = sites or {}
        self.nav_errors = nav_errors or {}
        self.delay = delay
        self.url = None
        self.visited = []
        self.evaluations = []
        self.load_states = []
        self.screenshots = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            self.visited.append((url, wait_until))
            if self.delay:
                await asyncio.sleep(self.delay)
            if url in self.nav_errors:
                raise self.nav_errors[url]
            self.url = url
        finally:
            self.active -= 1

    async def wait_for_load_state(self, state, timeout=None):
        self.load_states.append(state)

    async def wait_for_selector(self, selector, state=None, timeout=None):
        if selector not in self.sites.get(self.url, {}).get("fields", {}):
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def evaluate(self, script, arg):
        self.evaluations.append(arg)
        site = self.sites.get(self.url, {})
        container = arg["container"]
        if container and container not in site.get("containers", []):
            return {"error": "container", "detail": container}
        attributes = site.get("fields", {}).get(arg["selector"])
        if attributes is None:
            return {"error": "element", "detail": arg["selector"]}
        if arg["attribute"] not in attributes:
            return {"error": "value", "detail": arg["attribute"]}
        return {"value": attributes[arg["attribute"]]}

    async def screenshot(self, path):
        Path(path).write_bytes(b"png")
        self.screenshots.append(path)

    def is_closed(self):
        return self.closed


class StubSession:
    def __init__(self, settings, page=None, fail=False):
        self.settings = settings
        self.page = None
        self._page = page
        self.fail = fail
        self.starts = 0
        self.closes = 0

    @property
    def is_open(self):
        return self.page is not None and not self.page.is_closed()

    async def start(self):
        self.starts += 1
        if self.fail:
            raise SessionError("Cannot launch browser session: boom")
        self.page = self._page

    async def close(self):
        self.closes += 1
        self.page = None


WIDGET_URL = "https://example.com/p"


@pytest.fixture
def widget_site():
    return {
        WIDGET_URL: {
            "containers": ["#main"],
            "fields": {
                "h1": {"innerText": "Widget"},
                "img": {"src": "w.png"},
                ".price": {"innerText": "9.99"},
            },
        }
    }


@pytest.fixture
def config_data():
    return {
        "user": "u",
        "groups": [{
            "name": "G",
            "domain": "https://example.com",
            "observers": [{
                "path": "/p",
                "target": "load",
                "container": "#main",
                "title": {"selector": "h1", "attribute": "innerText"},
                "image": {"selector": "img", "attribute": "src"},
                "price": {"selector": ".price", "attribute": "innerText"},
            }],
        }],
    }


@pytest.fixture
def settings(tmp_path):
    return ScraperSettings(
        output=tmp_path / "users" / "u" / "data.json",
        retry_wait=0,
        render_timeout=0.1,
        navigation_timeout=0.1,
        scrape_interval=0.05,
    )


@pytest.fixture
def make_page():
    return StubPage


class SessionFactory:
    """Builds session factories and remembers every session they create."""

    def __init__(self):
        self.sessions = []

    def __call__(self, page=None, fail=False):
        def factory(settings):
            session = StubSession(settings, page=page, fail=fail)
            self.sessions.append(session)
            return session
        return factory


@pytest.fixture
def session_factory():
    return SessionFactory()


@pytest.fixture
def write_json(tmp_path):
    def write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return write
